"""Cloud Function entry point for the moodboard search service."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Iterable

import flask
import functions_framework

# Ensure project root is on sys.path before importing project modules
project_root = Path(__file__).parent.parent.parent.parent.parent.absolute()
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from src.shared.utils.env import load_env
from src.shared.utils.logging import setup_logging

from src.functions.moodboard_search.core.contracts.request import SearchRequest, SearchResponse
from src.functions.moodboard_search.core.factory import request_from_payload, request_from_query_args
from src.functions.moodboard_search.core.service import MoodboardSearchService

load_env()
setup_logging(level=os.getenv("LOG_LEVEL", "INFO"))
logger = logging.getLogger(__name__)

SEARCH_FAILED_MESSAGE = "Search failed. Please try again."


def moodboard_search_handler(request: flask.Request) -> flask.Response:
    """HTTP handler: POST JSON body or GET ``?q=``."""

    if request.method == "OPTIONS":
        return _cors_response({}, status=204)

    if request.method not in ("POST", "GET"):
        logger.warning("Unsupported HTTP method: %s", request.method)
        return _error_response("Method not allowed. Use POST or GET.", status=405)

    try:
        if request.method == "GET":
            search_request = request_from_query_args(request.args)
        else:
            payload = request.get_json(silent=True) or {}
            search_request = request_from_payload(payload)
        logger.info(
            "Incoming moodboard search for '%s' (platforms=%s)",
            search_request.query,
            [platform.value for platform in search_request.platforms or []] or "default",
        )

        response = _run_async(_execute(search_request))
        return _cors_response({"status": "success", **response.to_dict()})
    except ValueError as exc:
        logger.warning("Invalid request: %s", exc)
        return _error_response(str(exc), status=400)
    except Exception:  # noqa: BLE001
        logger.error("Unexpected failure", exc_info=True)
        return _error_response(SEARCH_FAILED_MESSAGE, status=500)


def health_check_handler(request: flask.Request) -> flask.Response:
    """Health check endpoint."""

    return _cors_response({"status": "healthy", "service": "moodboard_search"})


async def _execute(search_request: SearchRequest) -> SearchResponse:
    # Playwright objects are bound to this request's event loop
    async with MoodboardSearchService.from_settings() as service:
        return await service.search(search_request)


def _cors_response(body: dict[str, Any] | Iterable[Any], status: int = 200) -> flask.Response:
    response = flask.make_response(json.dumps(body, ensure_ascii=False), status)
    headers = response.headers
    headers["Content-Type"] = "application/json"
    headers["Access-Control-Allow-Origin"] = "*"
    headers["Access-Control-Allow-Methods"] = "GET,POST,OPTIONS"
    headers["Access-Control-Allow-Headers"] = "Content-Type"
    return response


def _error_response(message: str, status: int) -> flask.Response:
    return _cors_response({"status": "error", "message": message}, status=status)


def _run_async(coro):
    try:
        return asyncio.run(coro)
    except RuntimeError as exc:
        if "event loop" in str(exc).lower():
            loop = asyncio.new_event_loop()
            try:
                asyncio.set_event_loop(loop)
                return loop.run_until_complete(coro)
            finally:
                loop.close()
        raise


@functions_framework.http
def moodboard_search(request: flask.Request):
    return moodboard_search_handler(request)


@functions_framework.http
def health_check(request: flask.Request):
    return health_check_handler(request)
