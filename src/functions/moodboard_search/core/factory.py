"""Factories for constructing validated search requests."""

from __future__ import annotations

from typing import Any, Dict, Mapping

from pydantic import ValidationError

from .contracts.request import SearchRequest


def request_from_payload(payload: Dict[str, Any]) -> SearchRequest:
    """Build a SearchRequest from an API-style JSON payload.

    Raises:
        ValueError: If the payload is not an object or fails validation
    """
    if not isinstance(payload, dict):
        raise ValueError("Request body must be a JSON object")
    if not payload.get("query"):
        raise ValueError("Query is required")
    try:
        return SearchRequest.model_validate(payload)
    except ValidationError as exc:
        raise ValueError(f"Invalid request format: {_describe(exc)}") from exc


def request_from_query_args(args: Mapping[str, str]) -> SearchRequest:
    """Build a SearchRequest from GET query parameters (``?q=``)."""

    query = args.get("q")
    if not query or not query.strip():
        raise ValueError("Query parameter 'q' is required")
    return request_from_payload({"query": query})


def _describe(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "request"
        problems.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "; ".join(problems)
