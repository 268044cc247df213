"""CLI for running a moodboard search from the terminal."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from src.shared.utils.env import load_env
from src.shared.utils.logging import setup_logging

from src.functions.moodboard_search.core.config import MoodboardSettings, load_settings
from src.functions.moodboard_search.core.contracts.candidate import Source
from src.functions.moodboard_search.core.factory import request_from_payload
from src.functions.moodboard_search.core.service import MoodboardSearchService


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Search image platforms for mood board references.")
    parser.add_argument("query", help="Natural-language description of the imagery.")
    parser.add_argument(
        "--platform",
        action="append",
        choices=Source.names(),
        help="Platform to search (repeatable). Defaults to MOODBOARD_DEFAULT_PLATFORMS.",
    )
    parser.add_argument("--limit", type=int, help="Per-platform result limit (1-100).")
    parser.add_argument("--mood", action="append", default=[], help="Mood filter (repeatable).")
    parser.add_argument("--color", action="append", default=[], help="Color filter (repeatable).")
    parser.add_argument("--style", action="append", default=[], help="Style filter (repeatable).")
    parser.add_argument("--exclude", action="append", default=[], help="Negative filter (repeatable).")
    parser.add_argument("--no-llm", action="store_true", help="Skip LLM intent parsing and suggestions.")
    parser.add_argument("--headed", action="store_true", help="Show the browser window while scraping.")
    parser.add_argument("--output", type=Path, help="Optional path to write JSON response.")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO).")
    return parser.parse_args(argv)


def build_payload(args: argparse.Namespace) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"query": args.query}
    if args.platform:
        payload["platforms"] = args.platform
    if args.limit is not None:
        payload["limit"] = args.limit
    if args.mood or args.color or args.style or args.exclude:
        payload["userFilters"] = {
            "mood": args.mood,
            "colors": args.color,
            "style": args.style,
            "negativeFilters": args.exclude,
        }
    return payload


def build_settings(args: argparse.Namespace) -> MoodboardSettings:
    settings = load_settings()
    if args.no_llm:
        settings = dataclasses.replace(settings, llm=None)
    if args.headed:
        settings = dataclasses.replace(settings, browser=dataclasses.replace(settings.browser, headless=False))
    return settings


async def run_search(payload: Dict[str, Any], settings: MoodboardSettings) -> Dict[str, Any]:
    search_request = request_from_payload(payload)
    async with MoodboardSearchService.from_settings(settings) as service:
        response = await service.search(search_request)
    return {"status": "success", **response.to_dict()}


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    load_env()
    setup_logging(level=args.log_level)

    try:
        payload = build_payload(args)
        settings = build_settings(args)
        response = asyncio.run(run_search(payload, settings))
    except Exception as exc:  # noqa: BLE001
        logging.error("Moodboard search failed: %s", exc, exc_info=True)
        raise SystemExit(1) from exc

    output_text = json.dumps(response, indent=2, ensure_ascii=False)
    if args.output:
        args.output.write_text(output_text + "\n", encoding="utf-8")
        logging.info("Wrote %d images to %s", response["total"], args.output)
    else:
        print(output_text)


if __name__ == "__main__":
    main()
