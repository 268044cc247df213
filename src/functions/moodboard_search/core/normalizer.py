"""Map platform-specific records onto the canonical ImageCandidate shape."""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urlparse

from .adapters.arena import block_image_url
from .contracts.candidate import ImageCandidate, RawRecord, Source

logger = logging.getLogger(__name__)

ARENA_HOME = "https://www.are.na"
PLATFORM_HOMES = {
    Source.ARENA: ARENA_HOME,
    Source.PINTEREST: "https://www.pinterest.com",
    Source.SAVEE: "https://savee.it",
    Source.SHOTDECK: "https://shotdeck.com",
}


def new_run_token() -> str:
    """Millisecond timestamp shared by every candidate of one aggregation run."""

    return str(int(time.time() * 1000))


def is_http_url(value: Any) -> bool:
    if not isinstance(value, str) or not value:
        return False
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def normalize(
    source: Source,
    records: Iterable[RawRecord],
    *,
    run_token: Optional[str] = None,
) -> List[ImageCandidate]:
    """Convert raw records from one platform into candidates.

    Records without an absolute http(s) image URL are dropped. Identical
    inputs with the same ``run_token`` produce identical output.
    """
    token = run_token or new_run_token()
    mapper = _map_arena_block if source is Source.ARENA else _map_scraped_record

    candidates: List[ImageCandidate] = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            logger.debug("Dropping non-mapping %s record at index %d", source.value, index)
            continue
        fields = mapper(source, record)
        if not is_http_url(fields["url"]):
            logger.debug("Dropping %s record %d without a usable image URL", source.value, index)
            continue
        if not is_http_url(fields["thumbnail_url"]):
            fields["thumbnail_url"] = fields["url"]
        candidates.append(
            ImageCandidate(id=f"{source.value}-{token}-{index}", source=source, **fields)
        )
    return candidates


def _map_arena_block(source: Source, block: Dict[str, Any]) -> Dict[str, Any]:
    image = block.get("image") if isinstance(block.get("image"), dict) else {}
    thumb = image.get("thumb") if isinstance(image.get("thumb"), dict) else {}
    url = block_image_url(block) or ""

    source_info = block.get("source") if isinstance(block.get("source"), dict) else {}
    source_url = source_info.get("url")
    if not is_http_url(source_url):
        block_id = block.get("id")
        source_url = f"{ARENA_HOME}/block/{block_id}" if block_id is not None else ARENA_HOME

    user = block.get("user") if isinstance(block.get("user"), dict) else {}
    slug = user.get("slug")

    return {
        "url": url,
        "thumbnail_url": thumb.get("url") or url,
        "title": _text(block.get("title")),
        "description": _text(block.get("description")) or None,
        "source_url": source_url,
        "author": _text(user.get("full_name")) or None,
        "author_url": f"{ARENA_HOME}/{slug}" if slug else None,
    }


def _map_scraped_record(source: Source, record: Dict[str, Any]) -> Dict[str, Any]:
    url = record.get("url") or ""
    source_url = record.get("sourceUrl")
    if not is_http_url(source_url):
        source_url = PLATFORM_HOMES[source]

    return {
        "url": url,
        "thumbnail_url": record.get("thumbnailUrl") or url,
        "title": _text(record.get("title")),
        "description": _text(record.get("description")) or None,
        "source_url": source_url,
        "author": _text(record.get("author")) or None,
        "author_url": record.get("authorUrl") if is_http_url(record.get("authorUrl")) else None,
    }


def _text(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return " ".join(value.split())
