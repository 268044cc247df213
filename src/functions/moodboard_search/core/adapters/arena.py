"""Are.na public API adapter (direct-api retrieval)."""

from __future__ import annotations

import json
import logging
import ssl
from typing import Any, Dict, List, Optional

import aiohttp
import certifi

from ..contracts.candidate import RawRecord, Source
from ..errors import TransientFetchError
from .base import SourceAdapter

logger = logging.getLogger(__name__)

ARENA_SEARCH_ENDPOINT = "https://api.are.na/v2/search"
ARENA_PAGE_SIZE = 100


def block_image_url(block: Dict[str, Any]) -> Optional[str]:
    """Return the best image URL on an Are.na block, if any."""

    image = block.get("image")
    if not isinstance(image, dict):
        return None
    for size in ("display", "original"):
        variant = image.get(size)
        if isinstance(variant, dict) and variant.get("url"):
            return variant["url"]
    return None


class ArenaAdapter(SourceAdapter):
    """Searches Are.na blocks through its public JSON API."""

    source = Source.ARENA

    def __init__(
        self,
        *,
        access_token: Optional[str] = None,
        http_session: Optional[aiohttp.ClientSession] = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        self._access_token = access_token
        self._session = http_session
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    @property
    def is_configured(self) -> bool:
        # The public search endpoint works without a token
        return True

    async def _fetch(self, query: str, limit: int) -> List[RawRecord]:
        params = {"q": query, "per": str(ARENA_PAGE_SIZE)}
        headers = {"Accept": "application/json"}
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"

        if self._session is not None:
            payload = await self._request(self._session, params, headers)
        else:
            ssl_context = ssl.create_default_context(cafile=certifi.where())
            connector = aiohttp.TCPConnector(ssl=ssl_context)
            async with aiohttp.ClientSession(timeout=self._timeout, connector=connector) as session:
                payload = await self._request(session, params, headers)

        if not isinstance(payload, dict):
            raise TransientFetchError(self.source.value, "unexpected response shape")
        blocks = payload.get("blocks") or []
        if not isinstance(blocks, list):
            raise TransientFetchError(self.source.value, "unexpected 'blocks' field")

        with_images = [block for block in blocks if isinstance(block, dict) and block_image_url(block)]
        logger.debug("Are.na returned %d blocks, %d with images", len(blocks), len(with_images))
        return with_images[:limit]

    async def _request(
        self,
        session: aiohttp.ClientSession,
        params: Dict[str, str],
        headers: Dict[str, str],
    ) -> Any:
        try:
            async with session.get(ARENA_SEARCH_ENDPOINT, params=params, headers=headers) as response:
                if response.status != 200:
                    raise TransientFetchError(self.source.value, f"HTTP {response.status}")
                try:
                    return await response.json(content_type=None)
                except (json.JSONDecodeError, ValueError) as exc:
                    raise TransientFetchError(self.source.value, "response was not valid JSON") from exc
        except aiohttp.ClientError as exc:
            raise TransientFetchError(self.source.value, f"request failed: {exc}") from exc
