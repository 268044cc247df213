"""Common adapter interface shared by every image platform."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import List

from ..contracts.candidate import RawRecord, RetrievalMode, Source, SourceResult
from ..errors import NotConfiguredError, SourceError, TransientFetchError

logger = logging.getLogger(__name__)


class SourceAdapter(ABC):
    """Search one platform and report the outcome without raising.

    Subclasses implement ``_fetch`` and ``is_configured``; ``search`` wraps
    them with logging, timing and failure isolation. Task cancellation is the
    only thing that escapes ``search``.
    """

    source: Source

    @property
    def mode(self) -> RetrievalMode:
        return self.source.mode

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether the adapter has everything it needs to reach its platform."""

    @abstractmethod
    async def _fetch(self, query: str, limit: int) -> List[RawRecord]:
        """Return raw platform records, raising SourceError on failure."""

    async def search(self, query: str, limit: int) -> SourceResult:
        platform = self.source.value
        if not self.is_configured:
            logger.info("Skipping %s: credentials not configured", platform)
            return SourceResult.failure(
                self.source, NotConfiguredError(platform, "credentials not configured")
            )
        if limit < 1:
            return SourceResult(platform=self.source)

        logger.info("Searching %s for '%s' (limit=%d)", platform, query, limit)
        start = time.perf_counter()
        try:
            records = await self._fetch(query, limit)
        except SourceError as exc:
            elapsed = time.perf_counter() - start
            logger.warning("%s search failed after %.2fs: %s", platform, elapsed, exc)
            return SourceResult.failure(self.source, exc, elapsed)
        except Exception as exc:
            elapsed = time.perf_counter() - start
            logger.warning("%s search raised unexpectedly after %.2fs", platform, elapsed, exc_info=True)
            error = TransientFetchError(platform, f"unexpected {type(exc).__name__}: {exc}")
            return SourceResult.failure(self.source, error, elapsed)

        elapsed = time.perf_counter() - start
        records = list(records)[:limit]
        logger.info("%s returned %d records in %.2fs", platform, len(records), elapsed)
        return SourceResult(platform=self.source, records=records, elapsed_seconds=elapsed)
