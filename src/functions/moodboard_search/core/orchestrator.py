"""Fan a query out to every requested platform and merge what comes back."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Dict, Iterable, List, Mapping, Optional, Set, Union

from .adapters.base import SourceAdapter
from .config import AggregationConfig
from .contracts.candidate import AggregationResult, ImageCandidate, Source, SourceResult
from .errors import NotConfiguredError, SourceTimeoutError, TransientFetchError
from .normalizer import new_run_token, normalize

logger = logging.getLogger(__name__)

PlatformName = Union[Source, str]


class AggregationOrchestrator:
    """Runs adapters concurrently under per-adapter and overall time limits.

    A failing, slow or unconfigured platform only shrinks the result; the
    orchestrator itself never raises because of a platform.
    """

    def __init__(
        self,
        adapters: Mapping[Source, SourceAdapter],
        config: Optional[AggregationConfig] = None,
    ) -> None:
        self._adapters = dict(adapters)
        self.config = config or AggregationConfig()
        self._abandoned: Set[asyncio.Task] = set()

    async def aggregate(
        self,
        query: str,
        platforms: Optional[Iterable[PlatformName]] = None,
        per_platform_limit: Optional[int] = None,
        deadline: Optional[float] = None,
    ) -> List[ImageCandidate]:
        """Return the merged, unranked candidates for ``query``."""

        result = await self.aggregate_with_report(
            query,
            platforms=platforms,
            per_platform_limit=per_platform_limit,
            deadline=deadline,
        )
        return result.candidates

    async def aggregate_with_report(
        self,
        query: str,
        platforms: Optional[Iterable[PlatformName]] = None,
        per_platform_limit: Optional[int] = None,
        deadline: Optional[float] = None,
    ) -> AggregationResult:
        """Like ``aggregate`` but also returns one SourceResult per platform.

        Args:
            query: Search text sent to every adapter
            platforms: Platforms to query; defaults to the configured subset
            per_platform_limit: Maximum records requested from each platform
            deadline: Overall budget in seconds; adapters still running are cancelled
        """
        requested = self._resolve_platforms(platforms)
        limit = per_platform_limit or self.config.per_platform_limit
        deadline_seconds = self.config.deadline_seconds if deadline is None else max(deadline, 0.0)

        results: Dict[Source, SourceResult] = {}
        tasks: Dict[Source, asyncio.Task] = {}
        for platform in requested:
            adapter = self._adapters.get(platform)
            if adapter is None:
                results[platform] = SourceResult.failure(
                    platform, NotConfiguredError(platform.value, "no adapter registered")
                )
                continue
            logger.info("Starting %s search (%s)", platform.value, adapter.mode.value)
            tasks[platform] = asyncio.create_task(
                self._run_adapter(adapter, query, limit),
                name=f"moodboard-search-{platform.value}",
            )

        if tasks:
            done, pending = await asyncio.wait(
                tasks.values(),
                timeout=deadline_seconds,
                return_when=asyncio.ALL_COMPLETED,
            )
            if pending:
                logger.warning(
                    "Search deadline of %.1fs reached; cancelling %d platform(s)", deadline_seconds, len(pending)
                )
                # Cancelled adapters finish closing their pages in the background
                for task in pending:
                    task.cancel()
                    self._abandoned.add(task)
                    task.add_done_callback(self._forget)

            for platform, task in tasks.items():
                if task in done and not task.cancelled():
                    try:
                        results[platform] = task.result()
                    except Exception as exc:  # pragma: no cover - adapters report failures themselves
                        logger.error("%s task failed unexpectedly", platform.value, exc_info=True)
                        results[platform] = SourceResult.failure(
                            platform, TransientFetchError(platform.value, f"unexpected {type(exc).__name__}")
                        )
                else:
                    results[platform] = SourceResult.failure(
                        platform,
                        SourceTimeoutError(platform.value, f"exceeded search deadline of {deadline_seconds:.1f}s"),
                        deadline_seconds,
                    )

        run_token = new_run_token()
        candidates: List[ImageCandidate] = []
        ordered: List[SourceResult] = []
        for platform in requested:
            result = results[platform]
            ordered.append(result)
            if result.ok:
                normalized = normalize(platform, result.records, run_token=run_token)
                result.candidate_count = len(normalized)
                candidates.extend(normalized)
                logger.info(
                    "%s: %d records, %d candidates in %.2fs",
                    platform.value,
                    len(result.records),
                    len(normalized),
                    result.elapsed_seconds,
                )
            else:
                logger.info("%s: %s (%s)", platform.value, result.status, result.error)

        logger.info("Aggregated %d candidates from %d platform(s)", len(candidates), len(requested))
        return AggregationResult(candidates=candidates, sources=ordered)

    async def drain(self, timeout: Optional[float] = None) -> int:
        """Wait for adapters cancelled at the deadline to finish cleaning up.

        Bounded by ``cancel_grace_seconds`` unless ``timeout`` is given.
        Returns how many were still running when the wait ended.
        """
        if not self._abandoned:
            return 0
        grace = self.config.cancel_grace_seconds if timeout is None else timeout
        _, still_running = await asyncio.wait(set(self._abandoned), timeout=grace)
        if still_running:
            logger.warning("%d cancelled platform search(es) still cleaning up", len(still_running))
        return len(still_running)

    def _forget(self, task: asyncio.Task) -> None:
        self._abandoned.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.debug("Cancelled %s ended with %r", task.get_name(), task.exception())

    async def _run_adapter(self, adapter: SourceAdapter, query: str, limit: int) -> SourceResult:
        start = time.perf_counter()
        timeout = self.config.adapter_timeout_seconds
        try:
            return await asyncio.wait_for(adapter.search(query, limit), timeout=timeout)
        except asyncio.TimeoutError:
            elapsed = time.perf_counter() - start
            logger.warning("%s search timed out after %.1fs", adapter.source.value, elapsed)
            return SourceResult.failure(
                adapter.source,
                SourceTimeoutError(adapter.source.value, f"exceeded adapter timeout of {timeout:.1f}s"),
                elapsed,
            )

    def _resolve_platforms(self, platforms: Optional[Iterable[PlatformName]]) -> List[Source]:
        if platforms is None:
            platforms = self.config.default_platforms
        resolved = [platform if isinstance(platform, Source) else Source(platform) for platform in platforms]
        return list(dict.fromkeys(resolved))
