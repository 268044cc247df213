"""Request pipeline: intent, aggregation, filtering and ranking."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Iterable, List, Optional

import aiohttp

from .adapters.registry import build_adapters
from .config import MoodboardSettings, load_settings
from .contracts.intent import SearchIntent
from .contracts.request import SearchRequest, SearchResponse
from .errors import ExternalServiceError
from .filtering import RelevanceFilter
from .intent import IntentClient, create_intent_client, fallback_intent
from .orchestrator import AggregationOrchestrator
from .scoring import RelevanceScorer
from .sessions import BrowserSessionManager
from .sessions.browser_session import Launcher

logger = logging.getLogger(__name__)


class MoodboardSearchService:
    """Runs one search request end to end.

    Example:
        async with MoodboardSearchService.from_settings() as service:
            response = await service.search(SearchRequest(query="foggy harbour at dawn"))
    """

    def __init__(
        self,
        orchestrator: AggregationOrchestrator,
        *,
        intent_client: Optional[IntentClient] = None,
        relevance_filter: Optional[RelevanceFilter] = None,
        scorer: Optional[RelevanceScorer] = None,
        settings: Optional[MoodboardSettings] = None,
        sessions: Optional[BrowserSessionManager] = None,
    ) -> None:
        self.settings = settings or MoodboardSettings()
        self.orchestrator = orchestrator
        self.intent_client = intent_client
        self.relevance_filter = relevance_filter or RelevanceFilter(self.settings.relevance)
        self.scorer = scorer or RelevanceScorer(self.settings.relevance)
        self._sessions = sessions

    @classmethod
    def from_settings(
        cls,
        settings: Optional[MoodboardSettings] = None,
        *,
        http_session: Optional[aiohttp.ClientSession] = None,
        launcher: Optional[Launcher] = None,
    ) -> "MoodboardSearchService":
        """Wire adapters, browser sessions and the LLM client from settings.

        The returned service owns its browser session manager; an
        ``http_session`` passed in stays owned by the caller.
        """
        settings = settings or load_settings()
        sessions = BrowserSessionManager(settings.browser, launcher=launcher)
        adapters = build_adapters(settings, sessions, http_session)
        orchestrator = AggregationOrchestrator(adapters, settings.aggregation)
        return cls(
            orchestrator,
            intent_client=create_intent_client(settings.llm),
            settings=settings,
            sessions=sessions,
        )

    async def __aenter__(self) -> "MoodboardSearchService":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self.orchestrator.drain()
        if self._sessions is not None:
            await self._sessions.close()

    async def search(self, request: SearchRequest) -> SearchResponse:
        start = time.perf_counter()
        intent = await self.resolve_intent(request.query)
        intent = intent.merged_with(request.user_filters())

        aggregation_settings = self.settings.aggregation
        platforms = request.platforms or aggregation_settings.default_platforms
        limit = request.limit or aggregation_settings.per_platform_limit

        aggregation_task = asyncio.create_task(
            self.orchestrator.aggregate_with_report(
                intent.refined_query or request.query,
                platforms=platforms,
                per_platform_limit=limit,
                deadline=aggregation_settings.deadline_seconds,
            )
        )
        suggestions_task = asyncio.create_task(self.suggest(request.query, intent.mood))
        try:
            aggregation = await aggregation_task
        except BaseException:
            suggestions_task.cancel()
            raise
        suggestions = await suggestions_task

        filtered = self.relevance_filter.filter(aggregation.candidates, intent)
        ranked = self.scorer.rank(filtered, intent)
        logger.info(
            "Search '%s' returned %d of %d candidates in %.2fs",
            request.query,
            len(ranked),
            len(aggregation.candidates),
            time.perf_counter() - start,
        )
        return SearchResponse(
            images=ranked,
            intent=intent,
            suggestions=suggestions,
            sources=aggregation.sources,
        )

    async def resolve_intent(self, query: str) -> SearchIntent:
        """Ask the LLM for an intent, falling back to the raw query."""

        if self.intent_client is None:
            return fallback_intent(query)
        try:
            return await asyncio.wait_for(
                self.intent_client.parse_intent(query),
                timeout=self.settings.intent_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning("Intent parsing timed out after %.1fs; using raw query", self.settings.intent_timeout_seconds)
        except ExternalServiceError as exc:
            logger.warning("Intent parsing failed (%s); using raw query", exc)
        return fallback_intent(query)

    async def suggest(self, query: str, mood: Iterable[str] = ()) -> List[str]:
        """Related queries; empty when no LLM is configured or it fails."""

        if self.intent_client is None:
            return []
        try:
            return await asyncio.wait_for(
                self.intent_client.generate_suggestions(query, mood),
                timeout=self.settings.intent_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning("Suggestion generation timed out")
        except ExternalServiceError as exc:
            logger.warning("Suggestion generation failed: %s", exc)
        return []
