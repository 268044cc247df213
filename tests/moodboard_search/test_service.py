"""End-to-end tests for the search service with fake adapters and LLM."""

from __future__ import annotations

import asyncio
from typing import Dict, List, Optional

from src.functions.moodboard_search.core.adapters.base import SourceAdapter
from src.functions.moodboard_search.core.config import AggregationConfig, MoodboardSettings
from src.functions.moodboard_search.core.contracts.candidate import Source
from src.functions.moodboard_search.core.contracts.intent import SearchIntent
from src.functions.moodboard_search.core.contracts.request import SearchRequest
from src.functions.moodboard_search.core.errors import ExternalServiceError
from src.functions.moodboard_search.core.orchestrator import AggregationOrchestrator
from src.functions.moodboard_search.core.service import MoodboardSearchService


class FakeAdapter(SourceAdapter):
    def __init__(self, source: Source, records: List[Dict], error: Optional[Exception] = None) -> None:
        self.source = source
        self._records = records
        self._error = error
        self.queries: List[tuple] = []

    @property
    def is_configured(self) -> bool:
        return True

    async def _fetch(self, query: str, limit: int) -> List[Dict]:
        self.queries.append((query, limit))
        if self._error is not None:
            raise self._error
        return list(self._records)


class FakeIntentClient:
    def __init__(
        self,
        intent: Optional[SearchIntent] = None,
        suggestions: Optional[List[str]] = None,
        error: Optional[Exception] = None,
        delay: float = 0.0,
    ) -> None:
        self.intent = intent
        self.suggestions = suggestions or []
        self.error = error
        self.delay = delay
        self.suggestion_moods: List[frozenset] = []

    async def parse_intent(self, query: str) -> SearchIntent:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.intent

    async def generate_suggestions(self, query: str, mood=None) -> List[str]:
        self.suggestion_moods.append(frozenset(mood or ()))
        if self.error is not None:
            raise self.error
        return list(self.suggestions)


PIN_RECORDS = [
    {"url": "https://i.pinimg.com/736x/1.jpg", "title": "moody forest photograph", "sourceUrl": "https://www.pinterest.com/pin/1/"},
    {"url": "https://i.pinimg.com/736x/2.jpg", "title": "forest meme compilation", "sourceUrl": "https://www.pinterest.com/pin/2/"},
    {"url": "https://i.pinimg.com/736x/3.jpg", "title": "", "sourceUrl": "https://www.pinterest.com/pin/3/"},
]
ARENA_BLOCKS = [
    {"id": 9, "title": "Quiet afternoon light", "image": {"display": {"url": "https://images.are.na/9.jpg"}}},
    {"id": 10, "title": "funny news compilation lol", "image": {"display": {"url": "https://images.are.na/10.jpg"}}},
]

FOREST_INTENT = SearchIntent(
    refined_query="misty forest",
    mood=frozenset({"moody"}),
    subjects=frozenset({"forest"}),
    negative_filters=frozenset({"meme"}),
)


def _service(intent_client=None, settings: Optional[MoodboardSettings] = None, arena_error=None):
    settings = settings or MoodboardSettings(
        aggregation=AggregationConfig(default_platforms=[Source.PINTEREST, Source.ARENA], deadline_seconds=5.0),
        intent_timeout_seconds=0.2,
    )
    adapters = {
        Source.PINTEREST: FakeAdapter(Source.PINTEREST, PIN_RECORDS),
        Source.ARENA: FakeAdapter(Source.ARENA, ARENA_BLOCKS, error=arena_error),
    }
    orchestrator = AggregationOrchestrator(adapters, settings.aggregation)
    return MoodboardSearchService(orchestrator, intent_client=intent_client, settings=settings), adapters


def test_search_filters_ranks_and_reports_sources() -> None:
    client = FakeIntentClient(FOREST_INTENT, suggestions=["misty pine forest", "fog over moss"])
    service, adapters = _service(client)

    response = asyncio.run(service.search(SearchRequest(query="a misty forest")))

    titles = [image.title for image in response.images]
    assert titles[0] == "moody forest photograph"
    assert "forest meme compilation" not in titles
    assert "funny news compilation lol" not in titles
    assert set(titles) == {"moody forest photograph", "", "Quiet afternoon light"}
    relevances = [image.relevance for image in response.images]
    assert relevances == sorted(relevances, reverse=True)
    assert response.suggestions == ["misty pine forest", "fog over moss"]
    assert client.suggestion_moods == [frozenset({"moody"})]
    assert adapters[Source.PINTEREST].queries == [("misty forest", 30)]

    body = response.to_dict()
    assert body["total"] == len(response.images) == 3
    assert body["intent"]["refinedQuery"] == "misty forest"
    assert body["sources"] == [
        {"platform": "pinterest", "status": "ok", "count": 3},
        {"platform": "arena", "status": "ok", "count": 2},
    ]
    assert all("relevance" in image for image in body["images"])


def test_intent_failure_falls_back_to_raw_query() -> None:
    client = FakeIntentClient(error=ExternalServiceError("quota exceeded"))
    service, adapters = _service(client)

    response = asyncio.run(service.search(SearchRequest(query="misty forest")))

    assert response.intent.refined_query == "misty forest"
    assert response.intent.subjects == frozenset({"misty forest"})
    assert response.suggestions == []
    assert adapters[Source.ARENA].queries == [("misty forest", 30)]


def test_slow_intent_is_bounded_by_timeout() -> None:
    client = FakeIntentClient(FOREST_INTENT, delay=5)
    service, _ = _service(client)

    response = asyncio.run(service.search(SearchRequest(query="misty forest")))

    assert response.intent.refined_query == "misty forest"
    assert response.intent.negative_filters == frozenset()


def test_without_llm_uses_fallback_and_no_suggestions() -> None:
    service, _ = _service(None)

    response = asyncio.run(service.search(SearchRequest(query="misty forest")))

    assert response.suggestions == []
    assert response.intent == SearchIntent.fallback("misty forest")


def test_user_filters_and_request_overrides_apply() -> None:
    service, adapters = _service(FakeIntentClient(FOREST_INTENT))
    request = SearchRequest.model_validate(
        {
            "query": "misty forest",
            "platforms": ["pinterest"],
            "limit": 3,
            "userFilters": {"negativeFilters": ["photograph"], "colors": ["Green"]},
        }
    )

    response = asyncio.run(service.search(request))

    assert adapters[Source.ARENA].queries == []
    assert adapters[Source.PINTEREST].queries == [("misty forest", 3)]
    assert [image.title for image in response.images] == [""]
    assert response.intent.colors == frozenset({"green"})
    assert response.intent.negative_filters == frozenset({"meme", "photograph"})
    assert [source["platform"] for source in response.to_dict()["sources"]] == ["pinterest"]


def test_failed_platform_only_shrinks_results() -> None:
    service, _ = _service(FakeIntentClient(FOREST_INTENT), arena_error=RuntimeError("socket closed"))

    response = asyncio.run(service.search(SearchRequest(query="misty forest")))

    assert {image.source for image in response.images} == {Source.PINTEREST}
    statuses = {source["platform"]: source["status"] for source in response.to_dict()["sources"]}
    assert statuses == {"pinterest": "ok", "arena": "failed"}
    assert "socket closed" not in str(response.to_dict())


def test_from_settings_wires_every_platform_and_closes_cleanly() -> None:
    launches: List[object] = []

    async def launcher(config):
        launches.append(config)
        raise AssertionError("browser should not launch without credentials")

    settings = MoodboardSettings()
    service = MoodboardSearchService.from_settings(settings, launcher=launcher)

    async def run():
        async with service:
            return await service.orchestrator.aggregate_with_report(
                "q", platforms=[Source.PINTEREST, Source.SAVEE, Source.SHOTDECK]
            )

    report = asyncio.run(run())

    assert service.intent_client is None
    assert [result.status for result in report.sources] == ["not_configured"] * 3
    assert launches == []
