"""Tests for the HTTP entry point."""

from __future__ import annotations

import json
from typing import List

import flask
import pytest

from src.functions.moodboard_search.core.contracts.candidate import ImageCandidate, Source, SourceResult
from src.functions.moodboard_search.core.contracts.intent import SearchIntent
from src.functions.moodboard_search.core.contracts.request import SearchRequest, SearchResponse
from src.functions.moodboard_search.functions import main

app = flask.Flask(__name__)


@pytest.fixture
def executed(monkeypatch: pytest.MonkeyPatch) -> List[SearchRequest]:
    calls: List[SearchRequest] = []

    async def fake_execute(search_request: SearchRequest) -> SearchResponse:
        calls.append(search_request)
        image = ImageCandidate(
            id="arena-1-0",
            url="https://images.are.na/1.jpg",
            thumbnail_url="https://images.are.na/1.jpg",
            title="Harbour at dawn",
            source=Source.ARENA,
            source_url="https://www.are.na/block/1",
            relevance=0.75,
        )
        return SearchResponse(
            images=[image],
            intent=SearchIntent.fallback(search_request.query),
            suggestions=["harbour fog"],
            sources=[SourceResult(platform=Source.ARENA, records=[{"id": 1}], candidate_count=1)],
        )

    monkeypatch.setattr(main, "_execute", fake_execute)
    return calls


def _call(method: str, path: str = "/", **kwargs) -> flask.Response:
    with app.test_request_context(path, method=method, **kwargs):
        return main.moodboard_search_handler(flask.request)


def test_options_preflight_returns_cors_headers(executed) -> None:
    response = _call("OPTIONS")

    assert response.status_code == 204
    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert executed == []


def test_unsupported_method_is_rejected(executed) -> None:
    response = _call("PUT", json={"query": "q"})

    assert response.status_code == 405
    assert executed == []


def test_post_returns_ranked_images(executed) -> None:
    response = _call("POST", json={"query": "harbour at dawn", "platforms": ["arena"], "limit": 5})

    assert response.status_code == 200
    body = json.loads(response.get_data(as_text=True))
    assert body["status"] == "success"
    assert body["total"] == 1
    assert body["images"][0]["sourceUrl"] == "https://www.are.na/block/1"
    assert body["intent"]["refinedQuery"] == "harbour at dawn"
    assert body["sources"] == [{"platform": "arena", "status": "ok", "count": 1}]
    assert executed[0].platforms == [Source.ARENA]
    assert executed[0].limit == 5


def test_get_reads_query_parameter(executed) -> None:
    response = _call("GET", "/?q=misty+forest")

    assert response.status_code == 200
    assert executed[0].query == "misty forest"


@pytest.mark.parametrize(
    "method, path, kwargs",
    [
        ("POST", "/", {"json": {"platforms": ["arena"]}}),
        ("POST", "/", {"json": {"query": "q", "platforms": ["cosmos"]}}),
        ("POST", "/", {"data": "not json", "content_type": "text/plain"}),
        ("GET", "/", {}),
    ],
)
def test_invalid_requests_return_400(executed, method: str, path: str, kwargs: dict) -> None:
    response = _call(method, path, **kwargs)

    assert response.status_code == 400
    body = json.loads(response.get_data(as_text=True))
    assert body["status"] == "error"
    assert executed == []


def test_unexpected_failure_returns_generic_500(monkeypatch: pytest.MonkeyPatch) -> None:
    async def broken_execute(search_request: SearchRequest) -> SearchResponse:
        raise RuntimeError("playwright driver crashed at /tmp/secret-path")

    monkeypatch.setattr(main, "_execute", broken_execute)

    response = _call("POST", json={"query": "q"})

    assert response.status_code == 500
    body = json.loads(response.get_data(as_text=True))
    assert body == {"status": "error", "message": "Search failed. Please try again."}


def test_health_check() -> None:
    with app.test_request_context("/health"):
        response = main.health_check_handler(flask.request)

    assert response.status_code == 200
    assert json.loads(response.get_data(as_text=True)) == {"status": "healthy", "service": "moodboard_search"}
