"""Tests for the relevance filter."""

from __future__ import annotations

from src.functions.moodboard_search.core.config import RelevanceConfig
from src.functions.moodboard_search.core.contracts.candidate import ImageCandidate, Source
from src.functions.moodboard_search.core.contracts.intent import SearchIntent
from src.functions.moodboard_search.core.filtering import RelevanceFilter


def _candidate(
    title: str,
    *,
    url: str = "https://i.pinimg.com/736x/aa/bb/image.jpg",
    source_url: str = "https://www.pinterest.com/pin/1/",
    description: str | None = None,
    candidate_id: str = "pinterest-t-0",
) -> ImageCandidate:
    return ImageCandidate(
        id=candidate_id,
        url=url,
        thumbnail_url=url,
        title=title,
        description=description,
        source=Source.PINTEREST,
        source_url=source_url,
    )


FOREST_INTENT = SearchIntent(
    refined_query="forest",
    subjects=frozenset({"forest"}),
    negative_filters=frozenset({"meme"}),
)


def test_forest_photograph_passes_and_meme_is_removed() -> None:
    relevance_filter = RelevanceFilter()
    keep = _candidate("moody forest photograph", candidate_id="a")
    drop = _candidate("forest meme compilation", candidate_id="b")

    result = relevance_filter.filter([keep, drop], FOREST_INTENT)

    assert result == [keep]
    assert relevance_filter.rejection_reason(drop, FOREST_INTENT) == "negative filter 'meme'"


def test_negative_filter_matches_description_case_insensitively() -> None:
    intent = SearchIntent(refined_query="forest", negative_filters=frozenset({"cartoon"}))
    candidate = _candidate("Pine trees", description="A CARTOON rendering of pines")

    assert RelevanceFilter().filter([candidate], intent) == []


def test_long_title_is_removed_regardless_of_content() -> None:
    candidate = _candidate("forest " * 21 + "pines")  # well over 100 characters
    assert len(candidate.title) > 100

    assert RelevanceFilter().filter([candidate], FOREST_INTENT) == []


def test_exactly_150_character_title_is_removed() -> None:
    candidate = _candidate("f" * 150)

    reason = RelevanceFilter().rejection_reason(candidate, FOREST_INTENT)

    assert reason == "title longer than 100 characters"


def test_denylisted_terms_are_removed() -> None:
    candidates = [
        _candidate("Forest infographic", candidate_id="a"),
        _candidate("Screenshot of a forest app", candidate_id="b"),
        _candidate("Forest clip art set", candidate_id="c"),
        _candidate("Forest at dusk", candidate_id="d"),
    ]

    result = RelevanceFilter().filter(candidates, SearchIntent(refined_query="forest"))

    assert [candidate.id for candidate in result] == ["d"]


def test_blocked_urls_are_removed_but_image_platforms_are_not() -> None:
    intent = SearchIntent(refined_query="forest")
    blocked = [
        _candidate("Forest", url="https://pbs.twimg.com/media/x.jpg", source_url="https://twitter.com/a/status/1"),
        _candidate("Forest", url="https://cdn.example.com/anim.gif"),
        _candidate("Forest", url="https://cdn.example.com/shape.svg?v=2"),
        _candidate("Forest", url="https://cdn.example.com/avatars/user.jpg"),
        _candidate("Forest", url="https://i.pinimg.com/75x75_RS/aa/bb.jpg"),
        _candidate("Forest", source_url="https://someone.blogspot.com/2020/01/forest.html"),
    ]
    allowed = [
        _candidate("Forest", url="https://i.pinimg.com/736x/aa/bb/cc.jpg"),
        _candidate("Forest", url="https://images.are.na/display/1.jpg", source_url="https://www.are.na/block/1"),
        _candidate("Forest", url="https://cdn.savee.it/i/abc.jpg", source_url="https://savee.it/i/abc"),
    ]
    relevance_filter = RelevanceFilter()

    for candidate in blocked:
        assert relevance_filter.rejection_reason(candidate, intent) is not None, candidate.url
    for candidate in allowed:
        assert relevance_filter.rejection_reason(candidate, intent) is None, candidate.url


def test_filter_preserves_order_and_is_idempotent() -> None:
    candidates = [
        _candidate("Forest path", candidate_id="1"),
        _candidate("forest meme", candidate_id="2"),
        _candidate("Forest cabin", candidate_id="3"),
        _candidate("Forest lake", candidate_id="4"),
    ]
    relevance_filter = RelevanceFilter()

    once = relevance_filter.filter(candidates, FOREST_INTENT)
    twice = relevance_filter.filter(once, FOREST_INTENT)

    assert [candidate.id for candidate in once] == ["1", "3", "4"]
    assert twice == once


def test_custom_configuration_changes_thresholds() -> None:
    config = RelevanceConfig(denylist_terms=("cabin",), url_patterns=(), max_title_length=10)
    relevance_filter = RelevanceFilter(config)
    candidates = [
        _candidate("Forest", candidate_id="short"),
        _candidate("Forest cabin", candidate_id="cabin"),
        _candidate("A very long forest title", candidate_id="long"),
        _candidate("Forest", url="https://cdn.example.com/anim.gif", candidate_id="gif"),
    ]

    result = relevance_filter.filter(candidates, SearchIntent(refined_query="forest"))

    assert [candidate.id for candidate in result] == ["short", "gif"]
