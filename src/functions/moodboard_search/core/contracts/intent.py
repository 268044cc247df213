"""Search intent contracts shared by the LLM client, filter and scorer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Optional


def normalize_terms(values: Any) -> FrozenSet[str]:
    """Return a set of stripped, lower-cased, non-empty terms.

    Accepts any iterable of strings; a bare string counts as one term and
    anything else (``None``, numbers, dicts) yields an empty set.
    """

    if values is None:
        return frozenset()
    if isinstance(values, str):
        values = [values]
    elif not isinstance(values, (list, tuple, set, frozenset)):
        return frozenset()
    terms = set()
    for value in values:
        if not isinstance(value, str):
            continue
        term = " ".join(value.split()).lower()
        if term:
            terms.add(term)
    return frozenset(terms)


@dataclass(frozen=True)
class UserFilters:
    """Filters picked directly by the caller (chips in the UI)."""

    mood: FrozenSet[str] = field(default_factory=frozenset)
    colors: FrozenSet[str] = field(default_factory=frozenset)
    style: FrozenSet[str] = field(default_factory=frozenset)
    negative_filters: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_lists(
        cls,
        *,
        mood: Optional[Iterable[str]] = None,
        colors: Optional[Iterable[str]] = None,
        style: Optional[Iterable[str]] = None,
        negative_filters: Optional[Iterable[str]] = None,
    ) -> "UserFilters":
        return cls(
            mood=normalize_terms(list(mood or [])),
            colors=normalize_terms(list(colors or [])),
            style=normalize_terms(list(style or [])),
            negative_filters=normalize_terms(list(negative_filters or [])),
        )

    def is_empty(self) -> bool:
        return not (self.mood or self.colors or self.style or self.negative_filters)


@dataclass(frozen=True)
class SearchIntent:
    """Structured interpretation of a free-text query."""

    refined_query: str
    mood: FrozenSet[str] = field(default_factory=frozenset)
    colors: FrozenSet[str] = field(default_factory=frozenset)
    style: FrozenSet[str] = field(default_factory=frozenset)
    subjects: FrozenSet[str] = field(default_factory=frozenset)
    negative_filters: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], *, query: str) -> "SearchIntent":
        """Build an intent from the LLM's JSON object.

        Missing or malformed fields become empty sets; a blank refined query
        falls back to the raw query.
        """

        refined = payload.get("refinedQuery")
        if not isinstance(refined, str) or not refined.strip():
            refined = query
        return cls(
            refined_query=" ".join(refined.split()),
            mood=normalize_terms(payload.get("mood")),
            colors=normalize_terms(payload.get("colors")),
            style=normalize_terms(payload.get("style")),
            subjects=normalize_terms(payload.get("subjects")),
            negative_filters=normalize_terms(payload.get("negativeFilters")),
        )

    @classmethod
    def fallback(cls, query: str) -> "SearchIntent":
        """Intent used when the language model is unavailable."""

        cleaned = " ".join(query.split())
        return cls(refined_query=cleaned, subjects=normalize_terms([cleaned]))

    def merged_with(self, filters: Optional[UserFilters]) -> "SearchIntent":
        """Union each filter field with the user's explicit choices."""

        if filters is None or filters.is_empty():
            return self
        return SearchIntent(
            refined_query=self.refined_query,
            mood=self.mood | filters.mood,
            colors=self.colors | filters.colors,
            style=self.style | filters.style,
            subjects=self.subjects,
            negative_filters=self.negative_filters | filters.negative_filters,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "refinedQuery": self.refined_query,
            "mood": sorted(self.mood),
            "colors": sorted(self.colors),
            "style": sorted(self.style),
            "subjects": sorted(self.subjects),
            "negativeFilters": sorted(self.negative_filters),
        }
