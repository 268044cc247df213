"""Candidate image contracts produced by the adapters and the normalizer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..errors import SourceError

RawRecord = Dict[str, Any]


class RetrievalMode(str, Enum):
    """How an adapter reaches its platform."""

    DIRECT_API = "direct-api"
    AUTHENTICATED_BROWSER = "authenticated-browser"


class Source(str, Enum):
    """Supported image platforms."""

    ARENA = "arena"
    PINTEREST = "pinterest"
    SAVEE = "savee"
    SHOTDECK = "shotdeck"

    @property
    def mode(self) -> RetrievalMode:
        if self is Source.ARENA:
            return RetrievalMode.DIRECT_API
        return RetrievalMode.AUTHENTICATED_BROWSER

    @classmethod
    def names(cls) -> List[str]:
        return [member.value for member in cls]


@dataclass(slots=True)
class ImageCandidate:
    """Canonical image record shared by every platform."""

    id: str
    url: str
    thumbnail_url: str
    title: str
    source: Source
    source_url: str
    description: Optional[str] = None
    author: Optional[str] = None
    author_url: Optional[str] = None
    relevance: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "url": self.url,
            "thumbnailUrl": self.thumbnail_url,
            "title": self.title,
            "description": self.description,
            "source": self.source.value,
            "sourceUrl": self.source_url,
            "author": self.author,
            "authorUrl": self.author_url,
        }
        if self.relevance is not None:
            payload["relevance"] = round(self.relevance, 4)
        return payload


@dataclass(slots=True)
class SourceResult:
    """Outcome of one adapter call; an error means zero usable records."""

    platform: Source
    records: List[RawRecord] = field(default_factory=list)
    error: Optional[SourceError] = None
    elapsed_seconds: float = 0.0
    # usable candidates after normalization, set by the orchestrator
    candidate_count: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def status(self) -> str:
        if self.error is None:
            return "ok"
        return self.error.status

    @classmethod
    def failure(cls, platform: Source, error: SourceError, elapsed_seconds: float = 0.0) -> "SourceResult":
        return cls(platform=platform, records=[], error=error, elapsed_seconds=elapsed_seconds)


@dataclass(slots=True)
class AggregationResult:
    """Merged candidates plus one SourceResult per requested platform."""

    candidates: List[ImageCandidate] = field(default_factory=list)
    sources: List[SourceResult] = field(default_factory=list)

    def failed_platforms(self) -> List[Source]:
        return [result.platform for result in self.sources if not result.ok]
