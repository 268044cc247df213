"""Inbound request model and outbound response payload."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from .candidate import ImageCandidate, Source, SourceResult
from .intent import SearchIntent, UserFilters


class UserFiltersPayload(BaseModel):
    """Filter chips selected in the UI."""

    mood: List[str] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)
    style: List[str] = Field(default_factory=list)
    negativeFilters: List[str] = Field(default_factory=list)

    def to_filters(self) -> UserFilters:
        return UserFilters.from_lists(
            mood=self.mood,
            colors=self.colors,
            style=self.style,
            negative_filters=self.negativeFilters,
        )


class SearchRequest(BaseModel):
    """Request model for a moodboard search."""

    query: str = Field(..., description="Natural-language description of the desired imagery")
    platforms: Optional[List[Source]] = Field(None, description="Platforms to query; defaults from settings")
    userFilters: Optional[UserFiltersPayload] = Field(None, description="Explicit filter selections")
    limit: Optional[int] = Field(None, ge=1, le=100, description="Per-platform result limit (1-100)")

    @field_validator("query")
    @classmethod
    def _query_not_blank(cls, value: str) -> str:
        cleaned = " ".join(value.split())
        if not cleaned:
            raise ValueError("query must not be blank")
        return cleaned

    @field_validator("platforms")
    @classmethod
    def _dedupe_platforms(cls, value: Optional[List[Source]]) -> Optional[List[Source]]:
        if value is None:
            return None
        if not value:
            raise ValueError("platforms must not be empty when provided")
        return list(dict.fromkeys(value))

    def user_filters(self) -> Optional[UserFilters]:
        if self.userFilters is None:
            return None
        return self.userFilters.to_filters()


@dataclass
class SearchResponse:
    """Ranked search outcome returned to the caller."""

    images: List[ImageCandidate]
    intent: SearchIntent
    suggestions: List[str] = field(default_factory=list)
    sources: List[SourceResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.images)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "images": [image.to_dict() for image in self.images],
            "intent": self.intent.to_dict(),
            "suggestions": list(self.suggestions),
            "total": self.total,
            "sources": [
                {
                    "platform": result.platform.value,
                    "status": result.status,
                    "count": result.candidate_count,
                }
                for result in self.sources
            ],
        }
