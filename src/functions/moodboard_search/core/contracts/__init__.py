"""Data contracts for the moodboard search pipeline."""

from .candidate import AggregationResult, ImageCandidate, RawRecord, RetrievalMode, Source, SourceResult
from .intent import SearchIntent, UserFilters, normalize_terms
from .request import SearchRequest, SearchResponse, UserFiltersPayload

__all__ = [
    "AggregationResult",
    "ImageCandidate",
    "RawRecord",
    "RetrievalMode",
    "SearchIntent",
    "SearchRequest",
    "SearchResponse",
    "Source",
    "SourceResult",
    "UserFilters",
    "UserFiltersPayload",
    "normalize_terms",
]
