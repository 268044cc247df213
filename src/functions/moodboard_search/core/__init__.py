"""Core services for the moodboard_search module.

- Source adapters for Are.na (public API) and Pinterest, Savee and Shotdeck
  (logged-in headless browser)
- Concurrent aggregation with per-platform timeouts and failure isolation
- Keyword/URL relevance filter and text-based relevance scoring
- Optional LLM intent parsing and related-query suggestions
"""

from .config import MoodboardSettings, RelevanceConfig, load_relevance_config, load_settings
from .factory import request_from_payload, request_from_query_args
from .filtering import RelevanceFilter
from .intent import create_intent_client, fallback_intent
from .normalizer import normalize
from .orchestrator import AggregationOrchestrator
from .scoring import RelevanceScorer
from .service import MoodboardSearchService

__all__ = [
    "AggregationOrchestrator",
    "MoodboardSearchService",
    "MoodboardSettings",
    "RelevanceConfig",
    "RelevanceFilter",
    "RelevanceScorer",
    "create_intent_client",
    "fallback_intent",
    "load_relevance_config",
    "load_settings",
    "normalize",
    "request_from_payload",
    "request_from_query_args",
]
