"""Remove candidates that are clearly not usable mood-board imagery."""

from __future__ import annotations

import logging
from typing import List, Optional

from .config import RelevanceConfig
from .contracts.candidate import ImageCandidate
from .contracts.intent import SearchIntent

logger = logging.getLogger(__name__)


class RelevanceFilter:
    """Order-preserving, idempotent candidate filter.

    A candidate is removed when its text contains a negative filter or a
    denylisted term, when its image or page URL matches a blocked pattern,
    or when its title is too long to be an image caption.
    """

    def __init__(self, config: Optional[RelevanceConfig] = None) -> None:
        self.config = config or RelevanceConfig()

    def filter(self, candidates: List[ImageCandidate], intent: SearchIntent) -> List[ImageCandidate]:
        kept: List[ImageCandidate] = []
        for candidate in candidates:
            reason = self.rejection_reason(candidate, intent)
            if reason is None:
                kept.append(candidate)
            else:
                logger.debug("Filtered %s (%s): %s", candidate.id, candidate.url, reason)

        removed = len(candidates) - len(kept)
        if removed:
            logger.info("Relevance filter removed %d of %d candidates", removed, len(candidates))
        return kept

    def rejection_reason(self, candidate: ImageCandidate, intent: SearchIntent) -> Optional[str]:
        """Return why the candidate would be removed, or None when it passes."""

        text = f"{candidate.title} {candidate.description or ''}".lower()

        for term in sorted(intent.negative_filters):
            if term in text:
                return f"negative filter '{term}'"

        for term in self.config.denylist_terms:
            if term in text:
                return f"denylisted term '{term}'"

        urls = f"{candidate.url} {candidate.source_url}"
        for pattern in self.config.compiled_url_patterns:
            if pattern.search(urls):
                return f"blocked URL pattern '{pattern.pattern}'"

        if len(candidate.title) > self.config.max_title_length:
            return f"title longer than {self.config.max_title_length} characters"

        return None
