"""Text-based relevance scoring of candidates against a search intent."""

from __future__ import annotations

import dataclasses
import logging
import re
from typing import Iterable, List, Optional

from .config import RelevanceConfig
from .contracts.candidate import ImageCandidate
from .contracts.intent import SearchIntent

logger = logging.getLogger(__name__)

WORD_PATTERN = re.compile(r"[\w'-]+")


def candidate_text(candidate: ImageCandidate) -> str:
    """Text the scorer sees: title plus description, never the URL."""

    return f"{candidate.title} {candidate.description or ''}".strip()


def _words(text: str) -> List[str]:
    return WORD_PATTERN.findall(text.lower())


def _count_hits(terms: Iterable[str], text: str) -> int:
    return sum(1 for term in sorted(terms) if term and term in text)


class RelevanceScorer:
    """Deterministic additive scorer clamped to [0, 1]."""

    def __init__(self, config: Optional[RelevanceConfig] = None) -> None:
        self.config = config or RelevanceConfig()

    def score(self, text: str, intent: SearchIntent) -> float:
        weights = self.config.weights
        lowered = " ".join(text.split()).lower()

        # Short captions carry too little signal; trust the platform's own ranking
        if len(lowered) < self.config.min_text_length:
            return weights.short_text_score

        query_words = {word for word in _words(intent.refined_query) if len(word) > 2}
        subject_words = {
            word for subject in intent.subjects for word in _words(subject) if len(word) > 3
        }

        positive = 0.0
        positive += weights.refined_query_term * _count_hits(query_words, lowered)
        positive += weights.subject_phrase * _count_hits(intent.subjects, lowered)
        positive += weights.subject_word * _count_hits(subject_words, lowered)
        positive += weights.mood_term * _count_hits(intent.mood, lowered)
        positive += weights.style_term * _count_hits(intent.style, lowered)
        positive += weights.color_term * _count_hits(intent.colors, lowered)

        score = weights.base + positive
        score -= weights.negative_filter * _count_hits(intent.negative_filters, lowered)
        score -= weights.penalty_term * _count_hits(self.config.penalty_terms, lowered)
        score += weights.photo_term * _count_hits(self.config.photo_terms, lowered)

        if positive == 0 and score >= weights.neutral_threshold:
            score = weights.neutral_score

        return max(0.0, min(1.0, score))

    def rank(self, candidates: List[ImageCandidate], intent: SearchIntent) -> List[ImageCandidate]:
        """Score, drop those below ``min_score`` and sort best first.

        Returns new candidate objects; ties keep their input order.
        """
        scored = [
            dataclasses.replace(candidate, relevance=self.score(candidate_text(candidate), intent))
            for candidate in candidates
        ]
        kept = [candidate for candidate in scored if candidate.relevance >= self.config.min_score]
        if len(kept) < len(scored):
            logger.info(
                "Dropped %d candidates scoring below %.2f", len(scored) - len(kept), self.config.min_score
            )
        kept.sort(key=lambda candidate: candidate.relevance, reverse=True)
        return kept
