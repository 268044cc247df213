"""Prompt templates for search-intent parsing and related-query suggestions."""

from __future__ import annotations

from typing import Iterable, Optional

DEFAULT_NEGATIVE_FILTERS = (
    "illustration",
    "vector",
    "clip art",
    "book cover",
    "magazine",
    "poster",
    "graphic design",
    "logo",
    "icon",
    "screenshot",
    "article",
    "text",
    "infographic",
    "meme",
    "tweet",
    "social media post",
    "news",
    "blog",
    "website",
    "chart",
    "diagram",
    "cartoon",
    "anime",
    "comic",
)

INTENT_SYSTEM_PROMPT = (
    "You are a visual search intent parser for a creative discovery platform. "
    "Respond with a single JSON object and nothing else."
)

INTENT_PROMPT_TEMPLATE = (
    "You are a visual search intent parser for a creative discovery platform used by art directors, "
    "creative directors, and filmmakers.\n"
    "These professionals search for reference imagery, mood board material, and visual inspiration for projects.\n"
    "Interpret queries with this creative industry context in mind.\n"
    "Parse the user's search query and extract structured information.\n\n"
    "Return JSON with these fields:\n"
    "- refinedQuery: optimized search terms for image platforms (focus on the visual subject)\n"
    '- mood: emotional qualities (e.g., "romantic", "serene", "energetic")\n'
    "- colors: dominant colors mentioned or implied\n"
    '- style: visual styles (e.g., "candid", "cinematic", "editorial")\n'
    "- subjects: main subjects/objects in the image\n"
    "- negativeFilters: content types to EXCLUDE\n\n"
    "IMPORTANT for negativeFilters - ALWAYS include these unless the user explicitly wants them:\n"
    "- For photos of people/places: [{default_negative_filters}]\n"
    '- For art/design: ["stock photo", "amateur", "low quality"]\n'
    "- Always aggressively filter out text-heavy content, articles, and social media screenshots\n"
    "- Default to photo/visual content unless user asks for illustrations or graphics\n\n"
    'User query: "{query}"\n'
)

SUGGESTIONS_SYSTEM_PROMPT = (
    "You suggest visual search queries for mood boards. "
    'Respond with a JSON object of the form {"suggestions": [...]}.'
)

SUGGESTIONS_PROMPT_TEMPLATE = (
    "Generate {count} related visual search queries for creative professionals "
    "(art directors, creative directors, filmmakers).\n"
    "Think like someone building a mood board or seeking visual reference for a project.\n"
    'Return JSON with: {{ "suggestions": ["query1", "query2", ...] }}\n'
    "Make suggestions progressively more specific and creative.\n\n"
    'Original: "{query}"{mood_line}'
)


def build_intent_prompt(query: str) -> str:
    cleaned = " ".join(query.split()).replace('"', "'")
    negative = ", ".join(f'"{term}"' for term in DEFAULT_NEGATIVE_FILTERS)
    return INTENT_PROMPT_TEMPLATE.format(query=cleaned[:500], default_negative_filters=negative)


def build_suggestions_prompt(query: str, mood: Optional[Iterable[str]] = None, *, count: int = 5) -> str:
    cleaned = " ".join(query.split()).replace('"', "'")
    moods = sorted(mood or [])
    mood_line = f"\nMood: {', '.join(moods)}" if moods else ""
    return SUGGESTIONS_PROMPT_TEMPLATE.format(count=count, query=cleaned[:500], mood_line=mood_line)
