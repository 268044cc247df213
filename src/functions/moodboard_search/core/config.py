"""Configuration models and loaders for the moodboard search service.

Settings come from the process environment (seeded from ``.env`` during local
development); the relevance vocabularies and weights can additionally be
overridden from a YAML file.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Pattern, Tuple

import yaml

from src.shared.utils.config_validator import (
    ConfigurationError,
    validate_bool_env,
    validate_choice_env,
    validate_float_env,
    validate_int_env,
    validate_list_env,
)
from src.shared.utils.env import get_env

from .contracts.candidate import Source

logger = logging.getLogger(__name__)

VALID_LLM_PROVIDERS = ["gemini", "openai"]
DEFAULT_LLM_MODELS = {"gemini": "gemini-1.5-flash", "openai": "gpt-4.1-mini"}
DEFAULT_PLATFORMS = ["pinterest", "arena"]

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

DEFAULT_DENYLIST_TERMS: Tuple[str, ...] = (
    "article",
    "screenshot",
    "infographic",
    "logo",
    "meme",
    "thumbnail",
    "tweet",
    "clip art",
    "clipart",
    "diagram",
    "book cover",
    "magazine cover",
    "mockup",
    "template",
    "icon set",
)

DEFAULT_URL_PATTERNS: Tuple[str, ...] = (
    # Social media and blogging hosts
    r"https?://(?:[\w-]+\.)*(?:twitter|facebook|tiktok|reddit|youtube|medium|substack|linkedin)\.com",
    r"https?://(?:[\w-]+\.)*(?:blogspot|wordpress)\.com",
    r"https?://(?:www\.)?x\.com/",
    r"https?://(?:[\w-]+\.)*fbcdn\.net",
    # Animated and vector formats
    r"\.(?:gif|svg)(?:[?#\s]|$)",
    # Avatars, profile pictures and tiny thumbnails
    r"/(?:avatars?|profile_images?|profile-pictures?|user-avatar)/",
    r"[/_-](?:avatar|favicon)[^/\s]*\.(?:jpe?g|png|webp)",
    r"pinimg\.com/(?:30x30|60x60|75x75)(?:_RS)?/",
    r"/thumbs?/(?:small|tiny|xs)/",
)

DEFAULT_PENALTY_TERMS: Tuple[str, ...] = (
    "article",
    "blog",
    "news",
    "meme",
    "funny",
    "lol",
    "wtf",
    "omg",
    "click",
    "subscribe",
)

DEFAULT_PHOTO_TERMS: Tuple[str, ...] = (
    "photo",
    "photograph",
    "shot",
    "portrait",
    "candid",
    "capture",
    "film",
    "cinema",
)


@dataclass(frozen=True)
class PlatformCredentials:
    """Login credentials for an authenticated-browser platform."""

    email: str
    password: str = field(repr=False)


@dataclass
class BrowserConfig:
    """Headless browser and scraping behaviour shared by browser adapters."""

    headless: bool = True
    user_agent: str = DEFAULT_USER_AGENT
    viewport_width: int = 1440
    viewport_height: int = 900
    navigation_timeout_seconds: float = 30.0
    login_timeout_seconds: float = 30.0
    settle_delay_ms: int = 3000
    scroll_cycles: int = 3
    scroll_delay_ms: int = 1000
    min_image_width: int = 100

    def __post_init__(self) -> None:
        if self.viewport_width < 320 or self.viewport_height < 240:
            raise ConfigurationError("Browser viewport must be at least 320x240")
        if self.navigation_timeout_seconds <= 0 or self.login_timeout_seconds <= 0:
            raise ConfigurationError("Browser timeouts must be positive")
        if self.settle_delay_ms < 0 or self.scroll_delay_ms < 0:
            raise ConfigurationError("Browser delays cannot be negative")
        if self.scroll_cycles < 0:
            raise ConfigurationError("scroll_cycles cannot be negative")


@dataclass
class AggregationConfig:
    """Fan-out behaviour of the orchestrator."""

    default_platforms: List[Source] = field(
        default_factory=lambda: [Source(name) for name in DEFAULT_PLATFORMS]
    )
    per_platform_limit: int = 30
    adapter_timeout_seconds: float = 45.0
    deadline_seconds: float = 60.0
    cancel_grace_seconds: float = 2.0

    def __post_init__(self) -> None:
        if not self.default_platforms:
            raise ConfigurationError("At least one default platform is required")
        if not 1 <= self.per_platform_limit <= 100:
            raise ConfigurationError("per_platform_limit must be between 1 and 100")
        if self.adapter_timeout_seconds <= 0 or self.deadline_seconds <= 0:
            raise ConfigurationError("Aggregation timeouts must be positive")
        if self.cancel_grace_seconds < 0:
            raise ConfigurationError("cancel_grace_seconds cannot be negative")


@dataclass
class ScoringWeights:
    """Additive weights used by the relevance scorer."""

    base: float = 0.4
    refined_query_term: float = 0.15
    subject_phrase: float = 0.2
    subject_word: float = 0.08
    mood_term: float = 0.1
    style_term: float = 0.1
    color_term: float = 0.05
    negative_filter: float = 0.25
    penalty_term: float = 0.15
    photo_term: float = 0.05
    short_text_score: float = 0.5
    neutral_score: float = 0.45
    neutral_threshold: float = 0.35

    def __post_init__(self) -> None:
        for item in fields(self):
            value = getattr(self, item.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(f"Scoring weight '{item.name}' must be a number")
            if value < 0:
                raise ConfigurationError(f"Scoring weight '{item.name}' cannot be negative")


@dataclass
class RelevanceConfig:
    """Vocabularies and thresholds for filtering and scoring."""

    denylist_terms: Tuple[str, ...] = DEFAULT_DENYLIST_TERMS
    url_patterns: Tuple[str, ...] = DEFAULT_URL_PATTERNS
    max_title_length: int = 100
    min_score: float = 0.15
    min_text_length: int = 5
    penalty_terms: Tuple[str, ...] = DEFAULT_PENALTY_TERMS
    photo_terms: Tuple[str, ...] = DEFAULT_PHOTO_TERMS
    weights: ScoringWeights = field(default_factory=ScoringWeights)
    compiled_url_patterns: Tuple[Pattern[str], ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.denylist_terms = _clean_terms("denylist_terms", self.denylist_terms)
        self.penalty_terms = _clean_terms("penalty_terms", self.penalty_terms)
        self.photo_terms = _clean_terms("photo_terms", self.photo_terms)
        self.url_patterns = tuple(self.url_patterns)

        if self.max_title_length < 1:
            raise ConfigurationError("max_title_length must be at least 1")
        if not 0.0 <= self.min_score <= 1.0:
            raise ConfigurationError("min_score must be between 0 and 1")
        if self.min_text_length < 0:
            raise ConfigurationError("min_text_length cannot be negative")

        compiled = []
        for pattern in self.url_patterns:
            try:
                compiled.append(re.compile(pattern, re.IGNORECASE))
            except re.error as exc:
                raise ConfigurationError(f"Invalid URL pattern {pattern!r}: {exc}") from exc
        self.compiled_url_patterns = tuple(compiled)


@dataclass
class LLMConfig:
    """Language-model provider used for intent parsing and suggestions."""

    provider: str
    model: str
    api_key: str = field(repr=False)
    intent_temperature: float = 0.7
    suggestion_temperature: float = 0.9
    max_suggestions: int = 5

    def __post_init__(self) -> None:
        if self.provider not in VALID_LLM_PROVIDERS:
            raise ConfigurationError(
                f"Unsupported LLM provider '{self.provider}'. Valid providers: {', '.join(VALID_LLM_PROVIDERS)}"
            )
        if not self.model:
            raise ConfigurationError("LLM model must be provided")
        if not self.api_key:
            raise ConfigurationError("LLM api_key must be provided")


@dataclass
class MoodboardSettings:
    """Everything the search service needs, resolved once per process."""

    credentials: Dict[Source, PlatformCredentials] = field(default_factory=dict)
    arena_access_token: Optional[str] = field(default=None, repr=False)
    browser: BrowserConfig = field(default_factory=BrowserConfig)
    aggregation: AggregationConfig = field(default_factory=AggregationConfig)
    relevance: RelevanceConfig = field(default_factory=RelevanceConfig)
    llm: Optional[LLMConfig] = None
    intent_timeout_seconds: float = 15.0

    def credentials_for(self, source: Source) -> Optional[PlatformCredentials]:
        return self.credentials.get(source)


def load_relevance_config(config_path: Optional[str] = None) -> RelevanceConfig:
    """
    Load relevance overrides from a YAML file.

    Recognised keys: denylist_terms, url_patterns, max_title_length, min_score,
    min_text_length, penalty_terms, photo_terms and a ``weights`` mapping with
    ScoringWeights field names. Missing keys keep their defaults.

    Raises:
        ConfigurationError: If the file is missing, malformed or holds invalid values
    """
    if config_path is None:
        return RelevanceConfig()

    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Relevance configuration not found: {path}")

    logger.info("Loading relevance configuration from %s", path)

    try:
        with open(path, "r", encoding="utf-8") as handle:
            raw_config = yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in relevance configuration: {exc}") from exc

    if not isinstance(raw_config, dict):
        raise ConfigurationError("Relevance configuration must be a YAML mapping")

    allowed = {item.name for item in fields(RelevanceConfig) if item.init}
    unknown = sorted(set(raw_config) - allowed)
    if unknown:
        raise ConfigurationError(f"Unknown relevance configuration keys: {', '.join(unknown)}")

    overrides: Dict[str, Any] = dict(raw_config)
    weights_data = overrides.pop("weights", None)
    if weights_data is not None:
        if not isinstance(weights_data, dict):
            raise ConfigurationError("'weights' must be a mapping")
        try:
            overrides["weights"] = ScoringWeights(**weights_data)
        except TypeError as exc:
            raise ConfigurationError(f"Invalid scoring weights: {exc}") from exc

    for key in ("denylist_terms", "url_patterns", "penalty_terms", "photo_terms"):
        if key in overrides:
            value = overrides[key]
            if not isinstance(value, list):
                raise ConfigurationError(f"'{key}' must be a list of strings")
            overrides[key] = tuple(value)

    try:
        return RelevanceConfig(**overrides)
    except TypeError as exc:
        raise ConfigurationError(f"Invalid relevance configuration: {exc}") from exc


def load_settings() -> MoodboardSettings:
    """
    Build MoodboardSettings from environment variables.

    Raises:
        ConfigurationError: If any variable holds an invalid value
    """
    credentials: Dict[Source, PlatformCredentials] = {}
    for source in (Source.PINTEREST, Source.SAVEE, Source.SHOTDECK):
        prefix = source.value.upper()
        email = get_env(f"{prefix}_EMAIL")
        password = get_env(f"{prefix}_PASSWORD")
        if email and password:
            credentials[source] = PlatformCredentials(email=email, password=password)
        elif email or password:
            logger.warning(
                "Incomplete credentials for %s; set both %s_EMAIL and %s_PASSWORD",
                source.value,
                prefix,
                prefix,
            )

    platforms = validate_list_env(
        "MOODBOARD_DEFAULT_PLATFORMS",
        default=DEFAULT_PLATFORMS,
        choices=Source.names(),
    )

    aggregation = AggregationConfig(
        default_platforms=[Source(name) for name in platforms] or [Source(name) for name in DEFAULT_PLATFORMS],
        per_platform_limit=validate_int_env("MOODBOARD_PER_PLATFORM_LIMIT", default=30, min_value=1, max_value=100),
        adapter_timeout_seconds=validate_float_env(
            "MOODBOARD_ADAPTER_TIMEOUT_SECONDS", default=45.0, min_value=1.0, max_value=600.0
        ),
        deadline_seconds=validate_float_env(
            "MOODBOARD_SEARCH_DEADLINE_SECONDS", default=60.0, min_value=1.0, max_value=900.0
        ),
    )

    browser = BrowserConfig(headless=validate_bool_env("MOODBOARD_BROWSER_HEADLESS", default=True))
    relevance = load_relevance_config(get_env("MOODBOARD_RELEVANCE_CONFIG"))

    provider = validate_choice_env("MOODBOARD_LLM_PROVIDER", VALID_LLM_PROVIDERS, default="gemini")
    key_name = "GOOGLE_API_KEY" if provider == "gemini" else "OPENAI_API_KEY"
    api_key = get_env(key_name)
    llm: Optional[LLMConfig] = None
    if api_key:
        llm = LLMConfig(
            provider=provider,
            model=get_env("MOODBOARD_LLM_MODEL", DEFAULT_LLM_MODELS[provider]),
            api_key=api_key,
        )
    else:
        logger.info("%s not set; intent parsing will use the raw query", key_name)

    return MoodboardSettings(
        credentials=credentials,
        arena_access_token=get_env("ARENA_ACCESS_TOKEN"),
        browser=browser,
        aggregation=aggregation,
        relevance=relevance,
        llm=llm,
        intent_timeout_seconds=validate_float_env(
            "MOODBOARD_INTENT_TIMEOUT_SECONDS", default=15.0, min_value=1.0, max_value=120.0
        ),
    )


def _clean_terms(name: str, values: Any) -> Tuple[str, ...]:
    terms = []
    for value in values:
        if not isinstance(value, str):
            raise ConfigurationError(f"'{name}' entries must be strings")
        term = " ".join(value.split()).lower()
        if term and term not in terms:
            terms.append(term)
    return tuple(terms)
