"""Error taxonomy for the moodboard search pipeline.

Source errors never escape the aggregation step: adapters return them inside
a ``SourceResult`` and the orchestrator turns them into "this source
contributed zero candidates".
"""

from __future__ import annotations

from src.shared.utils.config_validator import ConfigurationError


class SourceError(Exception):
    """Base class for failures isolated to a single platform."""

    status = "failed"

    def __init__(self, platform: str, message: str) -> None:
        super().__init__(f"[{platform}] {message}")
        self.platform = platform
        self.message = message


class NotConfiguredError(SourceError, ConfigurationError):
    """The adapter lacks the credentials it needs and disabled itself."""

    status = "not_configured"


class TransientFetchError(SourceError):
    """Network, HTTP or browser failure while fetching candidates."""


class LoginError(TransientFetchError):
    """The platform login flow did not end in an authenticated session."""


class SourceTimeoutError(SourceError, TimeoutError):
    """The adapter exceeded its time budget for this run."""

    status = "timeout"


class ExternalServiceError(Exception):
    """The intent or suggestion service failed; callers fall back."""
