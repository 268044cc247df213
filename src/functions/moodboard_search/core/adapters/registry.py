"""Build one adapter per supported platform from settings."""

from __future__ import annotations

from typing import Dict, Optional

import aiohttp

from ..config import MoodboardSettings
from ..contracts.candidate import Source
from ..sessions import BrowserSessionManager
from .arena import ArenaAdapter
from .base import SourceAdapter
from .pinterest import PinterestAdapter
from .savee import SaveeAdapter
from .shotdeck import ShotdeckAdapter

BROWSER_ADAPTERS = {
    Source.PINTEREST: PinterestAdapter,
    Source.SAVEE: SaveeAdapter,
    Source.SHOTDECK: ShotdeckAdapter,
}


def build_adapters(
    settings: MoodboardSettings,
    sessions: BrowserSessionManager,
    http_session: Optional[aiohttp.ClientSession] = None,
) -> Dict[Source, SourceAdapter]:
    """Return adapters keyed by platform.

    Browser adapters without credentials are still built; they report
    ``not_configured`` when searched instead of touching the browser.
    """
    adapters: Dict[Source, SourceAdapter] = {
        Source.ARENA: ArenaAdapter(
            access_token=settings.arena_access_token,
            http_session=http_session,
            timeout_seconds=settings.browser.navigation_timeout_seconds,
        )
    }
    for source, adapter_cls in BROWSER_ADAPTERS.items():
        adapters[source] = adapter_cls(sessions, settings.credentials_for(source), settings.browser)
    return adapters
