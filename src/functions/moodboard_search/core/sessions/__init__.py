"""Browser session management for authenticated scraping."""

from .browser_session import (
    BrowserPage,
    BrowserSessionManager,
    LoginProcedure,
    PlatformSession,
    launch_chromium,
)

__all__ = [
    "BrowserPage",
    "BrowserSessionManager",
    "LoginProcedure",
    "PlatformSession",
    "launch_chromium",
]
