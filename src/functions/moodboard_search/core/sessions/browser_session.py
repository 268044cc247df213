"""Owned headless-browser resource shared by the authenticated-browser adapters.

One browser per manager, one isolated context per platform, login at most
once per context. The manager is created by whoever runs a search (service,
CLI, HTTP handler) and injected into the adapters; nothing here is global.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from typing import Any, Awaitable, Callable, Dict, Iterator, Optional, Tuple

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from ..config import BrowserConfig
from ..contracts.candidate import Source
from ..errors import LoginError, TransientFetchError

logger = logging.getLogger(__name__)

STEALTH_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--no-sandbox",
    "--disable-setuid-sandbox",
]

HIDE_WEBDRIVER_SCRIPT = """
    Object.defineProperty(navigator, 'webdriver', { get: () => undefined });
    Object.defineProperty(navigator, 'languages', { get: () => ['en-US', 'en'] });
"""

# Upper bound for any single fixed delay requested by an adapter
MAX_WAIT_MS = 15000

LoginProcedure = Callable[["BrowserPage"], Awaitable[None]]
Launcher = Callable[[BrowserConfig], Awaitable[Tuple[Any, Any]]]


async def launch_chromium(config: BrowserConfig) -> Tuple[Any, Any]:
    """Start the Playwright driver and a headless Chromium instance."""

    playwright = await async_playwright().start()
    try:
        browser = await playwright.chromium.launch(headless=config.headless, args=STEALTH_ARGS)
    except BaseException:
        await playwright.stop()
        raise
    return playwright, browser


class BrowserPage:
    """The small capability surface adapters are allowed to use on a page."""

    def __init__(self, platform: Source, page: Any, config: BrowserConfig) -> None:
        self.platform = platform
        self._page = page
        self._config = config

    @property
    def url(self) -> str:
        return self._page.url

    async def goto(self, url: str) -> None:
        with self._translate_errors(f"navigation to {url}"):
            await self._page.goto(
                url,
                wait_until="domcontentloaded",
                timeout=self._config.navigation_timeout_seconds * 1000,
            )

    async def fill(self, selector: str, value: str) -> None:
        # value may be a credential; never include it in messages
        with self._translate_errors(f"fill {selector}"):
            await self._page.fill(selector, value)

    async def click(self, selector: str) -> None:
        with self._translate_errors(f"click {selector}"):
            await self._page.click(selector)

    async def wait_for_network_idle(self, timeout_seconds: Optional[float] = None) -> None:
        timeout = timeout_seconds or self._config.navigation_timeout_seconds
        with self._translate_errors("network idle wait"):
            await self._page.wait_for_load_state("networkidle", timeout=timeout * 1000)

    async def wait(self, milliseconds: int) -> None:
        await asyncio.sleep(max(0, min(milliseconds, MAX_WAIT_MS)) / 1000)

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        with self._translate_errors("in-page script"):
            if arg is None:
                return await self._page.evaluate(script)
            return await self._page.evaluate(script, arg)

    async def scroll_viewport(self) -> None:
        with self._translate_errors("scroll"):
            await self._page.evaluate("() => window.scrollBy(0, window.innerHeight)")

    async def close(self) -> None:
        try:
            await self._page.close()
        except PlaywrightError as exc:
            logger.debug("Ignoring error while closing %s page: %s", self.platform.value, exc)

    @contextmanager
    def _translate_errors(self, action: str) -> Iterator[None]:
        try:
            yield
        except PlaywrightError as exc:
            detail = str(exc).splitlines()[0] if str(exc) else type(exc).__name__
            raise TransientFetchError(self.platform.value, f"{action} failed: {detail}") from exc


class PlatformSession:
    """A platform's isolated browser context and its login state."""

    def __init__(self, platform: Source, context: Any, config: BrowserConfig) -> None:
        self.platform = platform
        self.context = context
        self.authenticated = False
        self._config = config

    async def new_page(self) -> BrowserPage:
        try:
            page = await self.context.new_page()
        except PlaywrightError as exc:
            raise TransientFetchError(self.platform.value, f"could not open page: {exc}") from exc
        return BrowserPage(self.platform, page, self._config)

    async def close(self) -> None:
        await self.context.close()


class BrowserSessionManager:
    """Lazily launched browser with per-platform authenticated contexts.

    Example:
        async with BrowserSessionManager(BrowserConfig()) as sessions:
            session = await sessions.acquire(Source.PINTEREST, login=adapter_login)
            page = await session.new_page()
            try:
                ...
            finally:
                await page.close()
    """

    def __init__(self, config: Optional[BrowserConfig] = None, *, launcher: Optional[Launcher] = None) -> None:
        self.config = config or BrowserConfig()
        self._launcher = launcher or launch_chromium
        self._driver: Any = None
        self._browser: Any = None
        self._launch_lock = asyncio.Lock()
        self._platform_locks: Dict[Source, asyncio.Lock] = {}
        self._sessions: Dict[Source, PlatformSession] = {}
        self._closed = False

    async def __aenter__(self) -> "BrowserSessionManager":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def is_running(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    async def acquire(self, platform: Source, login: Optional[LoginProcedure] = None) -> PlatformSession:
        """Return the platform's session, creating and logging it in if needed.

        Raises:
            LoginError: The login procedure failed or timed out
            TransientFetchError: The browser or context could not be created
        """
        if self._closed:
            raise RuntimeError("Browser session manager is closed")

        lock = self._platform_locks.setdefault(platform, asyncio.Lock())
        async with lock:
            browser = await self._ensure_browser()
            session = self._sessions.get(platform)
            if session is None:
                session = await self._create_session(browser, platform)
                self._sessions[platform] = session

            if login is not None and not session.authenticated:
                await self._login(session, login)
            return session

    async def close(self) -> None:
        """Release contexts, the browser and the Playwright driver."""

        self._closed = True
        sessions = list(self._sessions.values())
        self._sessions.clear()
        for session in sessions:
            try:
                await session.close()
            except Exception as exc:
                logger.warning("Error closing %s browser context: %s", session.platform.value, exc)

        browser, driver = self._browser, self._driver
        self._browser = self._driver = None
        if browser is not None:
            try:
                await browser.close()
            except Exception as exc:
                logger.warning("Error closing browser: %s", exc)
        if driver is not None:
            try:
                await driver.stop()
            except Exception as exc:
                logger.warning("Error stopping Playwright driver: %s", exc)
        if browser is not None:
            logger.info("Browser session closed")

    async def _ensure_browser(self) -> Any:
        async with self._launch_lock:
            if self._browser is not None and self._browser.is_connected():
                return self._browser

            if self._browser is not None:
                logger.warning("Browser disconnected; relaunching and discarding %d sessions", len(self._sessions))
                self._sessions.clear()
                if self._driver is not None:
                    try:
                        await self._driver.stop()
                    except Exception as exc:
                        logger.debug("Error stopping stale Playwright driver: %s", exc)
                self._browser = self._driver = None

            try:
                self._driver, self._browser = await self._launcher(self.config)
            except PlaywrightError as exc:
                raise TransientFetchError("browser", f"launch failed: {exc}") from exc
            logger.info("Launched headless browser (headless=%s)", self.config.headless)
            return self._browser

    async def _create_session(self, browser: Any, platform: Source) -> PlatformSession:
        try:
            context = await browser.new_context(
                user_agent=self.config.user_agent,
                locale="en-US",
                viewport={"width": self.config.viewport_width, "height": self.config.viewport_height},
            )
            await context.add_init_script(HIDE_WEBDRIVER_SCRIPT)
        except PlaywrightError as exc:
            raise TransientFetchError(platform.value, f"could not create browser context: {exc}") from exc
        context.set_default_navigation_timeout(self.config.navigation_timeout_seconds * 1000)
        logger.debug("Created browser context for %s", platform.value)
        return PlatformSession(platform, context, self.config)

    async def _login(self, session: PlatformSession, login: LoginProcedure) -> None:
        platform = session.platform.value
        logger.info("Logging in to %s", platform)
        page = await session.new_page()
        try:
            await asyncio.wait_for(login(page), timeout=self.config.login_timeout_seconds)
        except asyncio.TimeoutError as exc:
            raise LoginError(platform, f"login timed out after {self.config.login_timeout_seconds:.0f}s") from exc
        except LoginError:
            raise
        except TransientFetchError as exc:
            raise LoginError(platform, f"login failed: {exc.message}") from exc
        finally:
            await page.close()

        session.authenticated = True
        logger.info("Logged in to %s", platform)
