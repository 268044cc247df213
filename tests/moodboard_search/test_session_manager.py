"""Tests for the browser session manager using an in-memory fake browser."""

from __future__ import annotations

import asyncio
from typing import Any, List, Optional

import pytest
from playwright.async_api import Error as PlaywrightError

from src.functions.moodboard_search.core.config import BrowserConfig
from src.functions.moodboard_search.core.contracts.candidate import Source
from src.functions.moodboard_search.core.errors import LoginError, TransientFetchError
from src.functions.moodboard_search.core.sessions import BrowserPage, BrowserSessionManager


class FakeRawPage:
    def __init__(self) -> None:
        self.url = "about:blank"
        self.closed = False
        self.fail_goto = False

    async def goto(self, url: str, wait_until: Optional[str] = None, timeout: Optional[float] = None) -> None:
        if self.fail_goto:
            raise PlaywrightError("net::ERR_NAME_NOT_RESOLVED at https://example.invalid\ncall log")
        self.url = url

    async def fill(self, selector: str, value: str) -> None:
        pass

    async def click(self, selector: str) -> None:
        pass

    async def wait_for_load_state(self, state: str, timeout: Optional[float] = None) -> None:
        pass

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        return arg

    async def close(self) -> None:
        self.closed = True


class FakeContext:
    def __init__(self, options: dict) -> None:
        self.options = options
        self.pages: List[FakeRawPage] = []
        self.init_scripts: List[str] = []
        self.navigation_timeout: Optional[float] = None
        self.closed = False

    async def add_init_script(self, script: str) -> None:
        self.init_scripts.append(script)

    def set_default_navigation_timeout(self, timeout: float) -> None:
        self.navigation_timeout = timeout

    async def new_page(self) -> FakeRawPage:
        page = FakeRawPage()
        self.pages.append(page)
        return page

    async def close(self) -> None:
        self.closed = True


class FakeBrowser:
    def __init__(self) -> None:
        self.contexts: List[FakeContext] = []
        self.connected = True
        self.closed = False

    def is_connected(self) -> bool:
        return self.connected

    async def new_context(self, **options: Any) -> FakeContext:
        context = FakeContext(options)
        self.contexts.append(context)
        return context

    async def close(self) -> None:
        self.closed = True
        self.connected = False


class FakeDriver:
    def __init__(self) -> None:
        self.stopped = False

    async def stop(self) -> None:
        self.stopped = True


class FakeLauncher:
    def __init__(self) -> None:
        self.launches: List[tuple] = []

    async def __call__(self, config: BrowserConfig):
        driver, browser = FakeDriver(), FakeBrowser()
        self.launches.append((driver, browser))
        return driver, browser


def _manager(**config_overrides) -> tuple:
    launcher = FakeLauncher()
    manager = BrowserSessionManager(BrowserConfig(**config_overrides), launcher=launcher)
    return manager, launcher


def test_browser_is_launched_lazily_and_reused() -> None:
    manager, launcher = _manager()
    assert launcher.launches == []

    async def run():
        first = await manager.acquire(Source.PINTEREST)
        second = await manager.acquire(Source.PINTEREST)
        return first, second

    first, second = asyncio.run(run())

    assert first is second
    assert len(launcher.launches) == 1
    _, browser = launcher.launches[0]
    assert len(browser.contexts) == 1
    context = browser.contexts[0]
    assert context.options["viewport"] == {"width": 1440, "height": 900}
    assert context.navigation_timeout == 30000
    assert context.init_scripts


def test_each_platform_gets_its_own_context() -> None:
    manager, launcher = _manager()

    async def run():
        return await asyncio.gather(manager.acquire(Source.PINTEREST), manager.acquire(Source.SAVEE))

    pinterest, savee = asyncio.run(run())

    assert pinterest.context is not savee.context
    assert len(launcher.launches) == 1
    assert len(launcher.launches[0][1].contexts) == 2


def test_login_runs_once_even_when_acquired_concurrently() -> None:
    manager, _ = _manager()
    calls: List[str] = []

    async def login(page: BrowserPage) -> None:
        calls.append(page.platform.value)
        await asyncio.sleep(0.01)

    async def run():
        return await asyncio.gather(*(manager.acquire(Source.SAVEE, login=login) for _ in range(3)))

    sessions = asyncio.run(run())

    assert calls == ["savee"]
    assert all(session.authenticated for session in sessions)
    # the login page is closed afterwards
    assert all(page.closed for page in sessions[0].context.pages)


def test_failed_login_is_retried_on_next_acquire() -> None:
    manager, _ = _manager()
    attempts: List[int] = []

    async def login(page: BrowserPage) -> None:
        attempts.append(1)
        if len(attempts) == 1:
            raise LoginError("pinterest", "still on the login page")

    async def run():
        with pytest.raises(LoginError):
            await manager.acquire(Source.PINTEREST, login=login)
        return await manager.acquire(Source.PINTEREST, login=login)

    session = asyncio.run(run())

    assert len(attempts) == 2
    assert session.authenticated is True


def test_login_timeout_raises_login_error() -> None:
    manager, _ = _manager(login_timeout_seconds=0.05)

    async def login(page: BrowserPage) -> None:
        await asyncio.sleep(5)

    async def run():
        await manager.acquire(Source.SHOTDECK, login=login)

    with pytest.raises(LoginError) as excinfo:
        asyncio.run(run())
    assert "timed out" in str(excinfo.value)


def test_browser_errors_during_login_become_login_errors() -> None:
    manager, _ = _manager()

    async def login(page: BrowserPage) -> None:
        raise TransientFetchError("savee", "click button[type=submit] failed")

    with pytest.raises(LoginError):
        asyncio.run(manager.acquire(Source.SAVEE, login=login))


def test_disconnected_browser_is_relaunched() -> None:
    manager, launcher = _manager()

    async def run():
        first = await manager.acquire(Source.PINTEREST)
        launcher.launches[0][1].connected = False
        second = await manager.acquire(Source.PINTEREST)
        return first, second

    first, second = asyncio.run(run())

    assert len(launcher.launches) == 2
    assert first is not second
    assert launcher.launches[0][0].stopped is True


def test_close_releases_everything_and_blocks_reuse() -> None:
    manager, launcher = _manager()

    async def run():
        async with manager:
            await manager.acquire(Source.PINTEREST)
            await manager.acquire(Source.SAVEE)
        with pytest.raises(RuntimeError):
            await manager.acquire(Source.PINTEREST)

    asyncio.run(run())

    driver, browser = launcher.launches[0]
    assert all(context.closed for context in browser.contexts)
    assert browser.closed is True
    assert driver.stopped is True
    assert manager.is_running is False


def test_page_translates_playwright_errors() -> None:
    raw_page = FakeRawPage()
    raw_page.fail_goto = True
    page = BrowserPage(Source.SAVEE, raw_page, BrowserConfig())

    with pytest.raises(TransientFetchError) as excinfo:
        asyncio.run(page.goto("https://example.invalid"))

    assert excinfo.value.platform == "savee"
    assert "ERR_NAME_NOT_RESOLVED" in str(excinfo.value)
    assert "call log" not in str(excinfo.value)


def test_page_wait_is_bounded() -> None:
    page = BrowserPage(Source.SAVEE, FakeRawPage(), BrowserConfig())

    async def run():
        await asyncio.wait_for(page.wait(-50), timeout=1)
        await asyncio.wait_for(page.wait(5), timeout=1)

    asyncio.run(run())
