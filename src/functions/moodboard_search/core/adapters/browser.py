"""Base class for platforms that are only searchable behind a login."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote, urlparse

from ..config import BrowserConfig, PlatformCredentials
from ..contracts.candidate import RawRecord
from ..errors import LoginError, TransientFetchError
from ..sessions import BrowserPage, BrowserSessionManager
from .base import SourceAdapter

logger = logging.getLogger(__name__)

# Runs inside the page; read-only, returns [{url, title, sourceUrl}]
EXTRACT_IMAGES_SCRIPT = """
(options) => {
    const isHttp = (value) => !!value && (value.startsWith('http://') || value.startsWith('https://'));
    const seen = new Set();
    const results = [];
    for (const img of Array.from(document.querySelectorAll('img'))) {
        // lazy-loaded images keep a data: placeholder in src until scrolled into view
        const src = [img.currentSrc, img.getAttribute('src'), img.getAttribute('data-src')].find(isHttp);
        if (!src) continue;
        if (seen.has(src)) continue;
        const width = img.getBoundingClientRect().width || img.width || 0;
        if (width <= options.minWidth) continue;
        const lower = src.toLowerCase();
        if (options.hostHint && !lower.includes(options.hostHint)) continue;
        if (options.exclude.some((fragment) => lower.includes(fragment))) continue;
        const style = window.getComputedStyle(img);
        if (style.display === 'none' || style.visibility === 'hidden') continue;
        seen.add(src);
        const anchor = img.closest('a');
        results.push({
            url: src,
            title: (img.getAttribute('alt') || img.getAttribute('title') || '').trim(),
            sourceUrl: anchor && anchor.href ? anchor.href : options.homeUrl,
        });
        if (results.length >= options.limit) break;
    }
    return results;
}
"""


class AuthenticatedBrowserAdapter(SourceAdapter):
    """Log in once per browser context, then scrape the platform's search page.

    Subclasses only declare URLs and selectors; the shotdeck adapter also
    overrides how the email field is located.
    """

    login_url: str
    search_url: str
    home_url: str
    email_selector: str = 'input[name="email"]'
    password_selector: str = 'input[name="password"]'
    submit_selector: str = 'button[type="submit"]'
    host_hint: Optional[str] = None
    excluded_fragments: Tuple[str, ...] = ("avatar", "logo")

    def __init__(
        self,
        sessions: BrowserSessionManager,
        credentials: Optional[PlatformCredentials],
        config: Optional[BrowserConfig] = None,
    ) -> None:
        self._sessions = sessions
        self._credentials = credentials
        self._config = config or sessions.config

    @property
    def is_configured(self) -> bool:
        return bool(self._credentials and self._credentials.email and self._credentials.password)

    def build_search_url(self, query: str) -> str:
        return f"{self.search_url}{quote(query, safe='')}"

    def extraction_options(self, limit: int) -> Dict[str, Any]:
        return {
            "minWidth": self._config.min_image_width,
            "hostHint": self.host_hint,
            "exclude": list(self.excluded_fragments),
            "homeUrl": self.home_url,
            "limit": limit,
        }

    async def _fetch(self, query: str, limit: int) -> List[RawRecord]:
        session = await self._sessions.acquire(self.source, login=self._login)
        page = await session.new_page()
        try:
            await page.goto(self.build_search_url(query))
            await page.wait(self._config.settle_delay_ms)
            for _ in range(self._config.scroll_cycles):
                await page.scroll_viewport()
                await page.wait(self._config.scroll_delay_ms)
            records = await page.evaluate(EXTRACT_IMAGES_SCRIPT, self.extraction_options(limit))
        finally:
            await page.close()

        if not isinstance(records, list):
            raise TransientFetchError(self.source.value, "image extraction returned no list")
        return [record for record in records if isinstance(record, dict)][:limit]

    async def _login(self, page: BrowserPage) -> None:
        credentials = self._credentials
        if credentials is None:
            raise LoginError(self.source.value, "no credentials available")

        await page.goto(self.login_url)
        email_selector = await self._resolve_email_selector(page)
        await page.fill(email_selector, credentials.email)
        await page.fill(self.password_selector, credentials.password)
        await page.click(self.submit_selector)
        await page.wait_for_network_idle()

        if self._is_login_page(page.url):
            raise LoginError(self.source.value, "still on the login page after submitting credentials")

    async def _resolve_email_selector(self, page: BrowserPage) -> str:
        return self.email_selector

    def _is_login_page(self, url: str) -> bool:
        current = urlparse(url)
        login = urlparse(self.login_url)
        return current.netloc == login.netloc and current.path.rstrip("/") == login.path.rstrip("/")
