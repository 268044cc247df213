"""Shotdeck film-still search.

The login form renders client-side and its email input carries no stable
name, so the field is located in the page after a settle delay.
"""

from __future__ import annotations

from ..contracts.candidate import Source
from ..errors import LoginError
from ..sessions import BrowserPage
from .browser import AuthenticatedBrowserAdapter

FIND_EMAIL_FIELD_SCRIPT = """
() => {
    const inputs = Array.from(document.querySelectorAll('input'));
    const match = inputs.find((input) =>
        ['type', 'name', 'placeholder', 'id'].some((attr) =>
            (input.getAttribute(attr) || '').toLowerCase().includes('email')));
    if (!match) return null;
    if (match.id) return '#' + CSS.escape(match.id);
    if (match.name) return `input[name="${match.name}"]`;
    return `input[type="${match.type}"]`;
}
"""


class ShotdeckAdapter(AuthenticatedBrowserAdapter):
    source = Source.SHOTDECK
    login_url = "https://shotdeck.com/welcome/login"
    search_url = "https://shotdeck.com/browse?search="
    home_url = "https://shotdeck.com"
    password_selector = 'input[type="password"]'
    submit_selector = 'button[type="submit"], input[type="submit"]'

    async def _resolve_email_selector(self, page: BrowserPage) -> str:
        await page.wait(self._config.settle_delay_ms)
        selector = await page.evaluate(FIND_EMAIL_FIELD_SCRIPT)
        if not isinstance(selector, str) or not selector:
            raise LoginError(self.source.value, "email field not found on login page")
        return selector
