"""Pinterest pin search behind a logged-in session."""

from __future__ import annotations

from ..contracts.candidate import Source
from .browser import AuthenticatedBrowserAdapter


class PinterestAdapter(AuthenticatedBrowserAdapter):
    source = Source.PINTEREST
    login_url = "https://www.pinterest.com/login/"
    search_url = "https://www.pinterest.com/search/pins/?q="
    home_url = "https://www.pinterest.com"
    email_selector = 'input[name="id"]'
    password_selector = 'input[name="password"]'
    # Pin images are served from the pinimg CDN; everything else is chrome
    host_hint = "pinimg"
