"""Savee search behind an email/password login."""

from __future__ import annotations

from ..contracts.candidate import Source
from .browser import AuthenticatedBrowserAdapter


class SaveeAdapter(AuthenticatedBrowserAdapter):
    source = Source.SAVEE
    login_url = "https://savee.it/login/"
    search_url = "https://savee.it/search/?q="
    home_url = "https://savee.it"
    email_selector = 'input[name="email"]'
    password_selector = 'input[name="password"]'
