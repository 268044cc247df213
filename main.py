"""Deployment wrapper for the moodboard search Cloud Function."""

from __future__ import annotations

import sys
from pathlib import Path

import flask

project_root = Path(__file__).resolve().parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from src.functions.moodboard_search.functions.main import health_check_handler, moodboard_search_handler


def moodboard_search(request: flask.Request) -> flask.Response:
    return moodboard_search_handler(request)


def health_check(request: flask.Request) -> flask.Response:
    return health_check_handler(request)
