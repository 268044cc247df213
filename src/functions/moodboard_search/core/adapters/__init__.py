"""Platform adapters: one per image source."""

from .arena import ArenaAdapter
from .base import SourceAdapter
from .browser import AuthenticatedBrowserAdapter
from .pinterest import PinterestAdapter
from .registry import build_adapters
from .savee import SaveeAdapter
from .shotdeck import ShotdeckAdapter

__all__ = [
    "ArenaAdapter",
    "AuthenticatedBrowserAdapter",
    "PinterestAdapter",
    "SaveeAdapter",
    "ShotdeckAdapter",
    "SourceAdapter",
    "build_adapters",
]
