"""Shared logging, environment and configuration helpers."""

from .config_validator import ConfigurationError
from .env import get_env, load_env
from .logging import setup_logging

__all__ = ["ConfigurationError", "get_env", "load_env", "setup_logging"]
