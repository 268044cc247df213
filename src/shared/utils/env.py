"""Environment variable loading utilities.

Platform credentials and LLM keys are read from the process environment,
optionally seeded from a ``.env`` file during local development.
"""

from __future__ import annotations
import os
from pathlib import Path
from typing import Optional
import logging

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


def load_env(env_file: Optional[str] = None, override: bool = False) -> None:
    """Load environment variables from .env file(s).

    Args:
        env_file: Path to .env file. If None, loads every .env found from the
                 filesystem root down to the current directory, so the
                 closest file wins when ``override`` is set.
        override: Whether to override existing environment variables.
    """
    env_paths = []
    if env_file:
        env_path = Path(env_file)
        if env_path.exists():
            env_paths.append(env_path)
        else:
            logger.warning("Requested env file %s does not exist", env_file)
    else:
        current = Path.cwd()
        for parent in reversed(list(current.parents)):
            candidate = parent / ".env"
            if candidate.exists():
                env_paths.append(candidate)
        candidate = current / ".env"
        if candidate.exists():
            env_paths.append(candidate)

    if not env_paths:
        logger.debug("No .env file found, using system environment")
        return

    seen = set()
    for path in env_paths:
        if path in seen:
            continue
        load_dotenv(path, override=override)
        seen.add(path)
        logger.debug("Loaded environment from %s", path)


def get_env(key: str, default: Optional[str] = None) -> Optional[str]:
    """Get environment variable with optional default.

    Blank values are treated as unset so an empty ``PINTEREST_PASSWORD=``
    line in a .env file does not count as a configured credential.
    """
    value = os.getenv(key)
    if value is None or not value.strip():
        return default
    return value.strip()
