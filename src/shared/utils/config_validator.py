"""
Configuration validation utilities.

Typed readers for environment variables that fail loudly with a clear
message instead of letting a bad value surface deep inside a search run.
"""

import os
from typing import List, Optional


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


def validate_int_env(name: str, default: Optional[int] = None, min_value: Optional[int] = None,
                     max_value: Optional[int] = None) -> int:
    """
    Validate an integer environment variable.

    Args:
        name: Environment variable name
        default: Default value if not set
        min_value: Minimum allowed value
        max_value: Maximum allowed value

    Returns:
        The validated integer value

    Raises:
        ConfigurationError: If the value is invalid
    """
    value_str = os.getenv(name)

    if not value_str:
        if default is None:
            raise ConfigurationError(f"Missing required integer environment variable: {name}")
        return default

    try:
        value = int(value_str)
    except ValueError:
        raise ConfigurationError(
            f"Invalid integer value for {name}: '{value_str}'\n"
            f"Expected an integer value."
        )

    _check_bounds(name, value, min_value, max_value)
    return value


def validate_float_env(name: str, default: Optional[float] = None, min_value: Optional[float] = None,
                       max_value: Optional[float] = None) -> float:
    """
    Validate a float environment variable (timeouts, deadlines, thresholds).

    Raises:
        ConfigurationError: If the value is missing without default or out of range
    """
    value_str = os.getenv(name)

    if not value_str:
        if default is None:
            raise ConfigurationError(f"Missing required numeric environment variable: {name}")
        return default

    try:
        value = float(value_str)
    except ValueError:
        raise ConfigurationError(
            f"Invalid numeric value for {name}: '{value_str}'\n"
            f"Expected a number."
        )

    _check_bounds(name, value, min_value, max_value)
    return value


def validate_bool_env(name: str, default: bool = False) -> bool:
    """
    Validate a boolean environment variable.

    Accepts: true, false, yes, no, 1, 0 (case-insensitive)

    Args:
        name: Environment variable name
        default: Default value if not set

    Returns:
        The validated boolean value

    Raises:
        ConfigurationError: If the value is invalid
    """
    value_str = os.getenv(name)

    if not value_str:
        return default

    value_lower = value_str.lower()

    if value_lower in ("true", "yes", "1"):
        return True
    elif value_lower in ("false", "no", "0"):
        return False
    else:
        raise ConfigurationError(
            f"Invalid boolean value for {name}: '{value_str}'\n"
            f"Expected one of: true, false, yes, no, 1, 0"
        )


def validate_choice_env(name: str, choices: List[str], default: Optional[str] = None) -> str:
    """
    Validate an environment variable against a list of allowed choices.

    Comparison is case-insensitive; the matching choice is returned.

    Raises:
        ConfigurationError: If the value is not in choices
    """
    value = os.getenv(name)

    if not value:
        if default is None:
            raise ConfigurationError(f"Missing required environment variable: {name}")
        return default

    for choice in choices:
        if choice.lower() == value.strip().lower():
            return choice

    raise ConfigurationError(
        f"Invalid value for {name}: '{value}'\n"
        f"Expected one of: {', '.join(choices)}"
    )


def validate_list_env(name: str, default: Optional[List[str]] = None,
                      choices: Optional[List[str]] = None) -> List[str]:
    """
    Read a comma separated environment variable into a list of lower-cased items.

    Empty items are dropped and duplicates removed while keeping order.

    Raises:
        ConfigurationError: If an item is not one of ``choices``
    """
    value = os.getenv(name)

    if not value:
        return list(default or [])

    items = list(dict.fromkeys(item.strip().lower() for item in value.split(",") if item.strip()))
    if choices is not None:
        allowed = {choice.lower() for choice in choices}
        invalid = [item for item in items if item not in allowed]
        if invalid:
            raise ConfigurationError(
                f"Invalid entries for {name}: {', '.join(invalid)}\n"
                f"Expected any of: {', '.join(choices)}"
            )
    return items


def _check_bounds(name: str, value: float, min_value: Optional[float], max_value: Optional[float]) -> None:
    if min_value is not None and value < min_value:
        raise ConfigurationError(
            f"Value for {name} ({value}) is below minimum allowed value ({min_value})"
        )

    if max_value is not None and value > max_value:
        raise ConfigurationError(
            f"Value for {name} ({value}) exceeds maximum allowed value ({max_value})"
        )
