"""Configuration utilities for recordkit.

This module centralizes small helpers and constants related to process-wide
configuration. Settings are read from ``RECORDKIT_*`` environment variables.
"""

import os
from enum import Enum

from recordkit.errors import InvalidUpdateModeError

ENV_PREFIX = "RECORDKIT"
UPDATE_MODE_ENV = f"{ENV_PREFIX}_UPDATE_MODE"  # pragma: no mutate


class UpdateMode(Enum):
    """How a record treats keys it does not declare.

    STRICT rejects them, TIDY records a diagnostic and skips them, and
    LENIENT skips them silently.
    """

    STRICT = "strict"
    TIDY = "tidy"
    LENIENT = "lenient"


DEFAULT_UPDATE_MODE = UpdateMode.LENIENT


def parse_update_mode(value: "str | UpdateMode") -> UpdateMode:
    """Convert a mode name (case-insensitive) into an `UpdateMode`.

    Args:
        value: A mode name such as ``"strict"``, or an `UpdateMode`.

    Returns:
        The matching `UpdateMode` member.

    Raises:
        InvalidUpdateModeError: If the name is not a known mode.
    """
    if isinstance(value, UpdateMode):
        return value
    try:
        return UpdateMode(value.strip().lower())
    except ValueError as e:
        raise InvalidUpdateModeError(value) from e


def get_default_update_mode() -> UpdateMode:
    """Get the process default update mode from the environment.

    Returns:
        The mode named by ``RECORDKIT_UPDATE_MODE``, or LENIENT when unset.

    Raises:
        InvalidUpdateModeError: If the variable holds an unknown mode name.
    """
    if not (value := os.environ.get(UPDATE_MODE_ENV)):
        return DEFAULT_UPDATE_MODE
    return parse_update_mode(value)
