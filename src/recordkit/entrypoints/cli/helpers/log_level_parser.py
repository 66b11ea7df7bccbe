"""Parsing of ``-L NAME=LEVEL`` logger-level options.

Values may be repeated or given as one comma/space separated list (the form
used by the ``RECORDKIT_LOGGER_LEVEL`` environment variable).
"""

import logging
import re

import click

DEFAULT_LIB_LEVELS = {"markdown_it": logging.WARNING, "asyncio": logging.WARNING}

_SEPARATORS = re.compile(r"[,\s]+")


def _normalize_items(value: str | list[str] | tuple[str, ...] | None) -> list[str]:
    """Flatten option values into non-empty ``NAME=LEVEL`` items."""
    if not value:
        return []
    chunks = [value] if isinstance(value, str) else list(value)
    items: list[str] = []
    for chunk in chunks:
        items.extend(s for s in _SEPARATORS.split(chunk) if s)
    return items


def parse_log_level(
    ctx: click.Context,  # pylint: disable=unused-argument
    param: click.Parameter | None,  # pylint: disable=unused-argument
    value: str | list[str] | tuple[str, ...] | None,
) -> dict[str, int]:
    """Click callback turning ``NAME=LEVEL`` items into ``{name: level}``.

    The result starts from `DEFAULT_LIB_LEVELS`; later items win.

    Raises:
        click.BadParameter: If an item is not ``NAME=LEVEL`` or the level is
            not a standard logging level name.
    """
    levels = dict(DEFAULT_LIB_LEVELS)
    for item in _normalize_items(value):
        name, sep, level_name = item.partition("=")
        if not sep or not name.strip():
            raise click.BadParameter(f"Expected NAME=LEVEL, got {item!r}")
        level = logging.getLevelNamesMapping().get(level_name.strip().upper())
        if level is None:
            raise click.BadParameter(f"Invalid log level: {level_name}")
        levels[name.strip()] = level
    return levels
