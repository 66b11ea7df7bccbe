"""Status lines for the recordkit CLI.

Messages go to stderr so that ``recordkit check --json`` output on stdout
stays machine-readable. Emoji markers fall back to ASCII on terminals that
cannot encode them.
"""

import click

GLYPHS = {
    "caution": ("⚠️", "[!]"),  # pragma: no mutate
    "success": ("✅", "[OK]"),  # pragma: no mutate
    "error": ("❌", "[X]"),  # pragma: no mutate
}


def _supports_character(character: str) -> bool:
    """Return True if ``character`` can be encoded on stderr."""
    stream = click.get_text_stream("stderr")  # pragma: no mutate
    encoding = getattr(stream, "encoding", None) or "ascii"
    try:
        character.encode(encoding)
    except UnicodeEncodeError:
        return False
    return True


def glyph(kind: str) -> str:
    """Return the marker for ``kind`` (caution, success or error)."""
    emoji, fallback = GLYPHS[kind]
    return emoji if _supports_character(emoji) else fallback


def warn(msg: str) -> None:
    """Print a bold yellow warning line to stderr."""
    click.secho(f"{glyph('caution')}  {msg}", fg="yellow", bold=True, err=True)


def success(msg: str) -> None:
    """Print a bold green success line to stderr.

    Example:
        ``✅  3 record(s) valid.``
    """
    click.secho(f"{glyph('success')}  {msg}", fg="green", bold=True, err=True)


def error(msg: str) -> None:
    """Print a bold red error line to stderr."""
    click.secho(f"{glyph('error')}  {msg}", fg="red", bold=True, err=True)
