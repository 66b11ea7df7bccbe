"""Clickable terminal links for CLI help output.

Terminals that understand OSC-8 escape sequences render `hyperlink()` output
as a link; everywhere else the plain URL is printed.
"""

import os
import sys
from typing import TextIO

OSC8_PROGRAMS = frozenset({"apple_terminal", "vscode", "iterm.app", "wezterm", "kitty"})


def supports_osc8(stream: TextIO | None = None) -> bool:
    """Guess whether ``stream`` (default: stdout) renders OSC-8 links.

    Only interactive streams qualify, and only under terminals known to
    support the sequence.
    """
    stream = stream or sys.stdout
    if not getattr(stream, "isatty", lambda: False)():
        return False
    program = (os.getenv("TERM_PROGRAM") or "").lower()
    return bool(
        program in OSC8_PROGRAMS
        or os.getenv("WT_SESSION")
        or os.getenv("VTE_VERSION")
        or os.getenv("TERM", "").startswith(("alacritty", "konsole"))
    )


def hyperlink(url: str, text: str | None = None) -> str:
    """Render ``url`` as an OSC-8 link labelled ``text`` (default: the URL).

    Falls back to ``text`` followed by the URL in parentheses, or just the
    URL, when the terminal does not support links.
    """
    label = text or url
    if not supports_osc8():
        return url if label == url else f"{label} ({url})"
    return f"\x1b]8;;{url}\x07{label}\x1b]8;;\x07"
