"""CLI helpers for recordkit.

Terminal hyperlinks, logger-level option parsing, ``module:Class`` target
loading and message emitters that write to stderr with emoji to ASCII
fallbacks.
"""

from .hyperlinks import hyperlink
from .loader import load_record_class
from .messages import error, success, warn

__all__ = ["error", "hyperlink", "load_record_class", "success", "warn"]
