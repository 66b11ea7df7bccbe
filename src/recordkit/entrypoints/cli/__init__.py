"""The ``recordkit`` command line."""

from .main import recordkit

__all__ = ["recordkit"]
