"""Entrypoints for recordkit.

Expose the library to the outside world. Currently only the ``recordkit``
command line lives here.
"""
