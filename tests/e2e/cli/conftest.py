"""Fixtures for end-to-end CLI tests.

`log-demo` is a test-only subcommand that logs at every level from a
recordkit logger and a third-party one, for the logging and flight-recorder
tests. `write_json` drops record files into the isolated filesystem.
"""

import json
import logging
from pathlib import Path

import click
import pytest
from click.testing import CliRunner

from recordkit.entrypoints.cli.main import recordkit

# pylint: disable=redefined-outer-name


@click.command()
def log_demo():
    """Log one message per level, then a trailing debug line."""
    logger = logging.getLogger("recordkit.demo")
    logger.debug("This is a debug-level test message.")
    logger.info("This is an info-level test message.")
    logger.warning("This is a warning-level test message.")
    logger.error("This is an error-level test message.")
    logger.critical("This is a critical-level test message.")
    other = logging.getLogger("some.thirdparty")
    other.debug("This is a debug-level third-party test message.")
    other.info("This is an info-level third-party test message.")
    other.warning("This is a warning-level third-party test message.")
    logger.debug("This is a final debug-level test message.")


@pytest.fixture
def registered_log_demo():
    """Attach `log-demo` to the `recordkit` group for one test."""
    recordkit.add_command(log_demo, name="log-demo")
    try:
        yield
    finally:
        recordkit.commands.pop("log-demo", None)
        for section in getattr(recordkit, "_sections", []):
            getattr(section, "commands", {}).pop("log-demo", None)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def fs(runner):
    """Run the test inside a temporary working directory."""
    with runner.isolated_filesystem():
        yield


@pytest.fixture
def write_json(fs):
    """Return a helper writing ``data`` as JSON to ``name`` in the working directory."""

    def write(name: str, data) -> str:
        Path(name).write_text(json.dumps(data), encoding="utf-8")
        return name

    return write
