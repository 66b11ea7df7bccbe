"""Global pytest fixtures for recordkit."""

import pytest

from recordkit.config import UPDATE_MODE_ENV


@pytest.fixture(autouse=True)
def _default_update_mode(monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every test with the built-in default update mode."""
    monkeypatch.delenv(UPDATE_MODE_ENV, raising=False)
