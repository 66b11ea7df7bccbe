"""Marks every test under `tests/unit/` as `unit`, unless already marked."""

from pathlib import Path

import pytest

# pylint: disable=unused-argument

HERE = Path(__file__).parent.resolve()


@pytest.hookimpl(tryfirst=True)
def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    for item in items:
        if HERE not in item.path.resolve().parents:
            continue
        if item.get_closest_marker("unit") is None:
            item.add_marker(pytest.mark.unit)
