"""Unit tests for `ErrorAggregator`."""

import pytest

from recordkit import ValidationException
from recordkit.validation import ErrorAggregator

# pylint: disable=magic-value-comparison


@pytest.fixture(name="aggregator")
def fixture_aggregator() -> ErrorAggregator:
    errors = ErrorAggregator()
    errors.record("a", "r1", "one")
    errors.record("b", "r1", "b-one")
    errors.record("a", "r2", "two")
    errors.record("a", "r1", "three")
    return errors


def test_empty() -> None:
    errors = ErrorAggregator()
    assert not errors.has_errors()
    assert len(errors) == 0
    assert errors.to_map() == {}
    errors.raise_errors()


def test_last_message_wins_in_first_seen_order(aggregator) -> None:
    """A repeated (field, rule) keeps its slot but takes the new message."""
    assert aggregator.to_map() == {"a": {"r1": "three", "r2": "two"}, "b": {"r1": "b-one"}}
    assert list(aggregator.to_map()) == ["a", "b"]
    assert list(aggregator.to_map()["a"]) == ["r1", "r2"]


def test_len_counts_field_rule_pairs(aggregator) -> None:
    assert aggregator.has_errors()
    assert len(aggregator) == 3


def test_to_map_is_a_deep_copy(aggregator) -> None:
    """Changing the returned map leaves the aggregator untouched."""
    copy = aggregator.to_map()
    copy["a"]["r3"] = "mine"
    copy["c"] = {"r1": "mine"}
    assert aggregator.to_map() == {"a": {"r1": "three", "r2": "two"}, "b": {"r1": "b-one"}}
    assert len(aggregator) == 3


def test_raise_errors_snapshots(aggregator) -> None:
    """The exception carries the errors as they were when raised."""
    with pytest.raises(ValidationException) as excinfo:
        aggregator.raise_errors()
    aggregator.record("c", "r1", "late")
    assert dict(excinfo.value.errors["a"]) == {"r1": "three", "r2": "two"}
    assert excinfo.value.fields == ["a", "b"]
    assert "c" not in excinfo.value.errors
