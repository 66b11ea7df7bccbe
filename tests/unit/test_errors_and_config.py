"""Unit tests for `recordkit.errors` and `recordkit.config`."""

import pytest

from recordkit.config import (
    UPDATE_MODE_ENV,
    UpdateMode,
    get_default_update_mode,
    parse_update_mode,
)
from recordkit.errors import (
    InvalidRuleError,
    InvalidUpdateModeError,
    RecordKitError,
    RequiredFieldError,
    UndefinedFieldError,
    UnknownFieldError,
    UnknownRuleError,
    ValidationException,
)

# pylint: disable=magic-value-comparison


class TestValidationException:
    """Aggregate exception behaviour."""

    @staticmethod
    def test_summary_and_message() -> None:
        """The message names every failed field in order."""
        exc = ValidationException({"a": {"required": "x"}, "b": {"email": "y"}})
        assert exc.summary == "Validation failed for 'a', 'b'"
        assert str(exc) == exc.summary
        assert exc.fields == ["a", "b"]

    @staticmethod
    def test_errors_are_read_only_snapshot() -> None:
        """Later changes to the source map do not leak into the exception."""
        source = {"a": {"required": "x"}}
        exc = ValidationException(source)
        source["a"]["email"] = "y"
        assert dict(exc.errors["a"]) == {"required": "x"}
        with pytest.raises(TypeError):
            exc.errors["b"] = {}  # type: ignore[index]

    @staticmethod
    def test_to_dict_is_mutable_copy() -> None:
        """to_dict returns plain dictionaries."""
        exc = ValidationException({"a": {"required": "x"}})
        copy = exc.to_dict()
        copy["a"]["other"] = "z"
        assert "other" not in exc.errors["a"]


def test_error_hierarchy() -> None:
    """Every error derives from RecordKitError and the expected builtins."""
    assert issubclass(UnknownRuleError, LookupError)
    assert issubclass(InvalidRuleError, ValueError)
    assert issubclass(InvalidUpdateModeError, ValueError)
    for exc_type in (UnknownFieldError, UnknownRuleError, ValidationException, RequiredFieldError):
        assert issubclass(exc_type, RecordKitError)
    assert UndefinedFieldError is UnknownFieldError


def test_required_message() -> None:
    """The required failure has a fixed message."""
    assert RequiredFieldError().message == "Property is required."


@pytest.mark.parametrize(
    ("value", "expected"),
    [("strict", UpdateMode.STRICT), (" TIDY ", UpdateMode.TIDY), (UpdateMode.LENIENT, UpdateMode.LENIENT)],
)
def test_parse_update_mode(value, expected) -> None:
    """Mode names are case-insensitive and trimmed."""
    assert parse_update_mode(value) is expected


def test_parse_update_mode_rejects_unknown() -> None:
    """Unknown names raise with the bad value attached."""
    with pytest.raises(InvalidUpdateModeError) as excinfo:
        parse_update_mode("loose")
    assert excinfo.value.value == "loose"


def test_default_mode_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """The environment variable selects the default; unset means lenient."""
    assert get_default_update_mode() is UpdateMode.LENIENT
    monkeypatch.setenv(UPDATE_MODE_ENV, "tidy")
    assert get_default_update_mode() is UpdateMode.TIDY
    monkeypatch.setenv(UPDATE_MODE_ENV, "bogus")
    with pytest.raises(InvalidUpdateModeError):
        get_default_update_mode()
