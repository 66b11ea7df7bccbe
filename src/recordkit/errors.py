"""Error definitions for recordkit."""

from collections.abc import Iterable, Mapping
from types import MappingProxyType

# ============================================================================
#                               General errors
# ============================================================================

MAX_LISTED_FIELDS = 25


class RecordKitError(Exception):
    """Base class for all recordkit errors."""


class InvalidUpdateModeError(RecordKitError, ValueError):
    """Raised when an update mode name is not one of strict, tidy or lenient."""

    def __init__(self, value: str) -> None:
        super().__init__(
            f"Invalid update mode '{value}', expected one of: strict, tidy, lenient."
        )
        self.value = value


# ============================================================================
#                               Record errors
# ============================================================================


class UnknownFieldError(RecordKitError):
    """Raised when a strict record is given keys it does not declare."""

    def __init__(self, fields: Iterable[str]) -> None:
        self.fields = list(fields)
        count = len(self.fields)
        listed = ", ".join(self.fields[:MAX_LISTED_FIELDS])
        if count > MAX_LISTED_FIELDS:
            listed += " ..."
        super().__init__(f"Unknown fields ({count}): {listed}")


UndefinedFieldError = UnknownFieldError


# ============================================================================
#                             Validation errors
# ============================================================================


class UnknownRuleError(RecordKitError, LookupError):
    """Raised when a rule name has no predicate registered for it."""

    def __init__(self, rule: str) -> None:
        super().__init__(f"Unknown rule: {rule}")
        self.rule = rule


class InvalidRuleError(RecordKitError, ValueError):
    """Raised when a rule declaration or rules table is malformed."""


class RuleViolation(RecordKitError):
    """Raised by a rule predicate when a value breaks the rule.

    The message is shown to end users, so it should name the constraint that
    failed rather than just saying "invalid".
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class RequiredFieldError(RuleViolation):
    """Raised by the `required` rule for a missing value."""

    def __init__(self, message: str = "Property is required.") -> None:
        super().__init__(message)


class ValidationException(RecordKitError):
    """Raised once at the end of a failed validation pass.

    Attributes:
        errors: Read-only ``{field: {rule: message}}`` snapshot of every
            failure recorded during the pass.
    """

    def __init__(self, errors: Mapping[str, Mapping[str, str]]) -> None:
        self.errors: Mapping[str, Mapping[str, str]] = MappingProxyType(
            {field: MappingProxyType(dict(rules)) for field, rules in errors.items()}
        )
        super().__init__(self.summary)

    @property
    def fields(self) -> list[str]:
        """Names of the fields that failed, in first-failure order."""
        return list(self.errors)

    @property
    def summary(self) -> str:
        """A one-line summary naming each failed field."""
        return self.get_summary(self.errors)

    @staticmethod
    def get_summary(errors: Mapping[str, object]) -> str:
        """Build the ``Validation failed for 'a', 'b'`` summary for an error map."""
        names = ", ".join(f"'{name}'" for name in errors)
        return f"Validation failed for {names}"

    def to_dict(self) -> dict[str, dict[str, str]]:
        """Return a plain, mutable copy of the error map."""
        return {field: dict(rules) for field, rules in self.errors.items()}
