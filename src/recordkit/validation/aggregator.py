"""Collects rule failures during a validation pass."""

from recordkit.errors import ValidationException


class ErrorAggregator:
    """Ordered ``{field: {rule: message}}`` map of failures.

    Fields keep the order of their first failure and rules keep execution
    order. Recording the same ``(field, rule)`` twice keeps the last message.
    """

    def __init__(self) -> None:
        self._errors: dict[str, dict[str, str]] = {}

    def record(self, field: str, rule: str, message: str) -> None:
        self._errors.setdefault(field, {})[rule] = message

    def has_errors(self) -> bool:
        return bool(self._errors)

    def to_map(self) -> dict[str, dict[str, str]]:
        """Return a deep copy of the collected errors."""
        return {field: dict(rules) for field, rules in self._errors.items()}

    def raise_errors(self) -> None:
        """Raise the aggregate `ValidationException` if anything failed."""
        if self._errors:
            raise ValidationException(self._errors)

    def __len__(self) -> int:
        return sum(len(rules) for rules in self._errors.values())
