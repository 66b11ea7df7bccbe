"""Record mixins that add validation.

Combine one of the validator mixins with `Collection`:

    ```python
    class Payment(RulesValidatorMixin, Collection):
        id: int | None = None
        amount: float | None = None

        def rules(self, scenario=None):
            return {"required": ["id"], "positiveInt": ["amount"]}

    Payment({"amount": -5}).validate()  # raises ValidationException
    ```
"""

import abc
from collections.abc import Mapping
from typing import Any, ClassVar

from recordkit.errors import ValidationException
from recordkit.validation.engine import Validator
from recordkit.validation.registry import RuleRegistry
from recordkit.validation.sources import (
    InlineRulesSource,
    RuleSource,
    RulesTableSource,
    TypeHintSource,
)


class Validates(abc.ABC):
    """A record that can validate itself.

    Attributes:
        RULE_REGISTRY: Registry used to resolve rule names; ``None`` means
            the default registry.
    """

    RULE_REGISTRY: ClassVar[RuleRegistry | None] = None

    @abc.abstractmethod
    def rule_source(self) -> RuleSource:
        raise NotImplementedError

    def validator(self) -> Validator:
        return Validator(self, self.rule_source(), self.RULE_REGISTRY)  # type: ignore[arg-type]

    def validate(self, scenario: str | None = None) -> None:
        """Validate the record.

        Raises:
            ValidationException: With every failure of the pass.
        """
        self.validator().validate(scenario)


class RulesValidatorMixin(Validates):
    """Validation driven by a ``rules(scenario)`` table."""

    @abc.abstractmethod
    def rules(self, scenario: str | None = None) -> Mapping[str, Any]:
        raise NotImplementedError

    def rule_source(self) -> RuleSource:
        return RulesTableSource()


class AttributeValidatorMixin(Validates):
    """Validation driven by rules attached to fields."""

    def rule_source(self) -> RuleSource:
        return InlineRulesSource()


class TypeValidatorMixin(Validates):
    """Validation of field values against their type hints."""

    def rule_source(self) -> RuleSource:
        return TypeHintSource()


class ValidErrorsMixin:
    """Boolean validation that keeps the errors, per scenario.

    Must be combined with a `Validates` mixin.
    """

    def _error_store(self) -> dict[str | None, dict[str, dict[str, str]]]:
        if (store := self.__dict__.get("_valid_errors")) is None:
            store = {}
            self._valid_errors = store
        return store

    def valid(self, scenario: str | None = None) -> bool:
        """Validate and report success instead of raising.

        The errors of a failed pass replace any earlier ones for the same
        scenario and become the latest entry. A passing run clears them.
        """
        store = self._error_store()
        try:
            self.validate(scenario)  # type: ignore[attr-defined]
        except ValidationException as e:
            store.pop(scenario, None)
            store[scenario] = e.to_dict()
            return False
        store.pop(scenario, None)
        return True

    def get_errors(self) -> dict[str | None, dict[str, dict[str, str]]]:
        """All stored errors, ``{scenario: {field: {rule: message}}}``."""
        return {key: {f: dict(r) for f, r in errors.items()} for key, errors in self._error_store().items()}

    def get_last_errors(self) -> dict[str, dict[str, str]]:
        if not (store := self._error_store()):
            return {}
        return {f: dict(r) for f, r in list(store.values())[-1].items()}

    def get_error_summaries(self) -> dict[str | None, str]:
        return {key: ValidationException.get_summary(errors) for key, errors in self._error_store().items()}

    def get_last_error_summary(self) -> str:
        if not (errors := self.get_last_errors()):
            return ""
        return ValidationException.get_summary(errors)

    def has_errors(self) -> bool:
        return bool(self._error_store())

    def clear_errors(self, scenario: Any = ...) -> None:
        """Forget the errors of ``scenario``, or all errors when not given."""
        store = self._error_store()
        if scenario is ...:
            store.clear()
        else:
            store.pop(scenario, None)
