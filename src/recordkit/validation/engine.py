"""The validation pass.

A `Validator` asks its `RuleSource` for the bindings of a scenario, orders
them field-major (fields in declaration order, then each field's rules in
declaration order), resolves every predicate, runs them against the record
and raises one `ValidationException` listing every failure.

Predicates are resolved in this order:

1. the binding's own ``func``;
2. a method of the record marked with `record_rule` under that name;
3. the validator's `RuleRegistry`.

An unresolvable rule raises `UnknownRuleError` before any predicate runs.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from recordkit.errors import RuleViolation
from recordkit.validation.aggregator import ErrorAggregator
from recordkit.validation.declarations import local_rules
from recordkit.validation.registry import RuleRegistry, default_registry
from recordkit.validation.sources import RuleBinding, RuleSource

if TYPE_CHECKING:
    from recordkit.records.collection import Collection

logger = logging.getLogger(__name__)

REQUIRED_RULE = "required"


class ValidatorState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class _Call:
    binding: RuleBinding
    fields: tuple[str, ...]
    predicate: Callable[..., None]
    multi: bool


class Validator:
    """Runs the rules of one record.

    Args:
        record: The record to validate.
        source: Where the rules come from.
        registry: Rule lookup table; defaults to `default_registry`.
    """

    def __init__(
        self,
        record: "Collection",
        source: RuleSource,
        registry: RuleRegistry | None = None,
    ) -> None:
        self.record = record
        self.source = source
        self.registry = registry if registry is not None else default_registry
        self._state = ValidatorState.IDLE
        self._errors: dict[str, dict[str, str]] = {}

    @property
    def state(self) -> ValidatorState:
        return self._state

    @property
    def errors(self) -> dict[str, dict[str, str]]:
        """Errors of the last completed pass."""
        return {field: dict(rules) for field, rules in self._errors.items()}

    def validate(self, scenario: str | None = None) -> None:
        """Run every rule for ``scenario``.

        Raises:
            ValidationException: If any rule failed.
            UnknownRuleError: If a rule name cannot be resolved.
            InvalidRuleError: If the rule declarations are malformed.
            RuntimeError: If a pass is already running on this validator.
        """
        if self._state is ValidatorState.RUNNING:
            raise RuntimeError("A validation pass is already running on this validator")
        self._state = ValidatorState.RUNNING
        aggregator = ErrorAggregator()
        try:
            for call in self._plan(scenario):
                self._run(call, aggregator)
        except BaseException:
            self._state = ValidatorState.IDLE
            raise

        self._errors = aggregator.to_map()
        name = type(self.record).__name__
        if aggregator.has_errors():
            self._state = ValidatorState.FAILED
            logger.debug(
                "Validation of %s (scenario=%r) failed: %d error(s) on %s",
                name,
                scenario,
                len(aggregator),
                ", ".join(self._errors),
            )
            aggregator.raise_errors()
        self._state = ValidatorState.PASSED
        logger.debug("Validation of %s (scenario=%r) passed", name, scenario)

    def _plan(self, scenario: str | None) -> list[_Call]:
        table = type(self.record).field_table()
        last = len(table)

        def order(fields: tuple[str, ...]) -> int:
            return min((table[f].index if f in table else last) for f in fields)

        calls: list[_Call] = []
        for binding in self.source.bindings(self.record, scenario):
            predicate, multi = self._resolve(binding)
            if multi:
                calls.append(_Call(binding, binding.fields, predicate, True))
            else:
                calls.extend(_Call(binding, (f,), predicate, False) for f in binding.fields)
        # list.sort is stable, so rules of a field keep declaration order.
        calls.sort(key=lambda call: order(call.fields))
        return calls

    def _resolve(self, binding: RuleBinding) -> tuple[Callable[..., None], bool]:
        if binding.func is not None:
            return binding.func, binding.multi
        if (local := local_rules(type(self.record)).get(binding.rule)) is not None:
            return getattr(self.record, local.attr), binding.multi or local.multi
        definition = self.registry.resolve(binding.rule)
        return definition.predicate, binding.multi or definition.multi

    def _run(self, call: _Call, aggregator: ErrorAggregator) -> None:
        rule = call.binding.rule
        params: tuple[Any, ...] = call.binding.params
        if call.multi:
            values = [v for v in (self.record.get(f) for f in call.fields) if v is not None]
            args: list[Any] = [values]
        else:
            value = self.record.get(call.fields[0])
            if value is None and rule != REQUIRED_RULE:
                return
            args = [value]

        try:
            call.predicate(*args, *params)
        except RuleViolation as e:
            logger.debug("Rule %s failed on %s: %s", rule, ", ".join(call.fields), e.message)
            for field in call.fields:
                aggregator.record(field, rule, e.message)
