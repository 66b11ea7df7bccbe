"""Rule sources: where a record's rules come from.

Each source turns some declaration style into a flat list of `RuleBinding`
objects for a scenario:

- `RulesTableSource` reads the record's ``rules(scenario)`` method.
- `InlineRulesSource` reads rules attached to the fields themselves.
- `TypeHintSource` derives ``required`` and ``type`` rules from type hints.

The engine orders and runs the bindings; sources only describe them.
"""

import abc
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from recordkit.errors import InvalidRuleError
from recordkit.validation.declarations import Rule, Scenario, as_rule
from recordkit.validation.types import is_optional

if TYPE_CHECKING:
    from recordkit.records.collection import Collection

RULESET_KEYS = frozenset({"fields", "params", "func", "multi"})


@dataclass(frozen=True, slots=True)
class RuleBinding:
    """One rule applied to one or more fields.

    A rule that is not multi-field is run once per field in ``fields``.
    """

    rule: str
    fields: tuple[str, ...]
    params: tuple[Any, ...] = ()
    func: Callable[..., None] | None = None
    multi: bool = False

    def __post_init__(self) -> None:
        fields = (self.fields,) if isinstance(self.fields, str) else tuple(self.fields)
        object.__setattr__(self, "fields", fields)
        object.__setattr__(self, "params", tuple(self.params))
        if not fields:
            raise InvalidRuleError(f"Invalid rule declaration: {self.rule}, missing fields")


@dataclass(frozen=True, slots=True)
class RuleSet:
    """A rules-table entry: target fields plus the rule's options."""

    fields: tuple[str, ...]
    params: tuple[Any, ...] = ()
    func: Callable[..., None] | None = None
    multi: bool = False

    def __post_init__(self) -> None:
        fields = (self.fields,) if isinstance(self.fields, str) else tuple(self.fields)
        object.__setattr__(self, "fields", fields)
        object.__setattr__(self, "params", tuple(self.params))
        if not self.fields:
            raise InvalidRuleError("A rule set needs at least one field")

    @classmethod
    def from_mapping(cls, rule: str, spec: Mapping[str, Any]) -> "RuleSet":
        """Build from ``{"fields": [...], "params": [...], "func": f, "multi": b}``."""
        if unknown := sorted(set(spec) - RULESET_KEYS):
            raise InvalidRuleError(f"Invalid rule declaration: {rule}, unknown keys: {', '.join(unknown)}")
        if not spec.get("fields"):
            raise InvalidRuleError(f"Invalid rule declaration: {rule}, missing fields")
        return cls(
            spec["fields"],
            params=spec.get("params", ()),
            func=spec.get("func"),
            multi=bool(spec.get("multi", False)),
        )


class RuleSource(abc.ABC):
    """Produces the rule bindings of a record for a scenario."""

    @abc.abstractmethod
    def bindings(self, record: "Collection", scenario: str | None) -> list[RuleBinding]:
        raise NotImplementedError


class RulesTableSource(RuleSource):
    """Bindings from the record's ``rules(scenario)`` table.

    Example:
        ```python
        def rules(self, scenario=None):
            return {
                "required": ["id", "amount"],
                "positiveInt": ["amount"],
                "range": [{"fields": ["percent"], "params": [0, 100]}],
                "allUnique": {"fields": ["home_phone", "work_phone"]},
            }
        ```
    """

    def bindings(self, record: "Collection", scenario: str | None) -> list[RuleBinding]:
        rules = getattr(record, "rules", None)
        if not callable(rules):
            raise InvalidRuleError(f"{type(record).__name__} does not define rules()")
        return list(self.parse_table(rules(scenario)))

    @classmethod
    def parse_table(cls, table: Mapping[str, Any]) -> Iterator[RuleBinding]:
        """Normalize a rules table into bindings, in table order.

        Raises:
            InvalidRuleError: On a malformed entry.
        """
        if not isinstance(table, Mapping):
            raise InvalidRuleError(f"Rules table must be a mapping, got {type(table).__name__}")
        for rule, spec in table.items():
            if not isinstance(rule, str) or not rule:
                raise InvalidRuleError(f"Invalid rule name: {rule!r}")
            for ruleset in cls._rulesets(rule, spec):
                yield RuleBinding(rule, ruleset.fields, ruleset.params, ruleset.func, ruleset.multi)

    @staticmethod
    def _rulesets(rule: str, spec: Any) -> list[RuleSet]:
        if isinstance(spec, RuleSet):
            return [spec]
        if isinstance(spec, Mapping):
            return [RuleSet.from_mapping(rule, spec)]
        if isinstance(spec, str):
            return [RuleSet((spec,))]
        if isinstance(spec, Sequence) and spec:
            if all(isinstance(item, str) for item in spec):
                return [RuleSet(tuple(spec))]
            rulesets = []
            for item in spec:
                if isinstance(item, RuleSet):
                    rulesets.append(item)
                elif isinstance(item, Mapping):
                    rulesets.append(RuleSet.from_mapping(rule, item))
                else:
                    raise InvalidRuleError(f"Invalid rule declaration: {rule}, entry {item!r}")
            return rulesets
        raise InvalidRuleError(f"Invalid rule declaration: {rule}, missing fields")


def _scenario_names(values: Sequence[Any]) -> set[str | None]:
    names: set[str | None] = set()
    for value in values:
        names.add(value.name if isinstance(value, Scenario) else value)
    return names


class InlineRulesSource(RuleSource):
    """Bindings from rules attached to each field.

    Rules come from ``field(rules=...)`` and from `Rule` objects in
    ``Annotated`` metadata. A field applies to the scenarios it lists, and a
    field listing none applies to the default scenario only.
    """

    def bindings(self, record: "Collection", scenario: str | None) -> list[RuleBinding]:
        bindings = []
        for spec in type(record).field_table().values():
            if not spec.stored:
                continue
            declared = spec.scenarios + tuple(m for m in spec.metadata if isinstance(m, Scenario))
            if scenario not in (_scenario_names(declared) or {None}):
                continue
            rules = [as_rule(item) for item in spec.rules]
            rules += [item for item in spec.metadata if isinstance(item, Rule)]
            bindings.extend(RuleBinding(r.name, (spec.name,), r.params) for r in rules)
        return bindings


class TypeHintSource(RuleSource):
    """Bindings derived from type hints; the scenario is ignored.

    A field whose hint does not admit ``None`` is required, and every
    annotated field is checked against its hint.
    """

    def bindings(self, record: "Collection", scenario: str | None) -> list[RuleBinding]:
        bindings = []
        for spec in type(record).field_table().values():
            if not spec.stored:
                continue
            if not is_optional(spec.type_hint):
                bindings.append(RuleBinding("required", (spec.name,)))
            bindings.append(RuleBinding("type", (spec.name,), (spec.type_hint,)))
        return bindings
