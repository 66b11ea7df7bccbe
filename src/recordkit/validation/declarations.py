"""Declarative rule markers attached to record fields and methods.

`Rule` and `Scenario` objects can be placed in `typing.Annotated` metadata or
passed to `field(rules=..., scenarios=...)`. `record_rule` marks a record
method as a rule predicate local to that record type.
"""

import functools
import inspect
import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from recordkit.errors import InvalidRuleError

RECORD_RULE_ATTR = "__record_rule__"


@dataclass(frozen=True, slots=True)
class Rule:
    """A named rule with its positional parameters."""

    name: str
    params: tuple[Any, ...] = ()

    @classmethod
    def parse(cls, text: str) -> "Rule":
        """Parse the string form ``"name arg, arg"``.

        The arguments are read as a JSON array, so strings must be quoted:
        ``'matchDomain "example.com"'``. Whitespace-separated arguments
        (``"range 10 20"``) are accepted too.

        Raises:
            InvalidRuleError: If the name is empty or the arguments are not JSON.
        """
        name, _, args = text.strip().partition(" ")
        if not name:
            raise InvalidRuleError("Empty rule declaration")
        if not (args := args.strip()):
            return cls(name)
        for candidate in (args, ", ".join(args.split())):
            try:
                return cls(name, tuple(json.loads(f"[{candidate}]")))
            except json.JSONDecodeError:
                continue
        raise InvalidRuleError(f"Error parsing rule: {text}")


@dataclass(frozen=True, slots=True)
class Scenario:
    """Names a scenario a field's rules apply to; ``None`` is the default."""

    name: str | None = None


def rule(name: str, *params: Any) -> Rule:
    """Build a `Rule`, parsing the string form when no params are given."""
    if params:
        return Rule(name, params)
    return Rule.parse(name)


def scenario(name: str | None = None) -> Scenario:
    return Scenario(name)


def as_rule(value: "str | Rule") -> Rule:
    if isinstance(value, Rule):
        return value
    if isinstance(value, str):
        return Rule.parse(value)
    raise InvalidRuleError(f"Invalid rule declaration: {value!r}")


@dataclass(frozen=True, slots=True)
class LocalRule:
    """A rule predicate defined as a method of a record type."""

    name: str
    attr: str
    multi: bool = False


def record_rule(
    func: Callable[..., None] | None = None, *, name: str | None = None, multi: bool = False
) -> Any:
    """Mark a record method as a rule predicate for that record type.

    Local rules take precedence over registry rules with the same name.

    Example:
        ```python
        class Site(RulesValidatorMixin, Collection):
            url: str | None = None

            @record_rule(name="matchDomain")
            def _match_domain(self, value, domain):
                if domain not in value:
                    raise RuleViolation(f"Must be on {domain}")
        ```
    """

    def decorator(target: Any) -> Any:
        inner = getattr(target, "__func__", target)
        setattr(inner, RECORD_RULE_ATTR, (name or inner.__name__, multi))
        return target

    if func is not None:
        return decorator(func)
    return decorator


@functools.cache
def local_rules(cls: type) -> dict[str, LocalRule]:
    """Return ``{rule name: LocalRule}`` for the record-local rules of ``cls``."""
    found: dict[str, LocalRule] = {}
    for base in reversed(cls.__mro__):
        for attr in vars(base):
            member = inspect.getattr_static(cls, attr)
            inner = getattr(member, "__func__", member)
            if (marker := getattr(inner, RECORD_RULE_ATTR, None)) is not None:
                rule_name, multi = marker
                found[rule_name] = LocalRule(rule_name, attr, multi)
    return found
