"""Named rule predicates.

A `RuleRegistry` maps rule names to predicates. `default_registry` holds
the built-in rules; applications add their own with `register_rule`:

    ```python
    @register_rule("postcode")
    def postcode(value):
        if not re.fullmatch(r"[0-9]{4}", str(value)):
            raise RuleViolation("Invalid postcode")
    ```

Registration takes a lock, but it is meant to happen at start-up before any
validation runs.
"""

import logging
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from recordkit.errors import UnknownRuleError
from recordkit.validation.validity import BUILTIN_RULES

logger = logging.getLogger(__name__)

Predicate = Callable[..., None]


@dataclass(frozen=True, slots=True)
class RuleDefinition:
    """A registered predicate.

    Attributes:
        name: The rule name used in declarations.
        predicate: Raises `RuleViolation` when the value is invalid.
        multi: The predicate takes the list of values of all target fields.
    """

    name: str
    predicate: Predicate
    multi: bool = False


class RuleRegistry:
    """A thread-safe name to predicate table."""

    def __init__(
        self, rules: Mapping[str, RuleDefinition] | None = None, *, builtins: bool = True
    ) -> None:
        self._lock = threading.RLock()
        self._rules: dict[str, RuleDefinition] = {}
        if builtins:
            for name, (predicate, multi) in BUILTIN_RULES.items():
                self._rules[name] = RuleDefinition(name, predicate, multi)
        if rules:
            self._rules.update(rules)

    def register(self, name: str, predicate: Predicate, *, multi: bool = False) -> RuleDefinition:
        """Register ``predicate`` as ``name``. A later registration replaces an earlier one."""
        definition = RuleDefinition(name, predicate, multi)
        with self._lock:
            if name in self._rules:
                logger.debug("Replacing rule %r", name)
            self._rules[name] = definition
        return definition

    def unregister(self, name: str) -> None:
        """Remove ``name``.

        Raises:
            UnknownRuleError: If no such rule is registered.
        """
        with self._lock:
            if self._rules.pop(name, None) is None:
                raise UnknownRuleError(name)

    def resolve(self, name: str) -> RuleDefinition:
        """Look up a rule.

        Raises:
            UnknownRuleError: If no such rule is registered.
        """
        try:
            return self._rules[name]
        except KeyError as e:
            raise UnknownRuleError(name) from e

    def names(self) -> list[str]:
        return sorted(self._rules)

    def copy(self) -> "RuleRegistry":
        """Return an independent registry with the same rules."""
        with self._lock:
            return RuleRegistry(dict(self._rules), builtins=False)

    def __contains__(self, name: object) -> bool:
        return name in self._rules

    def __len__(self) -> int:
        return len(self._rules)


default_registry = RuleRegistry()


def register_rule(
    name: str | None = None, *, multi: bool = False, registry: RuleRegistry | None = None
) -> Callable[[Predicate], Predicate]:
    """Decorator registering a function as a rule.

    Args:
        name: Rule name; defaults to the function name.
        multi: The rule checks several fields together.
        registry: Target registry; defaults to `default_registry`.
    """

    def decorator(func: Predicate) -> Predicate:
        target: Any = registry if registry is not None else default_registry
        target.register(name or func.__name__, func, multi=multi)
        return func

    return decorator
