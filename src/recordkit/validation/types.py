"""Runtime checks of values against type hints.

Only what record fields typically declare is checked: builtins, classes,
unions and optionals, `Literal`, `Annotated`, and one level of items for
lists, tuples, sets and dicts. Numeric strings satisfy ``int`` (when whole)
and ``float``, as values decoded from forms often arrive as text.
"""

import re
import types
import typing
from collections.abc import Mapping
from decimal import Decimal
from typing import Annotated, Any, Literal, get_args, get_origin

from recordkit.errors import RuleViolation

NUMERIC_PATTERN = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")
_NONE_TYPE = type(None)
# Unresolved string hints that still admit None.
_OPTIONAL_HINT = re.compile(
    r"^\s*(typing\.)?Optional\[|^\s*(typing\.)?Union\[(.*,)?\s*None\s*[,\]]|"
    r"^\s*(typing\.)?(Any|object|None)\s*$"
)
_NONE_ARM = re.compile(r"(^|\|)\s*None\s*(\||$)")


def is_numeric(value: Any) -> bool:
    """True for numbers and numeric strings. Booleans are not numbers."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float, Decimal)):
        return True
    return isinstance(value, str) and NUMERIC_PATTERN.match(value) is not None


def _is_union(tp: Any) -> bool:
    return get_origin(tp) in (typing.Union, types.UnionType)


def _unwrap(tp: Any) -> Any:
    while get_origin(tp) is Annotated:
        tp = get_args(tp)[0]
    return tp


def is_optional(tp: Any) -> bool:
    """True when ``None`` is an acceptable value for ``tp``."""
    tp = _unwrap(tp)
    if isinstance(tp, typing.ForwardRef):
        tp = tp.__forward_arg__
    if isinstance(tp, str):
        return bool(_OPTIONAL_HINT.match(tp) or _NONE_ARM.search(tp))
    if tp in (Any, object, None, _NONE_TYPE):
        return True
    if _is_union(tp):
        return any(is_optional(arg) for arg in get_args(tp))
    return False


def type_name(tp: Any) -> str:
    """Render a type hint the way it is usually written."""
    tp = _unwrap(tp)
    if tp is None or tp is _NONE_TYPE:
        return "None"
    if tp is Any:
        return "Any"
    if isinstance(tp, str):
        return tp
    if _is_union(tp):
        return " | ".join(type_name(arg) for arg in get_args(tp))
    if (origin := get_origin(tp)) is Literal:
        return f"Literal[{', '.join(repr(arg) for arg in get_args(tp))}]"
    if origin is not None:
        args = ", ".join("..." if arg is Ellipsis else type_name(arg) for arg in get_args(tp))
        name = getattr(origin, "__name__", repr(origin))
        return f"{name}[{args}]" if args else name
    return getattr(tp, "__name__", repr(tp))


def value_type_name(value: Any) -> str:
    """Name the type of ``value``; homogeneous lists include their item type."""
    if value is None:
        return "None"
    if isinstance(value, list) and value:
        names = {value_type_name(item) for item in value}
        if len(names) == 1:
            return f"list[{names.pop()}]"
    return type(value).__name__


def _matches_int(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return value.is_integer()
    if isinstance(value, Decimal):
        return value.is_finite() and value == value.to_integral_value()
    if isinstance(value, str) and is_numeric(value):
        return float(value).is_integer()
    return False


def _matches_items(origin: Any, args: tuple[Any, ...], value: Any) -> bool:
    if origin is tuple and args and args[-1] is not Ellipsis:
        return len(value) == len(args) and all(
            matches_type(arg, item) for arg, item in zip(args, value)
        )
    item_type = args[0] if args else Any
    return all(matches_type(item_type, item) for item in value)


def matches_type(expected: Any, value: Any) -> bool:
    """Check ``value`` against the type hint ``expected``."""
    expected = _unwrap(expected)
    if expected in (Any, object) or isinstance(expected, (str, typing.TypeVar, typing.ForwardRef)):
        return True
    if expected is None or expected is _NONE_TYPE:
        return value is None
    if _is_union(expected):
        return any(matches_type(arg, value) for arg in get_args(expected))

    origin = get_origin(expected)
    if origin is Literal:
        return any(value == arg and type(value) is type(arg) for arg in get_args(expected))
    if origin is not None:
        args = get_args(expected)
        if isinstance(origin, type) and issubclass(origin, Mapping):
            if not isinstance(value, Mapping):
                return False
            key_type, item_type = args if len(args) == 2 else (Any, Any)
            return all(
                matches_type(key_type, k) and matches_type(item_type, v) for k, v in value.items()
            )
        if origin in (list, tuple, set, frozenset):
            return isinstance(value, origin) and _matches_items(origin, args, value)
        return isinstance(origin, type) and isinstance(value, origin)

    if expected is int:
        return _matches_int(value)
    if expected is float:
        return is_numeric(value)
    if expected is bool:
        return isinstance(value, bool)
    if isinstance(expected, type):
        return isinstance(value, expected)
    return True


def check_type(value: Any, expected: Any) -> None:
    """Rule predicate for ``type``.

    Raises:
        RuleViolation: ``"Expected int instead of float."`` style message.
    """
    if not matches_type(expected, value):
        raise RuleViolation(f"Expected {type_name(expected)} instead of {value_type_name(value)}.")
