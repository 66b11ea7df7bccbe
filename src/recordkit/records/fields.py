"""Field declarations for records.

A record declares its stored fields as class annotations. Options beyond a
plain default are given with `field()` or with `typing.Annotated` metadata,
and write-only virtual keys are declared with the `virtual()` method
decorator.

Example:
    ```python
    class Thing(Collection):
        id: int | None = None
        secret: Annotated[str | None, Hidden()] = None
        tags: list[str] = field(default_factory=list)

        @virtual("route")
        def _set_route(self, value):
            self.id = route_to_id(value)
    ```

The per-class field table is built lazily on first use and cached on the
class; see `build_field_table`.
"""

import inspect
import logging
import sys
import typing
from collections.abc import Callable, Iterable, Mapping
from dataclasses import MISSING, dataclass
from enum import Enum
from types import MappingProxyType
from typing import Annotated, Any, ClassVar, get_args, get_origin

logger = logging.getLogger(__name__)

VIRTUAL_KEY_ATTR = "__virtual_key__"
_MUTABLE_DEFAULTS = (list, dict, set)


class FieldKind(Enum):
    """Whether a key has backing storage."""

    STORED = "stored"
    VIRTUAL = "virtual"


class Visibility(Enum):
    """Whether a stored field is projected by default."""

    PUBLIC = "public"
    HIDDEN = "hidden"


@dataclass(frozen=True, slots=True)
class Hidden:
    """`Annotated` marker that hides a field from default projection."""


@dataclass(frozen=True, slots=True)
class FieldOptions:
    """Options collected by `field()`, consumed at class creation."""

    default: Any = MISSING
    default_factory: Callable[[], Any] | None = None
    hidden: bool = False
    rules: tuple[Any, ...] = ()
    scenarios: tuple[Any, ...] = ()


def field(
    *,
    default: Any = MISSING,
    default_factory: Callable[[], Any] | None = None,
    hidden: bool = False,
    rules: Iterable[Any] = (),
    scenarios: Iterable[Any] = (),
) -> Any:
    """Declare options for a stored field.

    Args:
        default: Value the field starts with. Defaults to ``None``.
        default_factory: Zero-argument callable producing a fresh default
            for each instance. Mutually exclusive with ``default``.
        hidden: Exclude the field from `to_array()` unless requested as extra.
        rules: Inline rule declarations (strings such as ``"range 1, 10"``
            or `Rule` objects).
        scenarios: Scenario names the inline rules apply to; ``None`` names
            the default scenario.

    Returns:
        A `FieldOptions` placeholder that the record class replaces.

    Raises:
        ValueError: If both ``default`` and ``default_factory`` are given.
    """
    if default is not MISSING and default_factory is not None:
        raise ValueError("Cannot specify both default and default_factory")
    return FieldOptions(
        default=default,
        default_factory=default_factory,
        hidden=hidden,
        rules=tuple(rules),
        scenarios=tuple(scenarios),
    )


def virtual(key: str) -> Callable[[Callable[[Any, Any], None]], Callable[[Any, Any], None]]:
    """Mark a method as the setter of the write-only key ``key``.

    The setter is called with the incoming value during `update()`, after all
    stored keys have been assigned. It is never called with ``None``.
    """

    def decorator(func: Callable[[Any, Any], None]) -> Callable[[Any, Any], None]:
        setattr(func, VIRTUAL_KEY_ATTR, key)
        return func

    return decorator


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """Resolved description of one key of a record type."""

    name: str
    kind: FieldKind
    index: int
    visibility: Visibility = Visibility.PUBLIC
    type_hint: Any = Any
    default: Any = None
    default_factory: Callable[[], Any] | None = None
    rules: tuple[Any, ...] = ()
    scenarios: tuple[Any, ...] = ()
    metadata: tuple[Any, ...] = ()
    setter: str | None = None

    @property
    def stored(self) -> bool:
        return self.kind is FieldKind.STORED

    @property
    def hidden(self) -> bool:
        return self.visibility is Visibility.HIDDEN

    def make_default(self) -> Any:
        """Return the starting value for a new instance."""
        if self.default_factory is not None:
            return self.default_factory()
        return self.default


class StoredField:
    """Data descriptor exposing a stored field as an attribute."""

    def __init__(self, name: str) -> None:
        self.name = name

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        try:
            return instance._data[self.name]  # pylint: disable=protected-access
        except KeyError as e:
            raise AttributeError(self.name) from e

    def __set__(self, instance: Any, value: Any) -> None:
        instance.set(self.name, value)


def _is_classvar(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return annotation.startswith(("ClassVar", "typing.ClassVar"))
    return annotation is ClassVar or get_origin(annotation) is ClassVar


@dataclass(frozen=True, slots=True)
class _RawField:
    annotation: Any
    options: FieldOptions
    owner: type | None = None


def collect_fields(cls: type) -> None:
    """Collect the annotated fields and virtual setters declared on ``cls``.

    Stored fields of base classes come first, then those of ``cls`` in source
    order. Each stored field gets a `StoredField` descriptor.

    Raises:
        ValueError: If a field uses a mutable default instead of a factory.
        TypeError: If a virtual key collides with a stored field.
    """
    raw: dict[str, _RawField] = {}
    virtuals: dict[str, str] = {}
    for base in reversed(cls.__mro__[1:]):
        raw.update(base.__dict__.get("_raw_fields", {}))
        virtuals.update(base.__dict__.get("_raw_virtuals", {}))

    for name, annotation in inspect.get_annotations(cls).items():
        if name.startswith("_") or _is_classvar(annotation):
            continue
        value = cls.__dict__.get(name, MISSING)
        if isinstance(value, FieldOptions):
            options = value
        else:
            if isinstance(value, _MUTABLE_DEFAULTS):
                raise ValueError(
                    f"Mutable default {type(value).__name__} for field '{name}' "
                    "is not allowed: use field(default_factory=...)"
                )
            options = FieldOptions(default=value)
        raw[name] = _RawField(annotation, options, cls)
        setattr(cls, name, StoredField(name))

    for attr, member in cls.__dict__.items():
        func = getattr(member, "__func__", member)
        if (key := getattr(func, VIRTUAL_KEY_ATTR, None)) is not None:
            virtuals[key] = attr

    if clashes := sorted(set(virtuals) & set(raw)):
        raise TypeError(
            f"{cls.__qualname__}: virtual keys clash with stored fields: "
            + ", ".join(clashes)
        )

    cls._raw_fields = raw
    cls._raw_virtuals = virtuals
    cls._field_table = None


def _resolve_hints(cls: type, raw: Mapping[str, _RawField]) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls, include_extras=True)
    except (NameError, TypeError) as e:
        logger.debug("Could not resolve type hints of %s: %s", cls.__qualname__, e)
    # One bad hint must not discard the others.
    return {name: _resolve_hint(cls, name, item) for name, item in raw.items()}


def _resolve_hint(cls: type, name: str, item: _RawField) -> Any:
    if not isinstance(item.annotation, str):
        return item.annotation
    owner = item.owner or cls
    module = sys.modules.get(owner.__module__)
    globalns = dict(vars(module)) if module is not None else {}
    # Lets a record defined inside a function refer to itself.
    localns = {owner.__name__: owner, cls.__name__: cls}
    try:
        return eval(item.annotation, globalns, localns)  # pylint: disable=eval-used
    except (NameError, TypeError, SyntaxError, AttributeError) as e:
        logger.debug("Keeping unresolved hint %s.%s = %r: %s", cls.__qualname__, name, item.annotation, e)
        return item.annotation


def build_field_table(cls: type) -> Mapping[str, FieldSpec]:
    """Return the ordered, read-only field table of a record type.

    The table is computed once per class and cached on it. Stored fields come
    first in declaration order, followed by virtual keys.
    """
    if (table := cls.__dict__.get("_field_table")) is not None:
        return table

    raw: Mapping[str, _RawField] = cls.__dict__.get("_raw_fields", {})
    hints = _resolve_hints(cls, raw)
    specs: dict[str, FieldSpec] = {}
    for index, (name, item) in enumerate(raw.items()):
        hint = hints.get(name, item.annotation)
        metadata: tuple[Any, ...] = ()
        if get_origin(hint) is Annotated:
            hint, *extras = get_args(hint)
            metadata = tuple(extras)
        options = item.options
        hidden = options.hidden or any(isinstance(m, Hidden) for m in metadata)
        specs[name] = FieldSpec(
            name=name,
            kind=FieldKind.STORED,
            index=index,
            visibility=Visibility.HIDDEN if hidden else Visibility.PUBLIC,
            type_hint=hint,
            default=None if options.default is MISSING else options.default,
            default_factory=options.default_factory,
            rules=options.rules,
            scenarios=options.scenarios,
            metadata=metadata,
        )

    offset = len(specs)
    virtuals: Mapping[str, str] = cls.__dict__.get("_raw_virtuals", {})
    for index, (key, setter) in enumerate(virtuals.items(), start=offset):
        specs[key] = FieldSpec(name=key, kind=FieldKind.VIRTUAL, index=index, setter=setter)

    table = MappingProxyType(specs)
    cls._field_table = table
    return table
