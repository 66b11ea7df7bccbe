"""Projection of records into plain dictionaries.

Paths are dotted strings: ``"empty.lies"`` selects the ``lies`` key inside
the ``empty`` field. In extra paths a ``*`` root applies the rest of the path
to every field, so ``"*.virtual"`` asks every nested record for its
``virtual`` extra field.
"""

import contextvars
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from recordkit.records.collection import Collection

WILDCARD = "*"
_DROP = object()

# ids of the records on the current projection path.
_ACTIVE: contextvars.ContextVar[frozenset[int]] = contextvars.ContextVar(
    "recordkit_projecting", default=frozenset()
)


def key_roots(paths: Iterable[str] | None, wildcard: bool = False) -> list[str]:
    """Return the unique root segments of ``paths``, in first-seen order.

    Args:
        paths: Dotted paths.
        wildcard: Skip ``*`` roots, which do not name a key.
    """
    roots: list[str] = []
    for path in paths or ():
        root = path.split(".", 1)[0]
        if wildcard and root == WILDCARD:
            continue
        if root not in roots:
            roots.append(root)
    return roots


def key_children(key: str, paths: Iterable[str] | None, wildcard: bool = False) -> list[str] | None:
    """Return the sub-paths of ``paths`` below ``key``.

    Example:
        ```python
        >>> key_children("empty", ["id", "empty.lies", "*.virtual"], wildcard=True)
        ['lies', 'virtual']
        ```

    Returns:
        The child paths, or ``None`` when there are none.
    """
    children: list[str] = []
    for path in paths or ():
        root, sep, rest = path.partition(".")
        if not sep or not rest:
            continue
        if root == key or (wildcard and root == WILDCARD):
            if rest not in children:
                children.append(rest)
    return children or None


def project(
    record: "Collection",
    fields: Iterable[str] | None = None,
    extra: Iterable[str] | None = None,
    include_nulls: bool = False,
) -> dict[str, Any]:
    """Project ``record`` into a new dictionary; see `Collection.to_array`.

    A field pointing back at a record already being projected is left out,
    so reference cycles terminate.
    """
    token = _ACTIVE.set(_ACTIVE.get() | {id(record)})
    try:
        return _project(record, fields, extra, include_nulls)
    finally:
        _ACTIVE.reset(token)


def _project(
    record: "Collection",
    fields: Iterable[str] | None,
    extra: Iterable[str] | None,
    include_nulls: bool,
) -> dict[str, Any]:
    fields = list(fields) if fields is not None else None
    extra = list(extra) if extra is not None else None

    declared = record.fields()
    if fields:
        # The allow-list picks the order; a hidden field stays hidden.
        selected = {name: declared.get(name, True) for name in key_roots(fields)}
    else:
        selected = dict(declared)

    extra_roots = key_roots(extra, wildcard=True)
    for name in extra_roots:
        selected[name] = True
    for name, func in record.extra_fields().items():
        if name in extra_roots:
            selected[name] = func

    out: dict[str, Any] = {}
    for key, item in selected.items():
        if not item:
            continue
        value = item() if callable(item) else record._lookup(key)  # pylint: disable=protected-access
        if value is None and not include_nulls:
            continue
        value = _project_value(
            value,
            key_children(key, fields),
            key_children(key, extra, wildcard=True),
            include_nulls,
        )
        if value is _DROP:
            continue
        out[key] = value
    return out


def _project_value(
    value: Any,
    fields: list[str] | None,
    extra: list[str] | None,
    include_nulls: bool,
) -> Any:
    from recordkit.records.collection import Collection  # pylint: disable=import-outside-toplevel

    filtered = bool(fields)
    if isinstance(value, Collection):
        if id(value) in _ACTIVE.get():
            return _DROP
        result: Any = value.to_array(fields, extra, include_nulls)
    elif isinstance(value, Mapping):
        result = _project_mapping(value, fields, extra, include_nulls)
    elif isinstance(value, (list, tuple)):
        result = []
        for item in value:
            if (projected := _project_value(item, fields, extra, include_nulls)) is not _DROP:
                result.append(projected)
    else:
        return value

    if filtered and not result:
        return _DROP
    return result


def _project_mapping(
    value: Mapping[Any, Any],
    fields: list[str] | None,
    extra: list[str] | None,
    include_nulls: bool,
) -> dict[Any, Any]:
    if fields:
        keys = [key for key in key_roots(fields) if key in value]
        keys += [key for key in key_roots(extra, wildcard=True) if key in value and key not in keys]
    else:
        keys = list(value)

    out: dict[Any, Any] = {}
    for key in keys:
        child_fields = key_children(key, fields) if isinstance(key, str) else None
        child_extra = key_children(key, extra, wildcard=True) if isinstance(key, str) else None
        projected = _project_value(value[key], child_fields, child_extra, include_nulls)
        if projected is not _DROP:
            out[key] = projected
    return out
