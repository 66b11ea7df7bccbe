"""Keyed records with declared fields.

`Collection` is the base class for records: a fixed set of named fields,
bulk-assignable from a mapping, with a configurable policy for keys the
record does not declare (see `recordkit.config.UpdateMode`).

Example:
    ```python
    class Money(Collection):
        UPDATE_MODE = UpdateMode.STRICT

        amount: float | None = None
        currency: str = "AUD"

    money = Money({"amount": 12.5})
    money.update({"colour": "red"})  # raises UnknownFieldError
    ```
"""

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any, ClassVar

from recordkit.config import UpdateMode, get_default_update_mode, parse_update_mode
from recordkit.errors import UnknownFieldError
from recordkit.records import arrayable
from recordkit.records.fields import (
    FieldKind,
    FieldSpec,
    build_field_table,
    collect_fields,
)

logger = logging.getLogger(__name__)

ConfigInput = Mapping[str, Any] | Iterable[tuple[str, Any]]
FieldProjection = bool | Callable[[], Any]


class Collection:
    """A record with declared, ordered fields.

    Attributes:
        UPDATE_MODE: Class-level unknown-key policy. When ``None`` the
            process default from `recordkit.config` applies.
    """

    UPDATE_MODE: ClassVar[UpdateMode | None] = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        collect_fields(cls)

    def __init__(
        self, config: "ConfigInput | None" = None, *, mode: "str | UpdateMode | None" = None
    ) -> None:
        if mode is not None:
            self._mode = parse_update_mode(mode)
        else:
            self._mode = self.UPDATE_MODE or get_default_update_mode()
        self._unknown_fields: list[str] = []
        self._data: dict[str, Any] = {
            spec.name: spec.make_default() for spec in self.stored_fields()
        }
        if config:
            self.update(config)

    # ------------------------------------------------------------------
    # Field table
    # ------------------------------------------------------------------

    @classmethod
    def field_table(cls) -> Mapping[str, FieldSpec]:
        """Ordered table of every stored and virtual key of this type."""
        return build_field_table(cls)

    @classmethod
    def stored_fields(cls) -> list[FieldSpec]:
        return [spec for spec in cls.field_table().values() if spec.stored]

    @property
    def mode(self) -> UpdateMode:
        return self._mode

    @property
    def unknown_fields(self) -> list[str]:
        """Keys skipped by TIDY updates, oldest first."""
        return list(self._unknown_fields)

    # ------------------------------------------------------------------
    # Assignment
    # ------------------------------------------------------------------

    def update(self, config: "ConfigInput | Collection") -> None:
        """Assign many keys at once.

        Stored keys are assigned first in input order, then virtual setters
        run in input order. A virtual setter is never called with ``None``.

        Args:
            config: A mapping, another record, or an iterable of pairs.

        Raises:
            UnknownFieldError: In STRICT mode, listing every undeclared key.
                Nothing is assigned in that case.
        """
        if isinstance(config, (Mapping, Collection)):
            items = list(config.items())
        else:
            items = list(config)

        table = self.field_table()
        unknown = [key for key, _ in items if key not in table]
        if unknown:
            self._reject_unknown(unknown)

        setters: list[tuple[FieldSpec, Any]] = []
        for key, value in items:
            if (spec := table.get(key)) is None:
                continue
            if spec.kind is FieldKind.VIRTUAL:
                setters.append((spec, value))
            else:
                self._data[key] = value

        for spec, value in setters:
            if value is None:
                continue
            getattr(self, spec.setter)(value)

    def _reject_unknown(self, keys: list[str]) -> None:
        if self._mode is UpdateMode.STRICT:
            raise UnknownFieldError(keys)
        if self._mode is UpdateMode.TIDY:
            self._unknown_fields.extend(keys)
            logger.warning(
                "%s: skipped unknown fields: %s", type(self).__name__, ", ".join(keys)
            )

    def set(self, key: str, value: Any) -> None:
        """Assign one key, exactly like a one-key `update()`."""
        self.update([(key, value)])

    def get(self, key: str, default: Any = None) -> Any:
        """Read a stored field.

        Virtual keys are write-only and read as ``default``.

        Raises:
            UnknownFieldError: If ``key`` is undeclared and the record is STRICT.
        """
        if key in self._data:
            return self._data[key]
        if key not in self.field_table() and self._mode is UpdateMode.STRICT:
            raise UnknownFieldError([key])
        return default

    def _lookup(self, key: str) -> Any:
        return self._data.get(key)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_") or (
            name not in self.field_table()
            and hasattr(getattr(type(self), name, None), "__set__")
        ):
            object.__setattr__(self, name, value)
        else:
            self.set(name, value)

    def __getitem__(self, key: str) -> Any:
        return self.get(key)

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    # ------------------------------------------------------------------
    # Container protocol
    # ------------------------------------------------------------------

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def keys(self) -> list[str]:
        return list(self._data)

    def values(self) -> list[Any]:
        return list(self._data.values())

    def items(self) -> list[tuple[str, Any]]:
        return list(self._data.items())

    def copy(self) -> "Collection":
        """Return a shallow copy with the same mode. Virtual setters do not run."""
        return type(self)(self._data, mode=self._mode)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._data == other._data  # pylint: disable=protected-access

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        body = ", ".join(f"{key}={value!r}" for key, value in self._data.items())
        return f"{type(self).__name__}({body})"

    # ------------------------------------------------------------------
    # Projection
    # ------------------------------------------------------------------

    def fields(self) -> dict[str, FieldProjection]:
        """Default projection: public stored fields map to True, hidden to False.

        Override to add computed entries (zero-argument callables) or to
        change what is shown by default.
        """
        return {spec.name: not spec.hidden for spec in self.stored_fields()}

    def extra_fields(self) -> dict[str, Callable[[], Any]]:
        """Computed entries that are only projected when requested as extra."""
        return {}

    def to_array(
        self,
        fields: Iterable[str] | None = None,
        extra: Iterable[str] | None = None,
        include_nulls: bool = False,
    ) -> dict[str, Any]:
        """Project the record into plain data.

        Args:
            fields: Allow-list of dotted paths. The root segment picks a
                top-level key and the rest filters nested values.
            extra: Additional dotted paths. Extra roots may name hidden
                fields and `extra_fields()` entries; a ``*`` root applies its
                child path to every nested value.
            include_nulls: Keep entries whose value is ``None``.

        Returns:
            A new dictionary. The record is not modified.
        """
        return arrayable.project(self, fields, extra, include_nulls)
