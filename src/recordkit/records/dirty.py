"""Change tracking for records by checksum.

`DirtyChecksums` remembers a SHA-256 checksum per stored field at the last
`checkpoint()` and reports which fields changed since. Nothing checkpoints
automatically: a fresh tracker reports every field as dirty.
"""

import hashlib
import json
import weakref
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from recordkit.records.collection import Collection


def _encode(value: Any) -> Any:
    from recordkit.records.collection import Collection  # pylint: disable=import-outside-toplevel

    if isinstance(value, Collection):
        return _tag_tuples({"__record__": type(value).__qualname__, **dict(value.items())})
    if isinstance(value, (set, frozenset)):
        return _tag_tuples(sorted(value, key=repr))
    return repr(value)


def _tag_tuples(value: Any) -> Any:
    # json encodes tuples as arrays without consulting ``default``.
    if isinstance(value, tuple):
        return {"__tuple__": [_tag_tuples(item) for item in value]}
    if isinstance(value, list):
        return [_tag_tuples(item) for item in value]
    if isinstance(value, dict):
        return {key: _tag_tuples(item) for key, item in value.items()}
    return value


def checksum(value: Any) -> str:
    """SHA-256 hex digest of a canonical JSON encoding of ``value``.

    Tuples and lists with the same items hash differently.
    """
    try:
        payload = json.dumps(
            _tag_tuples(value), sort_keys=True, default=_encode, separators=(",", ":")
        )
    except (TypeError, ValueError, RecursionError):
        # Unsortable or non-string keys, or a reference cycle.
        payload = repr(value)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class DirtyChecksums:
    """Tracks which stored fields of a record changed since a checkpoint.

    The tracker only holds a weak reference to its record; once the record
    is garbage collected every query reports nothing dirty.

    Attributes:
        baseline: ``{field: checksum}`` from the last checkpoint.
    """

    def __init__(self, record: "Collection") -> None:
        self._record = weakref.ref(record)
        self.baseline: dict[str, str] = {}
        self._forced: set[str] = set()

    @property
    def record(self) -> "Collection | None":
        return self._record()

    def checkpoint(self) -> None:
        """Take the current field values as the new clean state."""
        if (record := self.record) is None:
            return
        self.baseline = {name: checksum(value) for name, value in record.items()}
        self._forced = set()

    def reset(self) -> None:
        """Forget the baseline, making every field dirty."""
        self.baseline = {}
        self._forced = set()

    def mark_dirty(self, name: str) -> None:
        """Force ``name`` dirty until the next checkpoint."""
        self._forced.add(name)

    def is_dirty(self, name: str) -> bool:
        if (record := self.record) is None or name not in record:
            return False
        if name in self._forced:
            return True
        if (expected := self.baseline.get(name)) is None:
            return True
        return checksum(record.get(name)) != expected

    def get_all_dirty(self) -> dict[str, Any]:
        """Return ``{field: current value}`` for every dirty field, in field order."""
        if (record := self.record) is None:
            return {}
        return {name: value for name, value in record.items() if self.is_dirty(name)}


class DirtyPropertiesMixin:
    """Adds change tracking to a `Collection` subclass.

    The tracker is not pickled; an unpickled record starts with every
    field dirty.
    """

    def __getstate__(self) -> dict[str, Any]:
        state = dict(self.__dict__)
        state.pop("_dirty_tracker", None)
        return state

    @property
    def dirty_tracker(self) -> DirtyChecksums:
        if (tracker := self.__dict__.get("_dirty_tracker")) is None:
            tracker = DirtyChecksums(self)  # type: ignore[arg-type]
            self._dirty_tracker = tracker
        return tracker

    def checkpoint(self) -> None:
        self.dirty_tracker.checkpoint()

    def get_dirty_properties(self) -> dict[str, Any]:
        return self.dirty_tracker.get_all_dirty()

    def is_property_dirty(self, name: str) -> bool:
        return self.dirty_tracker.is_dirty(name)

    def mark_property_dirty(self, name: str) -> None:
        self.dirty_tracker.mark_dirty(name)
