"""Records: declared fields, projection and change tracking."""

from recordkit.config import UpdateMode
from recordkit.records.arrayable import key_children, key_roots
from recordkit.records.collection import Collection
from recordkit.records.dirty import DirtyChecksums, DirtyPropertiesMixin, checksum
from recordkit.records.fields import (
    FieldKind,
    FieldSpec,
    Hidden,
    Visibility,
    field,
    virtual,
)

__all__ = [
    "Collection",
    "DirtyChecksums",
    "DirtyPropertiesMixin",
    "FieldKind",
    "FieldSpec",
    "Hidden",
    "UpdateMode",
    "Visibility",
    "checksum",
    "field",
    "key_children",
    "key_roots",
    "virtual",
]
