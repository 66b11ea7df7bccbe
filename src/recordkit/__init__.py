"""recordkit: declarative records with projection, change tracking and validation."""

from recordkit.config import UpdateMode
from recordkit.errors import (
    InvalidRuleError,
    RecordKitError,
    RuleViolation,
    UndefinedFieldError,
    UnknownFieldError,
    UnknownRuleError,
    ValidationException,
)
from recordkit.records import Collection, DirtyPropertiesMixin, Hidden, field, virtual
from recordkit.validation import (
    AttributeValidatorMixin,
    RulesValidatorMixin,
    TypeValidatorMixin,
    ValidErrorsMixin,
    record_rule,
    register_rule,
    rule,
    scenario,
)

__version__ = "0.1.0"

__all__ = [
    "AttributeValidatorMixin",
    "Collection",
    "DirtyPropertiesMixin",
    "Hidden",
    "InvalidRuleError",
    "RecordKitError",
    "RuleViolation",
    "RulesValidatorMixin",
    "TypeValidatorMixin",
    "UndefinedFieldError",
    "UnknownFieldError",
    "UnknownRuleError",
    "UpdateMode",
    "ValidErrorsMixin",
    "ValidationException",
    "__version__",
    "field",
    "record_rule",
    "register_rule",
    "rule",
    "scenario",
    "virtual",
]
