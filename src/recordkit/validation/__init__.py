"""Rule-based validation of records."""

from recordkit.validation.aggregator import ErrorAggregator
from recordkit.validation.declarations import Rule, Scenario, record_rule, rule, scenario
from recordkit.validation.engine import Validator, ValidatorState
from recordkit.validation.mixins import (
    AttributeValidatorMixin,
    RulesValidatorMixin,
    TypeValidatorMixin,
    Validates,
    ValidErrorsMixin,
)
from recordkit.validation.registry import (
    RuleDefinition,
    RuleRegistry,
    default_registry,
    register_rule,
)
from recordkit.validation.sources import (
    InlineRulesSource,
    RuleBinding,
    RuleSet,
    RuleSource,
    RulesTableSource,
    TypeHintSource,
)

__all__ = [
    "AttributeValidatorMixin",
    "ErrorAggregator",
    "InlineRulesSource",
    "Rule",
    "RuleBinding",
    "RuleDefinition",
    "RuleRegistry",
    "RuleSet",
    "RuleSource",
    "RulesTableSource",
    "RulesValidatorMixin",
    "Scenario",
    "TypeHintSource",
    "TypeValidatorMixin",
    "ValidErrorsMixin",
    "Validates",
    "Validator",
    "ValidatorState",
    "default_registry",
    "record_rule",
    "register_rule",
    "rule",
    "scenario",
]
