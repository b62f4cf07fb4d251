"""Type definitions for optirules."""

from .rules import (
    CONDITIONS_BY_RULE_TYPE,
    ContentLengthConditions,
    EntityType,
    OptimizationRule,
    OptimizationRuleCreate,
    OptimizationRuleUpdate,
    RequestContext,
    RuleConditions,
    RuleType,
    SupportedProvider,
    ToolPresenceConditions,
    coerce_rule_type,
    dump_conditions,
    parse_conditions,
)

__all__ = [
    # Enums
    "EntityType",
    "RuleType",
    "SupportedProvider",
    # Conditions
    "ContentLengthConditions",
    "ToolPresenceConditions",
    "RuleConditions",
    "CONDITIONS_BY_RULE_TYPE",
    "coerce_rule_type",
    "parse_conditions",
    "dump_conditions",
    # Rules
    "OptimizationRule",
    "OptimizationRuleCreate",
    "OptimizationRuleUpdate",
    "RequestContext",
]
