"""optirules - optimization-rule routing for an LLM proxy."""

__version__ = "0.1.0"

from optirules.config import OptiRulesConfig, load_config
from optirules.context import build_request_context
from optirules.exceptions import (
    ConfigurationError,
    EntityNotFoundError,
    MalformedConditionsError,
    OptiRulesError,
    RuleDefinitionError,
    UnknownRuleTypeError,
)
from optirules.matcher import RuleGroup, group_rules_by_model, match_rules, match_rules_raw
from optirules.service import OptimizationRouter, RoutingDecision
from optirules.types import (
    ContentLengthConditions,
    EntityType,
    OptimizationRule,
    RequestContext,
    RuleType,
    SupportedProvider,
    ToolPresenceConditions,
)

__all__ = [
    # Version
    "__version__",
    # Matching
    "match_rules",
    "match_rules_raw",
    "group_rules_by_model",
    "RuleGroup",
    "build_request_context",
    # Routing
    "OptimizationRouter",
    "RoutingDecision",
    # Config
    "OptiRulesConfig",
    "load_config",
    # Types
    "OptimizationRule",
    "RequestContext",
    "EntityType",
    "RuleType",
    "SupportedProvider",
    "ContentLengthConditions",
    "ToolPresenceConditions",
    # Exceptions
    "OptiRulesError",
    "RuleDefinitionError",
    "MalformedConditionsError",
    "UnknownRuleTypeError",
    "EntityNotFoundError",
    "ConfigurationError",
]
