"""Optimization rule matching.

Rules are grouped by target model. A group matches when every rule in it
matches the request context; the first matching group, in the order its
target model first appears in the input, wins.

Everything here is pure: no I/O, inputs are never mutated, and the same
inputs always produce the same result.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from optirules.exceptions import UnknownRuleTypeError
from optirules.types import (
    ContentLengthConditions,
    OptimizationRule,
    RequestContext,
    RuleConditions,
    ToolPresenceConditions,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuleGroup:
    """Enabled rules sharing one target model, in input order."""

    target_model: str
    rules: tuple[OptimizationRule, ...]


def group_rules_by_model(rules: Sequence[OptimizationRule]) -> list[RuleGroup]:
    """Group enabled rules by target model.

    Disabled rules are dropped before grouping. Groups are returned in the
    order their target model is first encountered.

    Args:
        rules: Rules in caller-defined precedence order

    Returns:
        One group per distinct target model, never empty
    """
    order: list[str] = []
    members: dict[str, list[OptimizationRule]] = {}

    for rule in rules:
        if not rule.enabled:
            continue

        model = rule.target_model
        if model not in members:
            order.append(model)
            members[model] = []
        members[model].append(rule)

    return [RuleGroup(target_model=model, rules=tuple(members[model])) for model in order]


def evaluate_condition(conditions: RuleConditions, context: RequestContext) -> bool:
    """Evaluate a single rule's conditions against a request context.

    Raises:
        UnknownRuleTypeError: For a conditions object of an unrecognized kind
    """
    if isinstance(conditions, ContentLengthConditions):
        return context.token_count <= conditions.max_length
    if isinstance(conditions, ToolPresenceConditions):
        return context.has_tools == conditions.has_tools
    raise UnknownRuleTypeError(type(conditions).__name__)


def _group_matches(group: RuleGroup, context: RequestContext) -> bool:
    for rule in group.rules:
        try:
            matched = evaluate_condition(rule.conditions, context)
        except UnknownRuleTypeError as e:
            e.rule_id = rule.id
            raise
        if not matched:
            return False
    return True


def match_rules(
    rules: Sequence[OptimizationRule],
    context: RequestContext,
) -> Optional[str]:
    """Pick the target model for a request.

    Args:
        rules: Candidate rules; their order sets group precedence
        context: Facts about the current request

    Returns:
        Target model of the first fully matching group, or None when no
        group matches (including no rules, or only disabled rules)

    Raises:
        UnknownRuleTypeError: If any evaluated rule has unrecognized conditions
    """
    for group in group_rules_by_model(rules):
        if _group_matches(group, context):
            logger.debug(
                "Optimization rules matched model %s (tokens=%d, has_tools=%s)",
                group.target_model,
                context.token_count,
                context.has_tools,
            )
            return group.target_model

    logger.debug(
        "No optimization rule matched (rules=%d, tokens=%d, has_tools=%s)",
        len(rules),
        context.token_count,
        context.has_tools,
    )
    return None


def match_rules_raw(
    rows: Sequence[Mapping[str, Any]],
    context: RequestContext,
) -> Optional[str]:
    """Decode raw rule rows and match them.

    Every row is decoded before any evaluation, so a single bad row aborts
    the whole call instead of being skipped.

    Raises:
        MalformedConditionsError: If a row's conditions do not fit its type
        UnknownRuleTypeError: If a row has an unrecognized rule type
    """
    rules = [OptimizationRule.model_validate(dict(row)) for row in rows]
    return match_rules(rules, context)
