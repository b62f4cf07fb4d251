"""Optimization rule type definitions.

A rule's ``conditions`` payload is a tagged variant keyed by ``rule_type``.
Payloads are decoded once, when a rule is constructed, so everything past
this module works with typed condition objects only.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    ValidationError,
    model_validator,
)

from optirules.exceptions import MalformedConditionsError, UnknownRuleTypeError


class EntityType(str, Enum):
    """Scope that owns a rule."""

    ORGANIZATION = "organization"
    TEAM = "team"


class RuleType(str, Enum):
    """Determines how a rule's conditions are interpreted."""

    CONTENT_LENGTH = "content_length"
    TOOL_PRESENCE = "tool_presence"


class SupportedProvider(str, Enum):
    """Upstream LLM providers a rule can target."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"


class ContentLengthConditions(BaseModel):
    """Matches when the request's token count is at most ``max_length``."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    max_length: StrictInt = Field(..., ge=0, alias="maxLength")


class ToolPresenceConditions(BaseModel):
    """Matches when tool presence on the request equals ``has_tools``."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    has_tools: StrictBool = Field(..., alias="hasTools")


RuleConditions = Union[ContentLengthConditions, ToolPresenceConditions]

CONDITIONS_BY_RULE_TYPE: dict[RuleType, type[BaseModel]] = {
    RuleType.CONTENT_LENGTH: ContentLengthConditions,
    RuleType.TOOL_PRESENCE: ToolPresenceConditions,
}


def coerce_rule_type(value: Any, rule_id: Optional[Any] = None) -> RuleType:
    """Convert a raw rule type value into ``RuleType``.

    Raises:
        UnknownRuleTypeError: If the value is not a recognized rule type.
    """
    if isinstance(value, RuleType):
        return value
    try:
        return RuleType(value)
    except ValueError:
        raise UnknownRuleTypeError(value, rule_id=rule_id) from None


def parse_conditions(
    rule_type: Any,
    payload: Any,
    rule_id: Optional[Any] = None,
) -> RuleConditions:
    """Decode a conditions payload for the given rule type.

    Args:
        rule_type: A ``RuleType`` or its string value
        payload: Raw mapping (wire or storage form) or a conditions object
        rule_id: Optional rule identifier, used in error messages

    Returns:
        The typed conditions variant for ``rule_type``

    Raises:
        UnknownRuleTypeError: If ``rule_type`` is not recognized
        MalformedConditionsError: If ``payload`` does not fit ``rule_type``
    """
    kind = coerce_rule_type(rule_type, rule_id=rule_id)
    conditions_cls = CONDITIONS_BY_RULE_TYPE[kind]

    if isinstance(payload, conditions_cls):
        return payload
    if not isinstance(payload, dict):
        raise MalformedConditionsError(
            kind.value,
            payload,
            rule_id=rule_id,
            reason=f"expected an object, got {type(payload).__name__}",
        )

    try:
        return conditions_cls.model_validate(payload)
    except ValidationError as e:
        reason = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'conditions'}: {err['msg']}"
            for err in e.errors()
        )
        raise MalformedConditionsError(
            kind.value, payload, rule_id=rule_id, reason=reason
        ) from e


def dump_conditions(conditions: RuleConditions) -> dict[str, Any]:
    """Render conditions in their storage/wire form (camelCase keys)."""
    return conditions.model_dump(by_alias=True)


def _pick(data: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def _decode_conditions_field(data: Any) -> Any:
    """Replace the raw ``conditions`` entry of ``data`` with its typed variant."""
    if not isinstance(data, dict):
        return data

    rule_type = _pick(data, "rule_type", "ruleType")
    if rule_type is None:
        # Let field validation report the missing rule type
        return data

    rule_id = data.get("id")
    payload = _pick(data, "conditions")
    decoded = dict(data)
    decoded["conditions"] = parse_conditions(rule_type, payload, rule_id=rule_id)
    return decoded


class OptimizationRule(BaseModel):
    """A routing rule scoped to an organization or team.

    Rules sharing a ``target_model`` form one condition group; every enabled
    rule in a group must match for the request to go to that model.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: UUID
    entity_type: EntityType = Field(..., alias="entityType")
    entity_id: UUID = Field(..., alias="entityId")
    provider: SupportedProvider
    rule_type: RuleType = Field(..., alias="ruleType")
    conditions: RuleConditions
    target_model: str = Field(..., min_length=1, alias="targetModel")
    enabled: bool = True
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @model_validator(mode="before")
    @classmethod
    def decode_conditions(cls, data: Any) -> Any:
        """Decode ``conditions`` against ``rule_type`` before field validation."""
        return _decode_conditions_field(data)

    @model_validator(mode="after")
    def check_conditions_variant(self) -> "OptimizationRule":
        """Ensure the conditions variant agrees with the rule type."""
        expected = CONDITIONS_BY_RULE_TYPE[self.rule_type]
        if not isinstance(self.conditions, expected):
            raise MalformedConditionsError(
                self.rule_type.value, self.conditions, rule_id=self.id
            )
        return self

    @classmethod
    def from_record(cls, record: Any) -> "OptimizationRule":
        """Build a rule from a storage row.

        Raises:
            MalformedConditionsError: If the stored conditions are invalid
            UnknownRuleTypeError: If the stored rule type is not recognized
        """
        return cls.model_validate(
            {
                "id": record.id,
                "entity_type": record.entity_type,
                "entity_id": record.entity_id,
                "provider": record.provider,
                "rule_type": record.rule_type,
                "conditions": record.conditions,
                "target_model": record.target_model,
                "enabled": record.enabled,
                "created_at": record.created_at,
                "updated_at": record.updated_at,
            }
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize in the camelCase wire form."""
        data = self.model_dump(mode="json", by_alias=True)
        data["conditions"] = dump_conditions(self.conditions)
        return data


class OptimizationRuleCreate(BaseModel):
    """Data needed to create a rule."""

    model_config = ConfigDict(populate_by_name=True)

    entity_type: EntityType = Field(..., alias="entityType")
    entity_id: UUID = Field(..., alias="entityId")
    provider: SupportedProvider
    rule_type: RuleType = Field(..., alias="ruleType")
    conditions: RuleConditions
    target_model: str = Field(..., min_length=1, max_length=255, alias="targetModel")
    enabled: bool = True

    @model_validator(mode="before")
    @classmethod
    def decode_conditions(cls, data: Any) -> Any:
        return _decode_conditions_field(data)


class OptimizationRuleUpdate(BaseModel):
    """Partial update of a rule.

    ``conditions`` stays raw here; it is checked against the resulting rule
    type once the stored rule is known.
    """

    model_config = ConfigDict(populate_by_name=True)

    entity_type: Optional[EntityType] = Field(default=None, alias="entityType")
    entity_id: Optional[UUID] = Field(default=None, alias="entityId")
    provider: Optional[SupportedProvider] = None
    rule_type: Optional[RuleType] = Field(default=None, alias="ruleType")
    conditions: Optional[Union[dict[str, Any], RuleConditions]] = None
    target_model: Optional[str] = Field(
        default=None, min_length=1, max_length=255, alias="targetModel"
    )
    enabled: Optional[bool] = None


class RequestContext(BaseModel):
    """Per-request facts evaluated against rule conditions."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    token_count: int = Field(..., ge=0, alias="tokenCount")
    has_tools: bool = Field(default=False, alias="hasTools")
