"""Custom exceptions for optirules."""

from typing import Any, Optional


class OptiRulesError(Exception):
    """Base exception for all optirules errors."""

    def __init__(
        self,
        message: str,
        *,
        type: Optional[str] = None,
        param: Optional[str] = None,
        code: Optional[str] = None,
        body: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.type = type or "optirules_error"
        self.param = param
        self.code = code
        self.body = body or {}

    def __str__(self) -> str:
        msg = self.message
        if self.type:
            msg = f"{self.type}: {msg}"
        if self.code:
            msg = f"[{self.code}] {msg}"
        return msg


class RuleDefinitionError(OptiRulesError):
    """A stored rule cannot be interpreted.

    These point at bad configuration data and need operator attention.
    They are never a substitute for an ordinary "no rule matched" outcome.
    """

    def __init__(
        self,
        message: str = "Invalid rule definition",
        rule_id: Optional[Any] = None,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("type", "rule_definition_error")
        kwargs.setdefault("code", "422")
        super().__init__(message, **kwargs)
        self.rule_id = rule_id


class MalformedConditionsError(RuleDefinitionError):
    """Conditions payload does not fit the declared rule type."""

    def __init__(
        self,
        rule_type: str,
        payload: Any,
        rule_id: Optional[Any] = None,
        reason: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        message = f"Malformed conditions for rule type '{rule_type}': {payload!r}"
        if rule_id is not None:
            message += f" (rule {rule_id})"
        if reason:
            message += f": {reason}"
        super().__init__(
            message,
            rule_id=rule_id,
            type="malformed_conditions",
            param="conditions",
            **kwargs,
        )
        self.rule_type = rule_type
        self.payload = payload


class UnknownRuleTypeError(RuleDefinitionError):
    """Rule type is not one of the recognized variants."""

    def __init__(
        self,
        rule_type: Any,
        rule_id: Optional[Any] = None,
        **kwargs: Any,
    ) -> None:
        message = f"Unknown rule type '{rule_type}'"
        if rule_id is not None:
            message += f" (rule {rule_id})"
        super().__init__(
            message,
            rule_id=rule_id,
            type="unknown_rule_type",
            param="rule_type",
            **kwargs,
        )
        self.rule_type = rule_type


class EntityNotFoundError(OptiRulesError):
    """Rule owner (organization or team) does not exist."""

    def __init__(self, entity_type: str, entity_id: Any, **kwargs: Any) -> None:
        message = f"{entity_type.capitalize()} not found: {entity_id}"
        super().__init__(message, type="not_found", code="404", param="entity_id", **kwargs)
        self.entity_type = entity_type
        self.entity_id = entity_id


class ConfigurationError(OptiRulesError):
    """Invalid or unloadable configuration."""

    def __init__(self, message: str = "Configuration error", **kwargs: Any) -> None:
        super().__init__(message, type="configuration_error", **kwargs)
