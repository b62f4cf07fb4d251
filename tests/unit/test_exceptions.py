"""Tests for custom exceptions."""

from uuid import uuid4

from optirules.exceptions import (
    ConfigurationError,
    EntityNotFoundError,
    MalformedConditionsError,
    OptiRulesError,
    RuleDefinitionError,
    UnknownRuleTypeError,
)


class TestOptiRulesError:
    """Test base exception class."""

    def test_basic_error(self):
        """Test basic error creation."""
        error = OptiRulesError("Test error")
        assert str(error) == "optirules_error: Test error"
        assert error.message == "Test error"

    def test_error_with_code(self):
        """Test error with code."""
        error = OptiRulesError("Test error", code="500")
        assert "[500]" in str(error)

    def test_error_with_body(self):
        """Test error with body."""
        error = OptiRulesError("Test error", body={"key": "value"})
        assert error.body == {"key": "value"}


class TestRuleDefinitionErrors:
    """Test rule data errors."""

    def test_malformed_conditions(self):
        """Malformed conditions carry the rule type, payload and rule id."""
        rule_id = uuid4()
        error = MalformedConditionsError(
            "content_length", {"hasTools": True}, rule_id=rule_id, reason="maxLength: Field required"
        )

        assert isinstance(error, RuleDefinitionError)
        assert error.type == "malformed_conditions"
        assert error.code == "422"
        assert error.param == "conditions"
        assert error.rule_id == rule_id
        assert error.payload == {"hasTools": True}
        assert "content_length" in str(error)
        assert str(rule_id) in str(error)
        assert "maxLength: Field required" in str(error)

    def test_unknown_rule_type(self):
        """Unknown rule types are rule definition errors too."""
        error = UnknownRuleTypeError("semantic")

        assert isinstance(error, RuleDefinitionError)
        assert error.type == "unknown_rule_type"
        assert error.rule_type == "semantic"
        assert error.rule_id is None
        assert "semantic" in str(error)

    def test_rule_definition_errors_are_distinct_from_not_found(self):
        """Data defects and missing entities are separate branches."""
        assert not issubclass(EntityNotFoundError, RuleDefinitionError)


class TestOtherErrors:
    """Test remaining error types."""

    def test_entity_not_found(self):
        entity_id = uuid4()
        error = EntityNotFoundError("team", entity_id)
        assert error.code == "404"
        assert error.entity_type == "team"
        assert str(error) == f"[404] not_found: Team not found: {entity_id}"

    def test_configuration_error(self):
        error = ConfigurationError("bad yaml")
        assert error.type == "configuration_error"
        assert "bad yaml" in str(error)
