"""Optimization rule storage.

Rules are stored as plain rows and decoded into typed ``OptimizationRule``
values on every read, so a row whose conditions do not fit its rule type
surfaces as a ``RuleDefinitionError`` instead of quietly never matching.
"""

import logging
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from optirules.db.models import OptimizationRuleRecord, Organization, Team
from optirules.exceptions import EntityNotFoundError
from optirules.types import (
    EntityType,
    OptimizationRule,
    OptimizationRuleCreate,
    OptimizationRuleUpdate,
    SupportedProvider,
    dump_conditions,
    parse_conditions,
)

logger = logging.getLogger(__name__)


class OptimizationRuleRepository:
    """Create, read, update and delete optimization rules.

    Reads are ordered oldest first (``created_at``, then ``id``). Callers
    that need another precedence must sort before matching.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def _ensure_entity_exists(self, entity_type: EntityType, entity_id: UUID) -> None:
        model = Organization if entity_type == EntityType.ORGANIZATION else Team
        if await self.db.get(model, entity_id) is None:
            raise EntityNotFoundError(entity_type.value, entity_id)

    @staticmethod
    def _decode(records: Sequence[OptimizationRuleRecord]) -> list[OptimizationRule]:
        return [OptimizationRule.from_record(record) for record in records]

    async def create(self, data: OptimizationRuleCreate) -> OptimizationRule:
        """Create a rule.

        Raises:
            EntityNotFoundError: If the owning organization or team is missing
        """
        await self._ensure_entity_exists(data.entity_type, data.entity_id)

        record = OptimizationRuleRecord(
            entity_type=data.entity_type.value,
            entity_id=data.entity_id,
            provider=data.provider.value,
            rule_type=data.rule_type.value,
            conditions=dump_conditions(data.conditions),
            target_model=data.target_model,
            enabled=data.enabled,
        )
        self.db.add(record)
        await self.db.flush()
        await self.db.refresh(record)

        logger.info(
            "Created optimization rule %s (%s %s -> %s)",
            record.id,
            record.entity_type,
            record.entity_id,
            record.target_model,
        )
        return OptimizationRule.from_record(record)

    async def get(self, rule_id: UUID) -> Optional[OptimizationRule]:
        """Get a rule by ID."""
        record = await self.db.get(OptimizationRuleRecord, rule_id)
        if record is None:
            return None
        return OptimizationRule.from_record(record)

    async def find_by_organization_id(self, org_id: UUID) -> list[OptimizationRule]:
        """All rules visible to an organization.

        Organization-level rules plus rules of every team in the organization.
        """
        rule = OptimizationRuleRecord
        result = await self.db.execute(
            select(rule)
            .outerjoin(
                Team,
                and_(
                    rule.entity_type == EntityType.TEAM.value,
                    rule.entity_id == Team.id,
                ),
            )
            .where(
                or_(
                    # Organization-level rules
                    and_(
                        rule.entity_type == EntityType.ORGANIZATION.value,
                        rule.entity_id == org_id,
                    ),
                    # Team-level rules for teams in this organization
                    and_(
                        rule.entity_type == EntityType.TEAM.value,
                        Team.org_id == org_id,
                    ),
                )
            )
            .order_by(rule.created_at, rule.id)
        )
        return self._decode(result.scalars().all())

    async def find_enabled_by_organization_and_provider(
        self,
        org_id: UUID,
        provider: SupportedProvider,
    ) -> list[OptimizationRule]:
        """Enabled organization-level rules for one provider."""
        rule = OptimizationRuleRecord
        result = await self.db.execute(
            select(rule)
            .where(
                rule.entity_type == EntityType.ORGANIZATION.value,
                rule.entity_id == org_id,
                rule.provider == SupportedProvider(provider).value,
                rule.enabled.is_(True),
            )
            .order_by(rule.created_at, rule.id)
        )
        return self._decode(result.scalars().all())

    async def update(
        self,
        rule_id: UUID,
        data: OptimizationRuleUpdate,
    ) -> Optional[OptimizationRule]:
        """Apply a partial update.

        Conditions are checked against the resulting rule type, so changing
        only ``rule_type`` fails when the stored conditions no longer fit.

        Returns:
            The updated rule, or None if no rule has this ID

        Raises:
            MalformedConditionsError: If conditions do not fit the rule type
            EntityNotFoundError: If the new owner does not exist
        """
        record = await self.db.get(OptimizationRuleRecord, rule_id)
        if record is None:
            return None

        changes = data.model_dump(exclude_unset=True)

        # Validate everything before touching the tracked record
        owner = None
        if "entity_type" in changes or "entity_id" in changes:
            entity_type = data.entity_type or EntityType(record.entity_type)
            entity_id = data.entity_id or record.entity_id
            await self._ensure_entity_exists(entity_type, entity_id)
            owner = (entity_type.value, entity_id)

        typed_conditions = None
        if "rule_type" in changes or "conditions" in changes:
            rule_type = data.rule_type or record.rule_type
            payload = data.conditions if data.conditions is not None else record.conditions
            conditions = parse_conditions(rule_type, payload, rule_id=rule_id)
            typed_conditions = (getattr(rule_type, "value", rule_type), dump_conditions(conditions))

        if owner is not None:
            record.entity_type, record.entity_id = owner
        if typed_conditions is not None:
            record.rule_type, record.conditions = typed_conditions
        if data.provider is not None:
            record.provider = data.provider.value
        if data.target_model is not None:
            record.target_model = data.target_model
        if data.enabled is not None:
            record.enabled = data.enabled

        await self.db.flush()
        await self.db.refresh(record)

        logger.info("Updated optimization rule %s (%s)", rule_id, ", ".join(sorted(changes)))
        return OptimizationRule.from_record(record)

    async def delete(self, rule_id: UUID) -> bool:
        """Delete a rule. Returns True if a rule was removed."""
        record = await self.db.get(OptimizationRuleRecord, rule_id)
        if record is None:
            return False

        await self.db.delete(record)
        await self.db.flush()

        logger.info("Deleted optimization rule %s", rule_id)
        return True
