"""Database models for optirules.

- Organizations: top-level tenants
- Teams: groups within an organization
- Optimization rules: routing rules owned by an organization or a team
"""

import uuid
from typing import List, Optional

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from optirules.db.base import Base, JSONType, TimestampMixin, UUIDMixin


class Organization(Base, UUIDMixin, TimestampMixin):
    """Organization model - top-level entity for multi-tenancy."""

    __tablename__ = "organizations"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Organization display name",
    )
    slug: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
        comment="URL-friendly unique identifier",
    )
    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Optional organization description",
    )

    # Relationships
    teams: Mapped[List["Team"]] = relationship(
        "Team",
        back_populates="organization",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Organization(id={self.id}, slug={self.slug}, name={self.name})>"


class Team(Base, UUIDMixin, TimestampMixin):
    """Team model - groups within organizations."""

    __tablename__ = "teams"
    __table_args__ = (
        UniqueConstraint("org_id", "slug", name="uq_team_org_slug"),
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Team display name",
    )
    slug: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="URL-friendly identifier (unique within org)",
    )
    org_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        comment="Parent organization ID",
    )

    # Relationships
    organization: Mapped["Organization"] = relationship(
        "Organization",
        back_populates="teams",
    )

    def __repr__(self) -> str:
        return f"<Team(id={self.id}, slug={self.slug}, org_id={self.org_id})>"


class OptimizationRuleRecord(Base, UUIDMixin, TimestampMixin):
    """Stored optimization rule.

    ``entity_id`` points at an organization or a team depending on
    ``entity_type``, so it carries no foreign key. Enum-like columns are
    plain strings; decoding into typed rules happens on read.
    """

    __tablename__ = "optimization_rules"
    __table_args__ = (
        Index("ix_optimization_rules_entity", "entity_type", "entity_id"),
    )

    entity_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="Owner scope: organization or team",
    )
    entity_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
        comment="Owning organization or team ID",
    )
    provider: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Upstream provider the rule applies to",
    )
    rule_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="content_length or tool_presence",
    )
    conditions: Mapped[dict] = mapped_column(
        JSONType,
        nullable=False,
        comment="Rule-type specific conditions payload",
    )
    target_model: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Model to route to when the rule group matches",
    )
    enabled: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        comment="Disabled rules never affect routing",
    )

    def __repr__(self) -> str:
        return (
            f"<OptimizationRuleRecord(id={self.id}, rule_type={self.rule_type}, "
            f"target_model={self.target_model}, enabled={self.enabled})>"
        )
