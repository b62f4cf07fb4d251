"""Database module for optirules.

Models, session management and the optimization rule repository.
"""

from optirules.db.base import Base, TimestampMixin, UUIDMixin
from optirules.db.models import OptimizationRuleRecord, Organization, Team
from optirules.db.repository import OptimizationRuleRepository
from optirules.db.session import (
    AsyncSession,
    close_db,
    create_tables,
    get_session,
    get_session_maker,
    init_db,
)

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    # Models
    "Organization",
    "Team",
    "OptimizationRuleRecord",
    # Repository
    "OptimizationRuleRepository",
    # Session
    "AsyncSession",
    "get_session",
    "get_session_maker",
    "init_db",
    "close_db",
    "create_tables",
]
