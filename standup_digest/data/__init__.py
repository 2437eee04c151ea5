# Data package
"""Data layer for the standup reporting system."""

from .base_repository import BaseStandupRepository
from .database import DatabaseInitializer, init_database
from .models import DatabaseManager, StandupUpdateModel, TeamMemberModel, WeeklyReportModel, db_manager
from .repository import InMemoryStandupRepository
from .sqlalchemy_repository import SQLAlchemyStandupRepository

__all__ = [
    "BaseStandupRepository",
    "InMemoryStandupRepository",
    "SQLAlchemyStandupRepository",
    "StandupUpdateModel",
    "TeamMemberModel",
    "WeeklyReportModel",
    "DatabaseManager",
    "db_manager",
    "DatabaseInitializer",
    "init_database",
]
