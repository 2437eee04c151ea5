# models.py
"""SQLAlchemy database models for the standup reporting system."""

from datetime import datetime

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker

from standup_digest.core import settings

Base = declarative_base()


class TeamMemberModel(Base):
    """SQLAlchemy model for team member information"""

    __tablename__ = "team_members"

    id = Column(String(64), primary_key=True)
    name = Column(String(100), nullable=False, unique=True)
    role = Column(String(50), nullable=True)
    avatar = Column(String(255), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    updates = relationship("StandupUpdateModel", back_populates="member", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_team_members_name", "name"),
    )

    def __repr__(self):
        return f"<TeamMemberModel(id={self.id}, name='{self.name}', role='{self.role}')>"


class StandupUpdateModel(Base):
    """One person's update for one calendar day"""

    __tablename__ = "standup_updates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    team_member_id = Column(String(64), ForeignKey("team_members.id"), nullable=False)

    date = Column(String(10), nullable=False)  # YYYY-MM-DD in the team timezone
    yesterday = Column(Text, nullable=False, default="")
    today = Column(Text, nullable=False, default="")
    blockers = Column(Text, nullable=False, default="")

    # Submission time, kept timezone-naive in UTC
    submitted_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    member = relationship("TeamMemberModel", back_populates="updates")

    __table_args__ = (
        UniqueConstraint("team_member_id", "date", name="uq_standup_updates_member_date"),
        Index("idx_standup_updates_date", "date"),
        Index("idx_standup_updates_date_member", "date", "team_member_id"),
    )

    def __repr__(self):
        return f"<StandupUpdateModel(id={self.id}, team_member_id={self.team_member_id}, date='{self.date}')>"


class WeeklyReportModel(Base):
    """Stored report snapshot, one row per (week_start, week_end)"""

    __tablename__ = "weekly_reports"

    id = Column(Integer, primary_key=True, autoincrement=True)
    week_start = Column(String(10), nullable=False)
    week_end = Column(String(10), nullable=False)
    total_updates = Column(Integer, nullable=False, default=0)
    unique_members = Column(Integer, nullable=False, default=0)
    report_data = Column(JSON, nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    error = Column(Text, nullable=True)
    generated_at = Column(String(40), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("week_start", "week_end", name="uq_weekly_reports_week"),
        Index("idx_weekly_reports_generated_at", "generated_at"),
    )

    def __repr__(self):
        return f"<WeeklyReportModel(week_start='{self.week_start}', week_end='{self.week_end}', status='{self.status}')>"


class DatabaseManager:
    """Manages database connections and sessions"""

    def __init__(self, database_url: str = None):
        self.database_url = database_url or settings.DATABASE_URL
        self.engine = None
        self.SessionLocal = None
        self._initialize()

    def _initialize(self):
        """Initialize database engine and session factory"""
        connect_args = {}
        if "sqlite" in self.database_url:
            connect_args = {
                "check_same_thread": False,  # sessions are used from worker threads
                "timeout": 20,
            }

        self.engine = create_engine(
            self.database_url,
            connect_args=connect_args,
            pool_pre_ping=True,
            pool_recycle=3600,
        )

        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine,
        )

    def create_tables(self):
        """Create all tables with indexes"""
        Base.metadata.create_all(bind=self.engine)

    def get_session(self):
        """Get a database session"""
        return self.SessionLocal()

    def drop_tables(self):
        """Drop all tables - USE WITH CAUTION"""
        Base.metadata.drop_all(bind=self.engine)

    def get_table_stats(self):
        """Get database statistics for monitoring"""
        with self.get_session() as session:
            latest_update = session.query(StandupUpdateModel).order_by(
                StandupUpdateModel.submitted_at.desc()
            ).first()
            return {
                "total_updates": session.query(StandupUpdateModel).count(),
                "total_members": session.query(TeamMemberModel).count(),
                "stored_reports": session.query(WeeklyReportModel).count(),
                "latest_update": latest_update.submitted_at.isoformat() if latest_update else None,
                "database_url": self.database_url.split("@")[-1] if "@" in self.database_url else self.database_url,
            }


# Global database manager instance
db_manager = DatabaseManager()
