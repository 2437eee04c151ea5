# database.py
"""Database initialization utilities."""

import logging
from pathlib import Path

from .models import db_manager

logger = logging.getLogger(__name__)


class DatabaseInitializer:
    """Handles database initialization"""

    @staticmethod
    def initialize_database():
        """Initialize database with tables and indexes"""
        try:
            logger.info("Initializing database...")
            logger.info(f"Database URL: {db_manager.database_url}")

            if "sqlite" in db_manager.database_url:
                db_path = Path(db_manager.database_url.replace("sqlite:///", ""))
                db_path.parent.mkdir(parents=True, exist_ok=True)

            db_manager.create_tables()

            stats = db_manager.get_table_stats()
            logger.info(f"Database initialized successfully: {stats}")

            return True

        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")
            raise

    @staticmethod
    def get_database_info():
        """Get database connection information"""
        try:
            stats = db_manager.get_table_stats()

            return {
                "database_type": "SQLite" if "sqlite" in db_manager.database_url else "Other",
                "database_path": db_manager.database_url,
                "connection_status": "Connected",
                "stats": stats,
            }

        except Exception as e:
            return {
                "database_type": "Unknown",
                "connection_status": "Failed",
                "error": str(e),
            }


def init_database():
    """Convenience function to initialize database"""
    return DatabaseInitializer.initialize_database()
