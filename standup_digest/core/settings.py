# settings.py
"""Centralized settings and configuration management."""

import json
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def _load_env_for_development():
    """Load .env file only for local development"""
    if os.getenv("ENVIRONMENT", "development") != "development":
        return
    try:
        from dotenv import load_dotenv

        load_dotenv()
    except ImportError:
        logger.debug("python-dotenv not installed, skipping .env loading")


_load_env_for_development()


DEFAULT_TEAM_ROSTER = [
    {"id": "1", "name": "Ibrahim", "role": "Boss"},
    {"id": "2", "name": "Aurelio", "role": "Developer"},
    {"id": "3", "name": "Francois", "role": "Developer"},
    {"id": "4", "name": "Isik", "role": "Marketing"},
    {"id": "5", "name": "Atena", "role": "Developer"},
]


def _load_team_roster():
    """Read the roster from TEAM_ROSTER (JSON list of {id, name, role})"""
    raw = os.getenv("TEAM_ROSTER")
    if not raw:
        return list(DEFAULT_TEAM_ROSTER)
    try:
        roster = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning(f"TEAM_ROSTER is not valid JSON ({e}), using default roster")
        return list(DEFAULT_TEAM_ROSTER)
    if not isinstance(roster, list):
        logger.warning("TEAM_ROSTER must be a JSON list, using default roster")
        return list(DEFAULT_TEAM_ROSTER)
    return roster


class Settings:
    """Application settings and configuration"""

    # Base paths
    BASE_DIR = Path(__file__).parent.parent
    DATA_DIR = BASE_DIR / "data"

    # Database
    DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DATA_DIR}/standup.db")

    # LLM Configuration
    LLM_PROVIDER = "groq"
    GROQ_API_KEY = os.getenv("GROQ_API_KEY")
    GROQ_MODEL = os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile")
    SUMMARY_MAX_TOKENS = 4000
    DRAFT_MAX_TOKENS = 500

    # Retry policy for rate limited / overloaded responses
    AI_MAX_RETRIES = int(os.getenv("AI_MAX_RETRIES", "2"))
    AI_RETRY_DELAY_SECONDS = float(os.getenv("AI_RETRY_DELAY_SECONDS", "2.0"))

    # Calendar - one fixed timezone for every date computation
    TIMEZONE = "America/Vancouver"
    DATE_FORMAT = "%Y-%m-%d"

    # Report settings
    MAX_REPORT_RANGE_DAYS = 14
    SUMMARY_LIST_CAP = 10
    MEMBER_CONTRIBUTION_CAP = 5
    HISTORY_DAYS = 10
    DEFAULT_HISTORY_LIMIT = 50

    # Team roster
    TEAM_ROSTER = _load_team_roster()

    # Application settings
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
    DEBUG = ENVIRONMENT == "development"
    API_KEY = os.getenv("API_KEY")

    # Weekly report job, polled from the web process when enabled
    SCHEDULER_ENABLED = os.getenv("SCHEDULER_ENABLED", "false").lower() == "true"
    SCHEDULER_POLL_SECONDS = int(os.getenv("SCHEDULER_POLL_SECONDS", "60"))

    @classmethod
    def ensure_directories(cls):
        """Ensure required directories exist"""
        cls.DATA_DIR.mkdir(exist_ok=True)


# Global settings instance
settings = Settings()
settings.ensure_directories()
