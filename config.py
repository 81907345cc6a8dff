"""
Application configuration.

Everything is read from the environment (and a local .env file, if present).
"""
import os
from datetime import timedelta
from typing import Optional

import pytz
from dotenv import load_dotenv

from utils.logger import get_logger

load_dotenv()

logger = get_logger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///journal.db"
DEFAULT_RETENTION_DAYS = 7
DEFAULT_SWEEP_INTERVAL_HOURS = 6
DEFAULT_PORT = 8443


def _positive_number(name: str, default: float) -> float:
    """Read a positive number from the environment, falling back to default."""
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Invalid {name}={raw!r}, using default {default}")
        return default
    if value <= 0:
        logger.warning(f"{name} must be positive, got {raw!r}; using default {default}")
        return default
    return value


class DatabaseConfig:
    """Database configuration container."""

    def __init__(self):
        # JOURNAL_DATABASE_URL wins over the generic DATABASE_URL
        self.database_url_override = (
            os.environ.get("JOURNAL_DATABASE_URL") or os.environ.get("DATABASE_URL")
        )
        self.echo = os.environ.get("DB_ECHO", "").lower() == "true"

    @property
    def database_url(self) -> str:
        """Get the database URL."""
        url = self.database_url_override or DEFAULT_DATABASE_URL
        # Handle Heroku-style postgres:// URLs (need postgresql://)
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql://", 1)
        return url

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def engine_kwargs(self) -> dict:
        """Get engine configuration."""
        if self.is_sqlite:
            return {
                "echo": self.echo,
                "connect_args": {"check_same_thread": False},
            }
        return {
            "pool_recycle": 300,
            "pool_pre_ping": True,  # Verify connections before use
            "pool_size": 5,
            "max_overflow": 10,
            "echo": self.echo,
        }


class JournalConfig:
    """Thought store policy: retention window, display timezone, sweep cadence."""

    def __init__(self):
        self.retention_days = _positive_number("THOUGHT_RETENTION_DAYS", DEFAULT_RETENTION_DAYS)
        self.sweep_interval_hours = _positive_number(
            "SWEEP_INTERVAL_HOURS", DEFAULT_SWEEP_INTERVAL_HOURS
        )
        self.timezone_name = os.environ.get("JOURNAL_TIMEZONE", "").strip() or None

    @property
    def retention(self) -> timedelta:
        return timedelta(days=self.retention_days)

    @property
    def sweep_interval(self) -> timedelta:
        return timedelta(hours=self.sweep_interval_hours)

    @property
    def timezone(self) -> Optional[pytz.BaseTzInfo]:
        """
        Timezone used to decide which calendar day a thought belongs to.

        None means the host's local timezone.
        """
        if not self.timezone_name:
            return None
        try:
            return pytz.timezone(self.timezone_name)
        except pytz.UnknownTimeZoneError:
            logger.error(f"Unknown timezone: {self.timezone_name}")
            return None


class BotConfig:
    """Telegram front-end configuration."""

    def __init__(self):
        self.token = os.environ.get("bot_token")
        self.mode = os.environ.get("TG_MODE", "polling").lower()
        self.webhook_url = os.environ.get("LIVE_SERVER_URL", "")
        self.port = int(_positive_number("PORT", DEFAULT_PORT))


database_config = DatabaseConfig()
journal_config = JournalConfig()
