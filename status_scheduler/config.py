"""
Configuration management for the status scheduler.

Handles environment-based configuration (and an optional .env file).
"""
import os
from pathlib import Path
from pydantic_settings import BaseSettings
from pydantic import field_validator


class Settings(BaseSettings):
    """Scheduler settings loaded from environment variables."""

    # Schedule document (JSON)
    schedule_path: str = os.getenv("SCHEDULE_PATH", "schedule.json")

    # Dry run - handle non-boolean values gracefully
    dry_run: bool = False

    @field_validator("dry_run", mode="before")
    @classmethod
    def parse_dry_run(cls, v):
        """Parse dry_run from environment, handling non-boolean values."""
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            return v.strip().lower() in ("true", "1", "yes")
        dry_run_env = os.getenv("DRY_RUN", "false").lower()
        return dry_run_env in ("true", "1", "yes")

    # Logging: error | warn | info | debug
    log_level: str = os.getenv("LOG_LEVEL", "info")

    # Lookahead window for upcoming changes
    upcoming_days: int = int(os.getenv("UPCOMING_DAYS", "7"))

    class Config:
        # Load .env from project root (status_scheduler/config.py -> parent.parent)
        env_file = str(Path(__file__).resolve().parent.parent / ".env")
        case_sensitive = False
        extra = "ignore"  # Ignore extra fields in .env file


# Global settings instance
settings = Settings()
