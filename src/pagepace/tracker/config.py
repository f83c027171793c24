"""Configuration management for pagepace.

Loads configuration from environment variables and provides defaults.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()


@dataclass
class Config:
    """Application configuration."""

    # Database
    db_path: Path
    user_id: str

    # Urgency policy
    impossible_factor: float
    urgent_days: int

    # Pace estimation
    pace_window_days: int
    reliable_min_days: int
    week_start: int  # 0=Monday, 6=Sunday

    # Logging
    log_level: str

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        db_path_str = os.environ.get(
            "PAGEPACE_DB_PATH",
            str(Path.home() / ".pagepace" / "pagepace.db"),
        )
        db_path = Path(db_path_str).expanduser()

        return cls(
            db_path=db_path,
            user_id=os.environ.get("PAGEPACE_USER_ID", "local"),
            impossible_factor=float(os.environ.get("PAGEPACE_IMPOSSIBLE_FACTOR", "2.5")),
            urgent_days=int(os.environ.get("PAGEPACE_URGENT_DAYS", "3")),
            pace_window_days=int(os.environ.get("PAGEPACE_PACE_WINDOW_DAYS", "14")),
            reliable_min_days=int(os.environ.get("PAGEPACE_RELIABLE_MIN_DAYS", "3")),
            week_start=int(os.environ.get("PAGEPACE_WEEK_START", "0")),
            log_level=os.environ.get("PAGEPACE_LOG_LEVEL", "WARNING").upper(),
        )

    def validate(self) -> list[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if self.impossible_factor <= 1:
            errors.append(
                f"Impossible factor must be greater than 1: {self.impossible_factor}"
            )
        if self.urgent_days < 0:
            errors.append(f"Urgent days cannot be negative: {self.urgent_days}")
        if self.pace_window_days < 1:
            errors.append(f"Pace window must be at least 1 day: {self.pace_window_days}")
        if self.reliable_min_days < 1:
            errors.append(
                f"Reliable pace needs at least 1 day: {self.reliable_min_days}"
            )
        if not 0 <= self.week_start <= 6:
            errors.append(f"Week start must be 0-6: {self.week_start}")
        if not isinstance(logging.getLevelName(self.log_level), int):
            errors.append(f"Unknown log level: {self.log_level}")

        # Check database directory is writable
        if str(self.db_path) != ":memory:" and not self.db_path.parent.exists():
            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
            except PermissionError:
                errors.append(f"Cannot create database directory: {self.db_path.parent}")

        return errors


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Reset the global config instance. Used for testing."""
    global _config
    _config = None
