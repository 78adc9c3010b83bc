# src/contributor_health/config/settings.py
"""Settings and environment variables for the contributor health analyzer."""

from datetime import date, datetime
from typing import Optional

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings."""

    github_token: Optional[str] = None
    github_owner: Optional[str] = None
    github_repo: Optional[str] = None

    # Trailing windows, in days
    recent_window_days: int = 30
    historical_window_days: int = 60
    metrics_window_days: int = 30

    max_contributors: int = 50
    insight_limit: int = 10
    synthetic_seed: Optional[int] = None
    log_level: str = "INFO"
    analysis_date: Optional[date] = None  # Pins "today" for reproducible runs

    model_config = {"env_file": ".env", "extra": "ignore"}

    @field_validator("analysis_date", mode="before")
    @classmethod
    def parse_analysis_date(cls, value):
        """Parse a YYYY-MM-DD string into a date; empty means unset."""
        if value in (None, ""):
            return None
        if isinstance(value, str):
            return datetime.strptime(value, "%Y-%m-%d").date()
        return value

    @field_validator(
        "recent_window_days",
        "historical_window_days",
        "metrics_window_days",
        "max_contributors",
    )
    @classmethod
    def must_be_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive number of days/items")
        return value

    @property
    def repository_id(self) -> Optional[str]:
        """The owner/repo full name, when both halves are configured."""
        if self.github_owner and self.github_repo:
            return f"{self.github_owner}/{self.github_repo}"
        return None


def get_settings() -> Settings:
    """Get the application settings."""
    # Pydantic will automatically handle loading from .env and validation
    return Settings()
