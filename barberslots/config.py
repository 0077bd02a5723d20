"""
Configuration management using Pydantic models loaded from YAML.
"""

import logging
from pathlib import Path
from typing import List, Optional

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator

from .domain.clock import format_minutes, parse_hhmm
from .domain.models import WorkingHours

DEFAULT_TIMEZONE = "America/Sao_Paulo"
MINIMUM_SERVICE_DURATION_MINUTES = 5


class DefaultsConfig(BaseModel):
    """Default settings for slot computation."""
    slot_duration_minutes: int = 30
    service_duration_minutes: int = 30
    booking_horizon_days: int = 30

    @field_validator("slot_duration_minutes", "booking_horizon_days")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        """Ensure durations and horizons are positive."""
        if value <= 0:
            raise ValueError(f"must be greater than zero, got {value}")
        return value

    @field_validator("service_duration_minutes")
    @classmethod
    def validate_service_duration(cls, value: int) -> int:
        """Services are never shorter than the business minimum."""
        if value < MINIMUM_SERVICE_DURATION_MINUTES:
            raise ValueError(
                f"service_duration_minutes must be at least {MINIMUM_SERVICE_DURATION_MINUTES}, got {value}"
            )
        return value


class ApiConfig(BaseModel):
    """Connection to the booking backend that serves the timeline."""
    base_url: str
    token: Optional[str] = None
    timeout_seconds: float = 30
    # Restricts the fetched timeline to these professionals; empty means all
    professional_ids: List[int] = Field(default_factory=list)

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got {value!r}")
        return value.rstrip("/")

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        return value


class WeeklyHoursConfig(BaseModel):
    """Business hours for one weekday (0 = Sunday .. 6 = Saturday)."""
    day_of_week: int = Field(ge=0, le=6)
    open_time: Optional[str] = None
    close_time: Optional[str] = None
    break_start: Optional[str] = None
    break_end: Optional[str] = None
    closed: bool = False

    @field_validator("open_time", "close_time", "break_start", "break_end", mode="before")
    @classmethod
    def validate_time_of_day(cls, value: object) -> Optional[str]:
        # Unquoted 10:30 is a base-60 integer in YAML 1.1, i.e. minutes
        if isinstance(value, int) and not isinstance(value, bool):
            return format_minutes(value)
        if value is not None:
            parse_hhmm(value)
        return value

    def to_domain(self) -> WorkingHours:
        return WorkingHours(**self.model_dump())


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = DEFAULT_TIMEZONE
    business_id: Optional[int] = None
    log_level: str = "WARNING"
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    api: Optional[ApiConfig] = None
    working_hours: List[WeeklyHoursConfig] = Field(default_factory=list)

    @field_validator("working_hours")
    @classmethod
    def validate_working_hours(cls, value: List[WeeklyHoursConfig]) -> List[WeeklyHoursConfig]:
        """Ensure every weekday is configured at most once."""
        seen: set[int] = set()
        for hours in value:
            if hours.day_of_week in seen:
                raise ValueError(f"Duplicate working hours for day_of_week {hours.day_of_week}")
            seen.add(hours.day_of_week)
        return value

    def weekly_hours(self) -> List[WorkingHours]:
        return [hours.to_domain() for hours in self.working_hours]

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA name."""
        try:
            pendulum.timezone(value)
        except (ValueError, KeyError) as exc:
            raise ValueError(f"Unknown timezone: {value!r}") from exc
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value!r}")
        return level

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)

    @classmethod
    def load_or_default(cls, config_path: Optional[Path]) -> "AppConfig":
        """Load the given file; without one, fall back to built-in defaults."""
        if config_path is not None:
            return cls.load_from_yaml(config_path)

        default_path = get_default_config_path()
        if default_path.exists():
            return cls.load_from_yaml(default_path)

        return cls()


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of barberslots/)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
