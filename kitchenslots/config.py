"""
Configuration management using Pydantic models loaded from YAML.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.availability import (
    DEFAULT_BUFFER_MINUTES,
    DEFAULT_DURATION_MINUTES,
    AvailabilityCalculator,
)
from .domain.models import TimeSlotDefinition, minutes_since_midnight, parse_clock

logger = logging.getLogger(__name__)

STORE_URL_ENV = "KITCHENSLOTS_STORE_URL"
STORE_KEY_ENV = "KITCHENSLOTS_STORE_KEY"

DEFAULT_OCCUPYING_STATUSES = ["confirmed", "pending", "deposit_paid"]


class SlotConfig(BaseModel):
    """One entry of the venue's slot calendar."""
    start: str
    end: str
    label: str = ""
    days: List[int] = Field(default_factory=lambda: list(range(7)))  # 0=Sunday

    @field_validator("start", "end")
    @classmethod
    def validate_clock(cls, value: str) -> str:
        """Normalise to HH:MM."""
        return parse_clock(value).strftime("%H:%M")

    @field_validator("days")
    @classmethod
    def validate_days(cls, value: List[int]) -> List[int]:
        """Ensure weekdays are in valid range and deduplicated."""
        if not value:
            raise ValueError("days must contain at least one weekday")
        invalid_days = [day for day in value if day not in range(7)]
        if invalid_days:
            raise ValueError(f"days must be between 0 and 6, got {invalid_days}")
        return sorted(set(value))

    @model_validator(mode="after")
    def validate_window(self) -> "SlotConfig":
        """Ensure the slot opens before it closes."""
        if parse_clock(self.end) <= parse_clock(self.start):
            raise ValueError(f"Slot end {self.end} must be later than start {self.start}")
        return self

    def to_definition(self) -> TimeSlotDefinition:
        start = parse_clock(self.start)
        end = parse_clock(self.end)
        return TimeSlotDefinition(
            start=start,
            end=end,
            label=self.label or _default_label(start, end),
            days_offered=frozenset(self.days),
        )


def _default_label(start, end) -> str:
    """Format as e.g. '1:30 PM - 3:00 PM'."""
    def fmt(value) -> str:
        minutes = minutes_since_midnight(value)
        hour, minute = divmod(minutes, 60)
        suffix = "AM" if hour < 12 else "PM"
        return f"{(hour % 12) or 12}:{minute:02d} {suffix}"

    return f"{fmt(start)} - {fmt(end)}"


def default_slots() -> List[SlotConfig]:
    """The venue's standard class and event slots."""
    return [
        SlotConfig(start="10:00", end="12:30", label="10:00 AM - 12:30 PM"),
        SlotConfig(start="13:30", end="15:00", label="1:30 PM - 3:00 PM"),
        SlotConfig(start="16:00", end="17:30", label="4:00 PM - 5:30 PM"),
        SlotConfig(start="18:30", end="20:00", label="6:30 PM - 8:00 PM"),
        SlotConfig(start="21:00", end="22:30", label="9:00 PM - 10:30 PM", days=[4, 5]),
    ]


class StoreConfig(BaseModel):
    """Connection settings for the hosted bookings table."""
    url: str = ""
    api_key: str = ""
    table: str = "service_bookings"
    timeout_seconds: float = 10.0

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        return value

    @property
    def is_configured(self) -> bool:
        return bool(self.url)


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "Asia/Dubai"
    buffer_minutes: int = DEFAULT_BUFFER_MINUTES
    default_duration_minutes: int = DEFAULT_DURATION_MINUTES
    occupying_statuses: List[str] = Field(
        default_factory=lambda: list(DEFAULT_OCCUPYING_STATUSES)
    )
    slots: List[SlotConfig] = Field(default_factory=default_slots)
    store: StoreConfig = Field(default_factory=StoreConfig)

    @field_validator("buffer_minutes")
    @classmethod
    def validate_buffer(cls, value: int) -> int:
        if value < 0:
            raise ValueError("buffer_minutes must not be negative")
        return value

    @field_validator("default_duration_minutes")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("default_duration_minutes must be greater than zero")
        return value

    @field_validator("occupying_statuses")
    @classmethod
    def validate_statuses(cls, value: List[str]) -> List[str]:
        """Lower-case, strip and deduplicate while preserving order."""
        seen: set[str] = set()
        statuses: List[str] = []
        for status in value:
            key = status.strip().lower()
            if key and key not in seen:
                statuses.append(key)
                seen.add(key)
        if not statuses:
            raise ValueError("occupying_statuses must not be empty")
        return statuses

    def slot_calendar(self) -> List[TimeSlotDefinition]:
        """Build the immutable slot calendar in configured order."""
        return [slot.to_definition() for slot in self.slots]

    def build_calculator(self) -> AvailabilityCalculator:
        return AvailabilityCalculator(
            buffer_minutes=self.buffer_minutes,
            default_duration_minutes=self.default_duration_minutes,
        )

    def with_env_overrides(self) -> "AppConfig":
        """Return a copy with store credentials taken from the environment."""
        url = os.environ.get(STORE_URL_ENV)
        api_key = os.environ.get(STORE_KEY_ENV)
        if not url and not api_key:
            return self

        store = self.store.model_copy(update={
            "url": url or self.store.url,
            "api_key": api_key or self.store.api_key,
        })
        return self.model_copy(update={"store": store})

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


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of kitchenslots/)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """
    Load the application config.

    An explicit path must exist. Without one, the default location is tried
    and the built-in defaults are used if nothing is there.
    """
    if config_path is not None:
        return AppConfig.load_from_yaml(config_path).with_env_overrides()

    default_path = get_default_config_path()
    if default_path.exists():
        return AppConfig.load_from_yaml(default_path).with_env_overrides()

    logger.info("No config file at %s, using built-in defaults", default_path)
    return AppConfig().with_env_overrides()
