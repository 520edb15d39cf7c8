# backend/salon_booking/services/availability/config.py
"""
Engine configuration for availability and booking validation.
"""

from dataclasses import dataclass
from datetime import date, datetime, time
from functools import lru_cache
from zoneinfo import ZoneInfo

from ...config import settings


@dataclass(frozen=True)
class BookingConfig:
    """
    Configuration for the availability engine.

    Attributes:
        slot_step_minutes: Candidate start grid step (15/30/60). Server policy,
            never chosen per request.
        horizon_days: Default number of days scanned by find_nearest
        max_horizon_days: Hard cap on any requested horizon
        cache_ttl_seconds: Redis TTL for cached slot listings
        permissive_qualifications: Employees without declared services
            count as qualified for every service
        timezone: Salon timezone for "now" and calendar days
    """
    slot_step_minutes: int = 30
    horizon_days: int = 30
    max_horizon_days: int = 90
    cache_ttl_seconds: int = 300
    permissive_qualifications: bool = True
    timezone: str = "UTC"

    def __post_init__(self):
        """Validate configuration."""
        if self.slot_step_minutes not in (15, 30, 60):
            raise ValueError(f"slot_step_minutes must be 15, 30, or 60, got {self.slot_step_minutes}")
        if self.horizon_days < 1 or self.max_horizon_days < 1:
            raise ValueError("horizon_days and max_horizon_days must be positive")
        if self.horizon_days > self.max_horizon_days:
            raise ValueError(
                f"horizon_days ({self.horizon_days}) exceeds max_horizon_days ({self.max_horizon_days})"
            )

    def now(self) -> datetime:
        """Current salon-local wall time (naive)."""
        return datetime.now(ZoneInfo(self.timezone)).replace(tzinfo=None)

    def to_local(self, value: datetime) -> datetime:
        """Convert an aware datetime to naive salon-local time. Naive input is kept as is."""
        if value.tzinfo is None:
            return value
        return value.astimezone(ZoneInfo(self.timezone)).replace(tzinfo=None)

    def normalize_start(self, value: datetime) -> datetime:
        """Salon-local start on the minute grid: seconds and microseconds are dropped."""
        return self.to_local(value).replace(second=0, microsecond=0)

    def clamp_horizon(self, horizon_days: int | None) -> int:
        if horizon_days is None:
            return self.horizon_days
        return max(1, min(horizon_days, self.max_horizon_days))


def weekday_index(target_date: date) -> int:
    """Weekday as stored in working_hours: 0 = Sunday … 6 = Saturday."""
    return (target_date.weekday() + 1) % 7


def slot_minutes(time_str: str) -> int:
    """"HH:MM" to minutes since midnight."""
    hour, minute = time_str.split(":")
    return int(hour) * 60 + int(minute)


def format_slot_time(value: datetime | time) -> str:
    """Format a slot start as "HH:MM"."""
    return f"{value.hour:02d}:{value.minute:02d}"


@lru_cache
def get_booking_config() -> BookingConfig:
    """
    Get engine configuration (singleton), built from application settings.
    """
    return BookingConfig(
        slot_step_minutes=settings.slot_step_minutes,
        horizon_days=settings.horizon_days,
        max_horizon_days=settings.max_horizon_days,
        cache_ttl_seconds=settings.cache_ttl_seconds,
        permissive_qualifications=settings.permissive_qualifications,
        timezone=settings.timezone,
    )
