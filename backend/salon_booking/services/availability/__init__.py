# backend/salon_booking/services/availability/__init__.py
"""
Availability & booking conflict engine.

intervals   - half-open interval math (overlaps / subtract / contains)
eligibility - is the salon open on a date, and when
calculator  - slot grid for one employee
availability - listing, nearest slot, dry-run check (Redis-cached listings)
validator   - authoritative checks on the reservation write path
"""

from .config import BookingConfig, get_booking_config
from .intervals import Interval, overlaps, subtract, contains
from .eligibility import DayEligibility, resolve_day
from .calculator import generate_slots
from .redis_store import SlotsRedisStore
from .invalidator import invalidate_salon_cache
from .availability import list_slots, find_nearest, find_available_employee, check_slot
from .validator import ValidationResult, validate_reservation

__all__ = [
    "BookingConfig",
    "get_booking_config",
    "Interval",
    "overlaps",
    "subtract",
    "contains",
    "DayEligibility",
    "resolve_day",
    "generate_slots",
    "SlotsRedisStore",
    "invalidate_salon_cache",
    "list_slots",
    "find_nearest",
    "find_available_employee",
    "check_slot",
    "ValidationResult",
    "validate_reservation",
]
