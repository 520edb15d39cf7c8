# backend/salon_booking/services/availability/errors.py
"""
Typed booking errors.

Validation rules return these as values; the write path raises them and
the HTTP layer renders each one as a specific message and status code.
"""

from datetime import date, datetime, time


class BookingError(Exception):
    code = "booking_error"
    status_code = 422

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = {k: _jsonable(v) for k, v in details.items() if v is not None}

    def to_dict(self) -> dict:
        return {
            "success": False,
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


def _jsonable(value):
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return value


class ClosedDay(BookingError):
    """Holiday or a weekday without working hours."""
    code = "closed_day"
    status_code = 409


class OutsideWorkingHours(BookingError):
    code = "outside_working_hours"
    status_code = 409


class DuringBreak(OutsideWorkingHours):
    code = "during_break"


class Conflict(BookingError):
    """Overlap with an existing reservation of the same employee."""
    code = "conflict"
    status_code = 409

    def __init__(
        self,
        message: str,
        reservation_id: int | None = None,
        start_at: datetime | None = None,
        end_at: datetime | None = None,
    ):
        super().__init__(
            message,
            reservation_id=reservation_id,
            start_at=start_at,
            end_at=end_at,
        )
        self.reservation_id = reservation_id
        self.start_at = start_at
        self.end_at = end_at


class UnknownEmployeeOrService(BookingError):
    code = "unknown_employee_or_service"
    status_code = 404


class InvalidDuration(BookingError):
    code = "invalid_duration"


class NoSlotAvailable(BookingError):
    """Nearest-slot search exhausted its horizon."""
    code = "no_slot_available"
    status_code = 404


class InvalidStatusTransition(BookingError):
    code = "invalid_status_transition"
    status_code = 409


class InvalidWorkingHours(BookingError):
    code = "invalid_working_hours"


class InvalidReservation(BookingError):
    code = "invalid_reservation"


class NotFound(BookingError):
    code = "not_found"
    status_code = 404


class UnknownHolidayCountry(BookingError):
    code = "unknown_holiday_country"
