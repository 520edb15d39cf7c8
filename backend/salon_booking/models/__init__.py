from .core import (
    BLOCKING_STATUSES,
    HOLIDAY_TYPES,
    RESERVATION_STATUSES,
    RESERVATION_TYPES,
    Base,
    Clients,
    Employees,
    Holidays,
    Reservations,
    Salons,
    Services,
    WorkingHours,
    metadata,
    t_employee_services,
)

__all__ = [
    "BLOCKING_STATUSES",
    "HOLIDAY_TYPES",
    "RESERVATION_STATUSES",
    "RESERVATION_TYPES",
    "Base",
    "Clients",
    "Employees",
    "Holidays",
    "Reservations",
    "Salons",
    "Services",
    "WorkingHours",
    "metadata",
    "t_employee_services",
]
