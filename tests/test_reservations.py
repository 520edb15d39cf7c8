from datetime import datetime, timedelta

import pytest

from salon_booking.schemas.reservations import (
    ReservationCreate,
    ReservationStatusUpdate,
    ReservationUpdate,
)
from salon_booking.services.availability.errors import (
    ClosedDay,
    Conflict,
    DuringBreak,
    InvalidReservation,
    InvalidStatusTransition,
    NotFound,
    UnknownEmployeeOrService,
)
from salon_booking.services.reservations import (
    can_transition,
    change_status,
    create_reservation,
    get_reservation,
    list_reservations,
    reschedule_reservation,
)

from tests.conftest import DAY, NOW, at


def manual(service, start, employee=None, **kwargs):
    return ReservationCreate(
        service_id=service.id,
        employee_id=employee.id if employee else None,
        start_at=start,
        type="manual",
        client_full_name="Walk-in Client",
        client_phone="+212600000000",
        **kwargs,
    )


class TestCreate:
    def test_end_is_computed_from_service(self, db_session, config, salon, employee, long_service):
        obj = create_reservation(
            db_session, salon.id, manual(long_service, at(10), employee), config=config, now=NOW
        )

        assert obj.id is not None
        assert obj.start_at == at(10)
        assert obj.end_at == at(11)
        assert obj.status == "CONFIRMED"
        assert obj.employee_id == employee.id

    def test_conflict_example(self, db_session, config, salon, employee, long_service):
        create_reservation(db_session, salon.id, manual(long_service, at(10), employee), config=config, now=NOW)

        with pytest.raises(Conflict):
            create_reservation(
                db_session, salon.id, manual(long_service, at(10, 30), employee), config=config, now=NOW
            )

        adjacent = create_reservation(
            db_session, salon.id, manual(long_service, at(11), employee), config=config, now=NOW
        )
        assert adjacent.end_at == at(12)

    def test_auto_assigns_free_employee(
        self, db_session, config, salon, employee, second_employee, long_service
    ):
        first = create_reservation(db_session, salon.id, manual(long_service, at(10)), config=config, now=NOW)
        second = create_reservation(db_session, salon.id, manual(long_service, at(10)), config=config, now=NOW)

        assert first.employee_id == employee.id
        assert second.employee_id == second_employee.id

        with pytest.raises(Conflict):
            create_reservation(db_session, salon.id, manual(long_service, at(10)), config=config, now=NOW)

    def test_auto_assign_reports_calendar_reason(self, db_session, config, salon, employee, service):
        with pytest.raises(DuringBreak):
            create_reservation(db_session, salon.id, manual(service, at(12)), config=config, now=NOW)

    def test_holiday_is_rejected(self, db_session, config, salon, employee, service, add_holiday):
        add_holiday()
        with pytest.raises(ClosedDay):
            create_reservation(db_session, salon.id, manual(service, at(10), employee), config=config, now=NOW)

    def test_cancelled_slot_can_be_rebooked(self, db_session, config, salon, employee, service, add_reservation):
        add_reservation(employee, at(10), at(10, 30), status="CANCELLED")
        obj = create_reservation(db_session, salon.id, manual(service, at(10), employee), config=config, now=NOW)
        assert obj.status == "CONFIRMED"

    def test_manual_requires_name_and_phone(self, db_session, config, salon, employee, service):
        data = ReservationCreate(service_id=service.id, start_at=at(10), type="manual")
        with pytest.raises(InvalidReservation):
            create_reservation(db_session, salon.id, data, config=config, now=NOW)

    def test_online_requires_existing_client(self, db_session, config, salon, employee, service):
        with pytest.raises(InvalidReservation):
            create_reservation(
                db_session, salon.id,
                ReservationCreate(service_id=service.id, start_at=at(10)),
                config=config, now=NOW,
            )
        with pytest.raises(NotFound):
            create_reservation(
                db_session, salon.id,
                ReservationCreate(service_id=service.id, start_at=at(10), client_id=999),
                config=config, now=NOW,
            )

    def test_online_booking(self, db_session, config, salon, employee, service, registered_client):
        data = ReservationCreate(
            service_id=service.id, start_at=at(15), client_id=registered_client.id, status="REQUESTED"
        )
        obj = create_reservation(db_session, salon.id, data, config=config, now=NOW)

        assert obj.type == "online"
        assert obj.status == "REQUESTED"
        assert obj.client_id == registered_client.id

    def test_online_booking_in_past_is_rejected(self, db_session, config, salon, employee, service, registered_client):
        data = ReservationCreate(service_id=service.id, start_at=at(10), client_id=registered_client.id)
        with pytest.raises(InvalidReservation):
            create_reservation(db_session, salon.id, data, config=config, now=at(11))

    def test_manual_booking_may_be_in_past(self, db_session, config, salon, employee, service):
        obj = create_reservation(
            db_session, salon.id, manual(service, at(10), employee), config=config, now=at(11)
        )
        assert obj.start_at == at(10)

    def test_seconds_are_dropped(self, db_session, config, salon, employee, service):
        obj = create_reservation(
            db_session, salon.id, manual(service, at(10).replace(second=42), employee), config=config, now=NOW
        )
        assert obj.start_at == at(10)

    def test_unknown_employee(self, db_session, config, salon, employee, service):
        with pytest.raises(UnknownEmployeeOrService):
            create_reservation(
                db_session, salon.id,
                manual(service, at(10)).model_copy(update={"employee_id": 999}),
                config=config, now=NOW,
            )

    def test_failed_create_writes_nothing(self, db_session, config, salon, employee, service):
        with pytest.raises(DuringBreak):
            create_reservation(db_session, salon.id, manual(service, at(12), employee), config=config, now=NOW)
        assert list_reservations(db_session, salon.id) == []


class TestReschedule:
    def test_move_overlapping_own_interval(self, db_session, config, salon, employee, long_service):
        obj = create_reservation(db_session, salon.id, manual(long_service, at(10), employee), config=config, now=NOW)

        moved = reschedule_reservation(
            db_session, salon.id, obj.id, ReservationUpdate(start_at=at(10, 30)), config=config, now=NOW
        )

        assert moved.start_at == at(10, 30)
        assert moved.end_at == at(11, 30)

    def test_keeps_original_duration(self, db_session, config, salon, employee, long_service):
        obj = create_reservation(db_session, salon.id, manual(long_service, at(10), employee), config=config, now=NOW)
        long_service.duration_min = 90
        db_session.commit()

        moved = reschedule_reservation(
            db_session, salon.id, obj.id, ReservationUpdate(start_at=at(14)), config=config, now=NOW
        )

        assert moved.end_at - moved.start_at == timedelta(minutes=60)

    def test_move_onto_other_reservation(self, db_session, config, salon, employee, long_service):
        create_reservation(db_session, salon.id, manual(long_service, at(14), employee), config=config, now=NOW)
        obj = create_reservation(db_session, salon.id, manual(long_service, at(10), employee), config=config, now=NOW)

        with pytest.raises(Conflict):
            reschedule_reservation(
                db_session, salon.id, obj.id, ReservationUpdate(start_at=at(14, 30)), config=config, now=NOW
            )

        assert get_reservation(db_session, salon.id, obj.id).start_at == at(10)

    def test_move_to_other_employee(
        self, db_session, config, salon, employee, second_employee, long_service
    ):
        obj = create_reservation(db_session, salon.id, manual(long_service, at(10), employee), config=config, now=NOW)

        moved = reschedule_reservation(
            db_session, salon.id, obj.id, ReservationUpdate(employee_id=second_employee.id), config=config, now=NOW
        )

        assert moved.employee_id == second_employee.id
        assert moved.start_at == at(10)

    def test_cancelled_cannot_be_moved(self, db_session, config, salon, employee, service, add_reservation):
        obj = add_reservation(employee, at(10), at(10, 30), status="CANCELLED")

        with pytest.raises(InvalidStatusTransition):
            reschedule_reservation(
                db_session, salon.id, obj.id, ReservationUpdate(start_at=at(11)), config=config, now=NOW
            )

    def test_cannot_move_into_past(self, db_session, config, salon, employee, service):
        obj = create_reservation(db_session, salon.id, manual(service, at(15), employee), config=config, now=NOW)

        with pytest.raises(InvalidReservation):
            reschedule_reservation(
                db_session, salon.id, obj.id,
                ReservationUpdate(start_at=datetime(2030, 1, 1, 10)),
                config=config, now=NOW,
            )


class TestStatus:
    def test_transition_table(self):
        assert can_transition("REQUESTED", "CONFIRMED")
        assert can_transition("REQUESTED", "CANCELLED")
        assert can_transition("CONFIRMED", "COMPLETED")
        assert can_transition("CONFIRMED", "CANCELLED")
        assert not can_transition("REQUESTED", "COMPLETED")
        assert not can_transition("CANCELLED", "CONFIRMED")
        assert not can_transition("COMPLETED", "CANCELLED")

    def test_cancel_frees_slot(self, db_session, config, salon, employee, service):
        obj = create_reservation(db_session, salon.id, manual(service, at(10), employee), config=config, now=NOW)

        cancelled = change_status(
            db_session, salon.id, obj.id,
            ReservationStatusUpdate(status="CANCELLED", cancel_reason="Client called"),
        )
        assert cancelled.status == "CANCELLED"
        assert cancelled.cancel_reason == "Client called"

        again = create_reservation(db_session, salon.id, manual(service, at(10), employee), config=config, now=NOW)
        assert again.id != obj.id

    def test_terminal_status(self, db_session, config, salon, employee, service):
        obj = create_reservation(db_session, salon.id, manual(service, at(10), employee), config=config, now=NOW)
        change_status(db_session, salon.id, obj.id, ReservationStatusUpdate(status="COMPLETED"))

        with pytest.raises(InvalidStatusTransition):
            change_status(db_session, salon.id, obj.id, ReservationStatusUpdate(status="CANCELLED"))

    def test_unknown_reservation(self, db_session, salon):
        with pytest.raises(NotFound):
            change_status(db_session, salon.id, 999, ReservationStatusUpdate(status="CONFIRMED"))


class TestList:
    def test_filters(self, db_session, salon, employee, second_employee, add_reservation):
        add_reservation(employee, at(10), at(11))
        add_reservation(second_employee, at(10), at(11), status="CANCELLED")
        add_reservation(employee, at(10, day=DAY + timedelta(days=1)), at(11, day=DAY + timedelta(days=1)))

        assert len(list_reservations(db_session, salon.id)) == 3
        assert len(list_reservations(db_session, salon.id, employee_id=employee.id)) == 2
        assert len(list_reservations(db_session, salon.id, status="CANCELLED")) == 1
        assert len(list_reservations(db_session, salon.id, on_date=DAY)) == 2
        assert len(list_reservations(db_session, salon.id, date_from=DAY + timedelta(days=1))) == 1

    def test_other_salon_is_hidden(self, db_session, salon, other_salon, employee, add_reservation):
        obj = add_reservation(employee, at(10), at(11))

        assert list_reservations(db_session, other_salon.id) == []
        with pytest.raises(NotFound):
            get_reservation(db_session, other_salon.id, obj.id)
