from datetime import date, time

import pytest

from salon_booking.models import Holidays
from salon_booking.schemas.holidays import HolidayCreate, HolidayUpdate
from salon_booking.schemas.working_hours import WorkingHourItem
from salon_booking.services import calendar_rules
from salon_booking.services.availability import list_slots
from salon_booking.services.availability.errors import (
    InvalidWorkingHours,
    NotFound,
    UnknownHolidayCountry,
)

from tests.conftest import DAY, NOW


def item(weekday, start=None, end=None, break_start=None, break_end=None):
    return WorkingHourItem(
        weekday=weekday,
        start_time=start,
        end_time=end,
        break_start=break_start,
        break_end=break_end,
    )


class TestWorkingHourRules:
    def test_valid_day(self):
        calendar_rules.validate_working_hour(item(1, time(9), time(18), time(12), time(13)))

    def test_closed_day(self):
        calendar_rules.validate_working_hour(item(0))

    @pytest.mark.parametrize("bad", [
        item(1, time(9)),
        item(1, time(18), time(9)),
        item(1, time(9), time(9)),
        item(1, time(9), time(18), time(12)),
        item(1, time(9), time(18), time(13), time(12)),
        item(1, time(9), time(18), time(8), time(10)),
        item(1, time(9), time(18), time(17), time(19)),
        item(0, None, None, time(12), time(13)),
    ])
    def test_invalid_day(self, bad):
        with pytest.raises(InvalidWorkingHours):
            calendar_rules.validate_working_hour(bad)


class TestReplaceWorkingHours:
    def test_replace_all(self, db_session, salon):
        rows = calendar_rules.replace_working_hours(
            db_session, salon.id, [item(2, time(10), time(14)), item(0)]
        )

        assert [r.weekday for r in rows] == [0, 2]
        assert rows[1].start_time == time(10)
        assert rows[1].break_start is None

    def test_duplicate_weekday(self, db_session, salon):
        with pytest.raises(InvalidWorkingHours):
            calendar_rules.replace_working_hours(
                db_session, salon.id, [item(1, time(9), time(18)), item(1, time(10), time(12))]
            )
        assert len(calendar_rules.list_working_hours(db_session, salon.id)) == 7

    def test_replace_changes_slots_and_cache(self, db_session, config, redis, salon, employee, service):
        before = list_slots(db_session, salon.id, service.id, DAY, config=config, redis=redis, now=NOW)
        assert len(before["slots"]) == 16

        # DAY is a Tuesday (weekday 2)
        calendar_rules.replace_working_hours(
            db_session, salon.id, [item(2, time(10), time(12))], redis=redis
        )

        after = list_slots(db_session, salon.id, service.id, DAY, config=config, redis=redis, now=NOW)
        assert [s["time"] for s in after["slots"]] == ["10:00", "10:30", "11:00", "11:30"]

    def test_other_salon_untouched(self, db_session, salon, other_salon):
        calendar_rules.replace_working_hours(db_session, salon.id, [])
        assert calendar_rules.list_working_hours(db_session, salon.id) == []
        assert len(calendar_rules.list_working_hours(db_session, other_salon.id)) == 7


class TestHolidays:
    def test_create_is_upsert_by_date(self, db_session, salon):
        first = calendar_rules.create_holiday(db_session, salon.id, HolidayCreate(date=DAY, name="Inventory"))
        second = calendar_rules.create_holiday(
            db_session, salon.id, HolidayCreate(date=DAY, name="Renovation", is_active=False)
        )

        assert first.id == second.id
        assert second.name == "Renovation"
        assert not second.is_active

    def test_toggle_and_delete(self, db_session, config, salon, employee, service):
        obj = calendar_rules.create_holiday(db_session, salon.id, HolidayCreate(date=DAY, name="Inventory"))
        assert list_slots(db_session, salon.id, service.id, DAY, config=config, now=NOW)["slots"] == []

        calendar_rules.update_holiday(db_session, salon.id, obj.id, HolidayUpdate(is_active=False))
        assert len(list_slots(db_session, salon.id, service.id, DAY, config=config, now=NOW)["slots"]) == 16

        calendar_rules.delete_holiday(db_session, salon.id, obj.id)
        with pytest.raises(NotFound):
            calendar_rules.get_holiday(db_session, salon.id, obj.id)

    def test_list_by_year(self, db_session, salon):
        calendar_rules.create_holiday(db_session, salon.id, HolidayCreate(date=date(2030, 3, 1), name="A"))
        calendar_rules.create_holiday(db_session, salon.id, HolidayCreate(date=date(2031, 3, 1), name="B"))

        assert [h.name for h in calendar_rules.list_holidays(db_session, salon.id, 2030)] == ["A"]
        assert len(calendar_rules.list_holidays(db_session, salon.id)) == 2


class TestImportNationalHolidays:
    def test_import(self, db_session, salon):
        imported, skipped = calendar_rules.import_national_holidays(db_session, salon.id, 2030, "FR")

        dates = {h.date for h in imported}
        assert date(2030, 1, 1) in dates
        assert date(2030, 7, 14) in dates
        assert skipped == 0
        assert all(h.type == "NATIONAL" and h.is_active for h in imported)

    def test_existing_dates_are_kept(self, db_session, salon):
        calendar_rules.create_holiday(
            db_session, salon.id, HolidayCreate(date=date(2030, 7, 14), name="Closed for summer")
        )

        imported, skipped = calendar_rules.import_national_holidays(db_session, salon.id, 2030, "FR")

        assert skipped == 1
        assert date(2030, 7, 14) not in {h.date for h in imported}
        kept = db_session.query(Holidays).filter_by(salon_id=salon.id, date=date(2030, 7, 14)).one()
        assert kept.type == "CUSTOM"

    def test_reimport_skips_everything(self, db_session, salon):
        imported, _ = calendar_rules.import_national_holidays(db_session, salon.id, 2030, "FR")
        again, skipped = calendar_rules.import_national_holidays(db_session, salon.id, 2030, "fr")

        assert again == []
        assert skipped == len(imported)

    def test_unknown_country(self, db_session, salon):
        with pytest.raises(UnknownHolidayCountry):
            calendar_rules.import_national_holidays(db_session, salon.id, 2030, "XX")
