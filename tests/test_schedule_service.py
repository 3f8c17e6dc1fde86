import pytest

from app.models.availability import BookingSettings, DaySchedule
from app.services.exceptions import BookingValidationError, InvalidDayError, InvalidTimeFormatError
from app.services.schedule.schedule_service import ScheduleService
from app.utils.timezone import DAY_NAMES


class TestGetSchedule:

    def test_unconfigured_store_returns_default_week(self, db):
        schedule = ScheduleService.get_schedule(db)

        assert list(schedule) == list(DAY_NAMES)
        assert schedule["sunday"] == {"is_working": False, "time_slots": []}
        assert schedule["saturday"]["is_working"] is False
        assert schedule["monday"] == {
            "is_working": True,
            "time_slots": ["12:30", "1:30", "2:30", "3:30", "4:30", "5:30"],
        }

    def test_reading_does_not_write(self, db):
        ScheduleService.get_schedule(db)
        assert db.query(DaySchedule).count() == 0

    def test_missing_day_in_configured_week_is_not_working(self, db):
        db.add(DaySchedule(day_of_week="monday", is_working=True, time_slots=["9:00"]))
        db.commit()

        schedule = ScheduleService.get_schedule(db)

        assert schedule["monday"] == {"is_working": True, "time_slots": ["9:00"]}
        assert schedule["tuesday"] == {"is_working": False, "time_slots": []}
        assert len(schedule) == 7


class TestUpdateDay:

    def test_slots_are_stored_in_business_order(self, db):
        result = ScheduleService.update_day(db, "monday", is_working=True, time_slots=["2:30", "9:00"])

        assert result["time_slots"] == ["9:00", "2:30"]
        assert ScheduleService.get_day(db, "monday").time_slots == ["9:00", "2:30"]

    def test_first_update_persists_the_whole_week(self, db):
        ScheduleService.update_day(db, "sunday", is_working=True, time_slots=["10:00"])

        assert db.query(DaySchedule).count() == 7
        assert ScheduleService.get_schedule(db)["monday"]["is_working"] is True

    def test_day_name_is_case_insensitive(self, db):
        ScheduleService.update_day(db, "Friday", is_working=False)
        assert ScheduleService.get_day(db, "friday").is_working is False

    def test_omitted_fields_keep_stored_values(self, db):
        ScheduleService.update_day(db, "monday", is_working=True, time_slots=["9:00", "10:00"])
        ScheduleService.update_day(db, "monday", is_working=False)

        day = ScheduleService.get_day(db, "monday")
        assert day.is_working is False
        assert day.time_slots == ["9:00", "10:00"]

    def test_duplicate_spellings_are_removed(self, db):
        result = ScheduleService.update_day(db, "monday", time_slots=["9:00", "09:00", "10:00"])
        assert result["time_slots"] == ["9:00", "10:00"]

    def test_invalid_day(self, db):
        with pytest.raises(InvalidDayError) as exc_info:
            ScheduleService.update_day(db, "funday", is_working=True)
        assert exc_info.value.code == "INVALID_DAY"

    def test_malformed_slot_rejects_whole_update(self, db):
        ScheduleService.update_day(db, "monday", time_slots=["9:00"])

        with pytest.raises(InvalidTimeFormatError):
            ScheduleService.update_day(db, "monday", time_slots=["10:00", "25:00"])

        assert ScheduleService.get_day(db, "monday").time_slots == ["9:00"]


class TestBookingSettings:

    def test_defaults_without_writing(self, db):
        settings_row = ScheduleService.get_booking_settings(db)

        assert settings_row.min_advance_booking_hours == 24
        assert settings_row.max_advance_booking_days == 30
        assert settings_row.is_booking_enabled is True
        assert db.query(BookingSettings).count() == 0

    def test_update_persists(self, db):
        ScheduleService.update_booking_settings(db, is_booking_enabled=False, max_advance_booking_days=60)

        settings_row = ScheduleService.get_booking_settings(db)
        assert settings_row.is_booking_enabled is False
        assert settings_row.max_advance_booking_days == 60
        assert settings_row.min_advance_booking_hours == 24
        assert db.query(BookingSettings).count() == 1

    def test_rejects_negative_notice(self, db):
        with pytest.raises(BookingValidationError):
            ScheduleService.update_booking_settings(db, min_advance_booking_hours=-1)
