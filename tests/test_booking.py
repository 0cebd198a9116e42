from datetime import date

import pytest

from config import TIME_SLOTS
from services.booking import (
    BookingError,
    available_slots,
    check_booking_window,
    parse_date,
    upcoming_dates,
    validate_booking,
)


def test_available_slots_exclude_booked():
    booked = ["9:00 AM", "1:30 PM", "3:30 PM"]
    slots = available_slots(booked)

    assert len(TIME_SLOTS) == 12
    assert len(slots) == 9
    assert not set(slots) & set(booked)


def test_available_slots_keep_order():
    assert available_slots(["9:30 AM"], ["9:00 AM", "9:30 AM", "10:00 AM"]) == ["9:00 AM", "10:00 AM"]


def test_no_bookings_means_all_slots():
    assert available_slots([]) == TIME_SLOTS


def test_booked_slot_rejected():
    with pytest.raises(BookingError, match="already booked"):
        validate_booking("2026-10-20", "9:00 AM", ["9:00 AM"])


@pytest.mark.parametrize("selected_date, time_slot", [
    ("", "9:00 AM"),
    ("2026-10-20", None),
    (None, None),
])
def test_missing_date_or_time_rejected(selected_date, time_slot):
    with pytest.raises(BookingError, match="select both"):
        validate_booking(selected_date, time_slot, [])


def test_unknown_slot_rejected():
    with pytest.raises(BookingError):
        validate_booking("2026-10-20", "12:00 PM", [])


def test_free_slot_accepted():
    validate_booking("2026-10-20", "10:00 AM", ["9:00 AM"])


def test_parse_date():
    assert parse_date("2026-10-20") == date(2026, 10, 20)
    with pytest.raises(BookingError):
        parse_date("20.10.2026")


def test_upcoming_dates():
    assert upcoming_dates(date(2026, 12, 30), 3) == ["2026-12-30", "2026-12-31", "2027-01-01"]


def test_booking_window_accepts_today_and_last_day():
    today = date(2026, 10, 18)

    assert check_booking_window("2026-10-18", today, 14) == today
    assert check_booking_window("2026-10-31", today, 14) == date(2026, 10, 31)


@pytest.mark.parametrize("selected_date", ["2026-10-17", "2026-11-01", "2025-01-01"])
def test_booking_window_rejects_outside_dates(selected_date):
    with pytest.raises(BookingError):
        check_booking_window(selected_date, date(2026, 10, 18), 14)
