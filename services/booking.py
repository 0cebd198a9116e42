"""Расчет свободных слотов для записи"""
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

from config import TIME_SLOTS

DATE_FORMAT = "%Y-%m-%d"


class BookingError(Exception):
    """Запись невозможна"""


def available_slots(booked: Iterable[str], all_slots: Optional[List[str]] = None) -> List[str]:
    """Все слоты минус занятые, в исходном порядке"""
    if all_slots is None:
        all_slots = TIME_SLOTS
    booked = set(booked)
    return [slot for slot in all_slots if slot not in booked]


def parse_date(value: str) -> date:
    """Разбор даты формата YYYY-MM-DD"""
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except (TypeError, ValueError):
        raise BookingError(f"Invalid date: {value!r}")


def upcoming_dates(today: date, days: int) -> List[str]:
    """Даты для записи начиная с сегодняшней"""
    return [(today + timedelta(days=offset)).strftime(DATE_FORMAT) for offset in range(days)]


def validate_booking(
    selected_date: Optional[str],
    time_slot: Optional[str],
    booked: Iterable[str],
    all_slots: Optional[List[str]] = None
) -> None:
    """Проверка выбранных даты и времени перед записью"""
    if all_slots is None:
        all_slots = TIME_SLOTS
    if not selected_date or not time_slot:
        raise BookingError("Please select both date and time.")

    parse_date(selected_date)

    if time_slot not in all_slots:
        raise BookingError(f"Unknown time slot: {time_slot}")
    if time_slot in set(booked):
        raise BookingError("This time slot is already booked.")


def check_booking_window(selected_date: str, today: date, days: int) -> date:
    """Дата записи должна попадать в [today, today + days)"""
    booking_date = parse_date(selected_date)
    if not today <= booking_date < today + timedelta(days=days):
        raise BookingError("This date is not available for booking.")
    return booking_date
