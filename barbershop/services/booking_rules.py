"""Slot availability and booking status rules.

Everything here is a pure function over data already loaded from the
database. Callers pass the current time in explicitly.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Iterable

from barbershop.core import config


class BookingStatus(str, Enum):
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    FINISHED = 'finished'


def to_local_naive(moment: datetime) -> datetime:
    """Bookings are stored as naive local time; convert aware datetimes to match."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone().replace(tzinfo=None)


def format_time_slot(moment: datetime) -> str:
    return moment.strftime(config.TIME_SLOT_FORMAT)


def is_catalog_time_slot(moment: datetime, time_slots: Iterable[str] = config.TIME_SLOTS) -> bool:
    if moment.second or moment.microsecond:
        return False
    return format_time_slot(moment) in time_slots


def get_day_bounds(day: date) -> tuple[datetime, datetime]:
    return datetime.combine(day, time.min), datetime.combine(day, time.max)


def get_available_time_slots(
    booked_times: Iterable[datetime],
    time_slots: Iterable[str] = config.TIME_SLOTS,
) -> list[str]:
    """Return the catalog slots whose ``HH:MM`` matches none of ``booked_times``.

    Every timestamp passed in counts as occupied; cancelled bookings have to
    be left out by the query that produces ``booked_times``.
    """
    occupied_slots = {format_time_slot(booked_time) for booked_time in booked_times}
    return [slot for slot in time_slots if slot not in occupied_slots]


def classify_booking_status(cancelled: bool | None, scheduled_at: datetime, now: datetime) -> BookingStatus:
    if cancelled:
        return BookingStatus.CANCELLED
    if scheduled_at >= now:
        return BookingStatus.CONFIRMED
    return BookingStatus.FINISHED


@dataclass
class BookingDashboard:
    total_bookings: int = 0
    total_revenue_in_cents: int = 0
    confirmed: list = field(default_factory=list)
    cancelled: list = field(default_factory=list)
    finished: list = field(default_factory=list)


def build_booking_dashboard(bookings: Iterable, now: datetime) -> BookingDashboard:
    """Group bookings by status and total the revenue of the non-cancelled ones.

    ``bookings`` are objects exposing ``cancelled``, ``date`` and
    ``service.price_in_cents``; input order is kept inside each group.
    """
    dashboard = BookingDashboard()

    for booking in bookings:
        dashboard.total_bookings += 1
        status = classify_booking_status(booking.cancelled, booking.date, now)

        if status is BookingStatus.CANCELLED:
            dashboard.cancelled.append(booking)
            continue

        dashboard.total_revenue_in_cents += booking.service.price_in_cents
        if status is BookingStatus.CONFIRMED:
            dashboard.confirmed.append(booking)
        else:
            dashboard.finished.append(booking)

    return dashboard
