from datetime import date, datetime, time, timedelta

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from barbershop.auth import jwt_handler
from barbershop.core.config import TIME_SLOTS
from barbershop.models.booking import Booking
from barbershop.routes.booking_routes import (
    cancel_booking,
    create_booking,
    get_booked_times,
    list_available_time_slots,
    list_my_bookings,
)
from barbershop.routes.schemas import CreateBookingRequest
from barbershop.services.booking_rules import BookingStatus
from factories import add_barbershop, add_booking, add_service, add_user


def _in_days(days: int, hour: int, minute: int = 0) -> datetime:
    return datetime.combine(date.today() + timedelta(days=days), time(hour, minute))


@pytest.fixture
def shop(db):
    owner = add_user(db, 'owner@example.com', name='Owner')
    customer = add_user(db, 'customer@example.com')
    barbershop = add_barbershop(db, owner)
    service = add_service(db, barbershop)
    return owner, customer, barbershop, service


def test_available_time_slots_exclude_booked_times(db, shop) -> None:
    _, customer, barbershop, service = shop
    day = date(2026, 3, 10)
    add_booking(db, service, customer, datetime(2026, 3, 10, 9, 0))
    add_booking(db, service, customer, datetime(2026, 3, 10, 13, 30))

    response = list_available_time_slots(barbershop_id=barbershop.id, day=day, db=db)

    assert response.barbershop_id == barbershop.id
    assert response.date == day
    assert len(response.time_slots) == 17
    assert response.time_slots == [slot for slot in TIME_SLOTS if slot not in {'09:00', '13:30'}]


def test_available_time_slots_keep_cancelled_booking_times_open(db, shop) -> None:
    _, customer, barbershop, service = shop
    add_booking(db, service, customer, datetime(2026, 3, 10, 10, 0), cancelled=True)

    response = list_available_time_slots(barbershop_id=barbershop.id, day=date(2026, 3, 10), db=db)

    assert '10:00' in response.time_slots
    assert response.time_slots == TIME_SLOTS


def test_available_time_slots_ignore_other_days_and_barbershops(db, shop) -> None:
    owner, customer, barbershop, service = shop
    other_shop = add_barbershop(db, owner, name='Classic Cuts')
    other_service = add_service(db, other_shop)
    add_booking(db, service, customer, datetime(2026, 3, 11, 9, 0))
    add_booking(db, other_service, customer, datetime(2026, 3, 10, 9, 0))

    response = list_available_time_slots(barbershop_id=barbershop.id, day=date(2026, 3, 10), db=db)

    assert response.time_slots == TIME_SLOTS


def test_get_booked_times_includes_bookings_at_day_edges(db, shop) -> None:
    _, customer, barbershop, service = shop
    add_booking(db, service, customer, datetime(2026, 3, 10, 0, 0))
    add_booking(db, service, customer, datetime(2026, 3, 10, 23, 59))

    booked = get_booked_times(barbershop.id, date(2026, 3, 10), db)

    assert sorted(booked) == [datetime(2026, 3, 10, 0, 0), datetime(2026, 3, 10, 23, 59)]


def test_create_booking_request_requires_service_id() -> None:
    with pytest.raises(ValidationError):
        CreateBookingRequest(service_id='   ', date=datetime(2026, 3, 10, 9, 0))


def test_create_booking_stores_booking_for_service_barbershop(db, shop) -> None:
    _, customer, barbershop, service = shop
    when = _in_days(2, 10, 30)

    response = create_booking(
        data=CreateBookingRequest(service_id=service.id, date=when),
        current_user=customer,
        db=db,
    )

    assert response.status is BookingStatus.CONFIRMED
    assert response.date == when
    assert response.barbershop.id == barbershop.id
    assert response.service.price_in_cents == 5000

    stored = db.query(Booking).filter(Booking.id == response.id).one()
    assert stored.user_id == customer.id
    assert stored.cancelled is False
    assert stored.cancelled_at is None


def test_create_booking_rejects_time_outside_catalog(db, shop) -> None:
    _, customer, _, service = shop

    with pytest.raises(HTTPException) as exception_info:
        create_booking(
            data=CreateBookingRequest(service_id=service.id, date=_in_days(2, 10, 15)),
            current_user=customer,
            db=db,
        )

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == 'Bookings must start on one of the available time slots.'


def test_create_booking_rejects_past_time(db, shop) -> None:
    _, customer, _, service = shop

    with pytest.raises(HTTPException) as exception_info:
        create_booking(
            data=CreateBookingRequest(service_id=service.id, date=_in_days(-1, 10, 0)),
            current_user=customer,
            db=db,
        )

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == 'Bookings must be scheduled in the future.'


def test_create_booking_returns_not_found_for_unknown_service(db, shop) -> None:
    _, customer, _, _ = shop

    with pytest.raises(HTTPException) as exception_info:
        create_booking(
            data=CreateBookingRequest(service_id='missing', date=_in_days(2, 10, 0)),
            current_user=customer,
            db=db,
        )

    assert exception_info.value.status_code == 404


def test_create_booking_rejects_taken_slot(db, shop) -> None:
    _, customer, barbershop, service = shop
    other_service = add_service(db, barbershop, name='Beard', price_in_cents=4000)
    when = _in_days(2, 11, 0)
    add_booking(db, service, customer, when)

    with pytest.raises(HTTPException) as exception_info:
        create_booking(
            data=CreateBookingRequest(service_id=other_service.id, date=when),
            current_user=customer,
            db=db,
        )

    assert exception_info.value.status_code == 409
    assert exception_info.value.detail == 'This time slot is already booked.'


def test_create_booking_reuses_slot_freed_by_cancellation(db, shop) -> None:
    _, customer, _, service = shop
    when = _in_days(2, 11, 0)
    add_booking(db, service, customer, when, cancelled=True)

    response = create_booking(
        data=CreateBookingRequest(service_id=service.id, date=when),
        current_user=customer,
        db=db,
    )

    assert response.status is BookingStatus.CONFIRMED


def test_list_my_bookings_returns_newest_first_with_status(db, shop) -> None:
    owner, customer, _, service = shop
    past = add_booking(db, service, customer, _in_days(-3, 9, 0))
    upcoming = add_booking(db, service, customer, _in_days(3, 9, 0))
    add_booking(db, service, owner, _in_days(4, 9, 0))

    response = list_my_bookings(current_user=customer, db=db)

    assert [booking.id for booking in response] == [upcoming.id, past.id]
    assert [booking.status for booking in response] == [BookingStatus.CONFIRMED, BookingStatus.FINISHED]
    assert all(booking.user is None for booking in response)


def test_cancel_booking_by_customer_sets_cancellation_timestamp(db, shop) -> None:
    _, customer, _, service = shop
    booking = add_booking(db, service, customer, _in_days(2, 15, 0))

    response = cancel_booking(booking_id=booking.id, current_user=customer, db=db)

    assert response.status is BookingStatus.CANCELLED
    assert response.cancelled is True
    assert response.cancelled_at is not None
    db.refresh(booking)
    assert booking.cancelled is True
    assert booking.cancelled_at is not None


def test_cancel_booking_by_barbershop_owner_includes_customer(db, shop) -> None:
    owner, customer, _, service = shop
    booking = add_booking(db, service, customer, _in_days(2, 15, 0))

    response = cancel_booking(booking_id=booking.id, current_user=owner, db=db)

    assert response.status is BookingStatus.CANCELLED
    assert response.user.email == 'customer@example.com'


def test_cancel_booking_rejects_unrelated_user(db, shop) -> None:
    _, customer, _, service = shop
    stranger = add_user(db, 'stranger@example.com')
    booking = add_booking(db, service, customer, _in_days(2, 15, 0))

    with pytest.raises(HTTPException) as exception_info:
        cancel_booking(booking_id=booking.id, current_user=stranger, db=db)

    assert exception_info.value.status_code == 403


def test_cancel_booking_returns_not_found_when_missing(db, shop) -> None:
    _, customer, _, _ = shop

    with pytest.raises(HTTPException) as exception_info:
        cancel_booking(booking_id='missing', current_user=customer, db=db)

    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == 'Booking not found.'


@pytest.mark.parametrize(
    ('days', 'cancelled', 'error_detail'),
    [
        (2, True, 'This booking is already cancelled.'),
        (-2, False, 'Finished bookings cannot be cancelled.'),
    ],
)
def test_cancel_booking_rejects_non_confirmed_bookings(db, shop, days: int, cancelled: bool, error_detail: str) -> None:
    _, customer, _, service = shop
    booking = add_booking(db, service, customer, _in_days(days, 15, 0), cancelled=cancelled)

    with pytest.raises(HTTPException) as exception_info:
        cancel_booking(booking_id=booking.id, current_user=customer, db=db)

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == error_detail


def test_create_booking_over_http_requires_authentication(client, db, shop) -> None:
    _, _, _, service = shop

    response = client.post(
        '/bookings',
        json={'service_id': service.id, 'date': _in_days(2, 10, 0).isoformat()},
    )

    assert response.status_code == 401
    assert db.query(Booking).count() == 0


def test_create_booking_over_http_with_token(client, db, shop) -> None:
    _, customer, _, service = shop
    token = jwt_handler.create_access_token(subject=customer.email)

    response = client.post(
        '/bookings',
        json={'service_id': service.id, 'date': _in_days(2, 10, 0).isoformat()},
        headers={'Authorization': f'Bearer {token}'},
    )

    assert response.status_code == 201
    assert response.json()['status'] == 'confirmed'
    assert db.query(Booking).count() == 1
