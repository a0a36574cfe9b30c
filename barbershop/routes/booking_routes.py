import logging
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from barbershop.auth.dependencies import get_current_user
from barbershop.core import config
from barbershop.database import get_db
from barbershop.models.barbershop import BarbershopService
from barbershop.models.booking import Booking
from barbershop.models.user import User
from barbershop.routes.deps import DATABASE_UNAVAILABLE_DETAIL, ensure_database_ready
from barbershop.routes.schemas import AvailableTimeSlotsResponse, BookingResponse, CreateBookingRequest
from barbershop.services.booking_rules import (
    BookingStatus,
    classify_booking_status,
    get_available_time_slots,
    get_day_bounds,
    is_catalog_time_slot,
)

router = APIRouter(tags=['bookings'])

logger = logging.getLogger(__name__)


def get_booked_times(barbershop_id: str, day: date, db: Session) -> list[datetime]:
    start_of_day, end_of_day = get_day_bounds(day)
    rows = db.query(Booking.date).filter(
        Booking.barbershop_id == barbershop_id,
        Booking.cancelled.is_(False),
        Booking.date >= start_of_day,
        Booking.date <= end_of_day,
    ).all()
    return [booked_at for (booked_at,) in rows]


@router.get('/barbershops/{barbershop_id}/available-time-slots', response_model=AvailableTimeSlotsResponse)
def list_available_time_slots(
    barbershop_id: str,
    day: date = Query(..., alias='date'),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        booked_times = get_booked_times(barbershop_id, day, db)
    except SQLAlchemyError as exc:
        logger.exception('Failed to load bookings for barbershop %s on %s', barbershop_id, day)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc

    return AvailableTimeSlotsResponse(
        barbershop_id=barbershop_id,
        date=day,
        time_slots=get_available_time_slots(booked_times, config.TIME_SLOTS),
    )


@router.post('/bookings', response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: CreateBookingRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    booking_time = data.date
    now = datetime.now()

    if not is_catalog_time_slot(booking_time, config.TIME_SLOTS):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Bookings must start on one of the available time slots.',
        )

    if booking_time <= now:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Bookings must be scheduled in the future.',
        )

    try:
        service = db.query(BarbershopService).filter(BarbershopService.id == data.service_id).first()
        if service is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail='Service not found.',
            )

        existing_booking = db.query(Booking).filter(
            Booking.barbershop_id == service.barbershop_id,
            Booking.cancelled.is_(False),
            Booking.date == booking_time,
        ).first()
        if existing_booking:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail='This time slot is already booked.',
            )

        booking = Booking(
            date=booking_time,
            cancelled=False,
            cancelled_at=None,
            service_id=service.id,
            barbershop_id=service.barbershop_id,
            user_id=current_user.id,
        )
        db.add(booking)
        db.commit()
        db.refresh(booking)
    except SQLAlchemyError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc

    logger.info('User %s booked %s at barbershop %s', current_user.id, booking_time, booking.barbershop_id)
    return BookingResponse.from_booking(booking, now)


@router.get('/bookings/mine', response_model=list[BookingResponse])
def list_my_bookings(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        bookings = db.query(Booking).options(
            joinedload(Booking.service),
            joinedload(Booking.barbershop),
        ).filter(
            Booking.user_id == current_user.id,
        ).order_by(Booking.date.desc()).all()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc

    now = datetime.now()
    return [BookingResponse.from_booking(booking, now) for booking in bookings]


@router.post('/bookings/{booking_id}/cancel', response_model=BookingResponse)
def cancel_booking(
    booking_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Cancel a booking on behalf of its customer or the barbershop owner."""
    ensure_database_ready()

    now = datetime.now()

    try:
        booking = db.query(Booking).filter(Booking.id == booking_id).first()
        if booking is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail='Booking not found.',
            )

        is_customer = booking.user_id == current_user.id
        is_owner = booking.barbershop.owner_id == current_user.id
        if not (is_customer or is_owner):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail='You are not allowed to cancel this booking.',
            )

        booking_status = classify_booking_status(booking.cancelled, booking.date, now)
        if booking_status is BookingStatus.CANCELLED:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail='This booking is already cancelled.',
            )
        if booking_status is BookingStatus.FINISHED:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail='Finished bookings cannot be cancelled.',
            )

        booking.cancelled = True
        booking.cancelled_at = now
        db.commit()
        db.refresh(booking)
    except SQLAlchemyError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc

    logger.info('User %s cancelled booking %s', current_user.id, booking.id)
    return BookingResponse.from_booking(booking, now, include_user=is_owner)
