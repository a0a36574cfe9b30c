from datetime import datetime, time
from enum import Enum

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from barbershop.auth.dependencies import get_current_user
from barbershop.database import get_db
from barbershop.models.barbershop import Barbershop
from barbershop.models.booking import Booking
from barbershop.models.user import User
from barbershop.routes.deps import DATABASE_UNAVAILABLE_DETAIL, ensure_database_ready
from barbershop.routes.schemas import BookingDashboardResponse, BookingResponse, OwnedBarbershopResponse
from barbershop.services.booking_rules import build_booking_dashboard, get_day_bounds, to_local_naive

router = APIRouter(tags=['admin'])


class BookingStatusFilter(str, Enum):
    ALL = 'all'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    FINISHED = 'finished'


def build_booking_filters(
    barbershop_id: str,
    status_filter: BookingStatusFilter,
    now: datetime,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
) -> list:
    """Translate the admin panel filters into SQL conditions on ``Booking``.

    A status filter that already bounds ``date`` is narrowed, never widened,
    by the date range.
    """
    conditions = [Booking.barbershop_id == barbershop_id]

    if status_filter is BookingStatusFilter.CONFIRMED:
        conditions.append(Booking.cancelled.is_(False))
        conditions.append(Booking.date >= max(date_from, now) if date_from else Booking.date >= now)
        if date_to:
            conditions.append(Booking.date <= date_to)
        return conditions

    if status_filter is BookingStatusFilter.FINISHED:
        conditions.append(Booking.cancelled.is_(False))
        conditions.append(Booking.date < now)
    elif status_filter is BookingStatusFilter.CANCELLED:
        conditions.append(Booking.cancelled.is_(True))

    if date_from:
        conditions.append(Booking.date >= date_from)
    if date_to:
        conditions.append(Booking.date <= date_to)

    return conditions


def get_owned_barbershop(barbershop_id: str, current_user: User, db: Session) -> Barbershop:
    try:
        barbershop = db.query(Barbershop).filter(Barbershop.id == barbershop_id).first()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc

    if barbershop is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='Barbershop not found.',
        )

    if barbershop.owner_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail='You do not have permission to manage this barbershop.',
        )

    return barbershop


def query_bookings(conditions: list, db: Session) -> list[Booking]:
    return db.query(Booking).options(
        joinedload(Booking.service),
        joinedload(Booking.barbershop),
        joinedload(Booking.user),
    ).filter(*conditions).order_by(Booking.date.desc()).all()


@router.get('/{barbershop_id}/admin/bookings', response_model=list[BookingResponse])
def list_barbershop_bookings(
    barbershop_id: str,
    status_filter: BookingStatusFilter = Query(default=BookingStatusFilter.ALL, alias='status'),
    date_from: datetime | None = Query(default=None),
    date_to: datetime | None = Query(default=None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    get_owned_barbershop(barbershop_id, current_user, db)

    date_from = to_local_naive(date_from) if date_from else None
    date_to = to_local_naive(date_to) if date_to else None
    if date_to and date_to.time() == time.min:
        # A bare date such as 2026-03-11 parses as midnight; include that whole day.
        _, date_to = get_day_bounds(date_to.date())
    if date_from and date_to and date_from > date_to:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='date_from must not be after date_to.',
        )

    now = datetime.now()
    conditions = build_booking_filters(barbershop_id, status_filter, now, date_from, date_to)

    try:
        bookings = query_bookings(conditions, db)
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc

    return [BookingResponse.from_booking(booking, now, include_user=True) for booking in bookings]


@router.get('/{barbershop_id}/admin/dashboard', response_model=BookingDashboardResponse)
def get_barbershop_dashboard(
    barbershop_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    barbershop = get_owned_barbershop(barbershop_id, current_user, db)
    now = datetime.now()

    try:
        bookings = query_bookings(
            build_booking_filters(barbershop_id, BookingStatusFilter.ALL, now),
            db,
        )
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc

    dashboard = build_booking_dashboard(bookings, now)

    def to_responses(group: list) -> list[BookingResponse]:
        return [BookingResponse.from_booking(booking, now, include_user=True) for booking in group]

    return BookingDashboardResponse(
        barbershop=OwnedBarbershopResponse.model_validate(barbershop),
        total_bookings=dashboard.total_bookings,
        total_revenue_in_cents=dashboard.total_revenue_in_cents,
        confirmed=to_responses(dashboard.confirmed),
        cancelled=to_responses(dashboard.cancelled),
        finished=to_responses(dashboard.finished),
    )
