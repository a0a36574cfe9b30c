"""Request and response models shared by the route modules."""

from datetime import date, datetime

from pydantic import BaseModel, field_validator

from barbershop.core import config
from barbershop.services.booking_rules import BookingStatus, classify_booking_status, to_local_naive


def _normalize_email(value: str) -> str:
    normalized = value.strip().lower()
    if not normalized or '@' not in normalized:
        raise ValueError('A valid email is required.')
    return normalized


class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Name is required.')
        return normalized

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _normalize_email(value)

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        if len(value) < config.MIN_PASSWORD_LENGTH:
            raise ValueError(f'Password must be at least {config.MIN_PASSWORD_LENGTH} characters.')
        return value


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _normalize_email(value)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = 'bearer'


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    image: str | None = None

    class Config:
        from_attributes = True


class BarbershopServiceResponse(BaseModel):
    id: str
    name: str
    description: str
    image_url: str
    price_in_cents: int
    barbershop_id: str

    class Config:
        from_attributes = True


class BarbershopSummaryResponse(BaseModel):
    id: str
    name: str
    address: str
    image_url: str
    phones: list[str]

    class Config:
        from_attributes = True


class BarbershopResponse(BarbershopSummaryResponse):
    description: str
    services: list[BarbershopServiceResponse] = []


class OwnedBarbershopResponse(BaseModel):
    id: str
    name: str

    class Config:
        from_attributes = True


class CreateBookingRequest(BaseModel):
    service_id: str
    date: datetime

    @field_validator('service_id')
    @classmethod
    def validate_service_id(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Service is required.')
        return normalized

    @field_validator('date')
    @classmethod
    def validate_date(cls, value: datetime) -> datetime:
        return to_local_naive(value)


class BookingResponse(BaseModel):
    id: str
    date: datetime
    cancelled: bool
    cancelled_at: datetime | None = None
    status: BookingStatus
    service: BarbershopServiceResponse
    barbershop: BarbershopSummaryResponse
    user: UserResponse | None = None

    @classmethod
    def from_booking(cls, booking, now: datetime, include_user: bool = False) -> 'BookingResponse':
        return cls(
            id=booking.id,
            date=booking.date,
            cancelled=bool(booking.cancelled),
            cancelled_at=booking.cancelled_at,
            status=classify_booking_status(booking.cancelled, booking.date, now),
            service=BarbershopServiceResponse.model_validate(booking.service),
            barbershop=BarbershopSummaryResponse.model_validate(booking.barbershop),
            user=UserResponse.model_validate(booking.user) if include_user else None,
        )


class AvailableTimeSlotsResponse(BaseModel):
    barbershop_id: str
    date: date
    time_slots: list[str]


class BookingDashboardResponse(BaseModel):
    barbershop: OwnedBarbershopResponse
    total_bookings: int
    total_revenue_in_cents: int
    confirmed: list[BookingResponse]
    cancelled: list[BookingResponse]
    finished: list[BookingResponse]
