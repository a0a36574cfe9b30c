"""Booking model definitions."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship
from barbershop.database import Base
from barbershop.models.barbershop import Barbershop, BarbershopService  # noqa: F401
from barbershop.models.user import User  # noqa: F401


class Booking(Base):
    """A reserved time slot for one service at one barbershop.

    ``cancelled_at`` is set exactly when ``cancelled`` is true. The booking
    status shown to users is derived from these two columns and ``date``;
    see ``barbershop.services.booking_rules.classify_booking_status``.
    """
    __tablename__ = "bookings"
    __table_args__ = (
        Index("idx_bookings_barbershop_date", "barbershop_id", "date"),
        Index("idx_bookings_user_date", "user_id", "date"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    date = Column(DateTime, nullable=False, index=True)
    cancelled = Column(Boolean, nullable=False, default=False)
    cancelled_at = Column(DateTime, nullable=True)
    service_id = Column(String(36), ForeignKey("barbershop_services.id"), nullable=False)
    barbershop_id = Column(String(36), ForeignKey("barbershops.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, default=datetime.now)

    service = relationship("BarbershopService")
    barbershop = relationship("Barbershop")
    user = relationship("User")
