"""Barbershop and service model definitions."""

import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from barbershop.database import Base
from barbershop.models.user import User  # noqa: F401


def _new_id() -> str:
    return str(uuid.uuid4())


class Barbershop(Base):
    """Represents a barbershop listed in the catalog."""
    __tablename__ = "barbershops"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String, nullable=False, index=True)
    address = Column(String, nullable=False)
    description = Column(String, nullable=False, default="")
    image_url = Column(String, nullable=False, default="")
    phones = Column(JSON, nullable=False, default=list)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.now)

    owner = relationship("User")
    services = relationship(
        "BarbershopService",
        back_populates="barbershop",
        order_by="BarbershopService.name",
    )


class BarbershopService(Base):
    """A service offered by a barbershop, priced in cents."""
    __tablename__ = "barbershop_services"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String, nullable=False)
    description = Column(String, nullable=False, default="")
    image_url = Column(String, nullable=False, default="")
    price_in_cents = Column(Integer, nullable=False)
    barbershop_id = Column(String(36), ForeignKey("barbershops.id"), nullable=False, index=True)

    barbershop = relationship("Barbershop", back_populates="services")
