"""User model definitions."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String
from barbershop.database import Base


class User(Base):
    """Represents a customer or barbershop owner."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    image = Column(String, nullable=True)
    hashed_password = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.now)
