"""Populate an empty database with a demo owner, barbershops and services.

Usage:
    python -m barbershop.seed
"""
import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from barbershop.auth.passwords import hash_password
from barbershop.database import Base, SessionLocal, engine
from barbershop.models.barbershop import Barbershop, BarbershopService
from barbershop.models.booking import Booking  # noqa: F401
from barbershop.models.user import User

logger = logging.getLogger(__name__)

DEMO_OWNER_EMAIL = "owner@barbershop.dev"
DEMO_OWNER_PASSWORD = "barbershop123"

BARBERSHOPS = [
    {
        "name": "Vintage Barber",
        "address": "12 Market Street",
        "phones": ["(11) 99999-0001"],
    },
    {
        "name": "Classic Cuts",
        "address": "480 Harbor Avenue",
        "phones": ["(11) 99999-0002", "(11) 99999-0003"],
    },
    {
        "name": "The Razor Room",
        "address": "7 Station Road",
        "phones": ["(11) 99999-0004"],
    },
]

SERVICES = [
    ("Haircut", "Cut styled to your taste.", 5000),
    ("Beard", "Beard trim and shaping.", 4000),
    ("Shave", "Classic straight razor shave.", 3500),
    ("Eyebrows", "Eyebrow grooming.", 2000),
    ("Hydration", "Hair hydration treatment.", 2500),
]


def seed(db) -> bool:
    if db.query(Barbershop).first() is not None:
        return False

    owner = db.query(User).filter(User.email == DEMO_OWNER_EMAIL).first()
    if owner is None:
        owner = User(
            name="Demo Owner",
            email=DEMO_OWNER_EMAIL,
            hashed_password=hash_password(DEMO_OWNER_PASSWORD),
        )
        db.add(owner)
        db.flush()

    for entry in BARBERSHOPS:
        barbershop = Barbershop(
            name=entry["name"],
            address=entry["address"],
            description=f"{entry['name']} has been grooming the neighbourhood for years.",
            phones=entry["phones"],
            owner_id=owner.id,
        )
        db.add(barbershop)
        db.flush()
        for name, description, price_in_cents in SERVICES:
            db.add(
                BarbershopService(
                    name=name,
                    description=description,
                    price_in_cents=price_in_cents,
                    barbershop_id=barbershop.id,
                )
            )

    db.commit()
    return True


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        created = seed(db)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Seeding failed.")
        sys.exit(1)
    finally:
        db.close()

    if created:
        logger.info("Seeded %d barbershops owned by %s", len(BARBERSHOPS), DEMO_OWNER_EMAIL)
    else:
        logger.info("Database already has barbershops; nothing to seed.")


if __name__ == "__main__":
    main()
