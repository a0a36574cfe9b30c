from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from barbershop.core import config


engine = create_engine(config.DATABASE_URL, echo=config.DATABASE_ECHO)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_booking_schema_checked = False


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()



BOOKING_INDEXES = [
    ('idx_bookings_barbershop_date', 'CREATE INDEX IF NOT EXISTS idx_bookings_barbershop_date ON bookings(barbershop_id, date)'),
    ('idx_bookings_user_date', 'CREATE INDEX IF NOT EXISTS idx_bookings_user_date ON bookings(user_id, date)'),
]


def ensure_booking_schema(bind=None) -> None:
    """Create the booking lookup indexes on databases that predate them."""
    global _booking_schema_checked

    if _booking_schema_checked:
        return

    bind = bind or engine

    with _schema_lock:
        if _booking_schema_checked:
            return

        inspector = inspect(bind)

        if 'bookings' not in inspector.get_table_names():
            _booking_schema_checked = True
            return

        existing_indexes = {index['name'] for index in inspector.get_indexes('bookings')}

        with bind.begin() as connection:
            for index_name, statement in BOOKING_INDEXES:
                if index_name not in existing_indexes:
                    connection.execute(text(statement))

        _booking_schema_checked = True
