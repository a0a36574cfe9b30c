import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from barbershop.core import config
from barbershop.database import Base, engine, ensure_booking_schema
from barbershop.models import barbershop, booking, user  # noqa: F401
from barbershop.routes import admin_routes, auth_routes, barbershop_routes, booking_routes

logging.basicConfig(level=config.LOG_LEVEL)

app = FastAPI(title='Barbershop Booking API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    try:
        Base.metadata.create_all(bind=engine)
        ensure_booking_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.get('/')
def root():
    return {'status': 'Barbershop Booking API Running'}


app.include_router(auth_routes.router, prefix='/auth')
app.include_router(barbershop_routes.router, prefix='/barbershops')
app.include_router(admin_routes.router, prefix='/barbershops')
app.include_router(booking_routes.router)
