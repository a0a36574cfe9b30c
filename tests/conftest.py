import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from barbershop.database import Base, get_db  # noqa: E402
from barbershop.main import app  # noqa: E402
from barbershop.models import booking  # noqa: E402,F401


@pytest.fixture(autouse=True)
def skip_schema_upgrades(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr('barbershop.routes.booking_routes.ensure_database_ready', lambda: None)
    monkeypatch.setattr('barbershop.routes.admin_routes.ensure_database_ready', lambda: None)


@pytest.fixture
def db():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
