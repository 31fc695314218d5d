import itertools
import os
import tempfile
from datetime import date

# Settings are read once; pin them before the application modules are imported.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_PATH"] = os.path.join(tempfile.gettempdir(), "tripplanner-tests", "api.log")
os.environ["SIGNUP_CREDITS"] = "1"
os.environ["AMADEUS_CLIENT_ID"] = ""
os.environ["AMADEUS_CLIENT_SECRET"] = ""
os.environ["GOOGLE_PLACES_API_KEY"] = "places-test-key"
os.environ["PLACES_API_BASE_URL"] = "https://places.test"
os.environ["OPENTRIPMAP_API_KEY"] = "otm-test-key"
os.environ["UNSPLASH_ACCESS_KEY"] = "unsplash-test-key"
os.environ["RESEND_API_KEY"] = "re_test_key"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_key"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_secret"
os.environ["STRIPE_PRICE_ID"] = "price_test_pack"

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import models  # noqa: F401
from database import Base, get_db
from models.Profile import Profile
from schemas import Passenger, TripDetails
from services.firebase_auth import AuthenticatedUser, get_current_user


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def user():
    return AuthenticatedUser(uid="user-1", email="real@user.com", email_verified=True, name="Real User")


@pytest.fixture
def profile(db, user):
    p = Profile(id=user.uid, email=user.email, credits=3)
    db.add(p)
    db.commit()
    return p


def _app_with_db(session_factory):
    from main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture
def client(session_factory, user):
    app = _app_with_db(session_factory)
    app.dependency_overrides[get_current_user] = lambda: user
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def anon_client(session_factory):
    app = _app_with_db(session_factory)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def sequential_ids():
    counter = itertools.count(1)
    return lambda prefix: f"{prefix}-{next(counter)}"


@pytest.fixture
def paris_tokyo():
    return TripDetails(
        departure_city="Paris",
        destination_city="Tokyo",
        departure_date=date(2025, 3, 1),
        return_date=date(2025, 3, 8),
        passengers=Passenger(adults=2, children=0, infants=0),
        flight_class="economy",
        include_car_rental=True,
        include_hotel=True,
    )


@pytest.fixture
def mock_http(monkeypatch):
    """Route every httpx.AsyncClient created by the app through `handler`."""
    def install(handler):
        real_client = httpx.AsyncClient

        def factory(*args, **kwargs):
            kwargs["transport"] = httpx.MockTransport(handler)
            return real_client(*args, **kwargs)

        monkeypatch.setattr(httpx, "AsyncClient", factory)

    return install
