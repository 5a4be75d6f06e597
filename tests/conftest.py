# tests/conftest.py

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import datetime, timedelta, timezone
from decimal import Decimal
import random

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from venue_booking.application.container import ServiceContainer
from venue_booking.config import Settings
from venue_booking.domain.pricing import MealType, PricingUnit, ServingStyle, VenueType
from venue_booking.domain.roles import Role
from venue_booking.infrastructure.db.models import Meal, Organizer, Venue
from venue_booking.infrastructure.db.session import Base, get_db
from venue_booking.main import create_app

TEST_PASSWORD = "Secret123!"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite://",
        jwt_secret="test-secret",
        bcrypt_rounds=4,
        environment="test",
        webhook_secret="test-webhook-secret",
        payment_success_rate=1.0,
        refund_success_rate=1.0,
    )


@pytest.fixture
def container(settings):
    return ServiceContainer.build(settings, rng=random.Random(7))


@pytest.fixture
def app(settings, container, session_factory):
    app = create_app(settings=settings, container=container, run_startup=False)

    def override_get_db():
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)


# -----------------------------
# Catalog helpers
# -----------------------------
@pytest.fixture
def make_venue(db):
    def _make_venue(**overrides) -> Venue:
        fields = {
            "name": "Grand Ballroom",
            "address": "123 Main Street, Downtown City",
            "city": "Dhaka",
            "state": "Dhaka Division",
            "capacity": 500,
            "venue_type": VenueType.INDOOR,
            "pricing_unit": PricingUnit.HOUR,
            "price_per_hour": Decimal("250.00"),
            "minimum_hours": 4,
        }
        fields.update(overrides)
        venue = Venue(**fields)
        db.add(venue)
        db.commit()
        return venue

    return _make_venue


@pytest.fixture
def make_meal(db):
    def _make_meal(**overrides) -> Meal:
        fields = {
            "name": "Vegetarian Deluxe",
            "type": MealType.VEG,
            "serving_style": ServingStyle.PLATED,
            "price_per_person": Decimal("325.00"),
            "minimum_guests": 50,
        }
        fields.update(overrides)
        meal = Meal(**fields)
        db.add(meal)
        db.commit()
        return meal

    return _make_meal


# -----------------------------
# Auth helpers
# -----------------------------
def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register_user(client):
    def _register_user(email: str = "customer@example.com", name: str = "Test Customer") -> dict:
        response = client.post(
            "/users/register",
            json={"name": name, "email": email, "password": TEST_PASSWORD},
        )
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        return {"id": data["user"]["id"], "token": data["token"], "headers": bearer(data["token"])}

    return _register_user


@pytest.fixture
def customer(register_user):
    return register_user()


@pytest.fixture
def make_staff(db, container):
    def _make_staff(role: Role = Role.ORGANIZER, email: str | None = None) -> dict:
        organizer = Organizer(
            name=f"Test {role.value.title()}",
            email=email or f"{role.value}@example.com",
            password_hash=container.hasher.hash(TEST_PASSWORD),
            role=role.value,
        )
        db.add(organizer)
        db.commit()
        token = container.tokens.issue(organizer.id, organizer.email, organizer.role)
        return {"id": organizer.id, "token": token, "headers": bearer(token)}

    return _make_staff


@pytest.fixture
def organizer(make_staff):
    return make_staff(Role.ORGANIZER)


@pytest.fixture
def admin(make_staff):
    return make_staff(Role.ADMIN)


# -----------------------------
# Time helpers
# -----------------------------
def slot(days_ahead: int = 30, hours: float = 2, start_hour: int = 10) -> tuple[str, str]:
    start = (datetime.now(timezone.utc) + timedelta(days=days_ahead)).replace(
        hour=start_hour, minute=0, second=0, microsecond=0
    )
    end = start + timedelta(hours=hours)
    return start.isoformat(), end.isoformat()


@pytest.fixture
def booking_payload(make_venue):
    def _booking_payload(venue=None, key: str = "booking-key-0001", **overrides) -> dict:
        venue = venue or make_venue()
        start, end = slot()
        payload = {
            "venueId": venue.id,
            "peopleCount": 100,
            "startTime": start,
            "endTime": end,
            "eventType": "Wedding",
            "paymentMethod": "bkash",
            "idempotencyKey": key,
        }
        payload.update(overrides)
        return payload

    return _booking_payload
