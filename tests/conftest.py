import os

# before the app module builds its engine and mail config
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("MAIL_SUPPRESS_SEND", "true")

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from restaurant_booking.database import Base
from restaurant_booking.main import app, get_notifier
from restaurant_booking.models import BOOKED, Booking, MenuItem, Offer, Table, User
from restaurant_booking.security import create_access_token
from restaurant_booking.store import SqlStore

# ------------------ engine ------------------
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(bind=engine)

EVENING = datetime(2099, 12, 31, 18, 0)


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def send_async(self, recipient, subject, body):
        self.sent.append((recipient, subject, body))


class FailingNotifier:
    def send_async(self, recipient, subject, body):
        raise RuntimeError("SMTP unavailable")


# ------------------ fixtures ------------------
@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session():
    db = TestingSessionLocal()
    yield db
    db.close()


@pytest.fixture
def store(session):
    return SqlStore(session)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client(monkeypatch, notifier):
    monkeypatch.setattr("restaurant_booking.database.SessionLocal", TestingSessionLocal)
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield TestClient(app)
    app.dependency_overrides.clear()


# ------------------ factories ------------------
def make_user(session, name="Alice", role="user", email=None):
    user = User(name=name, email=email or f"{name.lower()}@example.com", role=role)
    session.add(user)
    session.commit()
    return user


def make_table(session, number=1, price=1000, seats=4, offers=(), menu=()):
    table = Table(table_number=number, seats=seats, price=price)
    table.offers = [Offer(**o) for o in offers]
    table.food_menu = [MenuItem(**m) for m in menu]
    session.add(table)
    session.commit()
    return table


def make_booking(session, user, table, start, end=None, status=BOOKED):
    booking = Booking(
        user_id=user.id,
        table_id=table.id,
        start_time=start,
        end_time=end or start + timedelta(hours=2),
        status=status,
        price=table.price,
        discount=0,
        final_price=table.price,
        applied_offers=[],
    )
    session.add(booking)
    session.commit()
    return booking


def auth_header(user):
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}
