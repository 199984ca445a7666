"""
Pytest configuration and shared fixtures.
"""

import fnmatch
import os
from datetime import date, datetime, time, timedelta

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("REDIS_URL", "")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from backend.app.models.generated import (
    Appointments,
    AppointmentStatus,
    Base,
    Holidays,
    Services,
    StaffMembers,
    Users,
    WorkingHours,
)
from backend.app.services.slots.config import BookingConfig


class FakeRedis:
    """In-memory stand-in for the redis commands the slot cache uses."""

    def __init__(self):
        self.zsets: dict[str, dict[str, float]] = {}
        self.lists: dict[str, list[str]] = {}
        self.expire: dict[str, int] = {}

    # pipeline runs commands immediately
    def pipeline(self):
        return _FakePipeline(self)

    def delete(self, *keys):
        deleted = 0
        for key in keys:
            key = key.decode() if isinstance(key, bytes) else key
            if self.zsets.pop(key, None) is not None:
                deleted += 1
            self.expire.pop(key, None)
        return deleted

    def zadd(self, key, mapping):
        self.zsets.setdefault(key, {}).update(mapping)
        return len(mapping)

    def expireat(self, key, when):
        self.expire[key] = int(when)
        return True

    def exists(self, key):
        return int(key in self.zsets)

    def zrangebyscore(self, key, min_score, max_score):
        low_exclusive = isinstance(min_score, str) and min_score.startswith("(")
        low = float(min_score.lstrip("(")) if min_score != "-inf" else float("-inf")
        high = float("inf") if max_score == "+inf" else float(max_score)
        items = sorted(self.zsets.get(key, {}).items(), key=lambda kv: kv[1])
        return [
            member.encode()
            for member, score in items
            if (score > low if low_exclusive else score >= low) and score <= high
        ]

    def scan_iter(self, match="*"):
        for key in list(self.zsets):
            if fnmatch.fnmatchcase(key, match):
                yield key.encode()

    def rpush(self, key, value):
        self.lists.setdefault(key, []).append(value)
        return len(self.lists[key])


class _FakePipeline:
    def __init__(self, redis: FakeRedis):
        self.redis = redis

    def __getattr__(self, name):
        return getattr(self.redis, name)

    def execute(self):
        return []


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = Session(engine, autoflush=False)
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def config():
    return BookingConfig(
        slot_interval_minutes=30,
        min_advance_hours=1,
        cancellation_hours=24,
        cache_ttl_seconds=300,
    )


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def staff(db):
    member = StaffMembers(first_name="Claire", last_name="Dubois")
    db.add(member)
    db.commit()
    return member


@pytest.fixture
def service(db):
    cut = Services(name="Coupe", duration_minutes=30, price=25.0)
    db.add(cut)
    db.commit()
    return cut


@pytest.fixture
def long_service(db):
    colour = Services(name="Coloration", duration_minutes=60, price=60.0)
    db.add(colour)
    db.commit()
    return colour


@pytest.fixture
def client_user(db):
    user = Users(first_name="Alice", email="alice@example.com")
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def other_user(db):
    user = Users(first_name="Bob", email="bob@example.com")
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def admin_user(db):
    user = Users(first_name="Admin", email="admin@example.com", role="admin")
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def monday_hours(db, staff):
    """Monday 09:00-17:00 with lunch break 12:00-13:00."""
    hours = WorkingHours(
        staff_id=staff.id,
        day_of_week=1,
        start_time=time(9, 0),
        end_time=time(17, 0),
        break_start=time(12, 0),
        break_end=time(13, 0),
    )
    db.add(hours)
    db.commit()
    return hours


@pytest.fixture
def make_appointment(db):
    """Insert an appointment directly, bypassing the booking guard."""
    def _make(client, staff, service, start: datetime, status=AppointmentStatus.PENDING):
        end = start + timedelta(minutes=service.duration_minutes)
        appointment = Appointments(
            client_id=client.id,
            staff_id=staff.id,
            service_id=service.id,
            appointment_date=start.date(),
            start_time=start.time(),
            end_time=end.time(),
            status=status,
        )
        db.add(appointment)
        db.commit()
        return appointment
    return _make


@pytest.fixture
def make_holiday(db):
    def _make(start: date, end: date, staff=None, recurring=False):
        holiday = Holidays(
            name="Congé",
            start_date=start,
            end_date=end,
            staff_id=staff.id if staff is not None else None,
            is_recurring=recurring,
        )
        db.add(holiday)
        db.commit()
        return holiday
    return _make
