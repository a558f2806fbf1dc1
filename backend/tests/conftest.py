import asyncio
from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from agenda.models.generated import Base, Bookings, Services, StoreHours, Stores, TeamMembers
from agenda.services.slots import (
    BookingConfig,
    BookingRecord,
    BookingStatus,
    LedgerPermissionError,
    ProviderDef,
    ServiceDef,
    StoreConfig,
    WeeklyHours,
)


def utc(year, month, day, hour=0, minute=0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


def booking(start: datetime, end: datetime, status=BookingStatus.CONFIRMED) -> BookingRecord:
    return BookingRecord(start=start, end=end, status=status)


class InMemoryLedger:
    """Ledger double returning a fixed list and recording calls."""

    def __init__(self, bookings=(), error: Exception | None = None, delay: float = 0.0):
        self.bookings = list(bookings)
        self.error = error
        self.delay = delay
        self.calls = []

    async def fetch_bookings(self, store_id, provider_id, start, end):
        self.calls.append((store_id, provider_id, start, end))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return [b for b in self.bookings if start <= b.start < end]


class DeniedLedger(InMemoryLedger):
    def __init__(self):
        super().__init__(error=LedgerPermissionError("permission denied for table bookings"))


class FakeRedis:
    """Dict-backed stand-in for the few redis commands the cache uses."""

    def __init__(self):
        self.data = {}
        self.ttls = {}

    def get(self, key):
        return self.data.get(key)

    def setex(self, key, ttl, value):
        self.data[key] = value
        self.ttls[key] = ttl
        return True

    def delete(self, *keys):
        deleted = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                deleted += 1
            self.ttls.pop(key, None)
        return deleted


@pytest.fixture
def config():
    return BookingConfig(horizon_days=1, ledger_timeout_seconds=1.0, label_locale="pt-BR")


@pytest.fixture
def store():
    return StoreConfig(store_id=1, timezone="UTC", slot_step_minutes=30)


@pytest.fixture
def monday_hours():
    return [WeeklyHours(day_of_week=1, open_time="09:00", close_time="12:00")]


@pytest.fixture
def service():
    return ServiceDef(service_id=10, duration_minutes=60, name="Corte")


@pytest.fixture
def provider():
    return ProviderDef(provider_id=100, capacity=1, name="Ana")


# ── Database ─────────────────────────────────────────────────────────────


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded_db(db):
    """Store 1 open every day 08:00-18:00, one service, one team member."""
    db.add(Stores(
        id=1,
        name="Barbearia Centro",
        timezone="America/Sao_Paulo",
        slot_duration_min=30,
        buffer_before_min=0,
        buffer_after_min=10,
    ))
    for dow in range(7):
        db.add(StoreHours(
            store_id=1,
            day_of_week=dow,
            is_closed=0,
            open_time="08:00:00",
            close_time="18:00:00",
        ))
    db.add(Services(id=10, store_id=1, name="Corte", duration_min=45))
    db.add(Services(id=11, store_id=1, name="Antigo", duration_min=30, is_active=0))
    db.add(TeamMembers(id=100, full_name="Ana", max_parallel=2))
    db.add(TeamMembers(id=101, full_name="Bruno", max_parallel=1, is_active=0))
    db.commit()
    return db


def add_booking(db, start: datetime, end: datetime, status="confirmed", store_id=1, team_member_id=100):
    row = Bookings(
        store_id=store_id,
        team_member_id=team_member_id,
        start_ts=start.isoformat(),
        end_ts=end.isoformat(),
        status=status,
    )
    db.add(row)
    db.commit()
    return row
