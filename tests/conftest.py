"""Shared fixtures: a throwaway SQLite database per test and seeded listings."""

import os
import tempfile
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Tuple

# Settings are read at import time; these must exist before rentflow loads.
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault(
    "DB_DSN",
    "sqlite+aiosqlite:///" + os.path.join(tempfile.gettempdir(), "rentflow-import.db"),
)
os.environ.setdefault("RATE_LIMIT_DEFAULT", "10000/minute")

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from rentflow.models import Base, Property, Room, Tenant, Application, Referral
from rentflow.services.access_guard import Principal
from rentflow.statuses import ApplicationStatus

FIXED_NOW = datetime(2026, 3, 1, 12, 0, 0)

MANAGER_ID = "mgr-0001"
OTHER_MANAGER_ID = "mgr-0002"
ADMIN_ID = "admin-0001"


def fixed_clock() -> datetime:
    return FIXED_NOW


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'rentflow.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def manager():
    return Principal(id=MANAGER_ID, role="manager")


@pytest.fixture
def other_manager():
    return Principal(id=OTHER_MANAGER_ID, role="manager")


@pytest.fixture
def admin():
    return Principal(id=ADMIN_ID, role="admin")


@dataclass
class Seed:
    property_id: int
    room_id: int
    application_id: int
    referral_id: int
    tenant_id: str = "tenant-T1"
    referrer_id: str = "tenant-T2"


@pytest.fixture
async def seed(session_factory) -> Seed:
    """P1 at 4500/month managed by MANAGER_ID; T1 applied (A1, Pending) with
    referral code REF123 issued by T2 (R1, not completed)."""
    async with session_factory() as s:
        prop = Property(name="Sea Point Flat", manager_id=MANAGER_ID, price_per_month=Decimal("4500"))
        s.add(prop)
        await s.flush()
        room = Room(property_id=prop.id, name="Room 1", price_per_month=Decimal("2500"))
        t2 = Tenant(id="tenant-T2", name="Thandi", email="t2@example.com", referral_code="REF123")
        t1 = Tenant(id="tenant-T1", name="Tom", email="t1@example.com", referred_by_code="REF123")
        s.add_all([room, t1, t2])
        await s.flush()
        app = Application(
            property_id=prop.id,
            room_id=room.id,
            tenant_id=t1.id,
            status=ApplicationStatus.Pending.value,
            name="Tom",
            email="t1@example.com",
        )
        referral = Referral(code="REF123", referrer_id=t2.id, referred_id=t1.id, is_completed=False)
        s.add_all([app, referral])
        await s.commit()
        return Seed(
            property_id=prop.id,
            room_id=room.id,
            application_id=app.id,
            referral_id=referral.id,
        )


class EventRecorder:
    """Collects telemetry events and entity-changed notifications."""

    def __init__(self):
        self.events: List[Tuple[str, str, Dict[str, Any]]] = []
        self.changes: List[Any] = []

    def track(self, distinct_id: str, event: str, **properties: Any) -> None:
        self.events.append((distinct_id, event, properties))

    def publish(self, change: Any) -> None:
        self.changes.append(change)


@pytest.fixture
def recorder():
    return EventRecorder()
