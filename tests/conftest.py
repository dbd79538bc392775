import os
import sys

# Must be set before gigplanner.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CACHE_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ.pop("RESEND_API_KEY", None)
os.environ.pop("ADMIN_NOTIFICATION_EMAIL", None)

from datetime import date, timedelta  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from gigplanner.auth import get_current_user  # noqa: E402
from gigplanner.database import Base, get_db  # noqa: E402
from gigplanner.main import app  # noqa: E402
from gigplanner.models import (  # noqa: E402
    EventCategory,
    MonthlyPlanner,
    Musician,
    MusicianPayRate,
    PlannerAssignment,
    PlannerSlot,
    User,
    Venue,
)
from gigplanner.security_utils import hash_password  # noqa: E402

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def admin(db):
    user = User(
        username="admin",
        password_hash=hash_password("correct-horse"),
        name="Admin",
        email="admin@example.com",
        role="admin",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _override_db(db):
    def override():
        yield db

    return override


@pytest.fixture
def client(db, admin):
    """Client authenticated as the admin user"""
    app.dependency_overrides[get_db] = _override_db(db)
    app.dependency_overrides[get_current_user] = lambda: admin
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def anon_client(db):
    """Client without an authentication override"""
    app.dependency_overrides[get_db] = _override_db(db)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def sent_emails(monkeypatch):
    """Pretend email is configured and record every outgoing message"""
    outbox = []

    async def fake_contract_email(**kwargs):
        outbox.append(("contract", kwargs))
        return {"id": "test"}

    async def fake_response_notification(**kwargs):
        outbox.append(("response", kwargs))
        return {"id": "test"}

    async def fake_finalized_email(*args):
        outbox.append(("finalized", args))
        return {"id": "test"}

    monkeypatch.setattr("gigplanner.domain.contracts.service.send_contract_email", fake_contract_email)
    monkeypatch.setattr(
        "gigplanner.domain.contracts.service.send_contract_response_notification",
        fake_response_notification,
    )
    monkeypatch.setattr("gigplanner.domain.contracts.service.is_email_configured", lambda: True)
    monkeypatch.setattr(
        "gigplanner.domain.planners.service.send_planner_finalized_email", fake_finalized_email
    )
    monkeypatch.setattr("gigplanner.domain.planners.service.is_email_configured", lambda: True)
    # the package re-exports `router`, so patch the module object itself
    planners_router_module = sys.modules["gigplanner.domain.planners.router"]
    monkeypatch.setattr(planners_router_module, "is_email_configured", lambda: True)
    return outbox


# ============================================================================
# FACTORIES
# ============================================================================


def last_month() -> tuple[int, int]:
    first = date.today().replace(day=1) - timedelta(days=1)
    return first.month, first.year


@pytest.fixture
def past_period():
    """(month, year) of last month; its dates can have attendance marked"""
    return last_month()


@pytest.fixture
def future_period():
    """(month, year) of next month"""
    today = date.today()
    return (1, today.year + 1) if today.month == 12 else (today.month + 1, today.year)


@pytest.fixture
def make_venue(db):
    def make(name="Blue Note Jazz Club", **kwargs):
        venue = Venue(name=name, **kwargs)
        db.add(venue)
        db.commit()
        db.refresh(venue)
        return venue

    return make


@pytest.fixture
def make_event_category(db):
    def make(title="Club Performance", category_id=7):
        category = EventCategory(id=category_id, title=title)
        db.add(category)
        db.commit()
        return category

    return make


@pytest.fixture
def make_musician(db):
    def make(name="Ella Thompson", email="ella@example.com", **kwargs):
        musician = Musician(name=name, email=email, instruments=[], **kwargs)
        db.add(musician)
        db.commit()
        db.refresh(musician)
        return musician

    return make


@pytest.fixture
def make_pay_rate(db):
    def make(musician, event_category_id=7, hourly_rate=50.0):
        rate = MusicianPayRate(
            musician_id=musician.id, event_category_id=event_category_id, hourly_rate=hourly_rate
        )
        db.add(rate)
        db.commit()
        return rate

    return make


@pytest.fixture
def make_planner(db):
    def make(month=None, year=None, status="draft"):
        if month is None:
            month, year = last_month()
        planner = MonthlyPlanner(month=month, year=year, name=f"{month}/{year}", status=status)
        db.add(planner)
        db.commit()
        db.refresh(planner)
        return planner

    return make


@pytest.fixture
def make_slot(db):
    def make(
        planner,
        venue,
        day=None,
        start_time="20:00",
        end_time="23:00",
        duration=None,
        event_category_id=None,
    ):
        slot = PlannerSlot(
            planner_id=planner.id,
            venue_id=venue.id,
            date=day or date(planner.year, planner.month, 10),
            start_time=start_time,
            end_time=end_time,
            duration=duration,
            event_category_id=event_category_id,
            status="open",
        )
        db.add(slot)
        db.commit()
        db.refresh(slot)
        return slot

    return make


@pytest.fixture
def make_assignment(db):
    def make(slot, musician, actual_fee=150.0, status="scheduled", fee_overridden=False):
        assignment = PlannerAssignment(
            slot_id=slot.id,
            musician_id=musician.id,
            actual_fee=actual_fee,
            fee_overridden=fee_overridden,
            status=status,
        )
        slot.status = "assigned"
        db.add(assignment)
        db.commit()
        db.refresh(assignment)
        return assignment

    return make
