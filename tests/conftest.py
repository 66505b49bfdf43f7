"""Shared test fixtures and configuration."""
import os

# The engine is created at import time, so point it at SQLite first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "development"

from datetime import datetime, timezone  # noqa: E402
from types import SimpleNamespace  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from meetpoll.main import app  # noqa: E402
from meetpoll.api import deps  # noqa: E402
from meetpoll.core import config  # noqa: E402
from meetpoll.core.exceptions import CollaboratorFailure  # noqa: E402
from meetpoll.core.rate_limit import limiter  # noqa: E402
from meetpoll.core.security import create_access_token  # noqa: E402
from meetpoll.db.base import Base  # noqa: E402
from meetpoll.integrations.base import BusyInterval, MeetingBooking  # noqa: E402
from meetpoll.services.repository import PollRepository  # noqa: E402
from meetpoll.services.state_machine import (  # noqa: E402
    ParticipantInput,
    PollDraft,
    PollStateMachine,
    SlotInput,
)

SQLALCHEMY_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
UTC = timezone.utc


class FakeBookingProvider:
    """Records meeting requests; optionally fails every call."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = []

    async def create_meeting(self, topic, start, duration_minutes, invitee_emails):
        self.calls.append(
            {"topic": topic, "start": start, "duration": duration_minutes, "invitees": list(invitee_emails)}
        )
        if self.fail:
            raise CollaboratorFailure("zoom", "meeting creation failed (500)")
        return MeetingBooking(join_url="https://zoom.us/j/123456", meeting_id="123456")


class FakeCalendarProvider:
    """Records calendar events and serves canned busy intervals."""

    def __init__(self, fail: bool = False, busy=None, busy_error: bool = False):
        self.fail = fail
        self.busy = busy or []
        self.busy_error = busy_error
        self.events = []

    async def create_event(self, summary, description, start, end, attendee_emails, location_link=None):
        self.events.append(
            {
                "summary": summary,
                "description": description,
                "start": start,
                "end": end,
                "attendees": list(attendee_emails),
                "location": location_link,
            }
        )
        if self.fail:
            raise CollaboratorFailure("google_calendar", "event creation failed (403)")
        return "evt_1"

    async def get_busy_times(self, start, end):
        if self.busy_error:
            raise CollaboratorFailure("google_calendar", "free/busy query failed (401)")
        return [BusyInterval(start=s, end=e) for s, e in self.busy]


class FakeNotifier:
    """Collects sent messages; raises for addresses in ``fail_for``."""

    def __init__(self, fail_for=(), reject_for=()):
        self.fail_for = set(fail_for)
        self.reject_for = set(reject_for)
        self.sent = []

    async def send(self, to_email, message):
        if to_email in self.fail_for:
            raise CollaboratorFailure("sendgrid", "connection reset")
        if to_email in self.reject_for:
            return False
        self.sent.append((to_email, message))
        return True


@pytest.fixture(autouse=True)
def disable_rate_limiting_for_tests(request):
    """Disable rate limiting for all tests except rate limiting tests."""
    if "rate_limit" in request.keywords:
        limiter.reset()
        limiter.enabled = True
        yield
        limiter.reset()
    else:
        limiter.enabled = False
        yield
        limiter.enabled = True


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    """Fresh settings per test; integrations off unless a test enables them."""
    monkeypatch.setattr(
        config,
        "settings",
        config.Settings(
            DATABASE_URL=SQLALCHEMY_DATABASE_URL,
            ADMIN_PASSWORD="adminpass",
            WEBHOOK_SECRET="hook-secret",
            PUBLIC_BASE_URL="https://meet.example.com",
            FINALIZE_INLINE=True,
            VIDEO_BOOKING_ENABLED=False,
            CALENDAR_ENABLED=False,
            NOTIFICATIONS_ENABLED=False,
            COLLABORATOR_TIMEOUT=2.0,
        ),
    )
    return config.settings


@pytest_asyncio.fixture
async def db_engine():
    """Create a fresh database for each test."""
    engine = create_async_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Create a new database session for a test."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def repository(db_session):
    return PollRepository(db_session)


@pytest.fixture
def make_poll(repository):
    """Factory creating an active poll through the state machine.

    Defaults to the two-slot, two-participant kickoff poll.
    """
    async def _make(
        title="Project kickoff",
        slots=None,
        participants=None,
        modality="video",
        duration_minutes=30,
        description=None,
    ):
        if slots is None:
            slots = [
                (datetime(2024, 1, 8, 9, 0, tzinfo=UTC), datetime(2024, 1, 8, 9, 30, tzinfo=UTC)),
                (datetime(2024, 1, 8, 10, 0, tzinfo=UTC), datetime(2024, 1, 8, 10, 30, tzinfo=UTC)),
            ]
        if participants is None:
            participants = [("Alice", "alice@example.com"), ("Bob", "bob@example.com")]
        draft = PollDraft(
            title=title,
            description=description,
            duration_minutes=duration_minutes,
            modality=modality,
            slots=[SlotInput(start_time=s, end_time=e) for s, e in slots],
            participants=[ParticipantInput(name=n, email=e) for n, e in participants],
        )
        return await PollStateMachine(repository).create(draft)

    return _make


@pytest.fixture
def fakes():
    """Fake provider classes, for tests that need a failing variant."""
    return SimpleNamespace(booking=FakeBookingProvider, calendar=FakeCalendarProvider, notifier=FakeNotifier)


@pytest.fixture
def fake_booking():
    return FakeBookingProvider()


@pytest.fixture
def fake_calendar():
    return FakeCalendarProvider()


@pytest.fixture
def fake_notifier():
    return FakeNotifier()


@pytest_asyncio.fixture
async def client(session_factory):
    """Async HTTP client against the app with a test database."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[deps.get_db] = override_get_db
    app.dependency_overrides[deps.get_booking_provider] = lambda: None
    app.dependency_overrides[deps.get_calendar_provider] = lambda: None
    app.dependency_overrides[deps.get_notifier] = lambda: None

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_token():
    """Generate a valid admin JWT token."""
    return create_access_token({"is_admin": True})


@pytest.fixture
def admin_client(client, admin_token):
    """Client with the admin cookie already set."""
    client.cookies.set("admin_token", admin_token)
    return client


@pytest.fixture
def integrations(client, monkeypatch, fake_booking, fake_calendar, fake_notifier):
    """Enable every integration and route it to the fakes."""
    monkeypatch.setattr(config.settings, "VIDEO_BOOKING_ENABLED", True)
    monkeypatch.setattr(config.settings, "CALENDAR_ENABLED", True)
    monkeypatch.setattr(config.settings, "NOTIFICATIONS_ENABLED", True)
    app.dependency_overrides[deps.get_booking_provider] = lambda: fake_booking
    app.dependency_overrides[deps.get_calendar_provider] = lambda: fake_calendar
    app.dependency_overrides[deps.get_notifier] = lambda: fake_notifier
    return fake_booking, fake_calendar, fake_notifier
