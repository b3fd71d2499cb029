"""
Shared fixtures: an in-memory SQLite store, a controllable clock and an API
client wired to the same session.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("AUTH_MODE", "demo")

from datetime import datetime, timedelta, timezone  # noqa: E402
from uuid import uuid4  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from hrtime.config import BillingSettings, TimesheetSettings  # noqa: E402
from hrtime.database import Base, get_db  # noqa: E402
from hrtime.models import audit_log, project_assignment, time_log, timesheet_approval  # noqa: E402,F401
from hrtime.services.time_log_store import TimesheetStore  # noqa: E402
from hrtime.services.timesheet_approval import TimesheetApprovalService  # noqa: E402
from hrtime.services.timesheet_submission import TimesheetSubmissionService  # noqa: E402
from hrtime.services.timesheet_validation import TimesheetValidator  # noqa: E402


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture
def session(engine):
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = Session()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def store(session):
    return TimesheetStore(session)


@pytest.fixture
def timesheet_settings():
    return TimesheetSettings(max_daily_hours=8.0, require_title=False, default_working_hours=8.0)


@pytest.fixture
def billing_settings():
    return BillingSettings(fx_rate_usd_to_inr=84.0)


@pytest.fixture
def validator(timesheet_settings):
    return TimesheetValidator(timesheet_settings)


@pytest.fixture
def submission_service(store, validator, clock):
    return TimesheetSubmissionService(store, validator, now=clock)


@pytest.fixture
def approval_service(store, clock):
    return TimesheetApprovalService(store, now=clock)


@pytest.fixture
def employee_id():
    return uuid4()


@pytest.fixture
def org_id():
    return uuid4()


@pytest.fixture
def client(session):
    from fastapi.testclient import TestClient

    from hrtime.main import app

    def _get_db():
        yield session

    app.dependency_overrides[get_db] = _get_db
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()
