"""Clock in / clock out on the daily time log, the active-log lookup and marked attendance."""

from datetime import date, datetime, time, timedelta, timezone
from uuid import uuid4

import pytest

from hrtime.exceptions import (
    AuthenticationMissing,
    IllegalTransition,
    StoreUnavailable,
    SubmissionIncomplete,
    TimeLogNotFound,
)
from hrtime.models.audit_log import AuditLog
from hrtime.models.time_log import TimeLog
from hrtime.models.timesheet_approval import TimesheetApproval
from hrtime.schemas.timesheet import (
    DetailedTimesheetEntry,
    ProjectAllocation,
    ProjectAllocationEntry,
    TimesheetDraft,
)
from hrtime.services.clock import ClockService, elapsed_minutes
from hrtime.services.time_log_store import as_utc


@pytest.fixture
def clock_service(store, timesheet_settings, clock):
    return ClockService(store, timesheet_settings, now=clock)


def test_elapsed_minutes_rounds_partial_minutes_up():
    start = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)
    assert elapsed_minutes(start, start + timedelta(hours=8)) == 480
    assert elapsed_minutes(start, start + timedelta(hours=8, seconds=1)) == 481
    assert elapsed_minutes(start, start) == 0


def test_elapsed_minutes_accepts_naive_values():
    start = datetime(2026, 10, 19, 9, 0)
    end = datetime(2026, 10, 19, 10, 30, tzinfo=timezone.utc)
    assert elapsed_minutes(start, end) == 90


def test_clock_in_opens_row(clock_service, session, employee_id, org_id, clock):
    log = clock_service.clock_in(employee_id, org_id=org_id, notes="on site")

    row = session.get(TimeLog, log.id)
    assert row.date == clock().date()
    assert row.clock_in_time is not None
    assert row.clock_out_time is None
    assert row.status == "normal"
    assert row.is_submitted is False
    assert row.total_working_hours == 8.0


def test_clock_in_twice_returns_same_row(clock_service, session, employee_id, clock):
    first = clock_service.clock_in(employee_id)
    clock.advance(minutes=10)
    second = clock_service.clock_in(employee_id)

    assert second.id == first.id
    assert session.query(TimeLog).count() == 1


def test_clock_in_requires_employee(clock_service):
    with pytest.raises(AuthenticationMissing):
        clock_service.clock_in(None)


def test_clock_out_sets_duration(clock_service, employee_id, clock):
    log = clock_service.clock_in(employee_id)
    clock.advance(hours=8, seconds=20)

    closed = clock_service.clock_out(log.id, employee_id=employee_id)

    assert closed.clock_out_time is not None
    assert closed.duration_minutes == 481
    assert closed.status == "normal"


def test_grace_period_clock_out(clock_service, employee_id, clock):
    log = clock_service.clock_in(employee_id)
    clock.advance(hours=9)
    closed = clock_service.clock_out(log.id, employee_id=employee_id, grace_period=True)
    assert closed.status == "grace_period"
    assert closed.duration_minutes == 540


def test_auto_terminate(clock_service, employee_id, clock):
    log = clock_service.clock_in(employee_id)
    clock.advance(hours=12)
    closed = clock_service.auto_terminate(log.id, employee_id=employee_id)
    assert closed.status == "auto_terminated"
    assert closed.duration_minutes == 720


def test_double_clock_out_is_illegal(clock_service, employee_id, clock):
    log = clock_service.clock_in(employee_id)
    clock.advance(hours=1)
    clock_service.clock_out(log.id, employee_id=employee_id)

    with pytest.raises(IllegalTransition) as exc_info:
        clock_service.clock_out(log.id, employee_id=employee_id)
    assert exc_info.value.from_state == "ClockedOut"


def test_cannot_clock_out_submitted_log(clock_service, submission_service, employee_id, clock):
    log = clock_service.clock_in(employee_id)
    submission_service.submit(employee_id, TimesheetDraft(detailed_entries=[DetailedTimesheetEntry(hours=8)]))

    with pytest.raises(IllegalTransition) as exc_info:
        clock_service.clock_out(log.id, employee_id=employee_id)
    assert exc_info.value.from_state == "Submitted"


def test_cannot_clock_out_someone_elses_log(clock_service, employee_id):
    log = clock_service.clock_in(employee_id)
    with pytest.raises(TimeLogNotFound):
        clock_service.clock_out(log.id, employee_id=uuid4())


def test_clock_in_with_allocation_and_hours(clock_service, session, employee_id):
    allocation = ProjectAllocation(projects=[ProjectAllocationEntry(project_id="P1", hours=4, report="kickoff")])

    log = clock_service.clock_in(employee_id, allocation=allocation, total_working_hours=6.5)

    row = session.get(TimeLog, log.id)
    assert row.total_working_hours == 6.5
    assert row.project_time_data["projects"][0]["project_id"] == "P1"


def test_clock_in_zero_hours_uses_default(clock_service, employee_id):
    assert clock_service.clock_in(employee_id, total_working_hours=0).total_working_hours == 8.0


class TestActiveTimeLog:
    def test_none_before_clock_in(self, clock_service, employee_id):
        assert clock_service.active_time_log(employee_id) is None

    def test_open_log_is_active(self, clock_service, employee_id):
        log = clock_service.clock_in(employee_id)
        assert clock_service.active_time_log(employee_id).id == log.id

    def test_clocked_out_log_is_not_active(self, clock_service, employee_id, clock):
        log = clock_service.clock_in(employee_id)
        clock.advance(hours=1)
        clock_service.clock_out(log.id, employee_id=employee_id)
        assert clock_service.active_time_log(employee_id) is None

    def test_other_employees_log_is_not_active(self, clock_service, employee_id):
        clock_service.clock_in(uuid4())
        assert clock_service.active_time_log(employee_id) is None

    def test_requires_employee(self, clock_service):
        with pytest.raises(AuthenticationMissing):
            clock_service.active_time_log(None)


class TestMarkAttendance:
    def test_marked_day_is_submitted_full_day(self, clock_service, session, employee_id, org_id):
        manager_id = uuid4()
        log = clock_service.mark_attendance(
            employee_id, date(2026, 10, 16), time(9, 30), org_id=org_id, marked_by=manager_id
        )

        row = session.get(TimeLog, log.id)
        assert row.date == date(2026, 10, 16)
        assert as_utc(row.clock_in_time) == datetime(2026, 10, 16, 9, 30, tzinfo=timezone.utc)
        assert row.clock_out_time == row.clock_in_time
        assert row.duration_minutes == 480
        assert row.status == "normal"
        assert row.is_submitted is True

        approval = session.query(TimesheetApproval).filter(TimesheetApproval.time_log_id == log.id).one()
        assert approval.status == "pending"
        audit = session.query(AuditLog).filter(AuditLog.resource_id == str(approval.id)).one()
        assert audit.user_id == manager_id

    def test_does_not_touch_open_row(self, clock_service, session, employee_id, clock):
        open_log = clock_service.clock_in(employee_id)
        marked = clock_service.mark_attendance(employee_id, clock().date(), time(9, 0))

        assert marked.id != open_log.id
        assert clock_service.active_time_log(employee_id).id == open_log.id

    def test_missing_approval_reported(self, clock_service, store, session, employee_id, monkeypatch):
        def refuse(*args, **kwargs):
            raise StoreUnavailable("create_approval")

        monkeypatch.setattr(store, "create_approval", refuse)

        with pytest.raises(SubmissionIncomplete) as exc_info:
            clock_service.mark_attendance(employee_id, date(2026, 10, 16), time(9, 0))
        assert session.get(TimeLog, exc_info.value.time_log_id).is_submitted is True
