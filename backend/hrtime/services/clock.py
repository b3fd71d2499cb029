"""Clock in / clock out on the daily time log, and manual attendance marking."""

import logging
import math
import uuid
from datetime import date, datetime, time, timezone
from typing import Callable, Optional, Union

from hrtime.config import TimesheetSettings, get_settings
from hrtime.exceptions import (
    AuthenticationMissing,
    IllegalTransition,
    StoreError,
    SubmissionIncomplete,
    TimeLogNotFound,
)
from hrtime.models.time_log import TimeLog
from hrtime.schemas.timesheet import DetailedAllocation, ProjectAllocation
from hrtime.services.time_log_store import TimesheetStore, as_utc, utc_now

logger = logging.getLogger(__name__)

# a marked day counts as a full working day
MANUAL_ATTENDANCE_MINUTES = 480


def elapsed_minutes(clock_in, clock_out) -> int:
    """Minutes between two instants, partial minutes counted as whole ones."""
    seconds = (as_utc(clock_out) - as_utc(clock_in)).total_seconds()
    return max(int(math.ceil(seconds / 60)), 0)


class ClockService:
    def __init__(
        self,
        store: TimesheetStore,
        settings: Optional[TimesheetSettings] = None,
        now: Callable = utc_now,
    ):
        self.store = store
        self.settings = settings or get_settings().timesheets
        self._now = now

    def clock_in(
        self,
        employee_id: Optional[uuid.UUID],
        *,
        org_id: Optional[uuid.UUID] = None,
        notes: Optional[str] = None,
        allocation: Optional[Union[ProjectAllocation, DetailedAllocation]] = None,
        total_working_hours: Optional[float] = None,
    ) -> TimeLog:
        """Open today's time log. Zero or missing working hours fall back to the configured default."""
        if not employee_id:
            raise AuthenticationMissing("An employee id is required to clock in")
        now = self._now()
        existing = self.store.find_open_time_log(employee_id, now.date())
        if existing is not None:
            logger.info("Employee %s already has open time log %s", employee_id, existing.id)
            return existing

        log = self.store.create_time_log(
            employee_id=employee_id,
            org_id=org_id,
            date=now.date(),
            clock_in_time=now,
            notes=notes,
            status="normal",
            project_time_data=allocation.to_storage() if allocation is not None else None,
            total_working_hours=total_working_hours or self.settings.default_working_hours,
            is_submitted=False,
        )
        logger.info("Employee %s clocked in (time log %s)", employee_id, log.id)
        return log

    def active_time_log(self, employee_id: Optional[uuid.UUID]) -> Optional[TimeLog]:
        if not employee_id:
            raise AuthenticationMissing("An employee id is required to look up the active time log")
        return self.store.find_active_time_log(employee_id)

    def mark_attendance(
        self,
        employee_id: uuid.UUID,
        on_date: date,
        clock_in_at: time,
        *,
        org_id: Optional[uuid.UUID] = None,
        marked_by: Optional[uuid.UUID] = None,
    ) -> TimeLog:
        """Record a full day for ``employee_id`` on ``on_date``, already submitted.

        The row goes into the review queue like any other submission.
        """
        clock_in_time = datetime.combine(on_date, clock_in_at, tzinfo=clock_in_at.tzinfo or timezone.utc)
        log = self.store.create_time_log(
            employee_id=employee_id,
            org_id=org_id,
            date=on_date,
            clock_in_time=clock_in_time,
            clock_out_time=clock_in_time,
            duration_minutes=MANUAL_ATTENDANCE_MINUTES,
            status="normal",
            total_working_hours=MANUAL_ATTENDANCE_MINUTES / 60,
            is_submitted=True,
        )
        try:
            self.store.create_approval(log.id, self._now(), actor_id=marked_by, org_id=org_id)
        except StoreError as exc:
            logger.error("Marked time log %s has no approval row", log.id)
            raise SubmissionIncomplete(log.id, exc) from exc
        logger.info("Attendance marked for employee %s on %s by %s (time log %s)", employee_id, on_date, marked_by, log.id)
        return log

    def clock_out(
        self,
        time_log_id: uuid.UUID,
        *,
        employee_id: Optional[uuid.UUID] = None,
        grace_period: bool = False,
    ) -> TimeLog:
        return self._close(time_log_id, employee_id, "grace_period" if grace_period else "normal", "clock_out")

    def auto_terminate(self, time_log_id: uuid.UUID, *, employee_id: Optional[uuid.UUID] = None) -> TimeLog:
        return self._close(time_log_id, employee_id, "auto_terminated", "auto_terminate")

    def _close(self, time_log_id, employee_id, status: str, action: str) -> TimeLog:
        log = self.store.get_time_log(time_log_id, employee_id=employee_id)
        if log is None:
            raise TimeLogNotFound(time_log_id)
        if log.is_submitted:
            raise IllegalTransition(action, "Submitted", log.id)
        if log.clock_out_time is not None:
            raise IllegalTransition(action, "ClockedOut", log.id)
        if log.clock_in_time is None:
            raise IllegalTransition(action, "NotClockedIn", log.id)

        now = self._now()
        log = self.store.update_time_log(
            log.id,
            clock_out_time=now,
            duration_minutes=elapsed_minutes(log.clock_in_time, now),
            status=status,
        )
        logger.info("Time log %s closed with status %s (%s min)", log.id, status, log.duration_minutes)
        return log
