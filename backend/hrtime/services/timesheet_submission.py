"""
Timesheet submission: validate a draft, attach it to today's open time log
(creating one if needed), freeze the log and open its approval record.

Once the time log is marked submitted the approval row must follow. If the
store refuses it, ``SubmissionIncomplete`` is raised and calling ``submit``
again with the same ``time_log_id`` creates the missing row. A log that
already has its approval is left untouched.
"""

import logging
import math
import uuid
from typing import Callable, Optional

from hrtime.exceptions import (
    AuthenticationMissing,
    StoreError,
    SubmissionIncomplete,
    TimeLogNotFound,
    ValidationFailed,
)
from hrtime.models.time_log import TimeLog, encode_notes
from hrtime.schemas.timesheet import SubmissionResult, TimesheetDraft, allocation_from_draft
from hrtime.services.time_log_store import TimesheetStore, utc_now
from hrtime.services.timesheet_validation import TimesheetValidator

logger = logging.getLogger(__name__)


def minutes_from_hours(hours: float) -> int:
    """Whole minutes, halves rounded up."""
    return int(math.floor(float(hours or 0) * 60 + 0.5))


class TimesheetSubmissionService:
    def __init__(
        self,
        store: TimesheetStore,
        validator: Optional[TimesheetValidator] = None,
        now: Callable = utc_now,
    ):
        self.store = store
        self.validator = validator or TimesheetValidator()
        self._now = now

    def submit(
        self,
        employee_id: Optional[uuid.UUID],
        draft: TimesheetDraft,
        time_log_id: Optional[uuid.UUID] = None,
        *,
        org_id: Optional[uuid.UUID] = None,
    ) -> SubmissionResult:
        if not employee_id:
            raise AuthenticationMissing("An employee id is required to submit a timesheet")

        now = self._now()
        log: Optional[TimeLog] = None

        if time_log_id is not None:
            log = self.store.get_time_log(time_log_id, employee_id=employee_id)
            if log is None:
                raise TimeLogNotFound(time_log_id)
            if log.is_submitted:
                return self._open_approval(log, now, employee_id, org_id)

        result = self.validator.validate(draft)
        if not result.ok:
            logger.info("Timesheet draft for employee %s rejected: %s", employee_id, result.reasons[0])
            raise ValidationFailed(result.reasons[0], result.reasons)

        if log is None:
            log = self._find_or_create_open_log(employee_id, draft, now, org_id)

        fields = {
            "notes": encode_notes(draft.title, draft.work_report),
            "project_time_data": allocation_from_draft(draft).to_storage(),
            "total_working_hours": draft.total_working_hours,
            "is_submitted": True,
        }
        if log.duration_minutes is None:
            fields["duration_minutes"] = minutes_from_hours(draft.total_working_hours)

        log = self.store.update_time_log(log.id, **fields)
        logger.info("Time log %s submitted by employee %s", log.id, employee_id)

        return self._open_approval(log, now, employee_id, org_id)

    def _find_or_create_open_log(
        self,
        employee_id: uuid.UUID,
        draft: TimesheetDraft,
        now,
        org_id: Optional[uuid.UUID],
    ) -> TimeLog:
        today = now.date()
        log = self.store.find_open_time_log(employee_id, today)
        if log is not None:
            return log

        return self.store.create_time_log(
            employee_id=employee_id,
            org_id=org_id,
            date=today,
            clock_in_time=now,
            notes=encode_notes(draft.title, draft.work_report),
            duration_minutes=minutes_from_hours(draft.total_working_hours),
            total_working_hours=draft.total_working_hours,
            project_time_data=allocation_from_draft(draft).to_storage(),
            status="normal",
            is_submitted=False,
        )

    def _open_approval(self, log: TimeLog, now, employee_id: uuid.UUID, org_id: Optional[uuid.UUID]) -> SubmissionResult:
        try:
            existing = self.store.get_approval_for_time_log(log.id)
            if existing is not None:
                return SubmissionResult(ok=True, time_log_id=log.id, approval_id=existing.id, already_submitted=True)
            approval = self.store.create_approval(log.id, now, actor_id=employee_id, org_id=org_id or log.org_id)
        except StoreError as exc:
            logger.error("Time log %s is submitted but has no approval row", log.id)
            raise SubmissionIncomplete(log.id, exc) from exc

        return SubmissionResult(ok=True, time_log_id=log.id, approval_id=approval.id)
