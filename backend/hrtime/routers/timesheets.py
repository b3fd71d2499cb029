"""
Timesheets: employee-side time log endpoints.

Static routes (/validate, /submit, /clock-in, /active, /attendance) are declared BEFORE
/{time_log_id} so FastAPI does not try to parse them as UUIDs.
"""

import logging
import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from hrtime.dependencies import (
    get_clock_service,
    get_current_org_id,
    get_current_user_id,
    get_store,
    get_submission_service,
    get_validator,
    require_manager,
)
from hrtime.exceptions import TimeLogNotFound
from hrtime.models.time_log import TimeLog
from hrtime.models.timesheet_approval import TimesheetApproval  # noqa: F401  (registers TimeLog.approval)
from hrtime.schemas.timesheet import (
    ClockInRequest,
    ClockOutRequest,
    MarkAttendanceRequest,
    SubmissionResult,
    SubmitRequest,
    TimeLogResponse,
    TimesheetDraft,
    ValidationResult,
    allocation_from_storage,
)
from hrtime.services.clock import ClockService
from hrtime.services.time_log_store import TimesheetStore
from hrtime.services.timesheet_approval import approval_state
from hrtime.services.timesheet_submission import TimesheetSubmissionService
from hrtime.services.timesheet_validation import TimesheetValidator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/timesheets", tags=["timesheets"])


# ──────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────

def time_log_to_response(log: TimeLog) -> TimeLogResponse:
    notes = log.notes_record
    return TimeLogResponse(
        id=log.id,
        employee_id=log.employee_id,
        org_id=log.org_id,
        date=log.date,
        clock_in_time=log.clock_in_time,
        clock_out_time=log.clock_out_time,
        duration_minutes=log.duration_minutes,
        status=log.status,
        title=notes["title"],
        work_report=notes["workReport"],
        allocation=allocation_from_storage(log.project_time_data),
        is_submitted=bool(log.is_submitted),
        total_working_hours=log.total_working_hours,
        state=approval_state(log.approval).value,
        created_at=log.created_at,
    )


# ══════════════════════════════════════════════
# STATIC ROUTES: MUST be before /{time_log_id}
# ══════════════════════════════════════════════


# ── VALIDATE ──

@router.post("/validate", response_model=ValidationResult)
def validate_timesheet(
    draft: TimesheetDraft,
    validator: TimesheetValidator = Depends(get_validator),
):
    """Dry-run the submission rules. Always 200; failures come back as reasons."""
    return validator.validate(draft)


# ── SUBMIT ──

@router.post("/submit", response_model=SubmissionResult)
def submit_timesheet(
    payload: SubmitRequest,
    service: TimesheetSubmissionService = Depends(get_submission_service),
    store: TimesheetStore = Depends(get_store),
    user_id: uuid.UUID = Depends(get_current_user_id),
    org_id: uuid.UUID = Depends(get_current_org_id),
):
    """Submit today's timesheet. The project/detailed shape follows the employee's assignments."""
    draft = payload.draft.model_copy(
        update={"employee_has_projects": store.employee_has_projects(user_id)}
    )
    return service.submit(user_id, draft, payload.time_log_id, org_id=org_id)


# ── CLOCK IN ──

@router.post("/clock-in", response_model=TimeLogResponse, status_code=201)
def clock_in(
    payload: ClockInRequest,
    clock: ClockService = Depends(get_clock_service),
    user_id: uuid.UUID = Depends(get_current_user_id),
    org_id: uuid.UUID = Depends(get_current_org_id),
):
    log = clock.clock_in(
        user_id,
        org_id=org_id,
        notes=payload.notes,
        allocation=payload.allocation,
        total_working_hours=payload.total_working_hours,
    )
    return time_log_to_response(log)


# ── ACTIVE (clocked in, not yet out) ──

@router.get("/active", response_model=Optional[TimeLogResponse])
def get_active_time_log(
    clock: ClockService = Depends(get_clock_service),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    log = clock.active_time_log(user_id)
    return time_log_to_response(log) if log else None


# ── MARK ATTENDANCE (manager) ──

@router.post("/attendance", response_model=TimeLogResponse, status_code=201)
def mark_attendance(
    payload: MarkAttendanceRequest,
    clock: ClockService = Depends(get_clock_service),
    user_id: uuid.UUID = Depends(get_current_user_id),
    org_id: uuid.UUID = Depends(get_current_org_id),
    _role: str = Depends(require_manager),
):
    log = clock.mark_attendance(
        payload.employee_id, payload.date, payload.clock_in_time, org_id=org_id, marked_by=user_id
    )
    return time_log_to_response(log)


# ── LIST (own logs) ──

@router.get("/", response_model=list[TimeLogResponse])
def list_time_logs(
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    store: TimesheetStore = Depends(get_store),
    user_id: uuid.UUID = Depends(get_current_user_id),
    org_id: uuid.UUID = Depends(get_current_org_id),
):
    logs = store.list_time_logs(employee_id=user_id, org_id=org_id, start=start, end=end)
    return [time_log_to_response(log) for log in logs]


# ══════════════════════════════════════════════
# DYNAMIC ROUTES: /{time_log_id} AFTER static routes
# ══════════════════════════════════════════════


@router.get("/{time_log_id}", response_model=TimeLogResponse)
def get_time_log(
    time_log_id: uuid.UUID,
    store: TimesheetStore = Depends(get_store),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    log = store.get_time_log(time_log_id, employee_id=user_id)
    if not log:
        raise TimeLogNotFound(time_log_id)
    return time_log_to_response(log)


@router.post("/{time_log_id}/clock-out", response_model=TimeLogResponse)
def clock_out(
    time_log_id: uuid.UUID,
    payload: ClockOutRequest,
    clock: ClockService = Depends(get_clock_service),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    return time_log_to_response(
        clock.clock_out(time_log_id, employee_id=user_id, grace_period=payload.grace_period)
    )


@router.post("/{time_log_id}/auto-terminate", response_model=TimeLogResponse)
def auto_terminate(
    time_log_id: uuid.UUID,
    clock: ClockService = Depends(get_clock_service),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    return time_log_to_response(clock.auto_terminate(time_log_id, employee_id=user_id))
