"""Timesheet approvals: reviewer queues and the clarification cycle."""

import uuid

from fastapi import APIRouter, Depends

from hrtime.dependencies import (
    get_approval_service,
    get_current_org_id,
    get_current_user_id,
    require_manager,
)
from hrtime.models.timesheet_approval import TimesheetApproval
from hrtime.routers.timesheets import time_log_to_response
from hrtime.schemas.timesheet_approval import (
    ApprovalResponse,
    ApprovalWithTimeLog,
    ClarificationRequest,
    ClarificationResponseBody,
)
from hrtime.services.timesheet_approval import TimesheetApprovalService, approval_state

router = APIRouter(prefix="/api/v1/timesheet-approvals", tags=["Timesheet Approvals"])


def _to_response(approval: TimesheetApproval) -> ApprovalResponse:
    return ApprovalResponse(
        id=approval.id,
        time_log_id=approval.time_log_id,
        status=approval.status,
        clarification_status=approval.clarification_status,
        rejection_reason=approval.rejection_reason,
        clarification_response=approval.clarification_response,
        clarification_submitted_at=approval.clarification_submitted_at,
        submitted_at=approval.submitted_at,
        approved_at=approval.approved_at,
        reviewed_by=approval.reviewed_by,
        state=approval_state(approval).value,
    )


def _with_time_log(approval: TimesheetApproval) -> ApprovalWithTimeLog:
    return ApprovalWithTimeLog(
        **_to_response(approval).model_dump(),
        time_log=time_log_to_response(approval.time_log),
    )


# ── Reviewer queues ──

@router.get("/pending", response_model=list[ApprovalWithTimeLog])
def list_pending(
    org_id: uuid.UUID = Depends(get_current_org_id),
    _role: str = Depends(require_manager),
    service: TimesheetApprovalService = Depends(get_approval_service),
):
    return [_with_time_log(a) for a in service.pending_queue(org_id)]


@router.get("/clarifications", response_model=list[ApprovalWithTimeLog])
def list_clarifications(
    org_id: uuid.UUID = Depends(get_current_org_id),
    _role: str = Depends(require_manager),
    service: TimesheetApprovalService = Depends(get_approval_service),
):
    return [_with_time_log(a) for a in service.clarification_queue(org_id)]


@router.get("/approved", response_model=list[ApprovalWithTimeLog])
def list_approved(
    org_id: uuid.UUID = Depends(get_current_org_id),
    _role: str = Depends(require_manager),
    service: TimesheetApprovalService = Depends(get_approval_service),
):
    return [_with_time_log(a) for a in service.approved_queue(org_id)]


# ── Review Flow ──

@router.post("/{approval_id}/approve", response_model=ApprovalResponse)
def approve_timesheet(
    approval_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    org_id: uuid.UUID = Depends(get_current_org_id),
    _role: str = Depends(require_manager),
    service: TimesheetApprovalService = Depends(get_approval_service),
):
    return _to_response(service.approve(approval_id, reviewer_id=user_id, org_id=org_id))


@router.post("/{approval_id}/request-clarification", response_model=ApprovalResponse)
def request_clarification(
    approval_id: uuid.UUID,
    body: ClarificationRequest,
    user_id: uuid.UUID = Depends(get_current_user_id),
    org_id: uuid.UUID = Depends(get_current_org_id),
    _role: str = Depends(require_manager),
    service: TimesheetApprovalService = Depends(get_approval_service),
):
    return _to_response(
        service.request_clarification(approval_id, body.reason, reviewer_id=user_id, org_id=org_id)
    )


@router.post("/{approval_id}/submit-clarification", response_model=ApprovalResponse)
def submit_clarification(
    approval_id: uuid.UUID,
    body: ClarificationResponseBody,
    user_id: uuid.UUID = Depends(get_current_user_id),
    org_id: uuid.UUID = Depends(get_current_org_id),
    service: TimesheetApprovalService = Depends(get_approval_service),
):
    return _to_response(
        service.submit_clarification(approval_id, body.response, employee_id=user_id, org_id=org_id)
    )
