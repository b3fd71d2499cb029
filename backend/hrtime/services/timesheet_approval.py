"""
Timesheet approval workflow.

    Draft --submit--> Pending --approve--> Approved (terminal)
                         |
                         +--request_clarification--> ClarificationNeeded
                                                             |
                                        submit_clarification |
                                                             v
                                                  ClarificationSubmitted
                            (approve, or request_clarification again)

The state is derived from the approval row: ``status`` plus
``clarification_status``. ``submit_clarification`` never touches ``status``,
so a reviewer's approve always decides the outcome. Each transition is checked
again against the locked row right before it is written; a move that lost a
race to another reviewer raises ``IllegalTransition``.
"""

import enum
import logging
import uuid
from typing import Callable, Optional

from hrtime.exceptions import ApprovalNotFound, EmptyReason, EmptyResponse, IllegalTransition
from hrtime.models.timesheet_approval import TimesheetApproval
from hrtime.services.time_log_store import ANY, TimesheetStore, utc_now

logger = logging.getLogger(__name__)

APPROVED_QUEUE_LIMIT = 50


class ApprovalState(str, enum.Enum):
    DRAFT = "Draft"
    PENDING = "Pending"
    CLARIFICATION_NEEDED = "ClarificationNeeded"
    CLARIFICATION_SUBMITTED = "ClarificationSubmitted"
    APPROVED = "Approved"


ALLOWED_FROM = {
    "approve": {ApprovalState.PENDING, ApprovalState.CLARIFICATION_SUBMITTED},
    "request_clarification": {ApprovalState.PENDING, ApprovalState.CLARIFICATION_SUBMITTED},
    "submit_clarification": {ApprovalState.CLARIFICATION_NEEDED},
}


def approval_state(approval: Optional[TimesheetApproval]) -> ApprovalState:
    if approval is None:
        return ApprovalState.DRAFT
    if approval.status == "approved":
        return ApprovalState.APPROVED
    if approval.clarification_status == "needed":
        return ApprovalState.CLARIFICATION_NEEDED
    if approval.clarification_status == "submitted":
        return ApprovalState.CLARIFICATION_SUBMITTED
    return ApprovalState.PENDING


class TimesheetApprovalService:
    def __init__(self, store: TimesheetStore, now: Callable = utc_now):
        self.store = store
        self._now = now

    def _load(self, approval_id: uuid.UUID, org_id: Optional[uuid.UUID]) -> TimesheetApproval:
        approval = self.store.get_approval(approval_id, org_id=org_id)
        if approval is None:
            raise ApprovalNotFound(approval_id)
        return approval

    def _check(self, action: str, approval: TimesheetApproval) -> ApprovalState:
        state = approval_state(approval)
        if state not in ALLOWED_FROM[action]:
            raise IllegalTransition(action, state.value, approval.id)
        return state

    def _allows(self, action: str) -> Callable[[TimesheetApproval], bool]:
        """State check re-run by the store against the locked row."""
        def check(approval: TimesheetApproval) -> bool:
            self._check(action, approval)
            return True
        return check

    def _approvable(self, approval: TimesheetApproval) -> bool:
        if approval_state(approval) is ApprovalState.APPROVED:
            return False
        self._check("approve", approval)
        return True

    # ── reviewer actions ──

    def approve(
        self,
        approval_id: uuid.UUID,
        *,
        reviewer_id: Optional[uuid.UUID] = None,
        org_id: Optional[uuid.UUID] = None,
    ) -> TimesheetApproval:
        approval = self._load(approval_id, org_id)
        if not self._approvable(approval):
            logger.info("Approval %s already approved; nothing to do", approval_id)
            return approval

        approval = self.store.update_approval(
            approval.id,
            {
                "status": "approved",
                "approved_at": self._now(),
                "clarification_status": None,
                "rejection_reason": None,
                "reviewed_by": reviewer_id,
            },
            check=self._approvable,
            action="timesheet.approved",
            actor_id=reviewer_id,
            org_id=org_id,
        )
        logger.info("Timesheet approval %s approved by %s", approval_id, reviewer_id)
        return approval

    def request_clarification(
        self,
        approval_id: uuid.UUID,
        reason: str,
        *,
        reviewer_id: Optional[uuid.UUID] = None,
        org_id: Optional[uuid.UUID] = None,
    ) -> TimesheetApproval:
        approval = self._load(approval_id, org_id)
        self._check("request_clarification", approval)
        if not reason or not reason.strip():
            raise EmptyReason()

        approval = self.store.update_approval(
            approval.id,
            {
                "clarification_status": "needed",
                "rejection_reason": reason.strip(),
                "reviewed_by": reviewer_id,
            },
            check=self._allows("request_clarification"),
            action="timesheet.clarification_requested",
            actor_id=reviewer_id,
            org_id=org_id,
        )
        logger.info("Clarification requested on approval %s", approval_id)
        return approval

    # ── employee action ──

    def submit_clarification(
        self,
        approval_id: uuid.UUID,
        response: str,
        *,
        employee_id: Optional[uuid.UUID] = None,
        org_id: Optional[uuid.UUID] = None,
    ) -> TimesheetApproval:
        approval = self._load(approval_id, org_id)
        if employee_id is not None and approval.time_log.employee_id != employee_id:
            raise ApprovalNotFound(approval_id)
        self._check("submit_clarification", approval)
        if not response or not response.strip():
            raise EmptyResponse()

        approval = self.store.update_approval(
            approval.id,
            {
                "clarification_status": "submitted",
                "clarification_response": response.strip(),
                "clarification_submitted_at": self._now(),
            },
            check=self._allows("submit_clarification"),
            action="timesheet.clarification_submitted",
            actor_id=employee_id,
            org_id=org_id,
        )
        logger.info("Clarification submitted on approval %s", approval_id)
        return approval

    # ── reviewer queues ──

    def list_approvals(
        self,
        status: Optional[str] = None,
        clarification_status=ANY,
        org_id: Optional[uuid.UUID] = None,
        limit: Optional[int] = None,
    ) -> list[TimesheetApproval]:
        order_by = "approved_at" if status == "approved" else "submitted_at"
        return self.store.list_approvals(
            status=status,
            clarification_status=clarification_status,
            org_id=org_id,
            order_by=order_by,
            limit=limit,
        )

    def pending_queue(self, org_id: Optional[uuid.UUID] = None) -> list[TimesheetApproval]:
        return self.list_approvals(status="pending", clarification_status=None, org_id=org_id)

    def clarification_queue(self, org_id: Optional[uuid.UUID] = None) -> list[TimesheetApproval]:
        return self.list_approvals(status="pending", clarification_status="submitted", org_id=org_id)

    def approved_queue(self, org_id: Optional[uuid.UUID] = None) -> list[TimesheetApproval]:
        return self.list_approvals(status="approved", org_id=org_id, limit=APPROVED_QUEUE_LIMIT)
