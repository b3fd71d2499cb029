"""
Request identity and service wiring.

Identity comes from request headers (X-User-Id, X-Org-Id, X-User-Role) and is
handed to every service call explicitly. With AUTH_MODE=demo, missing headers
fall back to fixed demo identities; in any other mode a missing identity is an
``AuthenticationMissing`` error.
"""

import uuid
from fastapi import HTTPException, Header, Depends
from sqlalchemy.orm import Session
from typing import Optional

from hrtime.config import get_settings
from hrtime.database import get_db
from hrtime.exceptions import AuthenticationMissing
from hrtime.services.clock import ClockService
from hrtime.services.financials import FinancialNormalizer
from hrtime.services.time_log_store import TimesheetStore
from hrtime.services.timesheet_approval import TimesheetApprovalService
from hrtime.services.timesheet_submission import TimesheetSubmissionService
from hrtime.services.timesheet_validation import TimesheetValidator

# Demo placeholders: used only when AUTH_MODE=demo and no header is provided
DEMO_ORG_ID = "00000000-0000-0000-0000-000000000000"
DEMO_USER_ID = "00000000-0000-0000-0000-000000000000"
DEMO_ROLE = "hr_admin"

REVIEWER_ROLES = ("manager", "hr_admin", "super_admin")


def _as_uuid(value) -> uuid.UUID:
    if value is None:
        raise ValueError("None is not a UUID")
    if isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value))


def _demo_mode() -> bool:
    return get_settings().auth_mode == "demo"


def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> uuid.UUID:
    """Employee / reviewer UUID from X-User-Id."""
    if not x_user_id:
        if not _demo_mode():
            raise AuthenticationMissing()
        x_user_id = DEMO_USER_ID
    try:
        return _as_uuid(x_user_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid X-User-Id (must be UUID)")


def get_current_org_id(x_org_id: Optional[str] = Header(default=None)) -> uuid.UUID:
    """Org UUID from X-Org-Id."""
    if not x_org_id:
        if not _demo_mode():
            raise AuthenticationMissing()
        x_org_id = DEMO_ORG_ID
    try:
        return _as_uuid(x_org_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid X-Org-Id (must be UUID)")


def get_current_role(x_user_role: Optional[str] = Header(default=None)) -> str:
    if x_user_role:
        return x_user_role
    if _demo_mode():
        return DEMO_ROLE
    raise AuthenticationMissing()


def require_manager(role: str = Depends(get_current_role)) -> str:
    """Require manager or admin role. Returns the role."""
    if role not in REVIEWER_ROLES:
        raise HTTPException(status_code=403, detail="Manager access required")
    return role


# ── services ──

def get_store(db: Session = Depends(get_db)) -> TimesheetStore:
    return TimesheetStore(db)


def get_submission_service(store: TimesheetStore = Depends(get_store)) -> TimesheetSubmissionService:
    return TimesheetSubmissionService(store, TimesheetValidator(get_settings().timesheets))


def get_approval_service(store: TimesheetStore = Depends(get_store)) -> TimesheetApprovalService:
    return TimesheetApprovalService(store)


def get_clock_service(store: TimesheetStore = Depends(get_store)) -> ClockService:
    return ClockService(store, get_settings().timesheets)


def get_validator() -> TimesheetValidator:
    return TimesheetValidator(get_settings().timesheets)


def get_normalizer() -> FinancialNormalizer:
    return FinancialNormalizer(get_settings().billing)
