from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from uuid import UUID

from hrtime.schemas.timesheet import TimeLogResponse


class ApprovalResponse(BaseModel):
    id: UUID
    time_log_id: UUID
    status: str
    clarification_status: Optional[str] = None
    rejection_reason: Optional[str] = None
    clarification_response: Optional[str] = None
    clarification_submitted_at: Optional[datetime] = None
    submitted_at: datetime
    approved_at: Optional[datetime] = None
    reviewed_by: Optional[UUID] = None
    state: str

    model_config = {"from_attributes": True}


class ApprovalWithTimeLog(ApprovalResponse):
    time_log: TimeLogResponse


class ClarificationRequest(BaseModel):
    reason: str


class ClarificationResponseBody(BaseModel):
    response: str
