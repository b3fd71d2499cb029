from pydantic import BaseModel, Field
from typing import Annotated, Literal, Optional, Union
from datetime import date, datetime, time
from uuid import UUID


class ProjectAllocationEntry(BaseModel):
    project_id: str = ""
    hours: float = Field(default=0, ge=0)
    report: str = ""
    client_id: Optional[str] = None


class DetailedTimesheetEntry(BaseModel):
    hours: float = Field(default=0, ge=0)
    description: str = ""
    category: Optional[str] = None
    project: Optional[str] = None


class TimesheetDraft(BaseModel):
    employee_has_projects: bool = False
    project_entries: list[ProjectAllocationEntry] = []
    detailed_entries: list[DetailedTimesheetEntry] = []
    title: str = ""
    work_report: str = ""
    total_working_hours: float = Field(default=8, ge=0, le=24)


# ── Allocation: exactly one shape per time log ──

class ProjectAllocation(BaseModel):
    kind: Literal["projects"] = "projects"
    projects: list[ProjectAllocationEntry] = []

    def to_storage(self) -> dict:
        return {"projects": [p.model_dump() for p in self.projects]}


class DetailedAllocation(BaseModel):
    kind: Literal["entries"] = "entries"
    entries: list[DetailedTimesheetEntry] = []

    def to_storage(self) -> dict:
        return {"entries": [e.model_dump() for e in self.entries]}


Allocation = Annotated[Union[ProjectAllocation, DetailedAllocation], Field(discriminator="kind")]


def allocation_from_draft(draft: TimesheetDraft) -> Union[ProjectAllocation, DetailedAllocation]:
    """Project employees keep only booked entries; everyone else keeps their detailed rows."""
    if draft.employee_has_projects:
        return ProjectAllocation(
            projects=[p for p in draft.project_entries if p.project_id.strip() and p.hours > 0]
        )
    return DetailedAllocation(entries=list(draft.detailed_entries))


def allocation_from_storage(data: Optional[dict]) -> Optional[Union[ProjectAllocation, DetailedAllocation]]:
    if not data:
        return None
    if "projects" in data:
        return ProjectAllocation(projects=data.get("projects") or [])
    if "entries" in data:
        return DetailedAllocation(entries=data.get("entries") or [])
    return None


# ── Results ──

class ValidationResult(BaseModel):
    ok: bool
    reasons: list[str] = []


class SubmissionResult(BaseModel):
    ok: bool
    time_log_id: UUID
    approval_id: Optional[UUID] = None
    already_submitted: bool = False


class SubmitRequest(BaseModel):
    draft: TimesheetDraft
    time_log_id: Optional[UUID] = None


class ClockInRequest(BaseModel):
    notes: Optional[str] = None
    allocation: Optional[Allocation] = None
    total_working_hours: Optional[float] = Field(default=None, ge=0, le=24)


class MarkAttendanceRequest(BaseModel):
    employee_id: UUID
    date: date
    clock_in_time: time


class ClockOutRequest(BaseModel):
    grace_period: bool = False


class TimeLogResponse(BaseModel):
    id: UUID
    employee_id: UUID
    org_id: Optional[UUID] = None
    date: date
    clock_in_time: Optional[datetime] = None
    clock_out_time: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    status: str
    title: str = ""
    work_report: str = ""
    allocation: Optional[Allocation] = None
    is_submitted: bool
    total_working_hours: Optional[float] = None
    state: str
    created_at: Optional[datetime] = None
