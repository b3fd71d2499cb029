"""
Record store for time logs and their approval rows.

Each write commits on its own, so a returned value means the store has
acknowledged it. Connection problems and timeouts surface as
``StoreUnavailable``; nothing here retries.
"""

import logging
import uuid
from contextlib import contextmanager
from datetime import date, datetime, timezone
from typing import Any, Callable, Iterator, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from hrtime.exceptions import ApprovalNotFound, IllegalTransition, StoreUnavailable, TimeLogNotFound
from hrtime.models.project_assignment import ProjectAssignment
from hrtime.models.time_log import TimeLog
from hrtime.models.timesheet_approval import TimesheetApproval
from hrtime.services.audit import log_action

logger = logging.getLogger(__name__)

# list_approvals(clarification_status=ANY) means "don't filter"; None means "IS NULL"
ANY = object()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes read back from stores without tz support."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class TimesheetStore:
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.warning("Store call %s failed: %s", operation, exc.__class__.__name__)
            raise StoreUnavailable(operation, exc) from exc

    # ── time logs ──

    def find_open_time_log(self, employee_id: uuid.UUID, on_date: date) -> Optional[TimeLog]:
        with self._guard("find_open_time_log"):
            return (
                self.db.query(TimeLog)
                .filter(
                    TimeLog.employee_id == employee_id,
                    TimeLog.date == on_date,
                    TimeLog.is_submitted.is_(False),
                )
                .first()
            )

    def find_active_time_log(self, employee_id: uuid.UUID) -> Optional[TimeLog]:
        """The employee's latest clocked-in log that is neither clocked out nor submitted."""
        with self._guard("find_active_time_log"):
            return (
                self.db.query(TimeLog)
                .filter(
                    TimeLog.employee_id == employee_id,
                    TimeLog.is_submitted.is_(False),
                    TimeLog.clock_in_time.isnot(None),
                    TimeLog.clock_out_time.is_(None),
                )
                .order_by(TimeLog.clock_in_time.desc())
                .first()
            )

    def get_time_log(
        self,
        time_log_id: uuid.UUID,
        employee_id: Optional[uuid.UUID] = None,
        org_id: Optional[uuid.UUID] = None,
    ) -> Optional[TimeLog]:
        with self._guard("get_time_log"):
            q = self.db.query(TimeLog).filter(TimeLog.id == time_log_id)
            if employee_id is not None:
                q = q.filter(TimeLog.employee_id == employee_id)
            if org_id is not None:
                q = q.filter(TimeLog.org_id == org_id)
            return q.first()

    def list_time_logs(
        self,
        employee_id: Optional[uuid.UUID] = None,
        org_id: Optional[uuid.UUID] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        submitted_only: bool = False,
    ) -> list[TimeLog]:
        with self._guard("list_time_logs"):
            q = self.db.query(TimeLog)
            if employee_id is not None:
                q = q.filter(TimeLog.employee_id == employee_id)
            if org_id is not None:
                q = q.filter(TimeLog.org_id == org_id)
            if start:
                q = q.filter(TimeLog.date >= start)
            if end:
                q = q.filter(TimeLog.date <= end)
            if submitted_only:
                q = q.filter(TimeLog.is_submitted.is_(True))
            return q.order_by(TimeLog.date.desc(), TimeLog.clock_in_time.desc()).all()

    def create_time_log(self, **fields: Any) -> TimeLog:
        """Insert a time log.

        An unsubmitted row is guarded by the one-open-row-per-day index; when
        another writer got there first, their row is returned instead.
        """
        log = TimeLog(**fields)
        with self._guard("create_time_log"):
            try:
                self.db.add(log)
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                if fields.get("is_submitted"):
                    raise
                existing = self.find_open_time_log(fields["employee_id"], fields["date"])
                if existing is None:
                    raise
                logger.info(
                    "Open time log for employee %s on %s already exists (%s)",
                    fields["employee_id"], fields["date"], existing.id,
                )
                return existing
            self.db.refresh(log)
            return log

    def update_time_log(self, time_log_id: uuid.UUID, **fields: Any) -> TimeLog:
        with self._guard("update_time_log"):
            log = self.db.get(TimeLog, time_log_id)
            if log is None:
                raise TimeLogNotFound(time_log_id)
            for name, value in fields.items():
                setattr(log, name, value)
            self.db.commit()
            self.db.refresh(log)
            return log

    # ── approvals ──

    def create_approval(
        self,
        time_log_id: uuid.UUID,
        submitted_at: datetime,
        *,
        actor_id: Optional[uuid.UUID] = None,
        org_id: Optional[uuid.UUID] = None,
    ) -> TimesheetApproval:
        """Create the pending approval for a submitted log (returns the existing one if present)."""
        approval = TimesheetApproval(
            time_log_id=time_log_id,
            status="pending",
            clarification_status=None,
            submitted_at=submitted_at,
        )
        with self._guard("create_approval"):
            try:
                self.db.add(approval)
                self.db.flush()
                log_action(
                    self.db, org_id, actor_id, "timesheet.submitted", "timesheet_approval",
                    resource_id=approval.id, details={"time_log_id": str(time_log_id)}, commit=False,
                )
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                existing = self.get_approval_for_time_log(time_log_id)
                if existing is None:
                    raise
                return existing
            self.db.refresh(approval)
            return approval

    def get_approval(self, approval_id: uuid.UUID, org_id: Optional[uuid.UUID] = None) -> Optional[TimesheetApproval]:
        with self._guard("get_approval"):
            q = self.db.query(TimesheetApproval).filter(TimesheetApproval.id == approval_id)
            if org_id is not None:
                q = q.join(TimeLog, TimesheetApproval.time_log_id == TimeLog.id).filter(TimeLog.org_id == org_id)
            return q.first()

    def get_approval_for_time_log(self, time_log_id: uuid.UUID) -> Optional[TimesheetApproval]:
        with self._guard("get_approval_for_time_log"):
            return (
                self.db.query(TimesheetApproval)
                .filter(TimesheetApproval.time_log_id == time_log_id)
                .first()
            )

    def update_approval(
        self,
        approval_id: uuid.UUID,
        fields: dict,
        *,
        check: Optional[Callable[[TimesheetApproval], bool]] = None,
        action: Optional[str] = None,
        actor_id: Optional[uuid.UUID] = None,
        org_id: Optional[uuid.UUID] = None,
    ) -> TimesheetApproval:
        """Write ``fields`` onto an approval row.

        The row is re-read from the database under a row lock, so ``check``
        sees what concurrent reviewers committed, not the session's cached
        copy. ``check`` may raise to refuse the write; returning False leaves
        the row untouched.
        """
        with self._guard("update_approval"):
            approval = (
                self.db.query(TimesheetApproval)
                .filter(TimesheetApproval.id == approval_id)
                .with_for_update(of=TimesheetApproval)
                .populate_existing()
                .first()
            )
            if approval is None:
                self.db.rollback()
                raise ApprovalNotFound(approval_id)
            try:
                proceed = check(approval) if check else True
            except IllegalTransition:
                self.db.rollback()
                raise
            if not proceed:
                # releases the row lock
                self.db.rollback()
                return approval
            for name, value in fields.items():
                setattr(approval, name, value)
            if action:
                log_action(
                    self.db, org_id, actor_id, action, "timesheet_approval",
                    resource_id=approval_id,
                    details={k: v for k, v in fields.items() if isinstance(v, (str, type(None)))},
                    commit=False,
                )
            self.db.commit()
            self.db.refresh(approval)
            return approval

    def list_approvals(
        self,
        status: Optional[str] = None,
        clarification_status: Any = ANY,
        org_id: Optional[uuid.UUID] = None,
        order_by: str = "submitted_at",
        limit: Optional[int] = None,
    ) -> list[TimesheetApproval]:
        """Approval rows with their time log loaded."""
        with self._guard("list_approvals"):
            q = self.db.query(TimesheetApproval).join(TimeLog, TimesheetApproval.time_log_id == TimeLog.id)
            if status is not None:
                q = q.filter(TimesheetApproval.status == status)
            if clarification_status is None:
                q = q.filter(TimesheetApproval.clarification_status.is_(None))
            elif clarification_status is not ANY:
                q = q.filter(TimesheetApproval.clarification_status == clarification_status)
            if org_id is not None:
                q = q.filter(TimeLog.org_id == org_id)
            q = q.order_by(getattr(TimesheetApproval, order_by).desc())
            if limit:
                q = q.limit(limit)
            return q.all()

    # ── assignments ──

    def employee_has_projects(self, employee_id: uuid.UUID) -> bool:
        with self._guard("employee_has_projects"):
            return (
                self.db.query(ProjectAssignment.id)
                .filter(ProjectAssignment.employee_id == employee_id, ProjectAssignment.status == "Working")
                .first()
                is not None
            )

    def list_assignments(self, project_id: str, org_id: Optional[uuid.UUID] = None) -> list[ProjectAssignment]:
        with self._guard("list_assignments"):
            q = self.db.query(ProjectAssignment).filter(ProjectAssignment.project_id == project_id)
            if org_id is not None:
                q = q.filter(ProjectAssignment.org_id == org_id)
            return q.order_by(ProjectAssignment.created_at).all()
