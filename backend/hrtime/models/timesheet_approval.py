import uuid

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import backref, relationship

from hrtime.database import Base
from hrtime.models.time_log import TimeLog

APPROVAL_STATUSES = ["pending", "approved"]
CLARIFICATION_STATUSES = ["needed", "submitted"]


class TimesheetApproval(Base):
    __tablename__ = "timesheet_approvals"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    time_log_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("time_logs.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    status = Column(String(20), nullable=False, default="pending", server_default="pending")
    clarification_status = Column(String(20), nullable=True)
    rejection_reason = Column(Text, nullable=True)
    clarification_response = Column(Text, nullable=True)
    clarification_submitted_at = Column(DateTime(timezone=True), nullable=True)
    submitted_at = Column(DateTime(timezone=True), nullable=False)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    reviewed_by = Column(Uuid(as_uuid=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    time_log = relationship(TimeLog, lazy="joined", backref=backref("approval", uselist=False))
