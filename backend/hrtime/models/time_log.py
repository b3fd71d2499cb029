import json
import uuid

from sqlalchemy import Column, String, Text, Boolean, DateTime, Date, Integer, Float, Index, JSON, Uuid, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from hrtime.database import Base

TIME_LOG_STATUSES = ["normal", "auto_terminated", "grace_period"]


class TimeLog(Base):
    __tablename__ = "time_logs"
    __table_args__ = (
        # one open (unsubmitted) row per employee per day
        Index(
            "uq_time_logs_open_per_day",
            "employee_id",
            "date",
            unique=True,
            postgresql_where=text("NOT is_submitted"),
            sqlite_where=text("NOT is_submitted"),
        ),
        Index("ix_time_logs_employee_date", "employee_id", "date"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    employee_id = Column(Uuid(as_uuid=True), nullable=False)
    org_id = Column(Uuid(as_uuid=True), nullable=True, index=True)
    date = Column(Date, nullable=False)
    clock_in_time = Column(DateTime(timezone=True), nullable=True)
    clock_out_time = Column(DateTime(timezone=True), nullable=True)
    duration_minutes = Column(Integer, nullable=True)
    status = Column(String(20), nullable=False, server_default="normal")
    notes = Column(Text, nullable=True)
    project_time_data = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)
    is_submitted = Column(Boolean, nullable=False, default=False, server_default=text("false"))
    total_working_hours = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def notes_record(self) -> dict:
        """``notes`` decoded to ``{"title", "workReport"}``; plain text lands in workReport."""
        if not self.notes:
            return {"title": "", "workReport": ""}
        try:
            data = json.loads(self.notes)
        except ValueError:
            return {"title": "", "workReport": self.notes}
        if not isinstance(data, dict):
            return {"title": "", "workReport": self.notes}
        return {"title": data.get("title") or "", "workReport": data.get("workReport") or ""}


def encode_notes(title: str, work_report: str) -> str:
    return json.dumps({"title": title or "", "workReport": work_report or ""})
