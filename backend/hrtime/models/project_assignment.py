"""Employee-to-project billing assignments (read by the billing reports)."""
import uuid

from sqlalchemy import Column, String, DateTime, Date, Numeric, Integer, Uuid
from sqlalchemy.sql import func

from hrtime.database import Base


class ProjectAssignment(Base):
    __tablename__ = "project_assignments"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid(as_uuid=True), nullable=True, index=True)
    employee_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    project_id = Column(String(100), nullable=False, index=True)
    client_id = Column(String(100), nullable=True)

    # client_billing is quoted in the client's currency, per billing_type
    client_billing = Column(Numeric(14, 2), nullable=True)
    billing_type = Column(String(20), nullable=False, server_default="LPA")
    currency = Column(String(3), nullable=False, server_default="INR")

    # salary is always INR, per salary_type
    salary = Column(Numeric(14, 2), nullable=True)
    salary_type = Column(String(20), nullable=False, server_default="LPA")

    status = Column(String(20), nullable=False, server_default="Working")
    start_date = Column(Date, nullable=True)
    duration_days = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
