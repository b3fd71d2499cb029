"""Time logs, timesheet approvals, project assignments, audit log

Revision ID: 001
Revises:
Create Date: 2026-10-19

Idempotent: uses IF NOT EXISTS so it won't fail if tables already exist.
The partial unique index keeps at most one unsubmitted time log per employee
per day.
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE IF NOT EXISTS time_logs (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            employee_id UUID NOT NULL,
            org_id UUID,
            date DATE NOT NULL,
            clock_in_time TIMESTAMPTZ,
            clock_out_time TIMESTAMPTZ,
            duration_minutes INTEGER,
            status VARCHAR(20) NOT NULL DEFAULT 'normal'
                CHECK (status IN ('normal', 'auto_terminated', 'grace_period')),
            notes TEXT,
            project_time_data JSONB,
            is_submitted BOOLEAN NOT NULL DEFAULT false,
            total_working_hours DOUBLE PRECISION,
            created_at TIMESTAMPTZ DEFAULT now(),
            updated_at TIMESTAMPTZ DEFAULT now()
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_time_logs_employee_date ON time_logs (employee_id, date)")
    op.execute("CREATE INDEX IF NOT EXISTS ix_time_logs_org_id ON time_logs (org_id)")
    op.execute("""
        CREATE UNIQUE INDEX IF NOT EXISTS uq_time_logs_open_per_day
            ON time_logs (employee_id, date) WHERE NOT is_submitted
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS timesheet_approvals (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            time_log_id UUID NOT NULL UNIQUE REFERENCES time_logs(id) ON DELETE CASCADE,
            status VARCHAR(20) NOT NULL DEFAULT 'pending'
                CHECK (status IN ('pending', 'approved')),
            clarification_status VARCHAR(20)
                CHECK (clarification_status IN ('needed', 'submitted')),
            rejection_reason TEXT,
            clarification_response TEXT,
            clarification_submitted_at TIMESTAMPTZ,
            submitted_at TIMESTAMPTZ NOT NULL,
            approved_at TIMESTAMPTZ,
            reviewed_by UUID,
            created_at TIMESTAMPTZ DEFAULT now(),
            updated_at TIMESTAMPTZ DEFAULT now(),
            CHECK (status <> 'approved' OR clarification_status IS NULL)
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_ta_status ON timesheet_approvals (status, clarification_status)")

    op.execute("""
        CREATE TABLE IF NOT EXISTS project_assignments (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            org_id UUID,
            employee_id UUID NOT NULL,
            project_id VARCHAR(100) NOT NULL,
            client_id VARCHAR(100),
            client_billing NUMERIC(14,2),
            billing_type VARCHAR(20) NOT NULL DEFAULT 'LPA',
            currency VARCHAR(3) NOT NULL DEFAULT 'INR',
            salary NUMERIC(14,2),
            salary_type VARCHAR(20) NOT NULL DEFAULT 'LPA',
            status VARCHAR(20) NOT NULL DEFAULT 'Working',
            start_date DATE,
            duration_days INTEGER,
            created_at TIMESTAMPTZ DEFAULT now(),
            updated_at TIMESTAMPTZ DEFAULT now()
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_pa_project ON project_assignments (project_id)")
    op.execute("CREATE INDEX IF NOT EXISTS ix_pa_employee ON project_assignments (employee_id)")

    op.execute("""
        CREATE TABLE IF NOT EXISTS audit_log (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            org_id UUID,
            user_id UUID,
            action VARCHAR(100) NOT NULL,
            resource_type VARCHAR(100) NOT NULL,
            resource_id VARCHAR(255),
            details JSONB,
            ip_address VARCHAR(45),
            created_at TIMESTAMPTZ DEFAULT now()
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_audit_log_org_id ON audit_log (org_id)")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS audit_log")
    op.execute("DROP TABLE IF EXISTS project_assignments")
    op.execute("DROP TABLE IF EXISTS timesheet_approvals")
    op.execute("DROP TABLE IF EXISTS time_logs")
