"""Billing figures: annualized revenue/profit per assignment and per project."""

import uuid

from fastapi import APIRouter, Depends

from hrtime.dependencies import get_current_org_id, get_normalizer, get_store, require_manager
from hrtime.schemas.billing import AnnualFigures, AnnualFiguresRequest, ProjectFinancials
from hrtime.services.financials import FinancialNormalizer
from hrtime.services.time_log_store import TimesheetStore

router = APIRouter(prefix="/api/v1/billing", tags=["Billing"])


@router.post("/annual-figures", response_model=AnnualFigures)
def compute_annual_figures(
    body: AnnualFiguresRequest,
    normalizer: FinancialNormalizer = Depends(get_normalizer),
):
    return normalizer.compute_annual_figures(
        body.billing_amount, body.currency, body.billing_type, body.salary_annual
    )


@router.get("/projects/{project_id}/summary", response_model=ProjectFinancials)
def project_summary(
    project_id: str,
    org_id: uuid.UUID = Depends(get_current_org_id),
    _role: str = Depends(require_manager),
    store: TimesheetStore = Depends(get_store),
    normalizer: FinancialNormalizer = Depends(get_normalizer),
):
    assignments = store.list_assignments(project_id, org_id=org_id)
    time_logs = store.list_time_logs(org_id=org_id, submitted_only=True)
    return normalizer.project_financials(project_id, assignments, time_logs)
