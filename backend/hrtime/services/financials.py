"""
Billing normalization: turn a billing or salary figure into one comparable
unit (INR per annum, i.e. the LPA basis) and derive profit from it.

    amount ──(USD? × fx)──> INR ──(cadence scale)──> INR / year

Cadence scale:
    Monthly  × 12
    Hourly   × hours_per_day × days_per_month × 12   (2112 with the defaults)
    LPA      × 1
    anything else is treated as LPA

Everything here is pure; reports call it over rows they have already read.
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Optional

from hrtime.config import BillingSettings, get_settings
from hrtime.schemas.billing import AnnualFigures, AssignmentFigures, ProjectFinancials

logger = logging.getLogger(__name__)

CURRENCY_SYMBOLS = {"₹": "INR", "$": "USD"}
DEFAULT_HOURLY_MULTIPLIER = BillingSettings().hourly_multiplier


def normalize_to_annual(
    amount: Optional[float],
    currency: str,
    billing_type: str,
    fx_rate_usd_to_inr: float,
    *,
    hourly_multiplier: int = DEFAULT_HOURLY_MULTIPLIER,
) -> float:
    """Annual INR figure for ``amount`` quoted in ``currency`` per ``billing_type``."""
    value = float(amount or 0)
    if math.isnan(value):
        value = 0.0

    if currency == "USD":
        value *= fx_rate_usd_to_inr

    if billing_type == "Monthly":
        value *= 12
    elif billing_type == "Hourly":
        value *= hourly_multiplier
    # LPA and unknown cadences are already annual

    return value


def compute_profit(billing_annual: float, salary_annual: float) -> float:
    return billing_annual - salary_annual


@dataclass(frozen=True)
class Compensation:
    amount: float
    currency: str
    billing_type: str


def parse_compensation(value) -> Compensation:
    """Parse a stored compensation string such as ``"₹12 LPA"`` or ``"$50 Hourly"``.

    Numbers are taken as INR per annum. The leading symbol picks the currency
    (INR when absent), the second token the cadence (LPA when absent).
    """
    if value is None or value == "":
        return Compensation(0.0, "INR", "LPA")
    if isinstance(value, (int, float)):
        return Compensation(float(value), "INR", "LPA")

    text = str(value).strip()
    currency = "INR"
    for symbol, code in CURRENCY_SYMBOLS.items():
        if text.startswith(symbol):
            currency = code
            text = text[len(symbol):].strip()
            break

    parts = text.split()
    try:
        amount = float(parts[0].replace(",", "")) if parts else 0.0
    except ValueError:
        amount = 0.0
    billing_type = parts[1] if len(parts) > 1 else "LPA"
    return Compensation(amount, currency, billing_type)


class FinancialNormalizer:
    """Normalization bound to one set of configured constants."""

    def __init__(self, settings: Optional[BillingSettings] = None):
        self.settings = settings or get_settings().billing

    def normalize_to_annual(self, amount: Optional[float], currency: str, billing_type: str) -> float:
        return normalize_to_annual(
            amount,
            currency,
            billing_type,
            self.settings.fx_rate_usd_to_inr,
            hourly_multiplier=self.settings.hourly_multiplier,
        )

    def normalize_compensation(self, value) -> float:
        comp = parse_compensation(value)
        return self.normalize_to_annual(comp.amount, comp.currency, comp.billing_type)

    def compute_annual_figures(
        self,
        billing_amount: Optional[float],
        currency: str,
        billing_type: str,
        salary_annual: float,
    ) -> AnnualFigures:
        revenue = self.normalize_to_annual(billing_amount, currency, billing_type)
        return AnnualFigures(
            revenue_annual=revenue,
            profit_annual=compute_profit(revenue, float(salary_annual or 0)),
        )

    def assignment_figures(self, assignment, logged_hours: float = 0) -> AssignmentFigures:
        """Revenue and profit for one project assignment.

        Billing is in the client's currency; salary is INR in its own cadence.
        """
        salary_annual = self.normalize_to_annual(
            float(assignment.salary or 0), "INR", assignment.salary_type or "LPA"
        )
        figures = self.compute_annual_figures(
            float(assignment.client_billing or 0),
            assignment.currency or "INR",
            assignment.billing_type or "LPA",
            salary_annual,
        )
        return AssignmentFigures(
            assignment_id=str(assignment.id) if assignment.id else None,
            employee_id=str(assignment.employee_id),
            status=assignment.status or "Working",
            salary_annual=salary_annual,
            revenue_annual=figures.revenue_annual,
            profit_annual=figures.profit_annual,
            logged_hours=logged_hours,
        )

    def project_financials(self, project_id: str, assignments: Iterable, time_logs: Iterable = ()) -> ProjectFinancials:
        logs = list(time_logs)
        rows = []
        for a in assignments:
            hours = logged_project_hours(
                (log for log in logs if log.employee_id == a.employee_id), project_id
            )
            rows.append(self.assignment_figures(a, logged_hours=hours))

        result = ProjectFinancials(
            project_id=project_id,
            total_revenue=sum(r.revenue_annual for r in rows),
            total_profit=sum(r.profit_annual for r in rows),
            total_employees=len(rows),
            working_count=len([r for r in rows if r.status == "Working"]),
            relieved_count=len([r for r in rows if r.status == "Relieved"]),
            assignments=rows,
        )
        logger.debug("Project %s financials: revenue=%s profit=%s", project_id, result.total_revenue, result.total_profit)
        return result


def logged_project_hours(time_logs: Iterable, project_id: str) -> float:
    """Hours booked to ``project_id`` across submitted time logs."""
    total = 0.0
    for log in time_logs:
        if not log.is_submitted:
            continue
        data = log.project_time_data or {}
        for entry in data.get("projects") or []:
            if entry.get("project_id", entry.get("projectId")) == project_id:
                total += float(entry.get("hours") or 0)
    return total
