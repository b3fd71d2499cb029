from pydantic import BaseModel
from typing import Literal, Optional

Currency = Literal["INR", "USD"]


class AnnualFiguresRequest(BaseModel):
    billing_amount: Optional[float] = None
    currency: Currency = "INR"
    billing_type: str = "LPA"
    salary_annual: float = 0


class AnnualFigures(BaseModel):
    revenue_annual: float
    profit_annual: float


class AssignmentFigures(AnnualFigures):
    assignment_id: Optional[str] = None
    employee_id: str
    status: str
    salary_annual: float
    logged_hours: float = 0


class ProjectFinancials(BaseModel):
    project_id: str
    total_revenue: float
    total_profit: float
    total_employees: int
    working_count: int
    relieved_count: int
    assignments: list[AssignmentFigures] = []
