"""
Runtime configuration.

Values come from the environment (a backend/.env file is loaded first) and are
grouped into small settings objects that get injected into the normalizer,
the validator and the services at construction time.
"""

import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv(dotenv_path=Path(__file__).parent.parent / ".env", override=False)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    return float(raw) if raw else default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


class BillingSettings(BaseModel):
    fx_rate_usd_to_inr: float = 84.0
    hours_per_day: int = 8
    days_per_month: int = 22
    months_per_year: int = 12

    @property
    def hourly_multiplier(self) -> int:
        """Billable hours in a year: 8 x 22 x 12 = 2112 with the defaults."""
        return self.hours_per_day * self.days_per_month * self.months_per_year


class TimesheetSettings(BaseModel):
    max_daily_hours: float = 8.0
    require_title: bool = False
    default_working_hours: float = 8.0


class StoreSettings(BaseModel):
    statement_timeout_ms: int = 5000
    pool_timeout_s: int = 10


class Settings(BaseModel):
    billing: BillingSettings = BillingSettings()
    timesheets: TimesheetSettings = TimesheetSettings()
    store: StoreSettings = StoreSettings()
    auth_mode: str = "demo"
    cors_origins: list[str] = ["http://localhost:5173"]
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings(
        billing=BillingSettings(
            fx_rate_usd_to_inr=_env_float("FX_RATE_USD_TO_INR", 84.0),
            hours_per_day=_env_int("BILLING_HOURS_PER_DAY", 8),
            days_per_month=_env_int("BILLING_DAYS_PER_MONTH", 22),
        ),
        timesheets=TimesheetSettings(
            max_daily_hours=_env_float("TIMESHEET_MAX_DAILY_HOURS", 8.0),
            require_title=_env_bool("TIMESHEET_REQUIRE_TITLE", False),
            default_working_hours=_env_float("TIMESHEET_DEFAULT_WORKING_HOURS", 8.0),
        ),
        store=StoreSettings(
            statement_timeout_ms=_env_int("DB_STATEMENT_TIMEOUT_MS", 5000),
            pool_timeout_s=_env_int("DB_POOL_TIMEOUT_S", 10),
        ),
        auth_mode=os.getenv("AUTH_MODE", "demo"),
        cors_origins=[o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",") if o.strip()],
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
