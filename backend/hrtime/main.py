import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hrtime.config import get_settings
from hrtime.exceptions import (
    IllegalTransition,
    StoreError,
    SubmissionIncomplete,
    TimesheetError,
)
from hrtime.routers.billing import router as billing_router
from hrtime.routers.timesheet_approvals import router as approvals_router
from hrtime.routers.timesheets import router as timesheets_router

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)

app = FastAPI(title="HR Time API")

app.include_router(timesheets_router)
app.include_router(approvals_router)
app.include_router(billing_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TimesheetError)
def handle_timesheet_error(request: Request, exc: TimesheetError):
    if isinstance(exc, IllegalTransition):
        # a UI or workflow bug, not a user mistake
        logger.error("Illegal transition on %s %s: %s", request.method, request.url.path, exc.message)
    elif isinstance(exc, SubmissionIncomplete):
        logger.error("Incomplete submission for time log %s", exc.time_log_id)
    elif isinstance(exc, StoreError):
        logger.warning("Store error on %s %s: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.get("/health")
def health():
    return {"ok": True}
