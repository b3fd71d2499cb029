"""
Typed errors for the timesheet lifecycle.

Every error has a machine-readable ``code`` and the HTTP status the API layer
renders it with, and carries its data as attributes so callers catch by type
and never parse messages.

    TimesheetError
    +-- ValidationFailed            VALIDATION_FAILED        422
    +-- AuthenticationMissing       AUTHENTICATION_MISSING   401
    +-- NotFoundError
    |   +-- ApprovalNotFound        APPROVAL_NOT_FOUND       404
    |   +-- TimeLogNotFound         TIME_LOG_NOT_FOUND       404
    +-- IllegalTransition           ILLEGAL_TRANSITION       409
    +-- EmptyReason                 EMPTY_REASON             400
    +-- EmptyResponse               EMPTY_RESPONSE           400
    +-- StoreError
        +-- StoreUnavailable        STORE_UNAVAILABLE        503
        +-- SubmissionIncomplete    SUBMISSION_INCOMPLETE    503
"""

from typing import Any, Optional


class TimesheetError(Exception):
    code: str = "TIMESHEET_ERROR"
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "detail": self.message}


class ValidationFailed(TimesheetError):
    code = "VALIDATION_FAILED"
    status_code = 422

    def __init__(self, reason_code: str, reasons: Optional[list[str]] = None):
        self.reason_code = reason_code
        self.reasons = reasons or [reason_code]
        super().__init__(f"Timesheet rejected: {reason_code}")

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "reason_code": self.reason_code, "reasons": self.reasons}


class AuthenticationMissing(TimesheetError):
    code = "AUTHENTICATION_MISSING"
    status_code = 401

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class NotFoundError(TimesheetError):
    status_code = 404


class ApprovalNotFound(NotFoundError):
    code = "APPROVAL_NOT_FOUND"

    def __init__(self, approval_id: Any):
        self.approval_id = approval_id
        super().__init__(f"Timesheet approval {approval_id} not found")

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "approval_id": str(self.approval_id)}


class TimeLogNotFound(NotFoundError):
    code = "TIME_LOG_NOT_FOUND"

    def __init__(self, time_log_id: Any):
        self.time_log_id = time_log_id
        super().__init__(f"Time log {time_log_id} not found")

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "time_log_id": str(self.time_log_id)}


class IllegalTransition(TimesheetError):
    code = "ILLEGAL_TRANSITION"
    status_code = 409

    def __init__(self, action: str, from_state: str, record_id: Any = None):
        self.action = action
        self.from_state = from_state
        self.record_id = record_id
        super().__init__(f"Cannot {action} a timesheet in state {from_state}")

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "action": self.action,
            "from_state": self.from_state,
            "record_id": str(self.record_id) if self.record_id is not None else None,
        }


class EmptyReason(TimesheetError):
    code = "EMPTY_REASON"
    status_code = 400

    def __init__(self, message: str = "A clarification reason is required"):
        super().__init__(message)


class EmptyResponse(TimesheetError):
    code = "EMPTY_RESPONSE"
    status_code = 400

    def __init__(self, message: str = "A clarification response is required"):
        super().__init__(message)


class StoreError(TimesheetError):
    status_code = 503


class StoreUnavailable(StoreError):
    code = "STORE_UNAVAILABLE"

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.cause = cause
        super().__init__(f"Record store unavailable during {operation}")

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "operation": self.operation}


class SubmissionIncomplete(StoreError):
    """The time log was marked submitted but its approval row was not created.

    Retry the whole submit call with ``time_log_id``; it completes the missing
    approval instead of validating or submitting again.
    """

    code = "SUBMISSION_INCOMPLETE"

    def __init__(self, time_log_id: Any, cause: Optional[BaseException] = None):
        self.time_log_id = time_log_id
        self.cause = cause
        super().__init__(f"Time log {time_log_id} was submitted but its approval record is missing")

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "time_log_id": str(self.time_log_id)}
