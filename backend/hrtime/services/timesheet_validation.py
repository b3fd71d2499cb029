"""
Timesheet draft validation.

Rules run in a fixed order and the first failure wins, so callers always get
exactly one reason code to render. Nothing here reads the clock or the store.
"""

import enum
from typing import Callable, Optional

from hrtime.config import TimesheetSettings, get_settings
from hrtime.schemas.timesheet import TimesheetDraft, ValidationResult


class ValidationReason(str, enum.Enum):
    MISSING_TITLE = "MissingTitle"
    NO_PROJECT_SELECTED = "NoProjectSelected"
    MISSING_WORK_SUMMARY = "MissingWorkSummary"
    HOURS_EXCEEDED = "HoursExceeded"


Rule = Callable[[TimesheetDraft], Optional[ValidationReason]]


def _selected_projects(draft: TimesheetDraft):
    # stray project rows on a detailed-entries draft are never stored
    if not draft.employee_has_projects:
        return []
    return [p for p in draft.project_entries if p.project_id and p.project_id.strip()]


class TimesheetValidator:
    def __init__(self, settings: Optional[TimesheetSettings] = None):
        self.settings = settings or get_settings().timesheets
        self._rules: list[Rule] = [
            self._title_present,
            self._project_selected,
            self._work_summaries_present,
            self._project_hours_within_cap,
            self._detailed_hours_within_cap,
        ]

    def validate(self, draft: TimesheetDraft) -> ValidationResult:
        for rule in self._rules:
            reason = rule(draft)
            if reason is not None:
                return ValidationResult(ok=False, reasons=[reason.value])
        return ValidationResult(ok=True, reasons=[])

    # ── rules ──

    def _title_present(self, draft: TimesheetDraft) -> Optional[ValidationReason]:
        if self.settings.require_title and not draft.title.strip():
            return ValidationReason.MISSING_TITLE
        return None

    def _project_selected(self, draft: TimesheetDraft) -> Optional[ValidationReason]:
        if draft.employee_has_projects and not _selected_projects(draft):
            return ValidationReason.NO_PROJECT_SELECTED
        return None

    def _work_summaries_present(self, draft: TimesheetDraft) -> Optional[ValidationReason]:
        for entry in _selected_projects(draft):
            if entry.hours > 0 and not entry.report.strip():
                return ValidationReason.MISSING_WORK_SUMMARY
        return None

    def _project_hours_within_cap(self, draft: TimesheetDraft) -> Optional[ValidationReason]:
        total = sum(p.hours for p in _selected_projects(draft))
        if total > self.settings.max_daily_hours:
            return ValidationReason.HOURS_EXCEEDED
        return None

    def _detailed_hours_within_cap(self, draft: TimesheetDraft) -> Optional[ValidationReason]:
        if draft.employee_has_projects or not draft.detailed_entries:
            return None
        total = sum(e.hours for e in draft.detailed_entries)
        if total > self.settings.max_daily_hours:
            return ValidationReason.HOURS_EXCEEDED
        return None


def validate_draft(draft: TimesheetDraft, settings: Optional[TimesheetSettings] = None) -> ValidationResult:
    return TimesheetValidator(settings).validate(draft)
