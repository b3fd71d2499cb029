"""
Tests for TimesheetValidator.

Covers:
- each reason code on its own
- rule order (first failure wins, exactly one reason)
- HoursExceeded over project and detailed entries
- the optional title rule
"""

import pytest

from hrtime.config import TimesheetSettings
from hrtime.schemas.timesheet import DetailedTimesheetEntry, ProjectAllocationEntry, TimesheetDraft
from hrtime.services.timesheet_validation import TimesheetValidator, ValidationReason, validate_draft


def project_draft(*entries, **kwargs):
    return TimesheetDraft(
        employee_has_projects=True,
        project_entries=[ProjectAllocationEntry(**e) for e in entries],
        **kwargs,
    )


def detailed_draft(*hours, **kwargs):
    return TimesheetDraft(
        employee_has_projects=False,
        detailed_entries=[DetailedTimesheetEntry(hours=h, description="work") for h in hours],
        **kwargs,
    )


class TestProjectDrafts:
    def test_single_full_day_is_ok(self, validator):
        result = validator.validate(project_draft({"project_id": "P1", "hours": 8, "report": "Worked on X"}))
        assert result.ok is True
        assert result.reasons == []

    def test_no_project_selected(self, validator):
        result = validator.validate(project_draft({"project_id": "", "hours": 4, "report": "x"}))
        assert result.ok is False
        assert result.reasons == ["NoProjectSelected"]

    def test_no_entries_at_all(self, validator):
        result = validator.validate(TimesheetDraft(employee_has_projects=True))
        assert result.reasons == [ValidationReason.NO_PROJECT_SELECTED.value]

    def test_missing_work_summary(self, validator):
        result = validator.validate(project_draft({"project_id": "P1", "hours": 2, "report": "   "}))
        assert result.reasons == ["MissingWorkSummary"]

    def test_missing_work_summary_even_when_another_entry_is_fine(self, validator):
        result = validator.validate(project_draft(
            {"project_id": "P1", "hours": 4, "report": "done"},
            {"project_id": "P2", "hours": 2, "report": ""},
        ))
        assert result.reasons == ["MissingWorkSummary"]

    def test_zero_hour_entry_needs_no_summary(self, validator):
        result = validator.validate(project_draft(
            {"project_id": "P1", "hours": 8, "report": "done"},
            {"project_id": "P2", "hours": 0, "report": ""},
        ))
        assert result.ok is True

    def test_hours_exceeded(self, validator):
        result = validator.validate(project_draft(
            {"project_id": "P1", "hours": 5, "report": "a"},
            {"project_id": "P2", "hours": 3.5, "report": "b"},
        ))
        assert result.reasons == ["HoursExceeded"]

    def test_exactly_at_cap_is_ok(self, validator):
        result = validator.validate(project_draft(
            {"project_id": "P1", "hours": 5, "report": "a"},
            {"project_id": "P2", "hours": 3, "report": "b"},
        ))
        assert result.ok is True

    def test_unselected_rows_do_not_count_toward_cap(self, validator):
        result = validator.validate(project_draft(
            {"project_id": "P1", "hours": 8, "report": "a"},
            {"project_id": "", "hours": 6, "report": ""},
        ))
        assert result.ok is True

    def test_summary_checked_before_hours(self, validator):
        result = validator.validate(project_draft({"project_id": "P1", "hours": 12, "report": ""}))
        assert result.reasons == ["MissingWorkSummary"]


class TestDetailedDrafts:
    def test_within_cap(self, validator):
        assert validator.validate(detailed_draft(3, 5)).ok is True

    def test_hours_exceeded(self, validator):
        result = validator.validate(detailed_draft(4, 4, 0.5))
        assert result.ok is False
        assert result.reasons == ["HoursExceeded"]

    def test_empty_draft_is_ok(self, validator):
        assert validator.validate(TimesheetDraft()).ok is True

    def test_detailed_rows_ignored_for_project_employees(self, validator):
        draft = project_draft(
            {"project_id": "P1", "hours": 8, "report": "a"},
            detailed_entries=[DetailedTimesheetEntry(hours=20)],
        )
        assert validator.validate(draft).ok is True


class TestTitleRule:
    def test_title_not_required_by_default(self, validator):
        assert validator.validate(detailed_draft(8, title="")).ok is True

    def test_missing_title_when_required(self):
        validator = TimesheetValidator(TimesheetSettings(require_title=True))
        result = validator.validate(project_draft({"project_id": "", "hours": 9, "report": ""}, title=" "))
        # title is checked first
        assert result.reasons == ["MissingTitle"]

    def test_title_present_when_required(self):
        validator = TimesheetValidator(TimesheetSettings(require_title=True))
        assert validator.validate(detailed_draft(8, title="Monday")).ok is True


@pytest.mark.parametrize("cap,hours,ok", [(10, 9.5, True), (10, 10.5, False), (4, 4.5, False)])
def test_cap_comes_from_settings(cap, hours, ok):
    result = validate_draft(detailed_draft(hours), TimesheetSettings(max_daily_hours=cap))
    assert result.ok is ok


class TestStrayProjectRows:
    """Project rows on a detailed-entries draft are dropped at submit, so they never fail it."""

    def test_unreported_project_row_is_ignored(self, validator):
        draft = TimesheetDraft(
            employee_has_projects=False,
            project_entries=[ProjectAllocationEntry(project_id="P1", hours=9, report="")],
        )
        result = validator.validate(draft)
        assert result.ok is True
        assert result.reasons == []

    def test_detailed_entries_still_capped(self, validator):
        draft = TimesheetDraft(
            employee_has_projects=False,
            project_entries=[ProjectAllocationEntry(project_id="P1", hours=2, report="x")],
            detailed_entries=[DetailedTimesheetEntry(hours=9)],
        )
        assert validator.validate(draft).reasons == ["HoursExceeded"]
