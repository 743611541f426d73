"""Tests for policy expiry and project-period evaluation."""

from datetime import date, datetime, timedelta, timezone

import pytest

from riskshield.services.temporal import (
    as_reference_date,
    evaluate_policy_validity,
    evaluate_project_coverage,
    evaluate_temporal_validity,
)
from tests.factories import TODAY


class TestPolicyValidity:
    def test_expired_yesterday_fails(self):
        check, deficiency = evaluate_policy_validity(TODAY - timedelta(days=1), TODAY)
        assert check.status == "fail"
        assert check.details == "Policy has expired"
        assert deficiency.type == "expired_policy"
        assert deficiency.severity == "critical"
        assert deficiency.actual_value == "Expired on 2026-02-28"

    def test_expiring_today_is_a_warning(self):
        check, deficiency = evaluate_policy_validity(TODAY, TODAY)
        assert check.status == "warning"
        assert check.details == "Policy expires today"
        assert deficiency is None

    def test_thirty_days_out_is_a_warning(self):
        check, deficiency = evaluate_policy_validity(TODAY + timedelta(days=30), TODAY)
        assert check.status == "warning"
        assert check.details == "Policy expires in 30 days"
        assert deficiency is None

    def test_thirty_one_days_out_passes(self):
        check, deficiency = evaluate_policy_validity(TODAY + timedelta(days=31), TODAY)
        assert check.status == "pass"
        assert check.details == "Policy valid until 2026-04-01"
        assert deficiency is None

    def test_custom_warning_window(self):
        check, _ = evaluate_policy_validity(TODAY + timedelta(days=45), TODAY, warning_days=60)
        assert check.status == "warning"


class TestProjectCoverage:
    def test_policy_ending_before_project_fails(self):
        check, deficiency = evaluate_project_coverage(date(2026, 6, 30), date(2026, 12, 31))
        assert check.status == "fail"
        assert deficiency.type == "policy_expires_before_project"
        assert deficiency.required_value == "Valid until 2026-12-31"
        assert deficiency.actual_value == "Expires 2026-06-30"

    def test_policy_ending_on_project_end_passes(self):
        check, deficiency = evaluate_project_coverage(date(2026, 12, 31), date(2026, 12, 31))
        assert check.status == "pass"
        assert deficiency is None


class TestTemporalValidity:
    def test_without_project_end_only_checks_validity(self):
        checks, deficiencies = evaluate_temporal_validity(date(2027, 6, 30), now=TODAY)
        assert [c.check_type for c in checks] == ["policy_validity"]
        assert deficiencies == []

    def test_expired_policy_on_open_project_yields_two_deficiencies(self):
        checks, deficiencies = evaluate_temporal_validity(
            date(2026, 1, 31), now=TODAY, project_end=date(2026, 12, 31),
        )
        assert [c.check_type for c in checks] == ["policy_validity", "project_coverage"]
        assert [d.type for d in deficiencies] == ["expired_policy", "policy_expires_before_project"]


class TestReferenceDate:
    def test_date_is_used_as_is(self):
        assert as_reference_date(TODAY) == TODAY

    def test_aware_datetime_is_reduced_to_utc_day(self):
        sydney = timezone(timedelta(hours=10))
        assert as_reference_date(datetime(2026, 3, 2, 8, 0, tzinfo=sydney)) == date(2026, 3, 1)

    def test_none_means_today_utc(self):
        assert as_reference_date(None) == datetime.now(timezone.utc).date()

    @pytest.mark.parametrize("hour", [0, 12, 23])
    def test_time_of_day_does_not_change_the_outcome(self, hour):
        now = datetime(2026, 3, 1, hour, tzinfo=timezone.utc)
        checks, _ = evaluate_temporal_validity(TODAY + timedelta(days=30), now=now)
        assert checks[0].status == "warning"
