"""Tests for the end-to-end verification engine."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from riskshield.schemas.verification import CoverageRequirement, ExtractedPolicyData
from riskshield.services.verification_engine import check_abn, check_confidence, verify
from tests.factories import TODAY, VALID_ABN, make_extracted, standard_requirements

PROJECT_END = date(2026, 12, 31)
OTHER_VALID_ABN = "53004085616"


def _types(items):
    return [item.type for item in items]


class TestScenarios:
    def test_compliant_certificate_passes(self):
        result = verify(
            make_extracted(), standard_requirements(), PROJECT_END, "NSW", now=TODAY,
        )

        assert result.status == "pass"
        assert result.deficiencies == []
        assert all(c.status == "pass" for c in result.checks)
        assert result.confidence_score == pytest.approx(0.93)

    def test_expired_policy_fails_with_two_critical_deficiencies(self):
        extracted = make_extracted(period_of_insurance_end=date(2026, 2, 28))
        result = verify(extracted, standard_requirements(), PROJECT_END, "NSW", now=TODAY)

        assert result.status == "fail"
        assert _types(result.deficiencies) == ["expired_policy", "policy_expires_before_project"]
        assert {d.severity for d in result.deficiencies} == {"critical"}

    def test_policy_expiring_soon_goes_to_review(self):
        extracted = make_extracted(period_of_insurance_end=TODAY + timedelta(days=20))
        result = verify(extracted, standard_requirements(), None, "NSW", now=TODAY)

        assert result.status == "review"
        assert result.deficiencies == []
        assert result.checks[0].details == "Policy expires in 20 days"

    def test_multiple_deficiencies_are_all_reported(self):
        extracted = make_extracted(
            coverages=[
                {
                    "type": "public_liability",
                    "limit": 10_000_000,
                    "excess": 10_000,
                    "principal_indemnity": False,
                    "cross_liability": True,
                },
                {"type": "workers_comp", "limit": 2_000_000, "state": "QLD"},
            ]
        )
        result = verify(extracted, standard_requirements(), PROJECT_END, "NSW", now=TODAY)

        assert result.status == "fail"
        assert _types(result.deficiencies) == [
            "insufficient_limit",
            "excess_too_high",
            "missing_endorsement",
            "state_mismatch",
        ]

    def test_every_absent_requirement_is_a_missing_coverage(self):
        requirements = standard_requirements() + [
            CoverageRequirement(coverage_type="professional_indemnity", minimum_limit=Decimal(5_000_000)),
            CoverageRequirement(coverage_type="contract_works"),
        ]
        result = verify(make_extracted(coverages=[]), requirements, PROJECT_END, "NSW", now=TODAY)

        assert result.status == "fail"
        assert _types(result.deficiencies) == ["missing_coverage"] * len(requirements)

    def test_no_requirements_only_checks_dates(self):
        result = verify(make_extracted(), [], PROJECT_END, now=TODAY)
        assert result.status == "pass"
        assert [c.check_type for c in result.checks] == [
            "policy_validity",
            "project_coverage",
            "abn_verification",
        ]


class TestAbn:
    def test_absent_abn_adds_no_check(self):
        assert check_abn(None) is None
        assert check_abn("  ") is None

    def test_matching_abn_passes(self):
        check = check_abn("51 824 753 556", VALID_ABN)
        assert check.status == "pass"
        assert check.details == "ABN 51 824 753 556 verified"

    def test_invalid_abn_is_a_warning(self):
        check = check_abn("12345678901")
        assert check.status == "warning"
        assert "not a valid ABN" in check.details

    def test_mismatched_abn_sends_certificate_to_review(self):
        result = verify(
            make_extracted(insured_party_abn=OTHER_VALID_ABN),
            standard_requirements(),
            PROJECT_END,
            "NSW",
            now=TODAY,
            registered_abn=VALID_ABN,
        )
        assert result.status == "review"
        abn = [c for c in result.checks if c.check_type == "abn_verification"][0]
        assert abn.details == (
            "ABN 53 004 085 616 on certificate does not match registered ABN 51 824 753 556"
        )


class TestConfidence:
    def test_below_threshold_is_a_warning(self):
        check = check_confidence(0.62, 0.8)
        assert check.status == "warning"
        assert check.details == "Extraction confidence (62%) is below the review threshold (80%)"

    def test_threshold_unset_adds_no_check(self):
        result = verify(make_extracted(extraction_confidence=0.1), standard_requirements(), now=TODAY)
        assert all(c.check_type != "extraction_confidence" for c in result.checks)
        assert result.status == "pass"

    def test_low_confidence_goes_to_review(self):
        result = verify(
            make_extracted(extraction_confidence=0.5),
            standard_requirements(),
            now=TODAY,
            review_confidence_threshold=0.8,
        )
        assert result.status == "review"


class TestPurity:
    def test_same_inputs_same_result(self):
        extracted = make_extracted()
        requirements = standard_requirements()
        first = verify(extracted, requirements, PROJECT_END, "NSW", now=TODAY)
        second = verify(extracted, requirements, PROJECT_END, "NSW", now=TODAY)
        assert first == second

    def test_inputs_are_not_mutated(self):
        extracted = make_extracted()
        before = extracted.model_dump()
        verify(extracted, standard_requirements(), PROJECT_END, "NSW", now=TODAY)
        assert extracted.model_dump() == before

    def test_result_is_immutable(self):
        result = verify(make_extracted(), standard_requirements(), now=TODAY)
        with pytest.raises(ValidationError):
            result.status = "fail"

    def test_datetime_now_is_evaluated_on_its_utc_day(self):
        late_evening_utc = datetime(2026, 3, 1, 23, 59, tzinfo=timezone.utc)
        extracted = make_extracted(period_of_insurance_end=TODAY)
        result = verify(extracted, standard_requirements(), now=late_evening_utc)
        assert result.checks[0].details == "Policy expires today"


class TestExtractedPolicyValidation:
    def test_accepts_camel_case_keys(self):
        extracted = ExtractedPolicyData.model_validate(
            {
                "insuredPartyName": "Apex Electrical Pty Ltd",
                "insurerName": "QBE",
                "policyNumber": "PL-1",
                "periodOfInsuranceEnd": "2027-06-30",
                "coverages": [{"type": "motor_vehicle", "limit": 30_000_000}],
            }
        )
        assert extracted.coverages[0].type == "motor_vehicle"
        assert extracted.extraction_confidence == 0.0

    def test_unknown_coverage_type_is_rejected(self):
        with pytest.raises(ValidationError):
            ExtractedPolicyData.model_validate(
                make_extracted().model_dump(mode="json")
                | {"coverages": [{"type": "cyber", "limit": 1_000_000}]}
            )

    def test_missing_end_date_is_rejected(self):
        data = make_extracted().model_dump(mode="json")
        del data["period_of_insurance_end"]
        with pytest.raises(ValidationError):
            ExtractedPolicyData.model_validate(data)

    def test_negative_limit_is_rejected(self):
        with pytest.raises(ValidationError):
            ExtractedPolicyData.model_validate(
                make_extracted().model_dump(mode="json")
                | {"coverages": [{"type": "public_liability", "limit": -1}]}
            )
