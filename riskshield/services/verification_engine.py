"""Compliance verification engine.

``verify`` is the one place certificate data is judged against a project's
insurance requirements. It is a pure function of its arguments: no I/O, no
settings lookups, and no clock reads beyond the injectable *now*. Callers
(the document workflow, the evaluate endpoint) feed it and persist the
result themselves.

Order of evaluation:
  1. Policy validity and project-period coverage (temporal)
  2. ABN on the certificate vs. the subcontractor's registered ABN
  3. Each coverage requirement (presence, limit, excess, endorsements, WC state)
  4. Extraction confidence, when a review threshold is supplied
  5. Overall status (fail > review > pass)
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime

from riskshield.schemas.verification import (
    Check,
    CoverageRequirement,
    ExtractedPolicyData,
    VerificationResult,
)
from riskshield.services.abn import format_abn, is_valid_abn, normalize_abn
from riskshield.services.coverage_matcher import match_coverages
from riskshield.services.status_resolver import resolve_status
from riskshield.services.temporal import EXPIRY_WARNING_DAYS, evaluate_temporal_validity


def check_abn(extracted_abn: str | None, registered_abn: str | None = None) -> Check | None:
    """ABN check, or ``None`` when the certificate carries no ABN.

    A malformed or mismatching ABN is a *warning*: extraction misreads are
    common, so a person confirms it rather than the certificate failing.
    """
    if not normalize_abn(extracted_abn):
        return None

    shown = format_abn(extracted_abn)
    if not is_valid_abn(extracted_abn):
        return Check(
            check_type="abn_verification",
            description="ABN verification",
            status="warning",
            details=f"ABN {shown} on certificate is not a valid ABN",
        )
    if registered_abn and normalize_abn(registered_abn) != normalize_abn(extracted_abn):
        return Check(
            check_type="abn_verification",
            description="ABN verification",
            status="warning",
            details=(
                f"ABN {shown} on certificate does not match registered ABN "
                f"{format_abn(registered_abn)}"
            ),
        )
    return Check(
        check_type="abn_verification",
        description="ABN verification",
        status="pass",
        details=f"ABN {shown} verified",
    )


def check_confidence(confidence: float, threshold: float) -> Check:
    if confidence < threshold:
        return Check(
            check_type="extraction_confidence",
            description="Extraction confidence",
            status="warning",
            details=(
                f"Extraction confidence ({confidence:.0%}) is below "
                f"the review threshold ({threshold:.0%})"
            ),
        )
    return Check(
        check_type="extraction_confidence",
        description="Extraction confidence",
        status="pass",
        details=f"Extraction confidence {confidence:.0%}",
    )


def verify(
    extracted: ExtractedPolicyData,
    requirements: Iterable[CoverageRequirement],
    project_end_date: date | None = None,
    project_state: str | None = None,
    *,
    now: date | datetime | None = None,
    registered_abn: str | None = None,
    review_confidence_threshold: float | None = None,
    expiry_warning_days: int = EXPIRY_WARNING_DAYS,
) -> VerificationResult:
    """Verify extracted certificate data against a project's coverage requirements."""
    checks, deficiencies = evaluate_temporal_validity(
        extracted.period_of_insurance_end,
        now=now,
        project_end=project_end_date,
        warning_days=expiry_warning_days,
    )

    abn_check = check_abn(extracted.insured_party_abn, registered_abn)
    if abn_check is not None:
        checks.append(abn_check)

    coverage_checks, coverage_deficiencies = match_coverages(
        requirements, extracted.coverages, project_state,
    )
    checks.extend(coverage_checks)
    deficiencies.extend(coverage_deficiencies)

    if review_confidence_threshold is not None:
        checks.append(check_confidence(extracted.extraction_confidence, review_confidence_threshold))

    status = resolve_status(checks, deficiencies)
    return VerificationResult(
        status=status,
        checks=checks,
        deficiencies=deficiencies,
        confidence_score=extracted.extraction_confidence,
    )
