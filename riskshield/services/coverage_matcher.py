"""Match project coverage requirements against the coverages on a certificate."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from riskshield.schemas.verification import (
    Check,
    Coverage,
    CoverageRequirement,
    Deficiency,
)
from riskshield.services.formatting import coverage_label, format_currency, make_deficiency

# (requirement flag, coverage field, check prefix, display name)
ENDORSEMENT_RULES: tuple[tuple[str, str, str, str], ...] = (
    ("principal_indemnity_required", "principal_indemnity", "principal_indemnity", "Principal indemnity"),
    ("cross_liability_required", "cross_liability", "cross_liability", "Cross liability"),
    ("waiver_of_subrogation_required", "waiver_of_subrogation", "waiver_of_subrogation", "Waiver of subrogation"),
    ("principal_naming_required", "principal_named", "principal_naming", "Principal naming"),
)

_Outcome = tuple[Check, Deficiency | None]


def find_coverage(coverages: Sequence[Coverage], coverage_type: str) -> Coverage | None:
    """First coverage of *coverage_type*; duplicates are left as extracted."""
    return next((c for c in coverages if c.type == coverage_type), None)


def _check_limit(requirement: CoverageRequirement, coverage: Coverage, label: str) -> _Outcome:
    check_type = f"coverage_{requirement.coverage_type}"
    if requirement.minimum_limit is None:
        return (
            Check(
                check_type=check_type,
                description=f"{label} coverage",
                status="pass",
                details="Coverage present in certificate",
            ),
            None,
        )

    actual = format_currency(coverage.limit)
    required = format_currency(requirement.minimum_limit)
    if coverage.limit < requirement.minimum_limit:
        return (
            Check(
                check_type=check_type,
                description=f"{label} limit",
                status="fail",
                details=f"Limit {actual} is below required {required}",
            ),
            make_deficiency(
                "insufficient_limit",
                f"{label} limit is below minimum requirement",
                required_value=required,
                actual_value=actual,
            ),
        )
    return (
        Check(
            check_type=check_type,
            description=f"{label} limit",
            status="pass",
            details=f"Limit {actual} meets minimum requirement",
        ),
        None,
    )


def _check_excess(
    requirement: CoverageRequirement, coverage: Coverage, label: str,
) -> _Outcome | None:
    # Only a breach is reported; an excess within bounds adds no check.
    if requirement.maximum_excess is None or coverage.excess <= requirement.maximum_excess:
        return None
    actual = format_currency(coverage.excess)
    maximum = format_currency(requirement.maximum_excess)
    return (
        Check(
            check_type=f"excess_{requirement.coverage_type}",
            description=f"{label} excess",
            status="fail",
            details=f"Excess {actual} exceeds maximum {maximum}",
        ),
        make_deficiency(
            "excess_too_high",
            f"{label} excess exceeds maximum allowed",
            required_value=f"Max {maximum}",
            actual_value=actual,
        ),
    )


def _check_endorsements(
    requirement: CoverageRequirement, coverage: Coverage, label: str,
) -> list[_Outcome]:
    results: list[_Outcome] = []
    for flag, field, prefix, name in ENDORSEMENT_RULES:
        if not getattr(requirement, flag):
            continue
        # Judged only when the extraction reported the field; absent means unknown.
        if field not in coverage.model_fields_set:
            continue
        if getattr(coverage, field):
            continue
        results.append(
            (
                Check(
                    check_type=f"{prefix}_{requirement.coverage_type}",
                    description=f"{label} {name.lower()}",
                    status="fail",
                    details=f"{name} extension required but not present",
                ),
                make_deficiency(
                    "missing_endorsement",
                    f"{name} extension required for {label}",
                    required_value="Yes",
                    actual_value="No",
                ),
            )
        )
    return results


def _check_workers_comp_state(coverage: Coverage, project_state: str | None) -> _Outcome | None:
    state = getattr(coverage, "state", None)
    if not project_state or not state:
        return None
    if state.strip().upper() != project_state.strip().upper():
        return (
            Check(
                check_type="workers_comp_state",
                description="Workers' Compensation state coverage",
                status="fail",
                details=f"WC scheme is for {state} but project is in {project_state}",
            ),
            make_deficiency(
                "state_mismatch",
                "Workers' Compensation scheme does not cover project state",
                required_value=f"{project_state} scheme",
                actual_value=f"{state} scheme",
            ),
        )
    return (
        Check(
            check_type="workers_comp_state",
            description="Workers' Compensation state coverage",
            status="pass",
            details=f"WC scheme ({state}) matches project state",
        ),
        None,
    )


def match_requirement(
    requirement: CoverageRequirement,
    coverages: Sequence[Coverage],
    project_state: str | None = None,
) -> tuple[list[Check], list[Deficiency]]:
    """Evaluate one requirement; a missing coverage short-circuits the sub-checks."""
    label = coverage_label(requirement.coverage_type)
    coverage = find_coverage(coverages, requirement.coverage_type)

    if coverage is None:
        check = Check(
            check_type=f"coverage_{requirement.coverage_type}",
            description=f"{label} coverage",
            status="fail",
            details="Coverage not found in certificate",
        )
        deficiency = make_deficiency(
            "missing_coverage",
            f"{label} coverage is required but not present",
            required_value=(
                format_currency(requirement.minimum_limit)
                if requirement.minimum_limit is not None
                else "Required"
            ),
            actual_value="Not found",
        )
        return [check], [deficiency]

    outcomes: list[_Outcome | None] = [
        _check_limit(requirement, coverage, label),
        _check_excess(requirement, coverage, label),
    ]
    outcomes.extend(_check_endorsements(requirement, coverage, label))
    if requirement.coverage_type == "workers_comp":
        outcomes.append(_check_workers_comp_state(coverage, project_state))

    checks: list[Check] = []
    deficiencies: list[Deficiency] = []
    for outcome in outcomes:
        if outcome is None:
            continue
        check, deficiency = outcome
        checks.append(check)
        if deficiency is not None:
            deficiencies.append(deficiency)
    return checks, deficiencies


def match_coverages(
    requirements: Iterable[CoverageRequirement],
    coverages: Sequence[Coverage],
    project_state: str | None = None,
) -> tuple[list[Check], list[Deficiency]]:
    checks: list[Check] = []
    deficiencies: list[Deficiency] = []
    for requirement in requirements:
        req_checks, req_deficiencies = match_requirement(requirement, coverages, project_state)
        checks.extend(req_checks)
        deficiencies.extend(req_deficiencies)
    return checks, deficiencies
