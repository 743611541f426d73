"""Policy expiry and project-period checks."""

from __future__ import annotations

from datetime import date, datetime, timezone

from riskshield.schemas.verification import Check, Deficiency
from riskshield.services.formatting import format_iso_date, make_deficiency, pluralize_days

EXPIRY_WARNING_DAYS = 30


def as_reference_date(now: date | datetime | None) -> date:
    """Reduce *now* to the UTC calendar day the rules are evaluated on."""
    if now is None:
        return datetime.now(timezone.utc).date()
    if isinstance(now, datetime):
        if now.tzinfo is not None:
            now = now.astimezone(timezone.utc)
        return now.date()
    return now


def days_until(end: date, today: date) -> int:
    return (end - today).days


def evaluate_policy_validity(
    policy_end: date,
    today: date,
    warning_days: int = EXPIRY_WARNING_DAYS,
) -> tuple[Check, Deficiency | None]:
    """Expired → fail + critical deficiency; within *warning_days* → warning only."""
    remaining = days_until(policy_end, today)

    if remaining < 0:
        check = Check(
            check_type="policy_validity",
            description="Policy validity period",
            status="fail",
            details="Policy has expired",
        )
        deficiency = make_deficiency(
            "expired_policy",
            "Certificate of Currency has expired",
            required_value="Valid policy",
            actual_value=f"Expired on {format_iso_date(policy_end)}",
        )
        return check, deficiency

    if remaining <= warning_days:
        return (
            Check(
                check_type="policy_validity",
                description="Policy validity period",
                status="warning",
                details=f"Policy expires {pluralize_days(remaining)}",
            ),
            None,
        )

    return (
        Check(
            check_type="policy_validity",
            description="Policy validity period",
            status="pass",
            details=f"Policy valid until {format_iso_date(policy_end)}",
        ),
        None,
    )


def evaluate_project_coverage(
    policy_end: date, project_end: date,
) -> tuple[Check, Deficiency | None]:
    if policy_end < project_end:
        check = Check(
            check_type="project_coverage",
            description="Project period coverage",
            status="fail",
            details=f"Policy expires before project end date ({format_iso_date(project_end)})",
        )
        deficiency = make_deficiency(
            "policy_expires_before_project",
            "Policy expires before project completion date",
            required_value=f"Valid until {format_iso_date(project_end)}",
            actual_value=f"Expires {format_iso_date(policy_end)}",
        )
        return check, deficiency

    return (
        Check(
            check_type="project_coverage",
            description="Project period coverage",
            status="pass",
            details=f"Policy covers project period (ends {format_iso_date(project_end)})",
        ),
        None,
    )


def evaluate_temporal_validity(
    policy_end: date,
    now: date | datetime | None = None,
    project_end: date | None = None,
    warning_days: int = EXPIRY_WARNING_DAYS,
) -> tuple[list[Check], list[Deficiency]]:
    today = as_reference_date(now)
    checks: list[Check] = []
    deficiencies: list[Deficiency] = []

    pairs = [evaluate_policy_validity(policy_end, today, warning_days)]
    if project_end is not None:
        pairs.append(evaluate_project_coverage(policy_end, project_end))

    for check, deficiency in pairs:
        checks.append(check)
        if deficiency is not None:
            deficiencies.append(deficiency)
    return checks, deficiencies
