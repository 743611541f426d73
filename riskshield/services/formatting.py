"""Deficiency classification and human-readable formatting.

Everything here is deterministic and independent of the process locale so
deficiency text can be compared verbatim in tests and stored as-is.
"""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from riskshield.schemas.verification import Deficiency, DeficiencyType, Severity

COVERAGE_LABELS: dict[str, str] = {
    "public_liability": "Public Liability",
    "products_liability": "Products Liability",
    "workers_comp": "Workers' Compensation",
    "professional_indemnity": "Professional Indemnity",
    "motor_vehicle": "Motor Vehicle",
    "contract_works": "Contract Works",
}

DEFICIENCY_SEVERITY: dict[str, Severity] = {
    "expired_policy": "critical",
    "policy_expires_before_project": "critical",
    "missing_coverage": "critical",
    "state_mismatch": "critical",
    "insufficient_limit": "major",
    "missing_endorsement": "major",
    "excess_too_high": "minor",
}

_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def coverage_label(coverage_type: str) -> str:
    """Display label for a coverage type, e.g. ``workers_comp`` → "Workers' Compensation"."""
    label = COVERAGE_LABELS.get(coverage_type)
    if label:
        return label
    return " ".join(word.capitalize() for word in coverage_type.split("_"))


def format_currency(amount: Decimal | int | float) -> str:
    """``$`` + thousands-grouped whole dollars: ``20000000`` → ``$20,000,000``."""
    whole = Decimal(str(amount)).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return f"${whole:,}"


def format_iso_date(value: date) -> str:
    return value.isoformat()


def format_long_date(value: date) -> str:
    """Human-readable date for notices, e.g. ``14 November 2026``."""
    return f"{value.day} {_MONTHS[value.month - 1]} {value.year}"


def pluralize_days(days: int) -> str:
    if days == 0:
        return "today"
    if days == 1:
        return "in 1 day"
    return f"in {days} days"


def make_deficiency(
    deficiency_type: DeficiencyType,
    description: str,
    required_value: str | None,
    actual_value: str | None,
) -> Deficiency:
    """Build a deficiency with the severity its type carries."""
    return Deficiency(
        type=deficiency_type,
        severity=DEFICIENCY_SEVERITY[deficiency_type],
        description=description,
        required_value=required_value,
        actual_value=actual_value,
    )
