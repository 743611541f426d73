"""Aggregate checks and deficiencies into one overall verification status."""

from __future__ import annotations

from collections.abc import Iterable

from riskshield.schemas.verification import Check, Deficiency, VerificationStatus


def resolve_status(checks: Iterable[Check], deficiencies: Iterable[Deficiency]) -> VerificationStatus:
    """``fail`` dominates ``review`` dominates ``pass``.

    A failed check or any critical deficiency fails the certificate; otherwise
    any warning sends it to manual review.
    """
    checks = list(checks)
    has_failures = any(c.status == "fail" for c in checks)
    has_warnings = any(c.status == "warning" for c in checks)
    has_critical = any(d.severity == "critical" for d in deficiencies)

    if has_failures or has_critical:
        return "fail"
    if has_warnings:
        return "review"
    return "pass"
