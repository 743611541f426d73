"""Compliance verification value types.

Inputs (extracted policy data, coverage requirements) and outputs (checks,
deficiencies, verification result) of the verification engine. All of them
are frozen: the engine never mutates what it is given or what it returns.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Annotated, Literal, Union

from pydantic import Field

from riskshield.schemas.common import FrozenCamelModel

CoverageType = Literal[
    "public_liability",
    "products_liability",
    "workers_comp",
    "professional_indemnity",
    "motor_vehicle",
    "contract_works",
]
CheckStatus = Literal["pass", "fail", "warning"]
Severity = Literal["critical", "major", "minor"]
DeficiencyType = Literal[
    "expired_policy",
    "policy_expires_before_project",
    "missing_coverage",
    "insufficient_limit",
    "excess_too_high",
    "missing_endorsement",
    "state_mismatch",
]
VerificationStatus = Literal["pass", "fail", "review"]

Amount = Annotated[Decimal, Field(ge=0)]

# ---------------------------------------------------------------------------
# Extracted coverages — one model per coverage type
# ---------------------------------------------------------------------------

class _CoverageBase(FrozenCamelModel):
    limit: Amount
    limit_type: str = "per_occurrence"
    excess: Amount = Decimal(0)


class _LiabilityCoverage(_CoverageBase):
    """Liability-style cover that can carry principal-related endorsements."""

    principal_indemnity: bool | None = None
    cross_liability: bool | None = None
    waiver_of_subrogation: bool | None = None
    principal_named: bool | None = None


class PublicLiabilityCoverage(_LiabilityCoverage):
    type: Literal["public_liability"] = "public_liability"


class ProductsLiabilityCoverage(_LiabilityCoverage):
    type: Literal["products_liability"] = "products_liability"


class ContractWorksCoverage(_LiabilityCoverage):
    type: Literal["contract_works"] = "contract_works"


class WorkersCompCoverage(_CoverageBase):
    type: Literal["workers_comp"] = "workers_comp"
    state: str | None = None
    employer_indemnity: bool | None = None


class ProfessionalIndemnityCoverage(_CoverageBase):
    type: Literal["professional_indemnity"] = "professional_indemnity"
    retroactive_date: date | None = None


class MotorVehicleCoverage(_CoverageBase):
    type: Literal["motor_vehicle"] = "motor_vehicle"


Coverage = Annotated[
    Union[
        PublicLiabilityCoverage,
        ProductsLiabilityCoverage,
        ContractWorksCoverage,
        WorkersCompCoverage,
        ProfessionalIndemnityCoverage,
        MotorVehicleCoverage,
    ],
    Field(discriminator="type"),
]


class ExtractedPolicyData(FrozenCamelModel):
    """Policy details read off a Certificate of Currency by the extraction service."""

    insured_party_name: str
    insured_party_abn: str | None = None
    insured_party_address: str | None = None
    insurer_name: str
    policy_number: str
    period_of_insurance_start: date | None = None
    period_of_insurance_end: date
    coverages: list[Coverage] = Field(default_factory=list)
    extraction_confidence: float = Field(default=0.0, ge=0.0, le=1.0)

    broker_name: str | None = None
    broker_email: str | None = None
    currency: str = "AUD"


# ---------------------------------------------------------------------------
# Requirements
# ---------------------------------------------------------------------------

class CoverageRequirement(FrozenCamelModel):
    coverage_type: CoverageType
    minimum_limit: Amount | None = None
    limit_type: str = "per_occurrence"
    maximum_excess: Amount | None = None
    principal_indemnity_required: bool = False
    cross_liability_required: bool = False
    waiver_of_subrogation_required: bool = False
    principal_naming_required: bool = False


# ---------------------------------------------------------------------------
# Engine output
# ---------------------------------------------------------------------------

class Check(FrozenCamelModel):
    check_type: str
    description: str
    status: CheckStatus
    details: str


class Deficiency(FrozenCamelModel):
    type: DeficiencyType
    severity: Severity
    description: str
    required_value: str | None = None
    actual_value: str | None = None


class VerificationResult(FrozenCamelModel):
    status: VerificationStatus
    checks: list[Check] = Field(default_factory=list)
    deficiencies: list[Deficiency] = Field(default_factory=list)
    confidence_score: float


class ExtractionFailure(FrozenCamelModel):
    """Typed failure reported by the extraction service."""

    code: str = "UNREADABLE"
    message: str
    retryable: bool = False
