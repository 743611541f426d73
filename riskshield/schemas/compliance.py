"""Compliance state-machine schemas: communication requests and outcomes."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from riskshield.schemas.common import CamelModel, FrozenCamelModel

ComplianceStatus = Literal["pending", "compliant", "non_compliant", "exception"]
ExceptionStatus = Literal["pending_approval", "active", "expired", "resolved", "closed"]
CommunicationType = Literal["deficiency", "confirmation"]


class CommunicationRequest(FrozenCamelModel):
    """A notice handed to the email/SMS dispatcher."""

    type: CommunicationType
    recipient_email: str
    recipient_name: str
    subject: str
    body: str
    due_date: date | None = None


class OutcomeResult(FrozenCamelModel):
    exceptions_resolved: int
    new_status: ComplianceStatus
    communication_request: CommunicationRequest | None = None


class ComplianceExceptionOut(CamelModel):
    id: str
    project_subcontractor_id: str
    issue_summary: str
    reason: str | None = None
    risk_level: str
    status: ExceptionStatus
    expires_at: datetime | None = None
    approved_by_user_id: str | None = None
    approved_at: datetime | None = None
    resolution_type: str | None = None
    resolved_at: datetime | None = None
    resolution_notes: str | None = None
    created_at: datetime
    updated_at: datetime


class ExceptionApproval(CamelModel):
    approved_by_user_id: str


class ExpireResult(CamelModel):
    expired: int
