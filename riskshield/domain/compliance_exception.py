"""SQLAlchemy ORM model for compliance exceptions (approved, time-bounded waivers)."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from riskshield.db.base import Base
from riskshield.domain.mixins import TenantMixin, TimestampMixin, new_id


class ComplianceException(Base, TenantMixin, TimestampMixin):
    __tablename__ = "exceptions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    project_subcontractor_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("project_subcontractors.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    verification_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    issue_summary: Mapped[str] = mapped_column(Text, nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # "low" | "medium" | "high"
    risk_level: Mapped[str] = mapped_column(String(20), default="medium", nullable=False)

    # "pending_approval" | "active" | "expired" | "resolved" | "closed"
    status: Mapped[str] = mapped_column(
        String(30), default="pending_approval", nullable=False, index=True
    )
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_by_user_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    approved_by_user_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # "coc_updated" | "manual" | ...
    resolution_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    resolution_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
