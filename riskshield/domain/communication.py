"""SQLAlchemy ORM model for outbound broker/subcontractor communications."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from sqlalchemy import Date, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from riskshield.db.base import Base
from riskshield.domain.mixins import TenantMixin, TimestampMixin, new_id


class Communication(Base, TenantMixin, TimestampMixin):
    __tablename__ = "communications"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    subcontractor_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("subcontractors.id", ondelete="CASCADE"), nullable=False, index=True
    )
    project_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    verification_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    # "deficiency" | "confirmation" | "expiration_reminder"
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    # "email" | "sms"
    channel: Mapped[str] = mapped_column(String(20), default="email", nullable=False)
    recipient_email: Mapped[str] = mapped_column(String(255), nullable=False)
    subject: Mapped[str] = mapped_column(String(500), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # "queued" | "sent" | "delivered" | "failed"
    status: Mapped[str] = mapped_column(String(20), default="queued", nullable=False, index=True)
    sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
