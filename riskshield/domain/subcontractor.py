"""SQLAlchemy ORM model for Subcontractors.

The broker and contact emails are the recipients of deficiency and
confirmation notices (broker first, contact as fallback).
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from riskshield.db.base import Base
from riskshield.domain.mixins import SoftDeleteMixin, TenantMixin, TimestampMixin, new_id


class Subcontractor(Base, TenantMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "subcontractors"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    # Registered ABN; compared against the ABN printed on each certificate
    abn: Mapped[Optional[str]] = mapped_column(String(20), index=True, nullable=True)
    trade: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    contact_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    contact_email: Mapped[Optional[str]] = mapped_column(String(255), index=True, nullable=True)
    contact_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    broker_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    broker_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    broker_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    project_links: Mapped[List["ProjectSubcontractor"]] = relationship(
        back_populates="subcontractor", lazy="noload"
    )

    @property
    def recipient_email(self) -> str | None:
        return self.broker_email or self.contact_email or None

    @property
    def recipient_name(self) -> str:
        return self.broker_name or self.contact_name or "Insurance Contact"
