"""SQLAlchemy ORM models for uploaded Certificates of Currency and their verification."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, JSON, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from riskshield.db.base import Base
from riskshield.domain.mixins import TenantMixin, TimestampMixin, new_id


class CocDocument(Base, TenantMixin, TimestampMixin):
    """One uploaded Certificate of Currency for a (project, subcontractor) pair."""

    __tablename__ = "coc_documents"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    project_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    subcontractor_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("subcontractors.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Blob storage reference
    file_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    file_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    file_size: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    # "upload" | "email" | "portal"
    source: Mapped[str] = mapped_column(String(50), default="upload", nullable=False)

    # "pending" | "processing" | "completed" | "extraction_failed"
    processing_status: Mapped[str] = mapped_column(
        String(50), default="pending", nullable=False, index=True
    )
    processed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    verification: Mapped[Optional["Verification"]] = relationship(
        back_populates="document", lazy="noload", uselist=False
    )


class Verification(Base, TenantMixin, TimestampMixin):
    """The single verification result of a document.

    ``coc_document_id`` is unique: re-processing replaces the row in place.
    """

    __tablename__ = "verifications"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    coc_document_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("coc_documents.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    project_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)

    # "pass" | "fail" | "review"
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    confidence_score: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 4), nullable=True)
    extracted_data: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    checks: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    deficiencies: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    # Manual override
    verified_by_user_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    verified_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    document: Mapped["CocDocument"] = relationship(back_populates="verification", lazy="noload")
