"""SQLAlchemy ORM models for Projects, their insurance requirements, and
the per-(project, subcontractor) compliance link."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import Boolean, Date, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from riskshield.db.base import Base
from riskshield.domain.mixins import TenantMixin, TimestampMixin, new_id


class Project(Base, TenantMixin, TimestampMixin):
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Australian state/territory code, e.g. "NSW"; workers' comp must match it
    state: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    # "active" | "completed" | "on_hold"
    status: Mapped[str] = mapped_column(String(50), default="active", nullable=False)

    requirements: Mapped[List["InsuranceRequirement"]] = relationship(
        back_populates="project", lazy="selectin", cascade="all, delete-orphan"
    )


class InsuranceRequirement(Base, TenantMixin, TimestampMixin):
    """One minimum standard a project imposes on one coverage type."""

    __tablename__ = "insurance_requirements"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    project_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    coverage_type: Mapped[str] = mapped_column(String(50), nullable=False)
    minimum_limit: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)
    # "per_occurrence" | "aggregate"
    limit_type: Mapped[str] = mapped_column(String(50), default="per_occurrence", nullable=False)
    maximum_excess: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)
    principal_indemnity_required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    cross_liability_required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    waiver_of_subrogation_required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    principal_naming_required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    project: Mapped["Project"] = relationship(back_populates="requirements")


class ProjectSubcontractor(Base, TenantMixin, TimestampMixin):
    """Compliance status of one subcontractor on one project."""

    __tablename__ = "project_subcontractors"
    __table_args__ = (
        UniqueConstraint("project_id", "subcontractor_id", name="uq_project_subcontractor"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    project_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    subcontractor_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("subcontractors.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # "pending" | "compliant" | "non_compliant" | "exception"
    status: Mapped[str] = mapped_column(String(50), default="pending", nullable=False, index=True)
    on_site_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    subcontractor: Mapped["Subcontractor"] = relationship(
        back_populates="project_links", lazy="noload"
    )
