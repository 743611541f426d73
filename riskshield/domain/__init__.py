"""Domain package — all ORM models are imported here so Alembic autogenerate detects them.

Folder intent:
  subcontractor.py         — Subcontractors (registered ABN, broker/contact recipients)
  project.py               — Projects, insurance requirements, project-subcontractor status
  document.py              — Uploaded COCs and their single verification row
  compliance_exception.py  — Approved compliance waivers and their lifecycle
  communication.py         — Queued deficiency / confirmation notices
  audit.py                 — Immutable audit trail (never updated or deleted)
  mixins.py                — Shared TimestampMixin, SoftDeleteMixin, TenantMixin
"""

from riskshield.domain.audit import AuditTrail
from riskshield.domain.communication import Communication
from riskshield.domain.compliance_exception import ComplianceException
from riskshield.domain.document import CocDocument, Verification
from riskshield.domain.project import InsuranceRequirement, Project, ProjectSubcontractor
from riskshield.domain.subcontractor import Subcontractor

__all__ = [
    "AuditTrail",
    "CocDocument",
    "Communication",
    "ComplianceException",
    "InsuranceRequirement",
    "Project",
    "ProjectSubcontractor",
    "Subcontractor",
    "Verification",
]
