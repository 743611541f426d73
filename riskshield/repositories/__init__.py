"""Repositories package — all SQLAlchemy queries live here.

Files:
  base.py                  — BaseRepository (tenant-scoped CRUD, soft delete, pagination)
  subcontractor.py         — Subcontractors
  project.py               — Projects, insurance requirements, project-subcontractor links
  document.py              — COC documents and their single verification (upsert)
  compliance_exception.py  — Compliance exceptions (guarded status updates)
  communication.py         — Queued communications and the audit trail
"""
