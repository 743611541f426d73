"""v1 router package — all /api/v1/* endpoints live here.

Files:
  verifications.py   — evaluate, process a document, read/override a verification
  exceptions.py      — compliance exception approval, closing, expiry
  subcontractors.py  — subcontractor CRUD

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to riskshield/services/.
"""
