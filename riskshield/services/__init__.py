"""Services package — all business logic lives here, never in routers.

Pure rule evaluation (no SQLAlchemy, no FastAPI):
  verification_engine.py  — verify(): the single entry point for compliance rules
  temporal.py             — policy expiry and project-period checks
  coverage_matcher.py     — requirement ↔ coverage matching
  status_resolver.py      — fail > review > pass aggregation
  formatting.py           — labels, currency/date text, deficiency severities
  abn.py                  — ABN normalisation and checksum

Stateful:
  verification_records.py   — one verification per document (create / upsert)
  compliance_state.py       — exception auto-resolution, compliance status, notices
  communications.py         — notice templates and the dispatcher
  exception_service.py      — exception approval / closing / expiry
  document_verification.py  — document workflow tying the above together
  subcontractor.py          — subcontractor CRUD

Rule: routers call services, services call repositories, repositories call the DB.
"""
