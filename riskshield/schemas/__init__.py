"""Pydantic schemas package.

Folder intent:
  common.py         — CamelModel / FrozenCamelModel bases + HealthResponse
  verification.py   — Verification engine inputs and outputs (coverages, requirements, checks, deficiencies)
  compliance.py     — Communication requests, outcome of a verification, exception DTOs
  document.py       — Document verification request/response models
  subcontractor.py  — Subcontractor DTOs
"""
