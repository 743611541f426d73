"""Subcontractor Pydantic schemas (request DTOs and response models)."""


from datetime import datetime

from riskshield.schemas.common import CamelModel

class SubcontractorCreate(CamelModel):
    name: str
    abn: str | None = None
    trade: str | None = None
    contact_name: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    broker_name: str | None = None
    broker_email: str | None = None
    broker_phone: str | None = None
    notes: str | None = None

class SubcontractorUpdate(CamelModel):
    name: str | None = None
    abn: str | None = None
    trade: str | None = None
    contact_name: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    broker_name: str | None = None
    broker_email: str | None = None
    broker_phone: str | None = None
    notes: str | None = None

class SubcontractorOut(CamelModel):
    id: str
    client_id: str
    name: str
    abn: str | None = None
    trade: str | None = None
    contact_name: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    broker_name: str | None = None
    broker_email: str | None = None
    broker_phone: str | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime
