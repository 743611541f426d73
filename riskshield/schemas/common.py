"""Shared Pydantic schema bases with camelCase aliases, health and error bodies."""

from __future__ import annotations

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """All API schemas inherit from this to auto-generate camelCase aliases."""

    model_config = {
        "populate_by_name": True,
        "alias_generator": to_camel,
        "from_attributes": True,
    }


class FrozenCamelModel(CamelModel):
    """Immutable value object (engine inputs and outputs are never mutated)."""

    model_config = {"frozen": True}


class HealthResponse(BaseModel):
    """Health-check response returned by /health."""
    status: str = "ok"
    app: str
    env: str


class ErrorBody(BaseModel):
    code: str
    message: str
    retryable: bool | None = None
    actions: list[str] | None = None


class ErrorResponse(BaseModel):
    """Body of every error answer: `{ error: {...} }` (see core/exceptions.py)."""

    error: ErrorBody
