"""Application-level exceptions and FastAPI exception handlers."""


from collections.abc import Sequence
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)

class NotFoundError(AppException):
    def __init__(self, entity: str, entity_id: str | None = None):
        msg = f"{entity} not found" if not entity_id else f"{entity} '{entity_id}' not found"
        super().__init__(msg, status_code=404, code="NOT_FOUND")

class ConflictError(AppException):
    def __init__(self, message: str):
        super().__init__(message, status_code=409, code="CONFLICT")

class InputError(AppException):
    """Extracted policy data is malformed or missing required fields.

    Never treated as a passing verification; the caller must fix the input.
    """

    def __init__(self, message: str):
        super().__init__(message, status_code=422, code="INVALID_INPUT")

class InvalidTransitionError(AppException):
    """Raised when an exception/compliance record cannot move to the requested state."""

    def __init__(self, entity: str, current: str, target: str):
        super().__init__(
            f"{entity} cannot move from '{current}' to '{target}'",
            status_code=409,
            code="INVALID_TRANSITION",
        )
        self.current = current
        self.target = target

class ExtractionError(AppException):
    """Raised when the AI extraction of a certificate failed upstream.

    *code* is the extraction service's failure code (e.g. ``UNREADABLE``) and
    *retryable* tells the client whether re-running extraction may succeed.
    """

    def __init__(self, message: str, code: str = "UNREADABLE", retryable: bool = False):
        super().__init__(message, status_code=422, code=code)
        self.retryable = retryable

# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def _error_body(code: str, message: str, **extra) -> dict:
    return {"error": {"code": code, "message": message, **extra}}

def _describe_validation_errors(errors: Sequence[Any]) -> str:
    """One line per pydantic error, ``loc: msg``, joined with ``; ``."""
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in errors
    )

def extraction_error_body(exc: ExtractionError) -> dict:
    actions = ["retry", "upload_new"] if exc.retryable else ["upload_new"]
    return _error_body(exc.code, exc.message, retryable=exc.retryable, actions=actions)

def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the FastAPI app."""

    @app.exception_handler(ExtractionError)
    async def extraction_error_handler(request: Request, exc: ExtractionError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=extraction_error_body(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        # Malformed bodies get the same envelope as InputError.
        error = InputError(f"Invalid request: {_describe_validation_errors(exc.errors())}")
        return JSONResponse(status_code=error.status_code, content=_error_body(error.code, error.message))

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.code, exc.message),
        )

    @app.exception_handler(404)
    async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content=_error_body("NOT_FOUND", "Resource not found"),
        )

    @app.exception_handler(500)
    async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=500,
            content=_error_body("INTERNAL_ERROR", "An unexpected error occurred"),
        )
