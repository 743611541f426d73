"""Verification record manager — at most one verification per document.

``create`` is for first processing and refuses to overwrite; ``upsert`` is
for re-processing and replaces the stored result in place.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from riskshield.core.exceptions import ConflictError, InputError, NotFoundError
from riskshield.domain.document import Verification
from riskshield.repositories.document import CocDocumentRepository, VerificationRepository
from riskshield.schemas.verification import ExtractedPolicyData, VerificationResult

logger = logging.getLogger(__name__)

_MANUAL_STATUSES = ("pass", "fail", "review")


def verification_fields(
    result: VerificationResult, extracted: ExtractedPolicyData | None = None,
) -> dict[str, Any]:
    """Column values a verification row stores for *result*."""
    return {
        "status": result.status,
        "confidence_score": Decimal(str(round(result.confidence_score, 4))),
        "checks": [c.model_dump(mode="json") for c in result.checks],
        "deficiencies": [d.model_dump(mode="json") for d in result.deficiencies],
        "extracted_data": extracted.model_dump(mode="json") if extracted is not None else None,
    }


class VerificationRecordService:
    def __init__(self, session: AsyncSession, client_id: str):
        self._session = session
        self._repo = VerificationRepository(session, client_id)
        self._documents = CocDocumentRepository(session, client_id)

    async def _project_id_for(self, document_id: str) -> str:
        document = await self._documents.get_by_id(document_id)
        if not document:
            raise NotFoundError("Document", document_id)
        return document.project_id

    async def get_for_document(self, document_id: str) -> Verification:
        verification = await self._repo.get_by_document(document_id)
        if not verification:
            raise NotFoundError("Verification for document", document_id)
        return verification

    async def create(
        self,
        document_id: str,
        result: VerificationResult,
        extracted: ExtractedPolicyData | None = None,
    ) -> Verification:
        """Insert the first verification of *document_id*.

        Raises :class:`ConflictError` when one already exists; re-processing
        must go through :meth:`upsert`. The session is unusable after a
        conflict and must be rolled back by its owner.
        """
        project_id = await self._project_id_for(document_id)
        if await self._repo.get_by_document(document_id):
            raise ConflictError(
                f"Verification for document '{document_id}' already exists; use upsert"
            )
        try:
            return await self._repo.create(
                coc_document_id=document_id,
                project_id=project_id,
                **verification_fields(result, extracted),
            )
        except IntegrityError as exc:
            # Lost a race with a concurrent create for the same document.
            raise ConflictError(
                f"Verification for document '{document_id}' already exists; use upsert"
            ) from exc

    async def upsert(
        self,
        document_id: str,
        result: VerificationResult,
        extracted: ExtractedPolicyData | None = None,
    ) -> str:
        """Create or replace the verification of *document_id*; return its id."""
        project_id = await self._project_id_for(document_id)
        verification_id = await self._repo.upsert_by_document(
            document_id, project_id, verification_fields(result, extracted),
        )
        logger.info(
            "Stored verification %s for document %s (status=%s)",
            verification_id, document_id, result.status,
        )
        return verification_id

    async def manual_verify(self, verification_id: str, status: str, user_id: str) -> Verification:
        """Record a reviewer's decision, overriding the engine's status."""
        if status not in _MANUAL_STATUSES:
            raise InputError(f"Unknown verification status '{status}'")
        verification = await self._repo.update(
            verification_id,
            status=status,
            verified_by_user_id=user_id,
            verified_at=datetime.now(timezone.utc),
        )
        if not verification:
            raise NotFoundError("Verification", verification_id)
        return verification
