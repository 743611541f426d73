"""Document verification workflow — the one call site of the verification engine.

Loads everything ``verify`` needs for a document, stores the result (one
row per document), then lets the compliance state machine react. Routers
call this; they never evaluate rules themselves.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from riskshield.core.config import settings
from riskshield.core.exceptions import ExtractionError, NotFoundError
from riskshield.domain.document import CocDocument
from riskshield.repositories.document import CocDocumentRepository
from riskshield.repositories.project import InsuranceRequirementRepository, ProjectRepository
from riskshield.repositories.subcontractor import SubcontractorRepository
from riskshield.schemas.compliance import OutcomeResult
from riskshield.schemas.verification import (
    CoverageRequirement,
    ExtractedPolicyData,
    ExtractionFailure,
    VerificationResult,
)
from riskshield.services.communications import CommunicationDispatcher
from riskshield.services.compliance_state import ComplianceStateMachine
from riskshield.services.verification_engine import verify
from riskshield.services.verification_records import VerificationRecordService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessedDocument:
    document_id: str
    verification_id: str
    result: VerificationResult
    outcome: OutcomeResult


class DocumentVerificationService:
    def __init__(
        self,
        session: AsyncSession,
        client_id: str,
        dispatcher: CommunicationDispatcher | None = None,
    ):
        self._documents = CocDocumentRepository(session, client_id)
        self._projects = ProjectRepository(session, client_id)
        self._requirements = InsuranceRequirementRepository(session, client_id)
        self._subcontractors = SubcontractorRepository(session, client_id)
        self._records = VerificationRecordService(session, client_id)
        self._state = ComplianceStateMachine(session, client_id, dispatcher)

    async def _get_document(self, document_id: str) -> CocDocument:
        document = await self._documents.get_by_id(document_id)
        if not document:
            raise NotFoundError("Document", document_id)
        return document

    async def evaluate(
        self, document: CocDocument, extracted: ExtractedPolicyData, now: datetime,
    ) -> VerificationResult:
        project = await self._projects.get_by_id(document.project_id)
        if not project:
            raise NotFoundError("Project", document.project_id)
        subcontractor = await self._subcontractors.get_by_id(document.subcontractor_id)
        if not subcontractor:
            raise NotFoundError("Subcontractor", document.subcontractor_id)
        requirements = [
            CoverageRequirement.model_validate(r)
            for r in await self._requirements.list_for_project(project.id)
        ]
        return verify(
            extracted,
            requirements,
            project_end_date=project.end_date,
            project_state=project.state,
            now=now,
            registered_abn=subcontractor.abn,
            review_confidence_threshold=settings.review_confidence_threshold,
            expiry_warning_days=settings.expiry_warning_days,
        )

    async def process(
        self,
        document_id: str,
        extracted: ExtractedPolicyData,
        *,
        now: datetime | None = None,
    ) -> ProcessedDocument:
        """Verify *extracted* for a document, store it, and apply the outcome."""
        now = now or datetime.now(timezone.utc)
        document = await self._get_document(document_id)
        await self._documents.set_processing_status(document_id, "processing")

        result = await self.evaluate(document, extracted, now)
        verification_id = await self._records.upsert(document_id, result, extracted)
        await self._documents.set_processing_status(document_id, "completed")

        outcome = await self._state.apply_outcome(
            document.project_id,
            document.subcontractor_id,
            result,
            now=now,
            verification_id=verification_id,
            document_id=document_id,
        )
        logger.info(
            "Processed document %s: status=%s deficiencies=%d compliance=%s",
            document_id, result.status, len(result.deficiencies), outcome.new_status,
        )
        return ProcessedDocument(document_id, verification_id, result, outcome)

    async def record_extraction_failure(
        self, document_id: str, failure: ExtractionFailure,
    ) -> ExtractionError:
        """Mark the document unreadable and return the error to report.

        Returned rather than raised so the status change is committed with
        the request. The stored verification (if any) is left as it was.
        """
        await self._get_document(document_id)
        await self._documents.set_processing_status(document_id, "extraction_failed")
        logger.warning(
            "Extraction failed for document %s: %s (%s, retryable=%s)",
            document_id, failure.message, failure.code, failure.retryable,
        )
        return ExtractionError(failure.message, code=failure.code, retryable=failure.retryable)
