"""Compliance state machine — reacts to a verification outcome.

Given a fresh verification result for a (project, subcontractor) pair:

  pass    resolve every *active* exception (coc_updated), set ``compliant``,
          send a confirmation notice
  fail    set ``non_compliant`` (a pair under an approved exception keeps
          ``exception``), send a deficiency notice due in 14 days
  review  nothing; the document waits in the manual review queue

Every write is a guarded UPDATE (``WHERE status IN (...)``), so retries and
concurrent results for the same pair cannot resolve an exception twice or
reach ``compliant`` from anything but a pass. A missing recipient skips the
notice but never the state change.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from riskshield.core.exceptions import NotFoundError
from riskshield.domain.project import Project, ProjectSubcontractor
from riskshield.domain.subcontractor import Subcontractor
from riskshield.repositories.communication import AuditRepository
from riskshield.repositories.compliance_exception import ComplianceExceptionRepository
from riskshield.repositories.project import ProjectRepository, ProjectSubcontractorRepository
from riskshield.repositories.subcontractor import SubcontractorRepository
from riskshield.schemas.compliance import CommunicationRequest, OutcomeResult
from riskshield.schemas.verification import VerificationResult
from riskshield.services.communications import (
    CommunicationDispatcher,
    QueuedCommunicationDispatcher,
    build_confirmation_notice,
    build_deficiency_notice,
)
from riskshield.services.temporal import as_reference_date

logger = logging.getLogger(__name__)

AUTO_RESOLUTION_TYPE = "coc_updated"
AUTO_RESOLUTION_NOTES = "Automatically resolved — new compliant certificate uploaded"

# target status -> statuses it may be entered from
STATUS_TRANSITIONS: dict[str, frozenset[str]] = {
    "compliant": frozenset({"pending", "non_compliant", "exception", "compliant"}),
    "non_compliant": frozenset({"pending", "compliant", "non_compliant"}),
    "exception": frozenset({"pending", "non_compliant"}),
}


def can_transition(current: str, target: str) -> bool:
    return current in STATUS_TRANSITIONS.get(target, frozenset())


class ComplianceStateMachine:
    def __init__(
        self,
        session: AsyncSession,
        client_id: str,
        dispatcher: CommunicationDispatcher | None = None,
    ):
        self._links = ProjectSubcontractorRepository(session, client_id)
        self._projects = ProjectRepository(session, client_id)
        self._subcontractors = SubcontractorRepository(session, client_id)
        self._exceptions = ComplianceExceptionRepository(session, client_id)
        self._audit = AuditRepository(session, client_id)
        self._dispatcher = dispatcher or QueuedCommunicationDispatcher(session, client_id)

    async def _load(
        self, project_id: str, subcontractor_id: str,
    ) -> tuple[ProjectSubcontractor, Project, Subcontractor]:
        link = await self._links.get_pair(project_id, subcontractor_id)
        if not link:
            raise NotFoundError("Project subcontractor", f"{project_id}/{subcontractor_id}")
        project = await self._projects.get_by_id(project_id)
        if not project:
            raise NotFoundError("Project", project_id)
        subcontractor = await self._subcontractors.get_by_id(subcontractor_id)
        if not subcontractor:
            raise NotFoundError("Subcontractor", subcontractor_id)
        return link, project, subcontractor

    async def resolve_active_exceptions(
        self,
        link: ProjectSubcontractor,
        now: datetime,
        *,
        verification_id: str | None = None,
        document_id: str | None = None,
    ) -> int:
        """Resolve the pair's active exceptions; returns how many this call resolved."""
        resolved = 0
        for exception in await self._exceptions.list_for_link(link.id, status="active"):
            moved = await self._exceptions.transition_if(
                exception.id,
                "active",
                "resolved",
                resolution_type=AUTO_RESOLUTION_TYPE,
                resolved_at=now,
                resolution_notes=AUTO_RESOLUTION_NOTES,
            )
            if not moved:
                # Resolved, closed or expired by someone else in the meantime.
                continue
            resolved += 1
            await self._audit.record(
                "auto_resolve",
                "exception",
                exception.id,
                {
                    "resolution_type": AUTO_RESOLUTION_TYPE,
                    "verification_id": verification_id,
                    "document_id": document_id,
                },
            )
        return resolved

    async def set_status(self, link: ProjectSubcontractor, target: str, reason: str) -> bool:
        previous = await self._links.refresh_status(link)
        if not can_transition(previous, target):
            logger.info(
                "Project subcontractor %s stays %s (no transition to %s)", link.id, previous, target,
            )
            return False
        changed = await self._links.transition_status(link.id, target, STATUS_TRANSITIONS[target])
        if changed and previous != target:
            await self._audit.record(
                "status_change",
                "project_subcontractor",
                link.id,
                {"previous_status": previous, "new_status": target, "reason": reason},
            )
            logger.info("Project subcontractor %s: %s -> %s", link.id, previous, target)
        return changed

    def _notice(
        self,
        result: VerificationResult,
        project: Project,
        subcontractor: Subcontractor,
        today: date,
    ) -> CommunicationRequest | None:
        recipient = subcontractor.recipient_email
        if not recipient:
            logger.warning(
                "No broker or contact email for subcontractor %s; skipping %s notice",
                subcontractor.id, "confirmation" if result.status == "pass" else "deficiency",
            )
            return None

        if result.status == "pass":
            return build_confirmation_notice(
                recipient_email=recipient,
                recipient_name=subcontractor.recipient_name,
                subcontractor_name=subcontractor.name,
                subcontractor_abn=subcontractor.abn,
                project_name=project.name,
            )
        return build_deficiency_notice(
            recipient_email=recipient,
            recipient_name=subcontractor.recipient_name,
            subcontractor_name=subcontractor.name,
            subcontractor_abn=subcontractor.abn,
            project_name=project.name,
            project_id=project.id,
            subcontractor_id=subcontractor.id,
            deficiencies=result.deficiencies,
            today=today,
        )

    async def apply_outcome(
        self,
        project_id: str,
        subcontractor_id: str,
        result: VerificationResult,
        *,
        now: datetime | None = None,
        verification_id: str | None = None,
        document_id: str | None = None,
    ) -> OutcomeResult:
        now = now or datetime.now(timezone.utc)
        link, project, subcontractor = await self._load(project_id, subcontractor_id)

        resolved = 0
        request: CommunicationRequest | None = None

        if result.status == "pass":
            resolved = await self.resolve_active_exceptions(
                link, now, verification_id=verification_id, document_id=document_id,
            )
            await self.set_status(link, "compliant", "Compliant certificate verified")
            request = self._notice(result, project, subcontractor, as_reference_date(now))
        elif result.status == "fail":
            await self.set_status(link, "non_compliant", "Certificate failed verification")
            if result.deficiencies:
                request = self._notice(result, project, subcontractor, as_reference_date(now))

        if request is not None:
            await self._dispatcher.dispatch(
                request,
                project_id=project_id,
                subcontractor_id=subcontractor_id,
                verification_id=verification_id,
            )

        new_status = await self._links.refresh_status(link)
        logger.info(
            "Applied %s outcome to %s/%s: status=%s exceptions_resolved=%d",
            result.status, project_id, subcontractor_id, new_status, resolved,
        )
        return OutcomeResult(
            exceptions_resolved=resolved,
            new_status=new_status,
            communication_request=request,
        )
