"""Compliance exception lifecycle.

    pending_approval -> active -> {expired, resolved, closed}

Resolution by a compliant certificate happens in the compliance state
machine; this service covers approval, manual closing and expiry.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from riskshield.core.exceptions import InvalidTransitionError, NotFoundError
from riskshield.domain.compliance_exception import ComplianceException
from riskshield.repositories.communication import AuditRepository
from riskshield.repositories.compliance_exception import ComplianceExceptionRepository
from riskshield.repositories.project import ProjectSubcontractorRepository
from riskshield.services.compliance_state import STATUS_TRANSITIONS

logger = logging.getLogger(__name__)


class ComplianceExceptionService:
    def __init__(self, session: AsyncSession, client_id: str):
        self._session = session
        self._repo = ComplianceExceptionRepository(session, client_id)
        self._links = ProjectSubcontractorRepository(session, client_id)
        self._audit = AuditRepository(session, client_id)

    async def get_exception(self, exception_id: str) -> ComplianceException:
        exception = await self._repo.get_by_id(exception_id)
        if not exception:
            raise NotFoundError("Exception", exception_id)
        return exception

    async def _move(
        self, exception_id: str, from_status: str, to_status: str, **values,
    ) -> ComplianceException:
        exception = await self.get_exception(exception_id)
        if not await self._repo.transition_if(exception_id, from_status, to_status, **values):
            raise InvalidTransitionError("Exception", exception.status, to_status)
        await self._session.refresh(exception)
        return exception

    async def approve(self, exception_id: str, approved_by_user_id: str) -> ComplianceException:
        """Activate a pending exception; the pair's status becomes ``exception``."""
        exception = await self._move(
            exception_id,
            "pending_approval",
            "active",
            approved_by_user_id=approved_by_user_id,
            approved_at=datetime.now(timezone.utc),
        )
        await self._links.transition_status(
            exception.project_subcontractor_id, "exception", STATUS_TRANSITIONS["exception"],
        )
        await self._audit.record(
            "approve", "exception", exception.id, {"status": "active"}, user_id=approved_by_user_id,
        )
        return exception

    async def close(self, exception_id: str, user_id: str | None = None) -> ComplianceException:
        exception = await self._move(exception_id, "active", "closed")
        await self._audit.record("close", "exception", exception.id, {"status": "closed"}, user_id=user_id)
        return exception

    async def expire_overdue(self, now: datetime | None = None) -> int:
        """Expire every active exception whose ``expires_at`` has passed."""
        now = now or datetime.now(timezone.utc)
        expired = 0
        for exception in await self._repo.list_overdue(now):
            if await self._repo.transition_if(exception.id, "active", "expired"):
                expired += 1
                await self._audit.record("expire", "exception", exception.id, {"status": "expired"})
        if expired:
            logger.info("Expired %d overdue exception(s)", expired)
        return expired
