"""Compliance exception repository — every status change is a guarded UPDATE."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from riskshield.domain.compliance_exception import ComplianceException
from riskshield.repositories.base import BaseRepository


class ComplianceExceptionRepository(BaseRepository[ComplianceException]):
    model = ComplianceException

    async def list_for_link(
        self, project_subcontractor_id: str, status: str | None = None,
    ) -> list[ComplianceException]:
        q = self._base_query().where(
            ComplianceException.project_subcontractor_id == project_subcontractor_id
        )
        if status is not None:
            q = q.where(ComplianceException.status == status)
        result = await self._session.execute(q.order_by(ComplianceException.created_at))
        return list(result.scalars().all())

    async def transition_if(
        self, exception_id: str, from_status: str, to_status: str, **values: Any,
    ) -> bool:
        """Move one exception from *from_status* to *to_status*; ``False`` if it was not in *from_status*."""
        return await self.update_if_status(exception_id, (from_status,), status=to_status, **values)

    async def list_overdue(self, now: datetime) -> list[ComplianceException]:
        result = await self._session.execute(
            self._base_query()
            .where(ComplianceException.status == "active")
            .where(ComplianceException.expires_at.is_not(None))
            .where(ComplianceException.expires_at < now)
        )
        return list(result.scalars().all())
