"""Communication and audit-trail repositories."""

from __future__ import annotations

from typing import Any

from riskshield.domain.audit import AuditTrail
from riskshield.domain.communication import Communication
from riskshield.repositories.base import BaseRepository


class CommunicationRepository(BaseRepository[Communication]):
    model = Communication

    async def list_for_pair(self, project_id: str, subcontractor_id: str) -> list[Communication]:
        result = await self._session.execute(
            self._base_query()
            .where(Communication.project_id == project_id)
            .where(Communication.subcontractor_id == subcontractor_id)
            .order_by(Communication.created_at)
        )
        return list(result.scalars().all())


class AuditRepository(BaseRepository[AuditTrail]):
    """Append-only: only ``record`` writes; audit rows are never updated."""

    model = AuditTrail

    async def record(
        self,
        action: str,
        entity_type: str,
        entity_id: str | None,
        details: dict[str, Any] | None = None,
        *,
        user_id: str | None = None,
        description: str | None = None,
    ) -> AuditTrail:
        instance = AuditTrail(
            client_id=self._client_id,
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
            description=description,
        )
        self._session.add(instance)
        await self._session.flush()
        return instance

    async def list_for_entity(self, entity_type: str, entity_id: str) -> list[AuditTrail]:
        result = await self._session.execute(
            self._base_query()
            .where(AuditTrail.entity_type == entity_type)
            .where(AuditTrail.entity_id == entity_id)
            .order_by(AuditTrail.created_at)
        )
        return list(result.scalars().all())
