"""COC document and verification repositories.

There is exactly one verification per document; ``VerificationRepository``
relies on the unique index on ``verifications.coc_document_id`` for that.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from riskshield.domain.document import CocDocument, Verification
from riskshield.repositories.base import BaseRepository

# Fields re-processing replaces; ids, document/project links and created_at stay.
VERIFICATION_MUTABLE_FIELDS = (
    "status",
    "confidence_score",
    "extracted_data",
    "checks",
    "deficiencies",
)

_UPSERT_INSERTS = {
    "sqlite": sqlite_insert,
    "postgresql": pg_insert,
}


class CocDocumentRepository(BaseRepository[CocDocument]):
    model = CocDocument

    async def set_processing_status(self, document_id: str, status: str) -> None:
        values: dict[str, Any] = {"processing_status": status}
        if status == "completed":
            values["processed_at"] = datetime.now(timezone.utc)
        await self.update(document_id, **values)


class VerificationRepository(BaseRepository[Verification]):
    model = Verification

    async def get_by_document(self, document_id: str) -> Verification | None:
        result = await self._session.execute(
            self._base_query().where(Verification.coc_document_id == document_id)
        )
        return result.scalars().first()

    async def upsert_by_document(
        self, document_id: str, project_id: str, fields: dict[str, Any],
    ) -> str:
        """Insert or replace the verification of *document_id*; return its id.

        On SQLite and PostgreSQL this is a single ``INSERT … ON CONFLICT DO
        UPDATE``, so two concurrent calls converge on one row. Other
        dialects update first and insert only when nothing matched.
        """
        now = datetime.now(timezone.utc)
        mutable = {k: fields[k] for k in VERIFICATION_MUTABLE_FIELDS if k in fields}
        insert_fn = _UPSERT_INSERTS.get(self.dialect_name)

        if insert_fn is not None:
            stmt = insert_fn(Verification).values(
                client_id=self._client_id,
                coc_document_id=document_id,
                project_id=project_id,
                created_at=now,
                updated_at=now,
                **mutable,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=[Verification.coc_document_id],
                set_={**mutable, "updated_at": now},
            )
            await self._session.execute(stmt)
        else:
            result = await self._session.execute(
                update(Verification)
                .where(Verification.coc_document_id == document_id)
                .values(**mutable, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                self._session.add(
                    Verification(
                        client_id=self._client_id,
                        coc_document_id=document_id,
                        project_id=project_id,
                        **mutable,
                    )
                )
        await self._session.flush()

        verification_id = (
            await self._session.execute(
                select(Verification.id).where(Verification.coc_document_id == document_id)
            )
        ).scalar_one()
        # Instances already in the identity map would otherwise show stale fields.
        existing = await self._session.get(Verification, verification_id)
        if existing is not None:
            await self._session.refresh(existing)
        return verification_id
