"""Subcontractor service — CRUD over the companies whose certificates are verified."""


from sqlalchemy.ext.asyncio import AsyncSession

from riskshield.core.exceptions import ConflictError, InputError, NotFoundError
from riskshield.core.pagination import PaginationParams
from riskshield.domain.subcontractor import Subcontractor
from riskshield.repositories.communication import AuditRepository
from riskshield.repositories.subcontractor import SubcontractorRepository
from riskshield.schemas.subcontractor import SubcontractorCreate, SubcontractorUpdate
from riskshield.services.abn import is_valid_abn, normalize_abn

_EMAIL_FIELDS = ("contact_email", "broker_email")


class SubcontractorService:
    def __init__(self, session: AsyncSession, client_id: str):
        self._repo = SubcontractorRepository(session, client_id)
        self._audit = AuditRepository(session, client_id)

    @staticmethod
    def _clean(values: dict) -> dict:
        """Normalise ABN and recipient emails; raise :class:`InputError` on a bad ABN."""
        if values.get("abn") is not None:
            if not is_valid_abn(values["abn"]):
                raise InputError(f"'{values['abn']}' is not a valid ABN")
            values["abn"] = normalize_abn(values["abn"])
        for field in _EMAIL_FIELDS:
            if values.get(field):
                values[field] = values[field].strip().lower()
        return values

    async def _ensure_abn_free(self, abn: str | None, subcontractor_id: str | None = None) -> None:
        if abn is None:
            return
        existing = await self._repo.get_by_abn(abn)
        if existing and existing.id != subcontractor_id:
            raise ConflictError(f"A subcontractor with ABN {abn} already exists")

    async def list_subcontractors(self, pagination: PaginationParams, trade: str | None = None):
        return await self._repo.list(**pagination.list_kwargs(), filters={"trade": trade})

    async def get_subcontractor(self, subcontractor_id: str) -> Subcontractor:
        subcontractor = await self._repo.get_by_id(subcontractor_id)
        if not subcontractor:
            raise NotFoundError("Subcontractor", subcontractor_id)
        return subcontractor

    async def create_subcontractor(self, data: SubcontractorCreate) -> Subcontractor:
        values = self._clean(data.model_dump(exclude_none=True))
        await self._ensure_abn_free(values.get("abn"))
        subcontractor = await self._repo.create(**values)
        await self._audit.record(
            "create", "subcontractor", subcontractor.id,
            {"name": subcontractor.name, "abn": subcontractor.abn},
        )
        return subcontractor

    async def update_subcontractor(
        self, subcontractor_id: str, data: SubcontractorUpdate,
    ) -> Subcontractor:
        _ = await self.get_subcontractor(subcontractor_id)  # raises 404 if missing
        values = self._clean(data.model_dump(exclude_none=True, exclude_unset=True))
        await self._ensure_abn_free(values.get("abn"), subcontractor_id)
        updated = await self._repo.update(subcontractor_id, **values)
        return updated  # type: ignore[return-value]

    async def delete_subcontractor(self, subcontractor_id: str) -> None:
        deleted = await self._repo.soft_delete(subcontractor_id)
        if not deleted:
            raise NotFoundError("Subcontractor", subcontractor_id)
        await self._audit.record("delete", "subcontractor", subcontractor_id)
