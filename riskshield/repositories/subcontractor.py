"""Subcontractor repository."""


from riskshield.domain.subcontractor import Subcontractor
from riskshield.repositories.base import BaseRepository


class SubcontractorRepository(BaseRepository[Subcontractor]):
    model = Subcontractor
    sortable_columns = ("created_at", "updated_at", "name", "trade")

    async def get_by_abn(self, abn: str) -> Subcontractor | None:
        """*abn* must already be normalised (11 digits, no spaces)."""
        result = await self._session.execute(self._base_query().where(Subcontractor.abn == abn))
        return result.scalars().first()
