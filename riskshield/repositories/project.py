"""Project, requirement, and project-subcontractor repositories."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select

from riskshield.domain.project import InsuranceRequirement, Project, ProjectSubcontractor
from riskshield.repositories.base import BaseRepository


class ProjectRepository(BaseRepository[Project]):
    model = Project


class InsuranceRequirementRepository(BaseRepository[InsuranceRequirement]):
    model = InsuranceRequirement

    async def list_for_project(self, project_id: str) -> list[InsuranceRequirement]:
        result = await self._session.execute(
            self._base_query()
            .where(InsuranceRequirement.project_id == project_id)
            .order_by(InsuranceRequirement.coverage_type)
        )
        return list(result.scalars().all())


class ProjectSubcontractorRepository(BaseRepository[ProjectSubcontractor]):
    model = ProjectSubcontractor

    async def get_pair(self, project_id: str, subcontractor_id: str) -> ProjectSubcontractor | None:
        result = await self._session.execute(
            self._base_query()
            .where(ProjectSubcontractor.project_id == project_id)
            .where(ProjectSubcontractor.subcontractor_id == subcontractor_id)
        )
        return result.scalars().first()

    async def transition_status(
        self, link_id: str, new_status: str, allowed_from: Iterable[str],
    ) -> bool:
        return await self.update_if_status(link_id, allowed_from, status=new_status)

    async def refresh_status(self, link: ProjectSubcontractor) -> str:
        result = await self._session.execute(
            select(ProjectSubcontractor.status).where(ProjectSubcontractor.id == link.id)
        )
        return result.scalar_one()
