"""Tests for the compliance exception lifecycle."""

from datetime import timedelta

import pytest
from sqlalchemy import select

from riskshield.core.exceptions import InvalidTransitionError, NotFoundError
from riskshield.domain.compliance_exception import ComplianceException
from riskshield.domain.project import ProjectSubcontractor
from riskshield.repositories.communication import AuditRepository
from riskshield.services.exception_service import ComplianceExceptionService
from tests.factories import CLIENT_ID, NOW


@pytest.fixture
def service(session):
    return ComplianceExceptionService(session, CLIENT_ID)


async def _add_exception(session, seeded, status="pending_approval", expires_at=None):
    exception = ComplianceException(
        client_id=CLIENT_ID,
        project_subcontractor_id=seeded["link"].id,
        issue_summary="Workers' compensation certificate outstanding",
        reason="Renewal in progress with insurer",
        risk_level="low",
        status=status,
        expires_at=expires_at,
    )
    session.add(exception)
    await session.commit()
    return exception


async def _link_status(session, seeded):
    return (
        await session.execute(
            select(ProjectSubcontractor.status).where(ProjectSubcontractor.id == seeded["link"].id)
        )
    ).scalar_one()


class TestApprove:
    @pytest.mark.asyncio
    async def test_activates_and_moves_pair_to_exception(self, session, seeded, service):
        exception = await _add_exception(session, seeded)

        approved = await service.approve(exception.id, "manager-1")

        assert approved.status == "active"
        assert approved.approved_by_user_id == "manager-1"
        assert approved.approved_at is not None
        assert await _link_status(session, seeded) == "exception"

        audit = await AuditRepository(session, CLIENT_ID).list_for_entity("exception", exception.id)
        assert [(a.action, a.user_id) for a in audit] == [("approve", "manager-1")]

    @pytest.mark.asyncio
    async def test_compliant_pair_keeps_its_status(self, session, seeded, service):
        seeded["link"].status = "compliant"
        await session.commit()
        exception = await _add_exception(session, seeded)

        await service.approve(exception.id, "manager-1")

        assert await _link_status(session, seeded) == "compliant"

    @pytest.mark.asyncio
    async def test_cannot_approve_twice(self, session, seeded, service):
        exception = await _add_exception(session, seeded)
        await service.approve(exception.id, "manager-1")

        with pytest.raises(InvalidTransitionError) as exc_info:
            await service.approve(exception.id, "manager-2")
        assert exc_info.value.current == "active"
        assert exc_info.value.status_code == 409


class TestClose:
    @pytest.mark.asyncio
    async def test_closes_active_exception(self, session, seeded, service):
        exception = await _add_exception(session, seeded, status="active")
        closed = await service.close(exception.id, "manager-1")
        assert closed.status == "closed"

    @pytest.mark.asyncio
    async def test_pending_exception_cannot_be_closed(self, session, seeded, service):
        exception = await _add_exception(session, seeded)
        with pytest.raises(InvalidTransitionError):
            await service.close(exception.id)

    @pytest.mark.asyncio
    async def test_resolved_exception_is_terminal(self, session, seeded, service):
        exception = await _add_exception(session, seeded, status="resolved")
        with pytest.raises(InvalidTransitionError):
            await service.close(exception.id)


class TestExpireOverdue:
    @pytest.mark.asyncio
    async def test_expires_only_active_overdue_exceptions(self, session, seeded, service):
        overdue = await _add_exception(session, seeded, "active", NOW - timedelta(days=1))
        current = await _add_exception(session, seeded, "active", NOW + timedelta(days=1))
        open_ended = await _add_exception(session, seeded, "active")
        pending = await _add_exception(session, seeded, "pending_approval", NOW - timedelta(days=1))

        assert await service.expire_overdue(NOW) == 1
        assert await service.expire_overdue(NOW) == 0

        statuses = dict(
            (await session.execute(select(ComplianceException.id, ComplianceException.status))).all()
        )
        assert statuses == {
            overdue.id: "expired",
            current.id: "active",
            open_ended.id: "active",
            pending.id: "pending_approval",
        }

    @pytest.mark.asyncio
    async def test_expiry_leaves_pair_status_alone(self, session, seeded, service):
        seeded["link"].status = "exception"
        await session.commit()
        await _add_exception(session, seeded, "active", NOW - timedelta(hours=1))

        await service.expire_overdue(NOW)

        assert await _link_status(session, seeded) == "exception"


@pytest.mark.asyncio
async def test_unknown_exception(service, seeded):
    with pytest.raises(NotFoundError):
        await service.get_exception("missing")
