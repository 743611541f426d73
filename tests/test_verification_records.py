"""Tests for the one-verification-per-document record manager."""

import pytest
from sqlalchemy import func, select

from riskshield.core.exceptions import ConflictError, InputError, NotFoundError
from riskshield.domain.document import Verification
from riskshield.schemas.verification import VerificationResult
from riskshield.services.verification_engine import verify
from riskshield.services.verification_records import VerificationRecordService, verification_fields
from tests.factories import CLIENT_ID, TODAY, make_extracted, standard_requirements


def _passing():
    return verify(make_extracted(), standard_requirements(), now=TODAY)


def _failing():
    return verify(make_extracted(coverages=[]), standard_requirements(), now=TODAY)


async def _row_count(session, document_id):
    return (
        await session.execute(
            select(func.count()).select_from(Verification).where(Verification.coc_document_id == document_id)
        )
    ).scalar_one()


def test_verification_fields_are_json_ready():
    fields = verification_fields(_failing(), make_extracted())
    assert fields["status"] == "fail"
    assert fields["deficiencies"][0]["type"] == "missing_coverage"
    assert fields["checks"][0]["check_type"] == "policy_validity"
    assert fields["extracted_data"]["period_of_insurance_end"] == "2027-06-30"
    assert str(fields["confidence_score"]) == "0.93"


def test_verification_fields_without_extracted_data():
    result = VerificationResult(status="review", confidence_score=0.5)
    assert verification_fields(result)["extracted_data"] is None


@pytest.mark.asyncio
async def test_create_refuses_a_second_verification(session, seeded):
    svc = VerificationRecordService(session, CLIENT_ID)
    document_id = seeded["document"].id

    created = await svc.create(document_id, _passing(), make_extracted())
    assert created.status == "pass"
    assert created.project_id == seeded["project"].id

    with pytest.raises(ConflictError):
        await svc.create(document_id, _failing())
    assert await _row_count(session, document_id) == 1


@pytest.mark.asyncio
async def test_create_for_unknown_document(session, seeded):
    svc = VerificationRecordService(session, CLIENT_ID)
    with pytest.raises(NotFoundError):
        await svc.create("missing-document", _passing())


@pytest.mark.asyncio
async def test_upsert_replaces_in_place(session, seeded):
    svc = VerificationRecordService(session, CLIENT_ID)
    document_id = seeded["document"].id

    first_id = await svc.upsert(document_id, _passing(), make_extracted())
    second_id = await svc.upsert(document_id, _failing(), make_extracted(coverages=[]))

    assert first_id == second_id
    assert await _row_count(session, document_id) == 1
    stored = await svc.get_for_document(document_id)
    assert stored.status == "fail"
    assert [d["type"] for d in stored.deficiencies] == ["missing_coverage", "missing_coverage"]
    assert stored.extracted_data["coverages"] == []


@pytest.mark.asyncio
async def test_upsert_after_create_keeps_the_same_row(session, seeded):
    svc = VerificationRecordService(session, CLIENT_ID)
    document_id = seeded["document"].id

    created = await svc.create(document_id, _failing())
    upserted_id = await svc.upsert(document_id, _passing())

    assert upserted_id == created.id
    assert created.status == "pass"


@pytest.mark.asyncio
async def test_get_for_document_without_verification(session, seeded):
    svc = VerificationRecordService(session, CLIENT_ID)
    with pytest.raises(NotFoundError):
        await svc.get_for_document(seeded["document"].id)


class TestManualVerify:
    @pytest.mark.asyncio
    async def test_records_reviewer_decision(self, session, seeded):
        svc = VerificationRecordService(session, CLIENT_ID)
        verification_id = await svc.upsert(seeded["document"].id, _failing())

        verification = await svc.manual_verify(verification_id, "pass", "reviewer-1")

        assert verification.status == "pass"
        assert verification.verified_by_user_id == "reviewer-1"
        assert verification.verified_at is not None

    @pytest.mark.asyncio
    async def test_unknown_status(self, session, seeded):
        svc = VerificationRecordService(session, CLIENT_ID)
        verification_id = await svc.upsert(seeded["document"].id, _failing())
        with pytest.raises(InputError):
            await svc.manual_verify(verification_id, "approved", "reviewer-1")

    @pytest.mark.asyncio
    async def test_unknown_verification(self, session, seeded):
        svc = VerificationRecordService(session, CLIENT_ID)
        with pytest.raises(NotFoundError):
            await svc.manual_verify("missing", "pass", "reviewer-1")
