"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from datetime import date

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

import riskshield.domain  # noqa: F401  (register all tables)
from riskshield.db.base import Base, build_engine, get_db
from riskshield.domain.document import CocDocument
from riskshield.domain.project import InsuranceRequirement, Project, ProjectSubcontractor
from riskshield.domain.subcontractor import Subcontractor
from riskshield.main import app
from tests.factories import CLIENT_ID, VALID_ABN, standard_requirements

# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def engine():
    engine = build_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def seeded(session):
    """A project with standard requirements, one subcontractor, their link and one document."""
    project = Project(
        client_id=CLIENT_ID,
        name="Harbour Tower",
        state="NSW",
        start_date=date(2026, 1, 15),
        end_date=date(2026, 12, 31),
    )
    subcontractor = Subcontractor(
        client_id=CLIENT_ID,
        name="Apex Electrical Pty Ltd",
        abn=VALID_ABN,
        contact_name="Sam Lee",
        contact_email="sam@apex.example",
        broker_name="Jordan Broker",
        broker_email="jordan@broker.example",
    )
    session.add_all([project, subcontractor])
    await session.flush()

    for req in standard_requirements():
        session.add(InsuranceRequirement(client_id=CLIENT_ID, project_id=project.id, **req.model_dump()))

    link = ProjectSubcontractor(
        client_id=CLIENT_ID, project_id=project.id, subcontractor_id=subcontractor.id,
    )
    document = CocDocument(
        client_id=CLIENT_ID,
        project_id=project.id,
        subcontractor_id=subcontractor.id,
        file_name="apex-coc.pdf",
    )
    session.add_all([link, document])
    await session.commit()
    return {
        "project": project,
        "subcontractor": subcontractor,
        "link": link,
        "document": document,
    }


# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def clear_dependency_overrides():
    """Ensure FastAPI dependency overrides are reset between tests."""
    app.dependency_overrides = {}
    yield
    app.dependency_overrides = {}


@pytest.fixture
def test_client() -> TestClient:
    """Client for endpoints that do not touch the database."""
    return TestClient(app)


@pytest_asyncio.fixture
async def api_client(session_factory):
    """Async client whose requests run against the in-memory test database."""

    async def _get_test_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_test_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
