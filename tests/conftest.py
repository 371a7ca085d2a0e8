"""
Test configuration and fixtures
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from cheezus_search.app import app
from cheezus_search.dependencies import get_search_service
from cheezus_search.domain.entities import CandidateRecord, Category
from cheezus_search.models import Base

# Create in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database session for each test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def test_engine():
    """In-memory SQLite engine shared by the test sessions."""
    return engine

@pytest.fixture
def mock_service():
    """Create mock search service."""
    service = AsyncMock()
    service.search = AsyncMock(return_value=[])
    service.search_cheeses_to_add = AsyncMock(return_value=[])
    return service


@pytest.fixture
def client(mock_service):
    """Create test client with the search service dependency overridden."""

    async def override_get_search_service():
        return mock_service

    app.dependency_overrides[get_search_service] = override_get_search_service

    # Avoid creating a database engine during startup
    with patch("cheezus_search.app.create_search_service", return_value=mock_service):
        with TestClient(app) as test_client:
            yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def cheese_catalogue():
    """Small cheese catalogue covering exact, fuzzy and synonym cases."""
    return [
        CandidateRecord(
            id="c1",
            category=Category.CHEESE,
            title="Cheddar",
            description="A firm English cheese",
        ),
        CandidateRecord(
            id="c2",
            category=Category.CHEESE,
            title="Brie",
            description="Soft French cheese",
        ),
        CandidateRecord(
            id="c3",
            category=Category.CHEESE,
            title="Chèvre Log",
            description="Fresh goat cheese rolled in ash",
        ),
        CandidateRecord(
            id="c4",
            category=Category.CHEESE,
            title="Gouda",
            description=None,
        ),
    ]
