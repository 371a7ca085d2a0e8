"""
Tests for the PostgreSQL catalogue repository.

Runs against in-memory SQLite; ilike is emulated with lower() LIKE.
"""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from cheezus_search.domain.entities import Category
from cheezus_search.domain.exceptions import DataFetchException
from cheezus_search.models import (
    Cheese,
    CheeseBoxEntry,
    CheesePairing,
    CheeseTypeStats,
    CheezopediaEntry,
    ProducerCheeseStats,
)
from cheezus_search.repositories.postgres_repository import (
    PostgresCatalogRepository,
    escape_like,
)


@pytest.fixture
def repository(db_session):
    """Create repository bound to the test session."""
    return PostgresCatalogRepository(db_session)


@pytest.fixture
def catalogue(db_session):
    """Populate the test database."""
    db_session.add_all(
        [
            Cheese(
                id="c1", name="Cheddar", description="Firm", type="Hard", origin_country="England"
            ),
            Cheese(id="c2", name="Brie", description=None, type="Soft"),
            CheezopediaEntry(id="e1", title="Cheese 101", content_type="article"),
            CheezopediaEntry(id="e2", title="Fondue", content_type="recipe"),
            CheezopediaEntry(id="e3", title="Glossary", content_type=None),
            CheesePairing(id="p2", pairing="Port", type="drink"),
            CheesePairing(id="p1", pairing="Fig jam", type="food"),
            ProducerCheeseStats(
                id="pc1",
                full_name="Montgomery's Cheddar",
                producer_name="Montgomery",
                cheese_type_id="t1",
                cheese_type_name="Cheddar",
                origin_country="England",
                average_rating=4.6,
                rating_count=120,
            ),
            ProducerCheeseStats(
                id="pc2",
                full_name="Generic Cheddar",
                producer_name="Generic",
                cheese_type_id="t1",
                cheese_type_name="Cheddar",
                rating_count=5,
            ),
            ProducerCheeseStats(
                id="pc3",
                full_name="Pending Cheddar",
                producer_name="Newcomer",
                cheese_type_name="Cheddar",
                rating_count=500,
                status="pending",
            ),
            ProducerCheeseStats(
                id="pc4",
                full_name="Valençay",
                producer_name="Jacquin",
                cheese_type_name="Chèvre",
                rating_count=40,
            ),
            CheeseTypeStats(
                id="t1",
                name="Cheddar",
                type="Hard",
                origin_country="England",
                producer_count=12,
                average_rating=4.2,
            ),
            CheeseTypeStats(id="t2", name="Cheddar 100%", type=None, producer_count=1),
            CheeseTypeStats(id="t3", name="Brie", type="Soft", producer_count=3),
            CheeseBoxEntry(user_id="u1", cheese_id="pc1"),
            CheeseBoxEntry(user_id="u2", cheese_id="pc2"),
        ]
    )
    db_session.commit()


class TestEscapeLike:
    """Test LIKE pattern escaping."""

    def test_wildcards_escaped(self):
        assert escape_like("100%_a\\b") == "100\\%\\_a\\\\b"

    def test_plain_term_unchanged(self):
        assert escape_like("cheddar") == "cheddar"


class TestGlobalSearchFetches:
    """Test full-category fetches."""

    @pytest.mark.asyncio
    async def test_fetch_cheeses(self, repository, catalogue):
        records = await repository.fetch_cheeses()
        cheddar = next(record for record in records if record.id == "c1")

        assert len(records) == 2
        assert cheddar.category == Category.CHEESE
        assert cheddar.title == "Cheddar"
        assert cheddar.metadata["origin_country"] == "England"

    @pytest.mark.asyncio
    async def test_fetch_cheezopedia_entries(self, repository, catalogue):
        records = await repository.fetch_cheezopedia_entries()
        categories = {record.id: record.category for record in records}

        assert categories == {
            "e1": Category.ARTICLE,
            "e2": Category.RECIPE,
            "e3": Category.ARTICLE,
        }

    @pytest.mark.asyncio
    async def test_fetch_pairings_ordered(self, repository, catalogue):
        records = await repository.fetch_pairings()

        assert [record.title for record in records] == ["Fig jam", "Port"]
        assert records[1].metadata == {"pairing_type": "drink"}


class TestAddCheeseFetches:
    """Test term-filtered fetches."""

    @pytest.mark.asyncio
    async def test_producer_cheeses_filtered_and_ordered(self, repository, catalogue):
        records = await repository.fetch_producer_cheeses(["cheddar"])

        # Pending rows are excluded; most rated first
        assert [record.id for record in records] == ["pc1", "pc2"]

    @pytest.mark.asyncio
    async def test_generic_producer_shows_type_name(self, repository, catalogue):
        records = await repository.fetch_producer_cheeses(["cheddar"])
        by_id = {record.id: record for record in records}

        assert by_id["pc1"].title == "Montgomery's Cheddar"
        assert by_id["pc1"].description == "Cheddar • England"
        assert by_id["pc2"].title == "Cheddar"
        assert by_id["pc2"].description == "Cheddar"
        assert by_id["pc2"].metadata["cheese_type_name"] == "Cheddar"

    @pytest.mark.asyncio
    async def test_producer_cheeses_any_term(self, repository, catalogue):
        records = await repository.fetch_producer_cheeses(["montgomery", "jacquin"])

        assert {record.id for record in records} == {"pc1", "pc4"}

    @pytest.mark.asyncio
    async def test_producer_cheeses_limit(self, repository, catalogue):
        records = await repository.fetch_producer_cheeses(["cheddar"], limit=1)

        assert [record.id for record in records] == ["pc1"]

    @pytest.mark.asyncio
    async def test_no_terms(self, repository, catalogue):
        assert await repository.fetch_producer_cheeses([]) == []
        assert await repository.fetch_cheese_types([]) == []

    @pytest.mark.asyncio
    async def test_cheese_types(self, repository, catalogue):
        records = await repository.fetch_cheese_types(["cheddar"])

        assert [record.id for record in records] == ["t1", "t2"]
        assert records[0].category == Category.CHEESE_TYPE
        assert records[0].description == "Hard • England • 12 versions"
        assert records[1].description == "Cheese • 1 versions"

    @pytest.mark.asyncio
    async def test_percent_is_literal(self, repository, catalogue):
        records = await repository.fetch_cheese_types(["100%"])

        assert [record.id for record in records] == ["t2"]

    @pytest.mark.asyncio
    async def test_cheese_box_ids(self, repository, catalogue):
        assert await repository.fetch_cheese_box_ids("u1") == {"pc1"}
        assert await repository.fetch_cheese_box_ids("nobody") == set()


class TestErrorHandling:
    """Test storage errors are wrapped."""

    @pytest.mark.asyncio
    async def test_query_error_raises_data_fetch_exception(self):
        db = MagicMock()
        db.query.side_effect = OperationalError("SELECT", {}, Exception("connection lost"))
        repository = PostgresCatalogRepository(db)

        with pytest.raises(DataFetchException) as exc_info:
            await repository.fetch_cheeses()

        assert exc_info.value.details["source"] == "cheeses"
        db.rollback.assert_called_once()
        db.close.assert_called_once()


class TestSessionLifecycle:
    """Test connections are released after each read."""

    @pytest.mark.asyncio
    async def test_session_released_after_fetch(self, repository, catalogue, db_session):
        records = await repository.fetch_producer_cheeses(["cheddar"])

        assert not db_session.in_transaction()
        # Mapped records stay usable after the session is closed
        assert records[0].title == "Montgomery's Cheddar"

    @pytest.mark.asyncio
    async def test_session_reusable_after_fetch(self, repository, catalogue):
        await repository.fetch_cheeses()

        assert len(await repository.fetch_pairings()) == 2
