"""
Tests for the catalogue search service.

Covers:
- Category fetch selection per search mode
- Ranking of fetched candidates
- Add-cheese search: synonym fetch, cheese box exclusion, type de-duplication
- Error propagation
"""

from unittest.mock import AsyncMock

import pytest

from cheezus_search.config import SearchSettings
from cheezus_search.domain.entities import CandidateRecord, Category, SearchMode
from cheezus_search.domain.exceptions import DataFetchException
from cheezus_search.search.ranker import RankerConfig, SearchRanker
from cheezus_search.search.synonyms import CHEESE_SYNONYMS
from cheezus_search.services.search_service import CatalogSearchService


def producer_cheese(id, title, type_name):
    return CandidateRecord(
        id=id,
        category=Category.PRODUCER_CHEESE,
        title=title,
        extra_fields=(title, None, type_name),
        metadata={"cheese_type_name": type_name},
    )


def cheese_type(id, name):
    return CandidateRecord(id=id, category=Category.CHEESE_TYPE, title=name)


@pytest.fixture
def mock_repository(cheese_catalogue):
    """Create mock catalogue repository."""
    repository = AsyncMock()
    repository.fetch_cheeses.return_value = cheese_catalogue
    repository.fetch_cheezopedia_entries.return_value = [
        CandidateRecord(id="e1", category=Category.RECIPE, title="Cheddar Scones"),
    ]
    repository.fetch_pairings.return_value = [
        CandidateRecord(id="p1", category=Category.PAIRING, title="Port"),
    ]
    repository.fetch_producer_cheeses.return_value = []
    repository.fetch_cheese_types.return_value = []
    repository.fetch_cheese_box_ids.return_value = set()
    return repository


@pytest.fixture
def search_service(mock_repository):
    """Create search service with the cheese synonym table."""
    return CatalogSearchService(
        repository=mock_repository,
        ranker=SearchRanker(synonyms=CHEESE_SYNONYMS),
    )


class TestGlobalSearch:
    """Test the global search bar."""

    @pytest.mark.asyncio
    async def test_all_mode_fetches_every_category(self, search_service, mock_repository):
        results = await search_service.search("cheddar")

        mock_repository.fetch_cheeses.assert_awaited_once()
        mock_repository.fetch_cheezopedia_entries.assert_awaited_once()
        mock_repository.fetch_pairings.assert_awaited_once()
        assert [result.id for result in results][:2] == ["c1", "e1"]

    @pytest.mark.asyncio
    async def test_cheese_mode(self, search_service, mock_repository):
        results = await search_service.search("cheddar", mode=SearchMode.CHEESE)

        mock_repository.fetch_cheeses.assert_awaited_once()
        mock_repository.fetch_cheezopedia_entries.assert_not_awaited()
        mock_repository.fetch_pairings.assert_not_awaited()
        assert all(result.category == Category.CHEESE for result in results)

    @pytest.mark.asyncio
    async def test_pairing_mode(self, search_service, mock_repository):
        results = await search_service.search("port", mode=SearchMode.PAIRING)

        mock_repository.fetch_cheeses.assert_not_awaited()
        mock_repository.fetch_cheezopedia_entries.assert_not_awaited()
        mock_repository.fetch_pairings.assert_awaited_once()
        assert [result.id for result in results] == ["p1"]

    @pytest.mark.asyncio
    async def test_empty_query_skips_fetch(self, search_service, mock_repository):
        assert await search_service.search("   ") == []
        mock_repository.fetch_cheeses.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_synonym_recall(self, search_service):
        results = await search_service.search("goat", mode=SearchMode.CHEESE)

        assert [result.id for result in results] == ["c3"]

    @pytest.mark.asyncio
    async def test_suggestions(self, mock_repository):
        service = CatalogSearchService(
            repository=mock_repository,
            ranker=SearchRanker(config=RankerConfig(fuzzy_threshold=0.9)),
        )

        results = await service.search("cheder", mode=SearchMode.CHEESE)

        assert results[0].title == "Cheddar"
        assert results[0].description == "Did you mean: Cheddar?"

    @pytest.mark.asyncio
    async def test_fetch_error_propagates(self, search_service, mock_repository):
        mock_repository.fetch_pairings.side_effect = DataFetchException("cheese_pairings")

        with pytest.raises(DataFetchException):
            await search_service.search("port")


class TestAddCheeseSearch:
    """Test the add-cheese search."""

    @pytest.mark.asyncio
    async def test_short_term_skips_fetch(self, search_service, mock_repository):
        assert await search_service.search_cheeses_to_add("b") == []
        mock_repository.fetch_producer_cheeses.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fetches_with_expanded_terms(self, search_service, mock_repository):
        await search_service.search_cheeses_to_add("Chevre")

        terms = mock_repository.fetch_producer_cheeses.await_args.args[0]
        assert {"chevre", "chèvre", "goat", "goats"} <= set(terms)
        assert mock_repository.fetch_producer_cheeses.await_args.kwargs["limit"] == 30
        assert mock_repository.fetch_cheese_types.await_args.kwargs["limit"] == 10
        mock_repository.fetch_cheese_box_ids.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_excludes_cheese_box(self, search_service, mock_repository):
        mock_repository.fetch_producer_cheeses.return_value = [
            producer_cheese("pc1", "Montgomery's Cheddar", "Cheddar"),
            producer_cheese("pc2", "Quicke's Cheddar", "Cheddar"),
        ]
        mock_repository.fetch_cheese_box_ids.return_value = {"pc1"}

        results = await search_service.search_cheeses_to_add("cheddar", user_id="u1")

        mock_repository.fetch_cheese_box_ids.assert_awaited_once_with("u1")
        assert "pc1" not in [result.id for result in results]
        assert "pc2" in [result.id for result in results]

    @pytest.mark.asyncio
    async def test_represented_type_kept_while_few_results(
        self, search_service, mock_repository
    ):
        mock_repository.fetch_producer_cheeses.return_value = [
            producer_cheese("pc1", "Montgomery's Cheddar", "Cheddar"),
        ]
        mock_repository.fetch_cheese_types.return_value = [cheese_type("t1", "Cheddar")]

        results = await search_service.search_cheeses_to_add("cheddar")

        assert [result.id for result in results] == ["t1", "pc1"]

    @pytest.mark.asyncio
    async def test_represented_type_dropped_when_enough_results(
        self, search_service, mock_repository
    ):
        mock_repository.fetch_producer_cheeses.return_value = [
            producer_cheese(f"pc{i}", f"Cheddar No. {i}", "Cheddar") for i in range(5)
        ]
        mock_repository.fetch_cheese_types.return_value = [
            cheese_type("t1", "Cheddar"),
            cheese_type("t2", "Smoked Cheddar"),
        ]

        results = await search_service.search_cheeses_to_add("cheddar")
        ids = [result.id for result in results]

        assert "t1" not in ids
        assert "t2" in ids

    @pytest.mark.asyncio
    async def test_literal_name_match_first(self, search_service, mock_repository):
        mock_repository.fetch_producer_cheeses.return_value = [
            producer_cheese("pc1", "Chevre Log", "Chèvre"),
            producer_cheese("pc2", "Goat Gouda", "Gouda"),
        ]

        results = await search_service.search_cheeses_to_add("goat")

        assert [result.title for result in results] == ["Goat Gouda", "Chevre Log"]

    @pytest.mark.asyncio
    async def test_types_interleaved_by_similarity(self, search_service, mock_repository):
        mock_repository.fetch_producer_cheeses.return_value = [
            producer_cheese("pc1", "Montgomery's Cheddar", "Cheddar"),
        ]
        mock_repository.fetch_cheese_types.return_value = [
            cheese_type("t1", "Cheddar"),
            cheese_type("t2", "Red Leicester"),
        ]

        results = await search_service.search_cheeses_to_add("cheddar")

        # Closest name first regardless of category
        assert [result.id for result in results] == ["t1", "pc1"]

    @pytest.mark.asyncio
    async def test_result_cap(self, mock_repository):
        mock_repository.fetch_producer_cheeses.return_value = [
            producer_cheese(f"pc{i}", f"Cheddar No. {i}", "Cheddar") for i in range(30)
        ]
        service = CatalogSearchService(
            repository=mock_repository,
            ranker=SearchRanker(),
            settings=SearchSettings(max_results=15),
        )

        results = await service.search_cheeses_to_add("cheddar")

        assert len(results) == 15

    @pytest.mark.asyncio
    async def test_fetch_error_propagates(self, search_service, mock_repository):
        mock_repository.fetch_cheese_types.side_effect = DataFetchException("cheese_type_stats")

        with pytest.raises(DataFetchException):
            await search_service.search_cheeses_to_add("cheddar")


class TestServiceStats:
    """Test service statistics."""

    def test_get_stats(self, search_service):
        stats = search_service.get_stats()

        assert stats["max_results"] == 15
        assert stats["ranker"]["synonyms_enabled"] is True
