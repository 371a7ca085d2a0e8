"""
Business logic service layer.

Fetches candidates per category concurrently and ranks them. Serves the
two search entry points of the app: the global search bar and the
add-cheese search.
"""

import asyncio
import logging
import time
from typing import Awaitable, Dict, List, Optional, Set

from ..config import SearchSettings
from ..domain.entities import CandidateRecord, Category, ScoredResult, SearchMode
from ..domain.exceptions import DataFetchException
from ..metrics import track_search_query
from ..repositories.catalog_repository import ICatalogRepository
from ..search.ranker import SearchRanker
from ..search.similarity import similarity

logger = logging.getLogger(__name__)

ADD_CHEESE_MODE = "add_cheese"

# Cheese types already represented by a producer cheese are still shown
# while fewer results than this have been collected.
MIN_RESULTS_BEFORE_DEDUP = 5


class CatalogSearchService:
    """
    Catalogue search service.

    Fetching is delegated to the repository and ranking to the ranker; the
    service only decides what to fetch and how to post-process results.
    """

    def __init__(
        self,
        repository: ICatalogRepository,
        ranker: SearchRanker,
        settings: Optional[SearchSettings] = None,
    ):
        """
        Initialize search service.

        Args:
            repository: Catalogue repository that fetches candidates
            ranker: Ranker applied to fetched candidates
            settings: Fetch limits and result caps
        """
        self.repository = repository
        self.ranker = ranker
        self.settings = settings or SearchSettings(ranker=ranker.config)

    async def search(
        self, query: str, mode: SearchMode = SearchMode.ALL
    ) -> List[ScoredResult]:
        """
        Global catalogue search.

        Args:
            query: Raw search query
            mode: Which categories to search

        Returns:
            Ranked results (empty for an empty query)

        Raises:
            DataFetchException: If fetching candidates fails
        """
        term = (query or "").strip()
        if not term:
            return []

        start_time = time.time()
        try:
            candidates = await self._fetch_catalogue(mode)
        except DataFetchException as e:
            track_search_query(mode.value, False, time.time() - start_time)
            logger.error(f"Search failed for '{term}' (mode={mode.value}): {e.message}")
            raise

        results = self.ranker.search(term, candidates)

        self._record(mode.value, term, results, start_time)
        return results

    async def search_cheeses_to_add(
        self, query: str, user_id: Optional[str] = None
    ) -> List[ScoredResult]:
        """
        Search producer cheeses and cheese types for the add-cheese flow.

        Storage is queried with the synonym-expanded terms. Cheeses already
        in the user's cheese box are left out.

        Args:
            query: Raw search query
            user_id: Current user, if signed in

        Returns:
            Ranked results, capped at settings.max_results

        Raises:
            DataFetchException: If fetching candidates fails
        """
        term = (query or "").strip()
        if len(term) < self.settings.add_cheese_min_length:
            return []

        start_time = time.time()
        terms = sorted(self.ranker.expand(term.lower()))

        fetches: List[Awaitable] = [
            self.repository.fetch_producer_cheeses(
                terms, limit=self.settings.producer_cheese_limit
            ),
            self.repository.fetch_cheese_types(terms, limit=self.settings.cheese_type_limit),
        ]
        if user_id:
            fetches.append(self.repository.fetch_cheese_box_ids(user_id))

        try:
            fetched = await asyncio.gather(*fetches)
        except DataFetchException as e:
            track_search_query(ADD_CHEESE_MODE, False, time.time() - start_time)
            logger.error(f"Add-cheese search failed for '{term}': {e.message}")
            raise

        producer_cheeses, cheese_types = fetched[0], fetched[1]
        box_ids: Set[str] = fetched[2] if user_id else set()

        candidates = self._merge_add_cheese_candidates(producer_cheeses, cheese_types, box_ids)
        ranked = self._order_by_name_match(term, self.ranker.search(term, candidates))
        results = ranked[: self.settings.max_results]

        self._record(ADD_CHEESE_MODE, term, results, start_time)
        return results

    async def _fetch_catalogue(self, mode: SearchMode) -> Dict[Category, List[CandidateRecord]]:
        """
        Fetch the categories included in a mode concurrently.

        Returns:
            Candidates keyed by the category group they were fetched for
        """
        fetches: Dict[Category, Awaitable[List[CandidateRecord]]] = {}
        if mode.includes(Category.CHEESE):
            fetches[Category.CHEESE] = self.repository.fetch_cheeses()
        if mode.includes(Category.ARTICLE):
            fetches[Category.ARTICLE] = self.repository.fetch_cheezopedia_entries()
        if mode.includes(Category.PAIRING):
            fetches[Category.PAIRING] = self.repository.fetch_pairings()

        results = await asyncio.gather(*fetches.values())
        return dict(zip(fetches.keys(), results))

    @staticmethod
    def _merge_add_cheese_candidates(
        producer_cheeses: List[CandidateRecord],
        cheese_types: List[CandidateRecord],
        box_ids: Set[str],
    ) -> Dict[Category, List[CandidateRecord]]:
        """
        Combine producer cheeses and cheese types.

        A cheese type is kept when no producer cheese of that type was
        found, or while fewer than MIN_RESULTS_BEFORE_DEDUP candidates have
        been collected.
        """
        producers = [record for record in producer_cheeses if record.id not in box_ids]
        represented = {record.metadata.get("cheese_type_name") for record in producers}

        types: List[CandidateRecord] = []
        for record in cheese_types:
            total = len(producers) + len(types)
            if record.title not in represented or total < MIN_RESULTS_BEFORE_DEDUP:
                types.append(record)

        return {Category.PRODUCER_CHEESE: producers, Category.CHEESE_TYPE: types}

    @staticmethod
    def _order_by_name_match(term: str, results: List[ScoredResult]) -> List[ScoredResult]:
        """
        Order add-cheese results for display.

        Names containing the raw term come first, then results are ordered by
        similarity of the term to the name. Producer cheeses and cheese types
        are interleaved; the sort is stable.
        """
        needle = term.lower()
        return sorted(
            results,
            key=lambda result: (
                needle not in result.title.lower(),
                -similarity(term, result.title),
            ),
        )

    def _record(
        self, mode: str, term: str, results: List[ScoredResult], start_time: float
    ) -> None:
        suggestions = any(result.suggestion for result in results)
        duration = time.time() - start_time
        track_search_query(mode, True, duration, len(results), suggestions)
        logger.info(
            f"Search '{term}' (mode={mode}): {len(results)} results"
            f"{' (suggestions)' if suggestions else ''} in {duration * 1000:.1f}ms"
        )

    def get_stats(self) -> dict:
        """Get search configuration."""
        return {
            "ranker": self.ranker.get_stats(),
            "producer_cheese_limit": self.settings.producer_cheese_limit,
            "cheese_type_limit": self.settings.cheese_type_limit,
            "max_results": self.settings.max_results,
        }
