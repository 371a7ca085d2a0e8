"""
Catalogue repository interface (Abstract Base Class).

Defines the contract for fetching search candidates independent of the
underlying storage mechanism.
"""

from abc import ABC, abstractmethod
from typing import List, Sequence, Set

from ..domain.entities import CandidateRecord


class ICatalogRepository(ABC):
    """
    Abstract repository interface for catalogue reads.

    Implementations raise DataFetchException when the store fails; they
    never return partial results for a failed fetch.
    """

    @abstractmethod
    async def fetch_cheeses(self) -> List[CandidateRecord]:
        """
        Fetch all cheeses for the global search.

        Returns:
            Candidate records with category CHEESE
        """
        pass

    @abstractmethod
    async def fetch_cheezopedia_entries(self) -> List[CandidateRecord]:
        """
        Fetch all Cheezopedia entries.

        Returns:
            Candidate records with category ARTICLE or RECIPE
        """
        pass

    @abstractmethod
    async def fetch_pairings(self) -> List[CandidateRecord]:
        """
        Fetch all pairings, ordered by name.

        Returns:
            Candidate records with category PAIRING
        """
        pass

    @abstractmethod
    async def fetch_producer_cheeses(
        self, terms: Sequence[str], limit: int = 30
    ) -> List[CandidateRecord]:
        """
        Fetch approved producer cheeses matching any of the terms.

        A row matches when its full name, producer name or cheese type
        name contains one of the terms (case-insensitive).

        Args:
            terms: Synonym-expanded search terms
            limit: Maximum number of rows, most rated first

        Returns:
            Candidate records with category PRODUCER_CHEESE
        """
        pass

    @abstractmethod
    async def fetch_cheese_types(
        self, terms: Sequence[str], limit: int = 10
    ) -> List[CandidateRecord]:
        """
        Fetch approved cheese types whose name contains any of the terms.

        Args:
            terms: Synonym-expanded search terms
            limit: Maximum number of rows, most produced first

        Returns:
            Candidate records with category CHEESE_TYPE
        """
        pass

    @abstractmethod
    async def fetch_cheese_box_ids(self, user_id: str) -> Set[str]:
        """
        Fetch the ids of cheeses already in a user's cheese box.

        Args:
            user_id: Supabase user UUID

        Returns:
            Set of producer cheese ids
        """
        pass
