"""
PostgreSQL implementation of the catalogue repository.

Reads cheeses, Cheezopedia entries, pairings and the producer/type stats
views from the Supabase database and maps rows to candidate records.
"""

import logging
import time
from typing import Any, Callable, List, Sequence, Set, TypeVar

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..domain.entities import CandidateRecord, Category
from ..domain.exceptions import DataFetchException
from ..metrics import track_catalogue_fetch
from ..models import (
    GENERIC_PRODUCER,
    STATUS_APPROVED,
    Cheese,
    CheeseBoxEntry,
    CheesePairing,
    CheeseTypeStats,
    CheezopediaEntry,
    ProducerCheeseStats,
)
from .catalog_repository import ICatalogRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")

SUBTEXT_SEPARATOR = " • "


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so a term is matched literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class PostgresCatalogRepository(ICatalogRepository):
    """PostgreSQL implementation for catalogue reads."""

    def __init__(self, db: Session):
        """
        Initialize repository.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    async def fetch_cheeses(self) -> List[CandidateRecord]:
        """Fetch all cheeses."""
        return self._run("cheeses", lambda: self.db.query(Cheese).all(), self._map_cheese)

    async def fetch_cheezopedia_entries(self) -> List[CandidateRecord]:
        """Fetch all Cheezopedia entries."""
        return self._run(
            "cheezopedia_entries", lambda: self.db.query(CheezopediaEntry).all(), self._map_entry
        )

    async def fetch_pairings(self) -> List[CandidateRecord]:
        """Fetch all pairings ordered by name."""
        return self._run(
            "cheese_pairings",
            lambda: self.db.query(CheesePairing).order_by(CheesePairing.pairing).all(),
            self._map_pairing,
        )

    async def fetch_producer_cheeses(
        self, terms: Sequence[str], limit: int = 30
    ) -> List[CandidateRecord]:
        """Fetch approved producer cheeses matching any term, most rated first."""
        conditions = []
        for term in terms:
            pattern = f"%{escape_like(term)}%"
            conditions.extend(
                [
                    ProducerCheeseStats.full_name.ilike(pattern, escape="\\"),
                    ProducerCheeseStats.producer_name.ilike(pattern, escape="\\"),
                    ProducerCheeseStats.cheese_type_name.ilike(pattern, escape="\\"),
                ]
            )
        if not conditions:
            return []

        return self._run(
            "producer_cheese_stats",
            lambda: self.db.query(ProducerCheeseStats)
            .filter(ProducerCheeseStats.status == STATUS_APPROVED)
            .filter(or_(*conditions))
            .order_by(ProducerCheeseStats.rating_count.desc())
            .limit(limit)
            .all(),
            self._map_producer_cheese,
        )

    async def fetch_cheese_types(
        self, terms: Sequence[str], limit: int = 10
    ) -> List[CandidateRecord]:
        """Fetch approved cheese types matching any term, most produced first."""
        conditions = [
            CheeseTypeStats.name.ilike(f"%{escape_like(term)}%", escape="\\") for term in terms
        ]
        if not conditions:
            return []

        return self._run(
            "cheese_type_stats",
            lambda: self.db.query(CheeseTypeStats)
            .filter(CheeseTypeStats.status == STATUS_APPROVED)
            .filter(or_(*conditions))
            .order_by(CheeseTypeStats.producer_count.desc())
            .limit(limit)
            .all(),
            self._map_cheese_type,
        )

    async def fetch_cheese_box_ids(self, user_id: str) -> Set[str]:
        """Fetch ids of cheeses in the user's cheese box."""
        cheese_ids = self._run(
            "cheese_box_entries",
            lambda: self.db.query(CheeseBoxEntry.cheese_id)
            .filter(CheeseBoxEntry.user_id == user_id)
            .all(),
            lambda row: row.cheese_id,
        )
        return set(cheese_ids)

    def _run(
        self, source: str, query: Callable[[], List[Any]], mapper: Callable[[Any], T]
    ) -> List[T]:
        """
        Execute a query and map its rows, recording metrics and wrapping storage errors.

        Rows are mapped before the session is closed, so the connection goes
        back to the pool after every read.

        Raises:
            DataFetchException: If the query fails
        """
        start_time = time.time()
        try:
            result = [mapper(row) for row in query()]
        except SQLAlchemyError as e:
            track_catalogue_fetch(source, False, time.time() - start_time)
            logger.error(f"Error fetching {source} from PostgreSQL: {e}")
            self.db.rollback()
            raise DataFetchException(source, str(e)) from e
        finally:
            self.db.close()

        track_catalogue_fetch(source, True, time.time() - start_time)
        return result

    @staticmethod
    def _map_cheese(row: Cheese) -> CandidateRecord:
        return CandidateRecord(
            id=str(row.id),
            category=Category.CHEESE,
            title=row.name or "",
            description=row.description,
            metadata={
                "type": row.type,
                "origin_country": row.origin_country,
                "origin_region": row.origin_region,
            },
        )

    @staticmethod
    def _map_entry(row: CheezopediaEntry) -> CandidateRecord:
        # Unknown content types are shown as articles
        category = Category.RECIPE if row.content_type == "recipe" else Category.ARTICLE
        return CandidateRecord(
            id=str(row.id),
            category=category,
            title=row.title or "",
            description=row.description,
            metadata={"content_type": row.content_type},
        )

    @staticmethod
    def _map_pairing(row: CheesePairing) -> CandidateRecord:
        return CandidateRecord(
            id=str(row.id),
            category=Category.PAIRING,
            title=row.pairing or "",
            metadata={"pairing_type": row.type},
        )

    @staticmethod
    def _map_producer_cheese(row: ProducerCheeseStats) -> CandidateRecord:
        """
        Map a producer cheese row.

        Placeholder cheeses of the "Generic" producer are displayed under
        their cheese type name.
        """
        if row.producer_name == GENERIC_PRODUCER and row.cheese_type_name:
            display_name = row.cheese_type_name
        else:
            display_name = row.full_name or ""

        subtext_parts = [part for part in (row.cheese_type_name, row.origin_country) if part]

        return CandidateRecord(
            id=str(row.id),
            category=Category.PRODUCER_CHEESE,
            title=display_name,
            description=SUBTEXT_SEPARATOR.join(subtext_parts),
            extra_fields=(row.full_name, row.producer_name, row.cheese_type_name),
            metadata={
                "image_url": row.image_url,
                "rating": row.average_rating,
                "rating_count": row.rating_count,
                "origin_country": row.origin_country,
                "producer_name": row.producer_name,
                "cheese_type_id": row.cheese_type_id,
                "cheese_type_name": row.cheese_type_name,
            },
        )

    @staticmethod
    def _map_cheese_type(row: CheeseTypeStats) -> CandidateRecord:
        subtext_parts = [row.type or "Cheese"]
        if row.origin_country:
            subtext_parts.append(row.origin_country)
        subtext_parts.append(f"{row.producer_count or 0} versions")

        return CandidateRecord(
            id=str(row.id),
            category=Category.CHEESE_TYPE,
            title=row.name or "",
            description=SUBTEXT_SEPARATOR.join(subtext_parts),
            metadata={
                "type": row.type,
                "origin_country": row.origin_country,
                "producer_count": row.producer_count,
                "rating": row.average_rating,
            },
        )
