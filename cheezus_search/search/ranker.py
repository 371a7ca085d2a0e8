"""
Result merge and ranking policy for catalogue search.

Combines substring containment, edit-distance similarity and synonym
expansion into a single ordered result list, with a "did you mean"
fallback when nothing matches with confidence.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from ..domain.entities import CandidateRecord, Category, ScoredResult
from ..domain.exceptions import ValidationException
from .similarity import best_similarity
from .synonyms import SynonymTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankerConfig:
    """
    Tunable thresholds for the ranking policy.

    Attributes:
        fuzzy_threshold: Similarity a non-exact candidate must exceed
        fuzzy_limit: Maximum number of fuzzy matches returned
        suggestion_threshold: Similarity a fallback suggestion must exceed
        suggestion_limit: Maximum number of fallback suggestions
        suggestion_min_length: Minimum term length before suggesting
    """

    fuzzy_threshold: float = 0.5
    fuzzy_limit: int = 5
    suggestion_threshold: float = 0.4
    suggestion_limit: int = 3
    suggestion_min_length: int = 3

    def __post_init__(self):
        """Validate thresholds and limits on creation."""
        for name in ("fuzzy_threshold", "suggestion_threshold"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValidationException(name, value, "must be between 0 and 1")
        for name in ("fuzzy_limit", "suggestion_limit", "suggestion_min_length"):
            value = getattr(self, name)
            if value < 0:
                raise ValidationException(name, value, "must not be negative")

    @classmethod
    def legacy(cls) -> "RankerConfig":
        """Stricter thresholds of the first global search bar."""
        return cls(fuzzy_threshold=0.6, fuzzy_limit=3)


class SearchRanker:
    """
    Rank already-fetched candidate records against a search term.

    Ranking order:
    1. Exact matches (substring containment, synonym-aware) - score 1.0
    2. Fuzzy matches above the threshold - score = similarity, best first
    3. Only if both are empty: "did you mean" suggestions

    The ranker is pure: it performs no I/O, keeps no state between calls
    and never raises for empty terms or sparse records.
    """

    def __init__(
        self,
        config: Optional[RankerConfig] = None,
        synonyms: Optional[SynonymTable] = None,
    ):
        """
        Initialize ranker.

        Args:
            config: Thresholds and caps (defaults to RankerConfig())
            synonyms: Synonym table for recall boosting; None disables expansion
        """
        self.config = config or RankerConfig()
        self.synonyms = synonyms

    def expand(self, term: str) -> Set[str]:
        """Expand a normalized term with synonyms, if a table is configured."""
        if self.synonyms is None:
            return {term}
        return self.synonyms.expand(term)

    def search(
        self,
        term: str,
        candidates_by_category: Mapping[Category, Sequence[CandidateRecord]],
    ) -> List[ScoredResult]:
        """
        Rank candidates grouped by category.

        Categories are ranked uniformly; they are concatenated in the
        mapping's iteration order before ranking.

        Args:
            term: Raw search term
            candidates_by_category: Fetched candidates per category

        Returns:
            Ordered list of scored results
        """
        candidates = [
            record
            for records in candidates_by_category.values()
            for record in (records or ())
        ]
        return self.rank(term, candidates)

    def rank(self, term: str, candidates: Iterable[CandidateRecord]) -> List[ScoredResult]:
        """
        Rank a flat sequence of candidates.

        Args:
            term: Raw search term
            candidates: Candidate records in arrival order

        Returns:
            Exact matches followed by fuzzy matches, or fallback suggestions
        """
        normalized = term.lower().strip() if term else ""
        if not normalized:
            return []

        expanded = self.expand(normalized)
        scored = [
            (record, best_similarity(normalized, record.searchable_fields()))
            for record in candidates
        ]

        exact: List[ScoredResult] = []
        remaining: List[Tuple[CandidateRecord, float]] = []
        for record, record_similarity in scored:
            if self._is_exact_match(normalized, expanded, record):
                exact.append(ScoredResult(record, record_similarity, 1.0))
            else:
                remaining.append((record, record_similarity))

        fuzzy = self._top(remaining, self.config.fuzzy_threshold, self.config.fuzzy_limit)
        results = exact + [
            ScoredResult(record, record_similarity, record_similarity)
            for record, record_similarity in fuzzy
        ]

        logger.debug(
            f"Ranked '{normalized}': {len(exact)} exact, {len(fuzzy)} fuzzy "
            f"of {len(scored)} candidates"
        )

        if results or len(normalized) < self.config.suggestion_min_length:
            return results

        suggestions = self._top(
            scored, self.config.suggestion_threshold, self.config.suggestion_limit
        )
        if suggestions:
            logger.debug(f"No matches for '{normalized}', returning {len(suggestions)} suggestions")

        return [
            ScoredResult(record, record_similarity, record_similarity, suggestion=True)
            for record, record_similarity in suggestions
        ]

    def _is_exact_match(
        self, term: str, expanded: Set[str], record: CandidateRecord
    ) -> bool:
        """
        Check substring containment.

        The raw term is checked against title and description. With a
        synonym table, every expanded term is also checked against every
        searchable field.
        """
        if record.title and term in record.title.lower():
            return True
        if record.description and term in record.description.lower():
            return True

        if self.synonyms is None:
            return False

        fields = [value.lower() for value in record.searchable_fields()]
        return any(candidate in value for candidate in expanded for value in fields)

    @staticmethod
    def _top(
        scored: List[Tuple[CandidateRecord, float]], threshold: float, limit: int
    ) -> List[Tuple[CandidateRecord, float]]:
        """Filter by threshold, sort by similarity (stable) and truncate."""
        above = [item for item in scored if item[1] > threshold]
        above.sort(key=lambda item: item[1], reverse=True)
        return above[:limit]

    def get_stats(self) -> dict:
        """
        Get ranker configuration.

        Returns:
            Dictionary with thresholds and synonym table size
        """
        return {
            **asdict(self.config),
            "synonyms_enabled": self.synonyms is not None,
            "synonym_groups": len(self.synonyms) if self.synonyms is not None else 0,
        }
