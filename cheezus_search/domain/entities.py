"""
Domain entities for catalogue search.

Candidate records are fetched from storage once per search, scored by the
ranker and discarded after the response is rendered.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple


class Category(str, Enum):
    """Content categories a candidate record can belong to."""

    CHEESE = "cheese"
    ARTICLE = "article"
    RECIPE = "recipe"
    PAIRING = "pairing"
    PRODUCER_CHEESE = "producer_cheese"
    CHEESE_TYPE = "cheese_type"


class SearchMode(str, Enum):
    """Search modes offered by the global search bar."""

    ALL = "all"
    CHEESE = "cheese"
    PAIRING = "pairing"

    def includes(self, category: Category) -> bool:
        """
        Check whether this mode fetches candidates of the given category.

        Cheeses are searched in "all" and "cheese" mode, pairings in "all"
        and "pairing" mode, Cheezopedia entries only in "all" mode.
        """
        if category == Category.CHEESE:
            return self in (SearchMode.ALL, SearchMode.CHEESE)
        if category == Category.PAIRING:
            return self in (SearchMode.ALL, SearchMode.PAIRING)
        if category in (Category.ARTICLE, Category.RECIPE):
            return self == SearchMode.ALL
        return False


@dataclass(frozen=True)
class CandidateRecord:
    """
    Item fetched from storage that the ranker can match against.

    Attributes:
        id: Stable identifier of the row
        category: Content category (decides navigation target)
        title: Name/title field, always searchable
        description: Optional description, searchable when present
        extra_fields: Additional searchable text (producer, type name, ...)
        metadata: Category-specific display data passed through unchanged
    """

    id: str
    category: Category
    title: str
    description: Optional[str] = None
    extra_fields: Tuple[Optional[str], ...] = ()
    metadata: Dict[str, Any] = field(default_factory=dict)

    def searchable_fields(self) -> List[str]:
        """Return the non-empty text fields, title first."""
        fields = [self.title, self.description, *self.extra_fields]
        return [value for value in fields if isinstance(value, str) and value]


@dataclass
class ScoredResult:
    """
    Candidate record with its similarity and final rank score.

    Attributes:
        record: The matched candidate
        similarity: Best edit-distance similarity across fields (0-1)
        score: Rank score; 1.0 for exact matches, similarity otherwise
        suggestion: True when produced by the "did you mean" fallback
    """

    SUGGESTION_TEMPLATE: ClassVar[str] = "Did you mean: {title}?"

    record: CandidateRecord
    similarity: float
    score: float
    suggestion: bool = False

    @property
    def id(self) -> str:
        return self.record.id

    @property
    def category(self) -> Category:
        return self.record.category

    @property
    def title(self) -> str:
        return self.record.title

    @property
    def description(self) -> str:
        """Display description, replaced by a prompt for suggestions."""
        if self.suggestion:
            return self.SUGGESTION_TEMPLATE.format(title=self.record.title)
        return self.record.description or ""

    def to_dict(self) -> dict:
        """Convert to dictionary for API response."""
        return {
            "id": self.id,
            "category": self.category.value,
            "title": self.title,
            "description": self.description,
            "score": round(self.score, 4),
            "similarity": round(self.similarity, 4),
            "suggestion": self.suggestion,
            "metadata": dict(self.record.metadata),
        }
