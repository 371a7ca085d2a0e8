"""
Search configuration from environment variables.

Ranking thresholds are product decisions rather than invariants, so every
one of them can be tuned per deployment without a code change.

Environment variables:
- SEARCH_RANKER_PRESET: "default" (0.5 / 5) or "legacy" (0.6 / 3, no synonyms)
- SEARCH_FUZZY_THRESHOLD, SEARCH_FUZZY_LIMIT
- SEARCH_SUGGESTION_THRESHOLD, SEARCH_SUGGESTION_LIMIT, SEARCH_SUGGESTION_MIN_LENGTH
- SEARCH_SYNONYMS_ENABLED: "true" / "false"
- SEARCH_PRODUCER_CHEESE_LIMIT, SEARCH_CHEESE_TYPE_LIMIT, SEARCH_MAX_RESULTS
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .domain.exceptions import ValidationException
from .search.ranker import RankerConfig, SearchRanker
from .search.synonyms import CHEESE_SYNONYMS

# Load environment variables
env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(dotenv_path=env_path)

logger = logging.getLogger(__name__)

PRESET_DEFAULT = "default"
PRESET_LEGACY = "legacy"


@dataclass(frozen=True)
class SearchSettings:
    """
    Settings for the search service.

    Attributes:
        ranker: Thresholds used by the ranker
        synonyms_enabled: Whether the cheese synonym table is injected
        producer_cheese_limit: Fetch cap for producer cheeses (add-cheese search)
        cheese_type_limit: Fetch cap for cheese types (add-cheese search)
        max_results: Result cap for the add-cheese search
        add_cheese_min_length: Shortest term the add-cheese search runs for
    """

    ranker: RankerConfig = field(default_factory=RankerConfig)
    synonyms_enabled: bool = True
    producer_cheese_limit: int = 30
    cheese_type_limit: int = 10
    max_results: int = 15
    add_cheese_min_length: int = 2


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValidationException(name, raw, "must be a number")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationException(name, raw, "must be an integer")
    if value < 0:
        raise ValidationException(name, raw, "must not be negative")
    return value


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.lower() == "true"


def load_settings() -> SearchSettings:
    """
    Build search settings from the environment.

    Individual variables override the values of the selected preset.

    Returns:
        SearchSettings instance

    Raises:
        ValidationException: If a variable holds an invalid value
    """
    preset = os.getenv("SEARCH_RANKER_PRESET", PRESET_DEFAULT).lower()
    if preset == PRESET_LEGACY:
        base = RankerConfig.legacy()
        synonyms_default = False
    elif preset == PRESET_DEFAULT:
        base = RankerConfig()
        synonyms_default = True
    else:
        raise ValidationException(
            "SEARCH_RANKER_PRESET", preset, f"must be '{PRESET_DEFAULT}' or '{PRESET_LEGACY}'"
        )

    ranker = RankerConfig(
        fuzzy_threshold=_env_float("SEARCH_FUZZY_THRESHOLD", base.fuzzy_threshold),
        fuzzy_limit=_env_int("SEARCH_FUZZY_LIMIT", base.fuzzy_limit),
        suggestion_threshold=_env_float(
            "SEARCH_SUGGESTION_THRESHOLD", base.suggestion_threshold
        ),
        suggestion_limit=_env_int("SEARCH_SUGGESTION_LIMIT", base.suggestion_limit),
        suggestion_min_length=_env_int(
            "SEARCH_SUGGESTION_MIN_LENGTH", base.suggestion_min_length
        ),
    )

    settings = SearchSettings(
        ranker=ranker,
        synonyms_enabled=_env_bool("SEARCH_SYNONYMS_ENABLED", synonyms_default),
        producer_cheese_limit=_env_int("SEARCH_PRODUCER_CHEESE_LIMIT", 30),
        cheese_type_limit=_env_int("SEARCH_CHEESE_TYPE_LIMIT", 10),
        max_results=_env_int("SEARCH_MAX_RESULTS", 15),
    )

    logger.info(
        f"Search settings loaded (preset={preset}, "
        f"fuzzy_threshold={ranker.fuzzy_threshold}, fuzzy_limit={ranker.fuzzy_limit}, "
        f"synonyms={settings.synonyms_enabled})"
    )
    return settings


def build_ranker(settings: Optional[SearchSettings] = None) -> SearchRanker:
    """
    Create a ranker for the given settings.

    Args:
        settings: Search settings (defaults to load_settings())

    Returns:
        Configured SearchRanker
    """
    settings = settings or load_settings()
    synonyms = CHEESE_SYNONYMS if settings.synonyms_enabled else None
    return SearchRanker(config=settings.ranker, synonyms=synonyms)
