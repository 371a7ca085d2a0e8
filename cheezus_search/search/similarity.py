"""
Edit-distance similarity scoring for search terms.

Provides a case-insensitive Levenshtein distance and a normalized
similarity score used to rank fuzzy matches against catalogue titles.
"""

from typing import List

from rapidfuzz.distance import Levenshtein


def levenshtein_distance(s1: str, s2: str) -> int:
    """
    Calculate the Levenshtein distance between two strings.

    Uses unit cost for insertion, deletion and substitution with no score
    cutoff. Characters are compared case-insensitively.

    Args:
        s1: First string
        s2: Second string

    Returns:
        Minimum number of single-character edits turning s1 into s2

    Example:
        >>> levenshtein_distance("cheder", "Cheddar")
        2
    """
    return Levenshtein.distance(s1.lower(), s2.lower())


def similarity(s1: str, s2: str) -> float:
    """
    Calculate similarity between two strings.

    Computed as 1 - distance / max(len(s1), len(s2)). Two empty strings are
    identical and score 1.0; a single empty string scores 0.0.

    Returns:
        Similarity score between 0.0 (no match) and 1.0 (exact match)
    """
    if not s1 and not s2:
        return 1.0
    if not s1 or not s2:
        return 0.0

    # Lower-casing can change length for some code points, so measure the
    # lowered strings.
    a = s1.lower()
    b = s2.lower()
    max_length = max(len(a), len(b))
    return 1.0 - levenshtein_distance(a, b) / max_length


def best_similarity(term: str, fields: List[str]) -> float:
    """Return the highest similarity of term against any of the fields."""
    return max((similarity(term, value) for value in fields), default=0.0)
