"""
Search module for catalogue search.

Provides edit-distance similarity, synonym expansion and the ranking
policy that merges exact, fuzzy and suggested matches.
"""
from .ranker import RankerConfig, SearchRanker
from .similarity import levenshtein_distance, similarity
from .synonyms import CHEESE_SYNONYMS, SynonymTable, expand_term

__all__ = [
    "CHEESE_SYNONYMS",
    "RankerConfig",
    "SearchRanker",
    "SynonymTable",
    "expand_term",
    "levenshtein_distance",
    "similarity",
]
