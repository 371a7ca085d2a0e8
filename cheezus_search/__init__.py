"""
Cheezus catalogue search.

Fuzzy, synonym-aware ranking of cheeses, pairings and Cheezopedia entries,
served over a small FastAPI application.
"""

__version__ = "1.0.0"
