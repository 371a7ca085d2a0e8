"""
Repository layer - Catalogue data access.

Fetches candidate records for the ranker, hiding the storage
implementation from the search service.
"""
