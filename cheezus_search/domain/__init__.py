"""
Domain layer - Core search entities and domain errors.

This layer contains the records the ranker consumes and produces,
independent of any storage or HTTP concerns.
"""
