"""
Custom exceptions for the search service domain.

The ranker itself never raises; these exceptions cover request validation
and failures of the storage collaborator that fetches candidates.
"""

from typing import Any, Optional


class SearchServiceException(Exception):
    """Base exception for all search service errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationException(SearchServiceException):
    """Raised when input or configuration validation fails."""

    def __init__(self, field: str, value: Any, reason: str):
        message = f"Validation failed for {field}: {reason}"
        super().__init__(
            message=message,
            details={"field": field, "value": str(value), "reason": reason},
        )


class DataFetchException(SearchServiceException):
    """Raised when candidates cannot be fetched from the catalogue store."""

    def __init__(self, source: str, reason: Optional[str] = None):
        message = f"Failed to fetch search data from '{source}'"
        if reason:
            message += f": {reason}"
        super().__init__(
            message=message, details={"source": source, "reason": reason}
        )
