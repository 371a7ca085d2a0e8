"""
Shared dependencies for the application.

Provides dependency injection functions used across routers.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .services.search_service import CatalogSearchService

# Global service instance (set by main app)
_search_service: Optional["CatalogSearchService"] = None


def set_search_service(service: Optional["CatalogSearchService"]) -> None:
    """
    Set the global search service instance.

    Called by main app during startup and cleared on shutdown.
    """
    global _search_service
    _search_service = service


async def get_search_service() -> "CatalogSearchService":
    """
    Get search service instance for dependency injection.

    Used by all routers that need the search service.
    """
    if _search_service is None:
        raise RuntimeError("Search service not initialized")
    return _search_service
