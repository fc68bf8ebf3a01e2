"""Services implementation package."""

from .cache_service import CacheService
from .caching_service import CachingMarketplaceService, build_marketplace_service
from .favorites_service import HttpUserFavoritesService
from .http_transport import HttpCatalogTransport

__all__ = [
    "CacheService",
    "CachingMarketplaceService",
    "HttpCatalogTransport",
    "HttpUserFavoritesService",
    "build_marketplace_service",
]
