"""카탈로그 스키마 - export only."""

from .catalog_schema import (
    Category,
    FavoriteReference,
    Identifiable,
    InstallStatus,
    Ius,
    Market,
    MarketplaceDocument,
    News,
    Node,
    NodeListing,
    Search,
)

__all__ = [
    "Category",
    "FavoriteReference",
    "Identifiable",
    "InstallStatus",
    "Ius",
    "Market",
    "MarketplaceDocument",
    "News",
    "Node",
    "NodeListing",
    "Search",
]
