"""Engine Layer - Core Orchestration and Resolution

This module provides the core engine layer for the catalog client, implementing:
- MarketplaceService: Main entry point for catalog queries
- ProgressMonitor: Weighted progress and cancellation
- SearchResult: Standardized result format
- resolver: Catalog document → typed result checks
- favorites: Favorite reference resolution pipeline
"""

from .orchestrator import MarketplaceService
from .progress import ProgressMonitor
from .result import SearchResult

__all__ = [
    "MarketplaceService",
    "ProgressMonitor",
    "SearchResult",
]
