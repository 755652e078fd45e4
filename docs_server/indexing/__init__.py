"""
Docs Server Indexing Package.

Pulls documentation markdown from GitHub at the branch matching each
package's published npm version, renders it, rewrites cross-document links
to site permalinks and keeps a full-text index of the result.

Features:
- Branch resolution from npm dist-tags and semver-range branch names
- GitHub contents API fetching with token or client credentials
- Link rewriting against the route table
- Hourly refresh with on-demand ingestion of uncached documents
- CLI interface for one-off refreshes and index queries
"""
from .models import (
    TrackedRoute,
    FetchResult,
    BrokenLink,
    CycleReport,
)
from .routes import RouteTable, load_route_table
from .pipeline import IngestionPipeline
from .scheduler import RefreshScheduler, SchedulerState

__all__ = [
    "TrackedRoute",
    "FetchResult",
    "BrokenLink",
    "CycleReport",
    "RouteTable",
    "load_route_table",
    "IngestionPipeline",
    "RefreshScheduler",
    "SchedulerState",
]
