"""
Time-sliced snapshot resolution and freshness tracking.

Chooses live vs. archived snapshots for a period, fetches them
concurrently, folds Last-Modified metadata into a freshness signal and
publishes an immutable dashboard view model.
"""

from statboard.core.snapshots.exceptions import (
    AllResourcesFailedError,
    InvalidPeriodError,
    MetadataUnavailableError,
    ResourceError,
    ResourceUnavailableError,
    StatboardError,
)
from statboard.core.snapshots.freshness import fold, format_time_ago, parse_last_modified
from statboard.core.snapshots.loader import DashboardDataLoader
from statboard.core.snapshots.locator import DomainLayout, ResourceLocator, layout_for
from statboard.core.snapshots.models import (
    RANKED_KINDS,
    DashboardViewModel,
    FreshnessIndicator,
    FreshnessState,
    LoadingState,
    Period,
    PeriodClass,
    Profile,
    RankedEntity,
    RecentPlay,
    ResourceKind,
)
from statboard.core.snapshots.period import classify, current_period, selectable_periods
from statboard.core.snapshots.recent import RecentlyPlayedFeed

__all__ = [
    # Models
    "RANKED_KINDS",
    "DashboardViewModel",
    "FreshnessIndicator",
    "FreshnessState",
    "LoadingState",
    "Period",
    "PeriodClass",
    "Profile",
    "RankedEntity",
    "RecentPlay",
    "ResourceKind",
    # Components
    "DashboardDataLoader",
    "DomainLayout",
    "RecentlyPlayedFeed",
    "ResourceLocator",
    "classify",
    "current_period",
    "fold",
    "format_time_ago",
    "layout_for",
    "parse_last_modified",
    "selectable_periods",
    # Errors
    "AllResourcesFailedError",
    "InvalidPeriodError",
    "MetadataUnavailableError",
    "ResourceError",
    "ResourceUnavailableError",
    "StatboardError",
]
