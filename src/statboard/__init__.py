"""
Statboard - personal analytics dashboard data layer

Resolves live vs. archived JSON snapshots for a reporting month, fetches
them concurrently and tracks how fresh the underlying data is.
"""

__version__ = "0.3.0"

# Re-export core models for convenience
from statboard.core.config.models import StatboardConfig
from statboard.core.snapshots.models import DashboardViewModel, Period, ResourceKind

__all__ = ["DashboardViewModel", "Period", "ResourceKind", "StatboardConfig", "__version__"]
