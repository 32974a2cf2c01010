"""
Custom exceptions for snapshot loading.

Exception Hierarchy:
    StatboardError (base)
    ├── InvalidPeriodError (period outside the selectable range)
    ├── ResourceError (one resource slot failed)
    │   ├── ResourceUnavailableError (content fetch or parse failure)
    │   └── MetadataUnavailableError (freshness probe failure)
    └── AllResourcesFailedError (every content fetch failed)

Slot-level errors never escape the loader; they are folded into the
published view model. Only InvalidPeriodError is raised to callers of
``DashboardDataLoader.load``.

Example:
    >>> from statboard.core.snapshots.exceptions import ResourceUnavailableError
    >>> try:
    ...     raise ResourceUnavailableError("ranked-tracks", "HTTP 404", status_code=404)
    ... except ResourceUnavailableError as e:
    ...     print(e)
    ...     print(e.context)
    [ranked-tracks] HTTP 404
    {'kind': 'ranked-tracks', 'status_code': 404}
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from statboard.core.snapshots.models import Period


class StatboardError(Exception):
    """
    Base exception for all statboard errors.

    Attributes:
        message: Human-readable error message
        context: Optional dictionary of additional context
    """

    def __init__(self, message: str, **context: object) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message


class InvalidPeriodError(StatboardError):
    """
    Raised when a requested period lies after the current calendar month.

    Rejected before any network call is made.
    """

    def __init__(self, requested: Period, now: Period) -> None:
        super().__init__(
            f"Period {requested.label} is after the current month {now.label}",
            requested=requested.label,
            now=now.label,
        )
        self.requested = requested
        self.now = now


class ResourceError(StatboardError):
    """
    Base exception for a single resource slot.

    Attributes:
        kind: Resource kind value that failed (e.g. "ranked-tracks")
    """

    def __init__(self, kind: str, message: str, **context: object) -> None:
        super().__init__(message, kind=kind, **context)
        self.kind = kind

    def __str__(self) -> str:
        """Return string representation with the resource kind."""
        return f"[{self.kind}] {self.message}"


class ResourceUnavailableError(ResourceError):
    """
    One content resource failed to load or parse.

    Localized to its slot: the dashboard renders a placeholder there while
    the other slots render normally.
    """


class MetadataUnavailableError(ResourceError):
    """
    One freshness probe failed.

    Excluded from the freshness fold and never surfaced to the user.
    """


class AllResourcesFailedError(StatboardError):
    """
    Every content fetch for a period failed.

    Attributes:
        errors: Mapping of resource kind to the reason its slot failed
    """

    def __init__(self, errors: Mapping[str, str]) -> None:
        kinds = ", ".join(sorted(errors))
        super().__init__(
            f"All dashboard resources failed to load ({kinds})",
            errors=dict(errors),
        )
        self.errors = dict(errors)


__all__ = [
    "StatboardError",
    "InvalidPeriodError",
    "ResourceError",
    "ResourceUnavailableError",
    "MetadataUnavailableError",
    "AllResourcesFailedError",
]
