"""
Snapshot and view models for the dashboard data layer.

Defines the period, resource kinds, ranked entities, profile, freshness
state and the immutable view model published by ``DashboardDataLoader``.

Example:
    >>> from statboard.core.snapshots.models import Period
    >>> Period(year=2024, month=3) < Period(year=2024, month=6)
    True
    >>> Period(year=2024, month=3).label
    '2024-03'
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

EARLIEST_YEAR = 2020


class ResourceKind(str, Enum):
    """Which snapshot document to fetch."""

    PROFILE = "profile"
    RANKED_TRACKS = "ranked-tracks"
    RANKED_ARTISTS = "ranked-artists"
    RECENTLY_PLAYED = "recently-played"


RANKED_KINDS: tuple[ResourceKind, ...] = (
    ResourceKind.RANKED_TRACKS,
    ResourceKind.RANKED_ARTISTS,
)


class PeriodClass(str, Enum):
    """Whether a period is served from live or archived snapshots."""

    CURRENT = "current"
    PAST = "past"


class LoadingState(str, Enum):
    """Lifecycle of one load cycle."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class FreshnessIndicator(str, Enum):
    """What the presentation layer shows for data freshness."""

    FRESH = "fresh"
    STALE = "stale"
    UNKNOWN = "unknown"


class Period(BaseModel):
    """
    A calendar month selectable on the dashboard.

    Periods are ordered by (year, month). Years before 2020 are rejected
    at construction, as are months outside 1-12.
    """

    year: int = Field(..., ge=EARLIEST_YEAR, description="Four-digit year")
    month: int = Field(..., ge=1, le=12, description="Calendar month (1-12)")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_datetime(cls, moment: datetime) -> Period:
        """Return the calendar month containing ``moment``."""
        return cls(year=moment.year, month=moment.month)

    @property
    def key(self) -> tuple[int, int]:
        return (self.year, self.month)

    @property
    def label(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Period):
            return NotImplemented
        return self.key < other.key

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Period):
            return NotImplemented
        return self.key <= other.key

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Period):
            return NotImplemented
        return self.key > other.key

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Period):
            return NotImplemented
        return self.key >= other.key


class RankedEntity(BaseModel):
    """
    One ranked track or artist.

    ``rank`` is the 1-based position in the source document. Lists are never
    re-sorted client-side, so rank always equals array position + 1.

    Attributes:
        id: Unique identifier from the source service
        display_name: Track or artist name
        rank: 1-based position in the ranked list
        popularity_score: Source popularity (0-100)
        image_url: Album art or artist image, if any
        external_link: Link to the entity on the source service
        artist_names: Track artists (tracks only)
        album_name: Album title (tracks only)
        genres: Artist genres (artists only)
        follower_count: Artist followers (artists only)
    """

    id: str = Field(..., min_length=1)
    display_name: str
    rank: int = Field(..., ge=1)
    popularity_score: int = Field(..., ge=0, le=100)
    image_url: str | None = None
    external_link: str

    artist_names: tuple[str, ...] = ()
    album_name: str | None = None
    genres: tuple[str, ...] = ()
    follower_count: int | None = Field(default=None, ge=0)

    model_config = ConfigDict(frozen=True)


class Profile(BaseModel):
    """The account owner's profile snapshot."""

    id: str = Field(..., min_length=1)
    display_name: str
    image_url: str | None = None
    follower_count: int = Field(..., ge=0)
    external_link: str
    country: str | None = None

    model_config = ConfigDict(frozen=True)


class RecentPlay(BaseModel):
    """One entry of the recently-played feed."""

    track_id: str = Field(..., min_length=1)
    track_name: str = Field(..., min_length=1)
    artist_names: tuple[str, ...] = Field(..., min_length=1)
    album_name: str = Field(..., min_length=1)
    image_url: str | None = None
    external_link: str | None = None
    played_at: datetime | None = None

    model_config = ConfigDict(frozen=True)


class FreshnessState(BaseModel):
    """
    Recency of the underlying data.

    Derived on every successful metadata fetch; never persisted.
    """

    most_recent_timestamp: datetime | None = None
    is_fresh: bool = False

    model_config = ConfigDict(frozen=True)

    @property
    def indicator(self) -> FreshnessIndicator:
        if self.most_recent_timestamp is None:
            return FreshnessIndicator.UNKNOWN
        return FreshnessIndicator.FRESH if self.is_fresh else FreshnessIndicator.STALE


class DashboardViewModel(BaseModel):
    """
    Immutable snapshot of one dashboard handed to presentation.

    Built only by ``DashboardDataLoader`` and replaced wholesale on each
    publish, so readers never see a mix of two periods.

    Attributes:
        period: Period this snapshot describes
        is_historical: True when content came from the monthly archive
        profile: Profile, or None when its slot is unavailable
        ranked_lists: Ranked entities per ranked resource kind
        freshness: Folded freshness of the live feed
        loading_state: Where the load cycle stands
        failure_reason: Why the cycle failed (failed state only)
        unavailable: Reason per resource kind whose slot is empty
    """

    period: Period
    is_historical: bool = False
    profile: Profile | None = None
    ranked_lists: Mapping[ResourceKind, tuple[RankedEntity, ...]] = Field(
        default_factory=dict, validate_default=True
    )
    freshness: FreshnessState = Field(default_factory=FreshnessState)
    loading_state: LoadingState = LoadingState.LOADING
    failure_reason: str | None = None
    unavailable: Mapping[ResourceKind, str] = Field(default_factory=dict, validate_default=True)

    model_config = ConfigDict(frozen=True)

    @field_validator("ranked_lists", "unavailable", mode="after")
    @classmethod
    def _read_only(cls, value: Mapping[ResourceKind, object]) -> Mapping[ResourceKind, object]:
        # frozen=True does not reach container contents
        return MappingProxyType(dict(value))

    @field_serializer("ranked_lists", "unavailable")
    def _as_dict(self, value: Mapping[ResourceKind, object]) -> dict[ResourceKind, object]:
        return dict(value)

    def ranked(self, kind: ResourceKind) -> tuple[RankedEntity, ...]:
        """Return the ranked list for ``kind`` (empty when unavailable)."""
        return self.ranked_lists.get(kind, ())

    @property
    def is_ready(self) -> bool:
        return self.loading_state == LoadingState.READY

    @property
    def is_failed(self) -> bool:
        return self.loading_state == LoadingState.FAILED


__all__ = [
    "EARLIEST_YEAR",
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
]
