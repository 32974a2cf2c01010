"""
Resource locator: map (kind, period class, period) to a snapshot URL.

URL layout in the object store:

    live:     <base>/<domain>/live/<live-file>.json
    archive:  <base>/<domain>/archive/<YYYY>_<MM>_<archive-file>.json
    profile:  <base>/<domain>/profile/<profile-file>.json   (never period-scoped)

Example:
    >>> from statboard.core.snapshots.models import Period, PeriodClass, ResourceKind
    >>> locator = ResourceLocator("https://store.example.com", "spotify")
    >>> locator.resolve(ResourceKind.RANKED_TRACKS, PeriodClass.PAST, Period(year=2024, month=3))
    'https://store.example.com/spotify/archive/2024_03_tracks.json'
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from statboard.core.snapshots.models import Period, PeriodClass, ResourceKind


class DomainLayout(BaseModel):
    """
    File names of one data domain's snapshots.

    Attributes:
        live_files: Rolling-window file stem per period-scoped kind
        archive_files: Monthly archive file stem per period-scoped kind
        profile_files: File stem per kind with a fixed identity
    """

    live_files: dict[ResourceKind, str] = Field(default_factory=dict)
    archive_files: dict[ResourceKind, str] = Field(default_factory=dict)
    profile_files: dict[ResourceKind, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def generic(cls) -> DomainLayout:
        """Layout derived from kind names, for domains without a built-in one."""
        return cls(
            live_files={
                ResourceKind.RANKED_TRACKS: "ranked_tracks",
                ResourceKind.RANKED_ARTISTS: "ranked_artists",
            },
            archive_files={
                ResourceKind.RANKED_TRACKS: "ranked_tracks",
                ResourceKind.RANKED_ARTISTS: "ranked_artists",
            },
            profile_files={
                ResourceKind.PROFILE: "profile",
                ResourceKind.RECENTLY_PLAYED: "recently_played",
            },
        )

    def is_fixed(self, kind: ResourceKind) -> bool:
        """True for kinds whose URL never depends on the period."""
        return kind in self.profile_files


SPOTIFY_LAYOUT = DomainLayout(
    live_files={
        ResourceKind.RANKED_TRACKS: "30_day_tracks",
        ResourceKind.RANKED_ARTISTS: "30_day_artists",
    },
    archive_files={
        ResourceKind.RANKED_TRACKS: "tracks",
        ResourceKind.RANKED_ARTISTS: "artists",
    },
    profile_files={
        ResourceKind.PROFILE: "profile",
        ResourceKind.RECENTLY_PLAYED: "recently_played",
    },
)

BUILTIN_LAYOUTS: dict[str, DomainLayout] = {"spotify": SPOTIFY_LAYOUT}


def layout_for(domain: str) -> DomainLayout:
    """Return the built-in layout for ``domain`` or the generic one."""
    return BUILTIN_LAYOUTS.get(domain, DomainLayout.generic())


class ResourceLocator:
    """
    Pure, deterministic URL builder for one domain.

    Performs no I/O; the same inputs always produce the same URL.
    """

    def __init__(
        self,
        base_url: str,
        domain: str,
        layout: DomainLayout | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.domain = domain.strip("/")
        self.layout = layout or layout_for(self.domain)

    @property
    def root(self) -> str:
        return f"{self.base_url}/{self.domain}"

    def resolve(self, kind: ResourceKind, classification: PeriodClass, period: Period) -> str:
        """
        Build the URL of ``kind`` for ``period``.

        Args:
            kind: Resource to fetch
            classification: CURRENT selects the live file, PAST the archive
            period: Period embedded into archive file names

        Returns:
            Absolute URL of the snapshot document

        Raises:
            ValueError: If the layout has no file for ``kind``
        """
        if self.layout.is_fixed(kind):
            return self._profile_url(kind)
        if classification == PeriodClass.CURRENT:
            return self.live_url(kind)

        stem = self._stem(self.layout.archive_files, kind, "archive")
        return f"{self.root}/archive/{period.year:04d}_{period.month:02d}_{stem}.json"

    def live_url(self, kind: ResourceKind) -> str:
        """URL with a fixed identity for ``kind``, used for freshness probes."""
        if self.layout.is_fixed(kind):
            return self._profile_url(kind)
        stem = self._stem(self.layout.live_files, kind, "live")
        return f"{self.root}/live/{stem}.json"

    def _profile_url(self, kind: ResourceKind) -> str:
        stem = self._stem(self.layout.profile_files, kind, "profile")
        return f"{self.root}/profile/{stem}.json"

    def _stem(self, files: dict[ResourceKind, str], kind: ResourceKind, scheme: str) -> str:
        try:
            return files[kind]
        except KeyError:
            raise ValueError(
                f"Domain '{self.domain}' has no {scheme} file for {kind.value}"
            ) from None


__all__ = [
    "BUILTIN_LAYOUTS",
    "SPOTIFY_LAYOUT",
    "DomainLayout",
    "ResourceLocator",
    "layout_for",
]
