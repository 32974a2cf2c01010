"""
Raw snapshot document shapes and their conversion to domain models.

Snapshots are Spotify-shaped JSON documents. Ranked documents wrap their
entries in an ``items`` array; the profile is a single object. A ranked
document with any malformed item is rejected as a whole so that ranks
always match the source positions.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from statboard.core.snapshots.exceptions import ResourceUnavailableError
from statboard.core.snapshots.models import (
    Profile,
    RankedEntity,
    RecentPlay,
    ResourceKind,
)

logger = logging.getLogger(__name__)

# Keys tried, in order, when a recently-played document has no "items"
RECENT_FALLBACK_KEYS = ("tracks", "recent", "history")
RECENT_PLAYS_LIMIT = 20


class _Raw(BaseModel):
    model_config = ConfigDict(extra="ignore")


class RawImage(_Raw):
    url: str


class RawExternalUrls(_Raw):
    spotify: str


class RawFollowers(_Raw):
    total: int = Field(..., ge=0)


class RawArtistRef(_Raw):
    id: str | None = None
    name: str


class RawAlbum(_Raw):
    name: str
    images: list[RawImage] = Field(default_factory=list)


class RawTrack(_Raw):
    id: str
    name: str
    artists: list[RawArtistRef]
    album: RawAlbum
    external_urls: RawExternalUrls
    popularity: int = Field(..., ge=0, le=100)

    def to_entity(self, rank: int) -> RankedEntity:
        return RankedEntity(
            id=self.id,
            display_name=self.name,
            rank=rank,
            popularity_score=self.popularity,
            image_url=_first_image(self.album.images),
            external_link=self.external_urls.spotify,
            artist_names=tuple(a.name for a in self.artists),
            album_name=self.album.name,
        )


class RawArtist(_Raw):
    id: str
    name: str
    genres: list[str] = Field(default_factory=list)
    popularity: int = Field(..., ge=0, le=100)
    followers: RawFollowers
    images: list[RawImage] = Field(default_factory=list)
    external_urls: RawExternalUrls

    def to_entity(self, rank: int) -> RankedEntity:
        return RankedEntity(
            id=self.id,
            display_name=self.name,
            rank=rank,
            popularity_score=self.popularity,
            image_url=_first_image(self.images),
            external_link=self.external_urls.spotify,
            genres=tuple(self.genres),
            follower_count=self.followers.total,
        )


class RawProfile(_Raw):
    id: str
    display_name: str
    images: list[RawImage] = Field(default_factory=list)
    followers: RawFollowers
    country: str | None = None
    external_urls: RawExternalUrls

    def to_profile(self) -> Profile:
        return Profile(
            id=self.id,
            display_name=self.display_name,
            image_url=_first_image(self.images),
            follower_count=self.followers.total,
            external_link=self.external_urls.spotify,
            country=self.country,
        )


class RawPlayedTrack(_Raw):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    artists: list[RawArtistRef] = Field(..., min_length=1)
    album: RawAlbum
    external_urls: RawExternalUrls | None = None


class RawRecentPlay(_Raw):
    track: RawPlayedTrack
    played_at: str | None = None

    def to_play(self) -> RecentPlay:
        return RecentPlay(
            track_id=self.track.id,
            track_name=self.track.name,
            artist_names=tuple(a.name for a in self.track.artists),
            album_name=self.track.album.name,
            image_url=_first_image(self.track.album.images),
            external_link=self.track.external_urls.spotify if self.track.external_urls else None,
            played_at=self.played_at,
        )


_RANKED_SHAPES: dict[ResourceKind, type[RawTrack] | type[RawArtist]] = {
    ResourceKind.RANKED_TRACKS: RawTrack,
    ResourceKind.RANKED_ARTISTS: RawArtist,
}


def _first_image(images: list[RawImage]) -> str | None:
    return images[0].url if images else None


def _items_of(kind: ResourceKind, payload: Any) -> list[Any]:
    if not isinstance(payload, dict):
        raise ResourceUnavailableError(kind.value, "Expected a JSON object")
    items = payload.get("items")
    if not isinstance(items, list):
        raise ResourceUnavailableError(kind.value, "Missing 'items' array")
    return items


def parse_ranked(kind: ResourceKind, payload: Any) -> tuple[RankedEntity, ...]:
    """
    Convert a ranked document to entities in source order.

    Args:
        kind: RANKED_TRACKS or RANKED_ARTISTS
        payload: Decoded JSON document

    Returns:
        Tuple of entities; entity ``rank`` is its 1-based position

    Raises:
        ResourceUnavailableError: If the document or any item is malformed
    """
    shape = _RANKED_SHAPES.get(kind)
    if shape is None:
        raise ValueError(f"{kind.value} is not a ranked resource kind")

    items = _items_of(kind, payload)
    try:
        return tuple(
            shape.model_validate(item).to_entity(rank=index)
            for index, item in enumerate(items, start=1)
        )
    except ValidationError as e:
        raise ResourceUnavailableError(
            kind.value,
            f"Malformed item in ranked document: {e.error_count()} validation error(s)",
        ) from e


def parse_profile(payload: Any) -> Profile:
    """
    Convert a profile document to a Profile.

    Raises:
        ResourceUnavailableError: If required fields are missing
    """
    try:
        return RawProfile.model_validate(payload).to_profile()
    except ValidationError as e:
        raise ResourceUnavailableError(
            ResourceKind.PROFILE.value,
            f"Malformed profile document: {e.error_count()} validation error(s)",
        ) from e


def parse_recent_plays(payload: Any, limit: int = RECENT_PLAYS_LIMIT) -> tuple[RecentPlay, ...]:
    """
    Convert a recently-played document, skipping incomplete entries.

    Unlike ranked lists, entries here carry no rank, so a bad entry is
    dropped instead of failing the whole feed.

    Raises:
        ResourceUnavailableError: If the document has no usable entry array
    """
    kind = ResourceKind.RECENTLY_PLAYED
    if not isinstance(payload, dict):
        raise ResourceUnavailableError(kind.value, "Expected a JSON object")

    items = payload.get("items")
    if not isinstance(items, list):
        items = next(
            (payload[k] for k in RECENT_FALLBACK_KEYS if isinstance(payload.get(k), list)),
            None,
        )
    if items is None:
        raise ResourceUnavailableError(kind.value, "Missing 'items' array")

    plays: list[RecentPlay] = []
    for item in items:
        if len(plays) >= limit:
            break
        try:
            plays.append(RawRecentPlay.model_validate(item).to_play())
        except ValidationError:
            logger.debug("Skipping incomplete recently-played entry")
    return tuple(plays)


__all__ = [
    "RECENT_PLAYS_LIMIT",
    "parse_profile",
    "parse_ranked",
    "parse_recent_plays",
]
