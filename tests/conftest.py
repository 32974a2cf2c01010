"""
Pytest configuration and shared fixtures.

Provides an in-memory snapshot store served through ``httpx.MockTransport``,
sample Spotify-shaped documents, and a fixed clock.
"""

import asyncio
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Any

import httpx
import pytest

from statboard.core.config import clear_cache
from statboard.core.snapshots.locator import ResourceLocator

BASE_URL = "https://store.test"
DOMAIN = "spotify"

PROFILE_URL = f"{BASE_URL}/spotify/profile/profile.json"
RECENT_URL = f"{BASE_URL}/spotify/profile/recently_played.json"
LIVE_TRACKS_URL = f"{BASE_URL}/spotify/live/30_day_tracks.json"
LIVE_ARTISTS_URL = f"{BASE_URL}/spotify/live/30_day_artists.json"
MARCH_TRACKS_URL = f"{BASE_URL}/spotify/archive/2024_03_tracks.json"
MARCH_ARTISTS_URL = f"{BASE_URL}/spotify/archive/2024_03_artists.json"

NOW = datetime(2024, 6, 15, 13, 0, tzinfo=timezone.utc)


# ==============================================================================
# Sample documents
# ==============================================================================


def make_track(n: int, popularity: int = 50) -> dict[str, Any]:
    return {
        "id": f"track-{n}",
        "name": f"Track {n}",
        "artists": [{"id": f"artist-{n}", "name": f"Artist {n}"}],
        "album": {
            "name": f"Album {n}",
            "images": [{"url": f"https://img.test/album-{n}.jpg"}],
        },
        "external_urls": {"spotify": f"https://open.spotify.com/track/{n}"},
        "popularity": popularity,
    }


def make_artist(n: int, popularity: int = 60) -> dict[str, Any]:
    return {
        "id": f"artist-{n}",
        "name": f"Artist {n}",
        "genres": ["indie", "dream pop"],
        "popularity": popularity,
        "followers": {"total": 1000 * n},
        "images": [{"url": f"https://img.test/artist-{n}.jpg"}],
        "external_urls": {"spotify": f"https://open.spotify.com/artist/{n}"},
    }


def make_profile() -> dict[str, Any]:
    return {
        "id": "listener",
        "display_name": "Listener",
        "images": [{"url": "https://img.test/me.jpg"}],
        "followers": {"total": 42},
        "country": "CA",
        "external_urls": {"spotify": "https://open.spotify.com/user/listener"},
    }


def make_play(n: int) -> dict[str, Any]:
    return {
        "track": {
            "id": f"track-{n}",
            "name": f"Track {n}",
            "artists": [{"id": f"artist-{n}", "name": f"Artist {n}"}],
            "album": {"name": f"Album {n}", "images": []},
            "external_urls": {"spotify": f"https://open.spotify.com/track/{n}"},
        },
        "played_at": "2024-06-15T12:30:00Z",
    }


# ==============================================================================
# In-memory store
# ==============================================================================


class SnapshotStore:
    """
    Object store double for ``httpx.MockTransport``.

    Documents are served on GET, Last-Modified headers on GET and HEAD.
    URLs can be made to fail with a status code or a transport error, or
    gated so their requests wait until the test releases them.
    """

    def __init__(self) -> None:
        self.documents: dict[str, Any] = {}
        self.last_modified: dict[str, datetime] = {}
        self.statuses: dict[str, int] = {}
        self.broken: set[str] = set()
        self.gates: dict[tuple[str, str], asyncio.Event] = {}
        self.arrivals: dict[tuple[str, str], asyncio.Event] = {}
        self.requests: list[tuple[str, str]] = []

    def put(self, url: str, document: Any, last_modified: datetime | None = None) -> None:
        self.documents[url] = document
        if last_modified is not None:
            self.last_modified[url] = last_modified

    def fail(self, url: str, status: int = 500) -> None:
        self.statuses[url] = status

    def break_connection(self, url: str) -> None:
        self.broken.add(url)

    def gate(self, url: str, method: str = "GET") -> asyncio.Event:
        """Hold ``method`` requests to ``url`` until the returned event is set."""
        self.gates[(method, url)] = asyncio.Event()
        self.arrivals[(method, url)] = asyncio.Event()
        return self.gates[(method, url)]

    def entered(self, url: str, method: str = "GET") -> asyncio.Event:
        """Event set once a gated request has reached the store."""
        return self.arrivals[(method, url)]

    def requested(self, method: str) -> list[str]:
        return [url for m, url in self.requests if m == method]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append((request.method, url))

        key = (request.method, url)
        if key in self.gates:
            self.arrivals[key].set()
            await self.gates[key].wait()

        if url in self.broken:
            raise httpx.ConnectError("Connection refused", request=request)
        if url in self.statuses:
            return httpx.Response(self.statuses[url])
        if url not in self.documents:
            return httpx.Response(404)

        headers = {}
        if url in self.last_modified:
            headers["Last-Modified"] = format_datetime(self.last_modified[url], usegmt=True)
        if request.method == "HEAD":
            return httpx.Response(200, headers=headers)
        return httpx.Response(200, json=self.documents[url], headers=headers)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


# ==============================================================================
# Fixtures
# ==============================================================================


@pytest.fixture
def store() -> SnapshotStore:
    """Store holding the live feed, the March 2024 archive and the profile."""
    snapshots = SnapshotStore()
    snapshots.put(
        PROFILE_URL,
        make_profile(),
        last_modified=datetime(2024, 6, 15, 10, 0, tzinfo=timezone.utc),
    )
    snapshots.put(
        LIVE_TRACKS_URL,
        {"items": [make_track(n) for n in range(1, 4)]},
        last_modified=datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc),
    )
    snapshots.put(
        LIVE_ARTISTS_URL,
        {"items": [make_artist(n) for n in range(1, 3)]},
    )
    snapshots.put(MARCH_TRACKS_URL, {"items": [make_track(n) for n in range(10, 12)]})
    snapshots.put(MARCH_ARTISTS_URL, {"items": [make_artist(n) for n in range(10, 13)]})
    snapshots.put(RECENT_URL, {"items": [make_play(n) for n in range(1, 4)]})
    return snapshots


@pytest.fixture
def locator() -> ResourceLocator:
    return ResourceLocator(BASE_URL, DOMAIN)


@pytest.fixture
def clock():
    """Clock fixed at 2024-06-15T13:00:00Z."""
    return lambda: NOW


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path, monkeypatch):
    """Keep user/project config and STATBOARD_* env out of every test."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    for name in (
        "STATBOARD_BASE_URL",
        "STATBOARD_DOMAIN",
        "STATBOARD_TIMEOUT",
        "STATBOARD_STALE_HOURS",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_cache()
    yield
    clear_cache()
