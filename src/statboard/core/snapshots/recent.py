"""
Recently-played feed.

The feed is a fixed-identity snapshot next to the profile and is loaded on
its own, outside the period-scoped dashboard cycle.
"""

from __future__ import annotations

import logging

import httpx

from statboard.core.snapshots.http import DEFAULT_TIMEOUT, fetch_json
from statboard.core.snapshots.locator import ResourceLocator
from statboard.core.snapshots.models import RecentPlay, ResourceKind
from statboard.core.snapshots.payloads import RECENT_PLAYS_LIMIT, parse_recent_plays

logger = logging.getLogger(__name__)


class RecentlyPlayedFeed:
    """Fetches the most recent plays for one domain."""

    def __init__(
        self,
        locator: ResourceLocator,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        limit: int = RECENT_PLAYS_LIMIT,
    ) -> None:
        self.locator = locator
        self.timeout = timeout
        self.limit = limit
        self._client = client

    @property
    def url(self) -> str:
        return self.locator.live_url(ResourceKind.RECENTLY_PLAYED)

    async def fetch(self) -> tuple[RecentPlay, ...]:
        """
        Fetch and validate the feed.

        Returns:
            Up to ``limit`` complete entries, newest first as stored

        Raises:
            ResourceUnavailableError: If the feed cannot be fetched or has
                no entry array
        """
        kind = ResourceKind.RECENTLY_PLAYED.value
        if self._client is not None:
            payload = await fetch_json(self._client, kind, self.url, self.timeout)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                payload = await fetch_json(client, kind, self.url, self.timeout)

        plays = parse_recent_plays(payload, limit=self.limit)
        logger.debug("Loaded %d recently-played entries from %s", len(plays), self.url)
        return plays


__all__ = ["RecentlyPlayedFeed"]
