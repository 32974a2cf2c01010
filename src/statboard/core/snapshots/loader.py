"""
Dashboard data loader: one consistent view model per requested period.

A load cycle classifies the period, resolves every content URL, then fans
out all content fetches and all freshness probes at once and waits for
every one of them to settle. Each fetch returns an outcome record instead
of raising, so one failed slot never cancels the others. The settled
outcomes are folded into a single ``DashboardViewModel`` that replaces the
previously published one.

Each call to ``load`` takes the next request sequence number. A cycle whose
number is no longer the latest when it settles is discarded, so the
last-requested period wins even if an older request finishes later.

Example:
    >>> loader = DashboardDataLoader(ResourceLocator("https://store.example.com", "spotify"))
    >>> view_model = await loader.load(Period(year=2024, month=3))
    >>> view_model.is_historical
    True
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

import httpx

from statboard.core.config.models import StatboardConfig
from statboard.core.snapshots.exceptions import (
    AllResourcesFailedError,
    MetadataUnavailableError,
    ResourceUnavailableError,
)
from statboard.core.snapshots.freshness import DEFAULT_STALE_THRESHOLD, fold
from statboard.core.snapshots.http import DEFAULT_TIMEOUT, fetch_json, probe_last_modified
from statboard.core.snapshots.locator import ResourceLocator
from statboard.core.snapshots.models import (
    RANKED_KINDS,
    DashboardViewModel,
    FreshnessState,
    LoadingState,
    Period,
    PeriodClass,
    Profile,
    RankedEntity,
    ResourceKind,
)
from statboard.core.snapshots.payloads import parse_profile, parse_ranked
from statboard.core.snapshots.period import classify, utc_now

logger = logging.getLogger(__name__)

CONTENT_KINDS: tuple[ResourceKind, ...] = (ResourceKind.PROFILE, *RANKED_KINDS)

ViewModelListener = Callable[[DashboardViewModel], None]


@dataclass(frozen=True)
class ContentOutcome:
    """Settled result of one content fetch: a parsed value or an error."""

    kind: ResourceKind
    url: str
    value: Profile | tuple[RankedEntity, ...] | None = None
    error: ResourceUnavailableError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ProbeOutcome:
    """Settled result of one freshness probe."""

    kind: ResourceKind
    url: str
    last_modified: datetime | None = None
    error: MetadataUnavailableError | None = None


class DashboardDataLoader:
    """
    Owns the published dashboard view model and the request sequence.

    External readers get immutable snapshots through ``view_model`` or by
    subscribing; nothing outside the loader writes back.

    Args:
        locator: URL builder for the dashboard's domain
        client: Shared async HTTP client; one is created per load when omitted
        timeout: Upper bound in seconds on every fetch and probe
        stale_threshold: Age at which the live feed is reported stale
        clock: Source of the current instant (UTC)
    """

    def __init__(
        self,
        locator: ResourceLocator,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        stale_threshold: timedelta = DEFAULT_STALE_THRESHOLD,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.locator = locator
        self.timeout = timeout
        self.stale_threshold = stale_threshold
        self._client = client
        self._clock = clock

        self._sequence = 0
        self._requested: Period | None = None
        self._view_model: DashboardViewModel | None = None
        self._listeners: list[ViewModelListener] = []

    @classmethod
    def from_config(
        cls,
        config: StatboardConfig,
        *,
        client: httpx.AsyncClient | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> DashboardDataLoader:
        """Build a loader for the configured store, domain and thresholds."""
        locator = ResourceLocator(config.source.base_url, config.source.domain)
        return cls(
            locator,
            client=client,
            timeout=config.source.timeout_seconds,
            stale_threshold=config.freshness.stale_threshold,
            clock=clock,
        )

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------

    @property
    def view_model(self) -> DashboardViewModel | None:
        """The currently published view model (None before the first load)."""
        return self._view_model

    @property
    def state(self) -> LoadingState:
        if self._view_model is None:
            return LoadingState.IDLE
        return self._view_model.loading_state

    @property
    def requested_period(self) -> Period | None:
        """Most recently requested period."""
        return self._requested

    def subscribe(self, listener: ViewModelListener) -> Callable[[], None]:
        """
        Call ``listener`` with every view model published from now on.

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Load cycle
    # ------------------------------------------------------------------

    async def load(self, period: Period) -> DashboardViewModel:
        """
        Load every resource for ``period`` and publish the result.

        Args:
            period: Requested reporting month

        Returns:
            The view model built by this cycle. It is only published if no
            newer ``load`` was issued while this one was in flight.

        Raises:
            InvalidPeriodError: If ``period`` is after the current month
                (raised before any network call)
        """
        classification = classify(period, Period.from_datetime(self._clock()))
        is_historical = classification == PeriodClass.PAST

        self._sequence += 1
        sequence = self._sequence
        self._requested = period
        logger.debug(
            "Load #%d for %s (%s)", sequence, period.label, classification.value
        )

        self._publish(
            DashboardViewModel(
                period=period,
                is_historical=is_historical,
                loading_state=LoadingState.LOADING,
            )
        )

        content_urls = {
            kind: self.locator.resolve(kind, classification, period) for kind in CONTENT_KINDS
        }
        # Probes always target the live identities, even for archived periods
        probe_urls = {kind: self.locator.live_url(kind) for kind in CONTENT_KINDS}

        async with self._session() as client:
            content, probes = await asyncio.gather(
                asyncio.gather(
                    *(self._fetch_content(client, k, u) for k, u in content_urls.items())
                ),
                asyncio.gather(
                    *(self._probe(client, k, u) for k, u in probe_urls.items())
                ),
            )

        freshness = fold(
            (p.last_modified for p in probes),
            stale_threshold=self.stale_threshold,
            now=self._clock(),
        )
        view_model = self._assemble(period, is_historical, content, freshness)

        if sequence != self._sequence:
            logger.debug(
                "Discarding load #%d for %s: superseded by #%d",
                sequence,
                period.label,
                self._sequence,
            )
            return view_model

        self._publish(view_model)
        return view_model

    async def refresh(self) -> DashboardViewModel | None:
        """Re-run the load for the most recently requested period."""
        if self._requested is None:
            return None
        return await self.load(self._requested)

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            yield client

    async def _fetch_content(
        self, client: httpx.AsyncClient, kind: ResourceKind, url: str
    ) -> ContentOutcome:
        try:
            payload = await fetch_json(client, kind.value, url, self.timeout)
            value = self._parse(kind, payload)
        except ResourceUnavailableError as e:
            logger.warning("Resource unavailable: %s (%s)", e, url)
            return ContentOutcome(kind=kind, url=url, error=e)
        except Exception as e:
            logger.exception("Unexpected error fetching %s", url)
            error = ResourceUnavailableError(kind.value, f"Unexpected error: {e}", url=url)
            return ContentOutcome(kind=kind, url=url, error=error)
        return ContentOutcome(kind=kind, url=url, value=value)

    async def _probe(
        self, client: httpx.AsyncClient, kind: ResourceKind, url: str
    ) -> ProbeOutcome:
        try:
            last_modified = await probe_last_modified(client, kind.value, url, self.timeout)
        except MetadataUnavailableError as e:
            logger.debug("Metadata unavailable: %s (%s)", e, url)
            return ProbeOutcome(kind=kind, url=url, error=e)
        except Exception as e:
            logger.exception("Unexpected error probing %s", url)
            error = MetadataUnavailableError(kind.value, f"Unexpected error: {e}", url=url)
            return ProbeOutcome(kind=kind, url=url, error=error)
        return ProbeOutcome(kind=kind, url=url, last_modified=last_modified)

    @staticmethod
    def _parse(kind: ResourceKind, payload: Any) -> Profile | tuple[RankedEntity, ...]:
        if kind == ResourceKind.PROFILE:
            return parse_profile(payload)
        return parse_ranked(kind, payload)

    def _assemble(
        self,
        period: Period,
        is_historical: bool,
        content: list[ContentOutcome],
        freshness: FreshnessState,
    ) -> DashboardViewModel:
        unavailable = {o.kind: o.error.message for o in content if o.error is not None}

        if len(unavailable) == len(content):
            failure = AllResourcesFailedError({k.value: v for k, v in unavailable.items()})
            logger.error("Dashboard load failed for %s: %s", period.label, failure)
            return DashboardViewModel(
                period=period,
                is_historical=is_historical,
                freshness=freshness,
                loading_state=LoadingState.FAILED,
                failure_reason=str(failure),
                unavailable=unavailable,
            )

        by_kind = {o.kind: o.value for o in content if o.ok}
        profile = by_kind.get(ResourceKind.PROFILE)
        ranked_lists: dict[ResourceKind, tuple[RankedEntity, ...]] = {}
        for kind in RANKED_KINDS:
            entries = by_kind.get(kind)
            ranked_lists[kind] = entries if isinstance(entries, tuple) else ()

        return DashboardViewModel(
            period=period,
            is_historical=is_historical,
            profile=profile if isinstance(profile, Profile) else None,
            ranked_lists=ranked_lists,
            freshness=freshness,
            loading_state=LoadingState.READY,
            unavailable=unavailable,
        )

    def _publish(self, view_model: DashboardViewModel) -> None:
        self._view_model = view_model
        for listener in list(self._listeners):
            try:
                listener(view_model)
            except Exception:
                logger.exception("View model listener %r failed", listener)


__all__ = [
    "CONTENT_KINDS",
    "ContentOutcome",
    "DashboardDataLoader",
    "ProbeOutcome",
    "ViewModelListener",
]
