"""Tests for snapshot and view models."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from statboard.core.snapshots.models import (
    DashboardViewModel,
    FreshnessIndicator,
    FreshnessState,
    LoadingState,
    Period,
    RankedEntity,
    ResourceKind,
)


def _entity(rank: int) -> RankedEntity:
    return RankedEntity(
        id=f"id-{rank}",
        display_name=f"Name {rank}",
        rank=rank,
        popularity_score=50,
        external_link="https://example.com",
    )


class TestRankedEntity:
    """Tests for RankedEntity validation."""

    def test_rank_is_one_based(self) -> None:
        with pytest.raises(ValidationError):
            _entity(0)

    @pytest.mark.parametrize("score", [-1, 101])
    def test_popularity_bounds(self, score: int) -> None:
        with pytest.raises(ValidationError):
            RankedEntity(
                id="x",
                display_name="x",
                rank=1,
                popularity_score=score,
                external_link="https://example.com",
            )

    def test_is_frozen(self) -> None:
        entity = _entity(1)
        with pytest.raises(ValidationError):
            entity.rank = 2  # type: ignore[misc]


class TestFreshnessState:
    """Tests for the freshness indicator."""

    def test_indicator(self) -> None:
        stamp = datetime(2024, 6, 1, tzinfo=timezone.utc)
        assert FreshnessState().indicator == FreshnessIndicator.UNKNOWN
        assert FreshnessState(most_recent_timestamp=stamp, is_fresh=True).indicator == (
            FreshnessIndicator.FRESH
        )
        assert FreshnessState(most_recent_timestamp=stamp, is_fresh=False).indicator == (
            FreshnessIndicator.STALE
        )


class TestDashboardViewModel:
    """Tests for DashboardViewModel accessors."""

    def test_defaults(self) -> None:
        vm = DashboardViewModel(period=Period(year=2024, month=6))
        assert vm.loading_state == LoadingState.LOADING
        assert vm.profile is None
        assert vm.ranked(ResourceKind.RANKED_TRACKS) == ()
        assert vm.freshness.indicator == FreshnessIndicator.UNKNOWN

    def test_ranked_accessor(self) -> None:
        entries = (_entity(1), _entity(2))
        vm = DashboardViewModel(
            period=Period(year=2024, month=6),
            ranked_lists={ResourceKind.RANKED_TRACKS: entries},
            loading_state=LoadingState.READY,
        )
        assert vm.ranked(ResourceKind.RANKED_TRACKS) == entries
        assert vm.ranked(ResourceKind.RANKED_ARTISTS) == ()
        assert vm.is_ready
        assert not vm.is_failed

    def test_mappings_are_read_only(self) -> None:
        vm = DashboardViewModel(
            period=Period(year=2024, month=6),
            ranked_lists={ResourceKind.RANKED_TRACKS: (_entity(1),)},
            unavailable={ResourceKind.PROFILE: "HTTP 404"},
        )
        with pytest.raises(TypeError):
            vm.ranked_lists[ResourceKind.RANKED_TRACKS] = ()  # type: ignore[index]
        with pytest.raises(TypeError):
            vm.unavailable[ResourceKind.PROFILE] = "changed"  # type: ignore[index]
        assert vm.ranked(ResourceKind.RANKED_TRACKS) == (_entity(1),)

    def test_input_dict_is_copied(self) -> None:
        lists = {ResourceKind.RANKED_TRACKS: (_entity(1),)}
        vm = DashboardViewModel(period=Period(year=2024, month=6), ranked_lists=lists)
        lists[ResourceKind.RANKED_TRACKS] = ()
        assert len(vm.ranked(ResourceKind.RANKED_TRACKS)) == 1

    def test_defaults_are_read_only(self) -> None:
        vm = DashboardViewModel(period=Period(year=2024, month=6))
        with pytest.raises(TypeError):
            vm.unavailable[ResourceKind.PROFILE] = "changed"  # type: ignore[index]

    def test_is_frozen(self) -> None:
        vm = DashboardViewModel(period=Period(year=2024, month=6))
        with pytest.raises(ValidationError):
            vm.loading_state = LoadingState.READY  # type: ignore[misc]

    def test_json_round_trip(self) -> None:
        vm = DashboardViewModel(
            period=Period(year=2024, month=3),
            is_historical=True,
            ranked_lists={ResourceKind.RANKED_ARTISTS: (_entity(1),)},
            loading_state=LoadingState.READY,
            unavailable={ResourceKind.RANKED_TRACKS: "HTTP 404"},
        )
        restored = DashboardViewModel.model_validate_json(vm.model_dump_json())
        assert restored == vm
        assert isinstance(vm.model_dump()["unavailable"], dict)
