"""Tests for the live vs. archive period policy."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from statboard.core.snapshots.exceptions import InvalidPeriodError
from statboard.core.snapshots.models import Period, PeriodClass
from statboard.core.snapshots.period import (
    MONTH_NAMES,
    classify,
    current_period,
    selectable_periods,
    selectable_years,
)

NOW = Period(year=2024, month=6)


class TestPeriod:
    """Tests for the Period model."""

    def test_rejects_years_before_2020(self) -> None:
        with pytest.raises(ValidationError):
            Period(year=2019, month=12)

    @pytest.mark.parametrize("month", [0, 13, -1])
    def test_rejects_invalid_month(self, month: int) -> None:
        with pytest.raises(ValidationError):
            Period(year=2024, month=month)

    def test_lexicographic_ordering(self) -> None:
        assert Period(year=2023, month=12) < Period(year=2024, month=1)
        assert Period(year=2024, month=2) < Period(year=2024, month=10)
        assert Period(year=2024, month=6) >= Period(year=2024, month=6)
        assert sorted([NOW, Period(year=2020, month=1), Period(year=2022, month=5)])[0] == Period(
            year=2020, month=1
        )

    def test_equality_and_hash(self) -> None:
        assert Period(year=2024, month=6) == NOW
        assert len({NOW, Period(year=2024, month=6)}) == 1

    def test_is_frozen(self) -> None:
        with pytest.raises(ValidationError):
            NOW.month = 7  # type: ignore[misc]

    def test_label_zero_pads_month(self) -> None:
        assert Period(year=2024, month=3).label == "2024-03"

    def test_from_datetime(self) -> None:
        moment = datetime(2024, 6, 30, 23, 59, tzinfo=timezone.utc)
        assert Period.from_datetime(moment) == NOW


class TestClassify:
    """Tests for classify()."""

    @pytest.mark.parametrize(
        "requested",
        [
            Period(year=2024, month=5),
            Period(year=2024, month=1),
            Period(year=2023, month=12),
            Period(year=2020, month=1),
        ],
    )
    def test_earlier_months_are_past(self, requested: Period) -> None:
        assert classify(requested, NOW) == PeriodClass.PAST

    @pytest.mark.parametrize("day", [1, 15, 30])
    def test_current_month_regardless_of_day(self, day: int) -> None:
        now = current_period(lambda: datetime(2024, 6, day, tzinfo=timezone.utc))
        assert classify(Period(year=2024, month=6), now) == PeriodClass.CURRENT

    @pytest.mark.parametrize(
        "requested",
        [Period(year=2024, month=7), Period(year=2025, month=1)],
    )
    def test_future_months_are_invalid(self, requested: Period) -> None:
        with pytest.raises(InvalidPeriodError) as exc_info:
            classify(requested, NOW)
        assert exc_info.value.requested == requested
        assert exc_info.value.context["now"] == "2024-06"


class TestSelectablePeriods:
    """Tests for the period selector bounds."""

    def test_years_newest_first_down_to_2020(self) -> None:
        assert selectable_years(Period(year=2023, month=2)) == [2023, 2022, 2021, 2020]

    def test_periods_stop_at_current_month(self) -> None:
        periods = selectable_periods(Period(year=2021, month=2))
        assert periods[0] == Period(year=2021, month=2)
        assert periods[-1] == Period(year=2020, month=1)
        assert len(periods) == 14

    def test_every_selectable_period_classifies(self) -> None:
        for period in selectable_periods(NOW):
            classify(period, NOW)

    def test_month_names(self) -> None:
        assert len(MONTH_NAMES) == 12
        assert MONTH_NAMES[0] == "January"
