"""Tests for StepEngine - daily, weekly and lifetime step accounting.

These tests verify:
- Creation-day offset (steps walked before creation never count)
- Lifetime query window selection
- Idempotent refreshes at the same instant
- Local-midnight rollover snapshot
- Weekly tally through the checkpoint and week anchor
- Monotonic lifetime total under stale or regressing readings

No Home Assistant fixtures needed - pure Python tests. Boundaries are taken in
UTC so that local midnight is 00:00Z.

Test Categories:
- Window selection
- Creation day
- Day rollover
- Week rollover
- Monotonicity
"""

from datetime import UTC, datetime, timedelta

from custom_components.steppet import const
from custom_components.steppet.data_builders import build_pet
from custom_components.steppet.engines.step_engine import StepEngine
from custom_components.steppet.type_defs import ProgressRecord
from custom_components.steppet.utils.dt_utils import start_of_week_utc

CREATED = datetime(2025, 3, 12, 9, 0, tzinfo=UTC)  # Wednesday
STARTING = 1000


def _new_pet() -> ProgressRecord:
    return build_pet("Sprout", CREATED, STARTING)


def _refresh(
    record: ProgressRecord, now: datetime, raw_today: int, raw_total: int
):
    """Compute and apply one pass with UTC day and week boundaries."""
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    result = StepEngine.compute(
        record, now, midnight, start_of_week_utc(now), raw_today, raw_total
    )
    StepEngine.apply(record, result)
    return result


# ============================================================================
# Window selection
# ============================================================================


class TestLifetimeWindow:
    """Tests for lifetime_window_start()."""

    def test_creation_day_uses_midnight(self) -> None:
        """On the creation day the window starts at local midnight."""
        midnight = datetime(2025, 3, 12, tzinfo=UTC)
        assert StepEngine.lifetime_window_start(CREATED, midnight) == midnight

    def test_later_day_uses_created_at(self) -> None:
        """After the creation day the window starts at creation."""
        midnight = datetime(2025, 3, 14, tzinfo=UTC)
        assert StepEngine.lifetime_window_start(CREATED, midnight) == CREATED


# ============================================================================
# Creation day
# ============================================================================


class TestCreationDay:
    """Tests for refreshes on the day the pet was created."""

    def test_starting_offset_subtracted(self) -> None:
        """Steps walked before creation are excluded from every tally."""
        record = _new_pet()

        result = _refresh(record, CREATED + timedelta(hours=1), 1800, 1800)

        assert result.daily_steps == 800
        assert result.absolute_total == 800
        assert result.lifetime_delta == 800
        assert record[const.DATA_PET_DAILY_STEPS] == 800
        assert record[const.DATA_PET_TOTAL_STEPS] == 800
        assert record[const.DATA_PET_WEEKLY_STEPS] == 800
        assert record[const.DATA_PET_TOTAL_STEPS_AT_LAST_WEEKLY_CALC] == 800
        assert not result.day_rolled_over
        assert not result.week_rolled_over

    def test_reading_below_offset_clamps_to_zero(self) -> None:
        """A reading lower than the starting count never goes negative."""
        record = _new_pet()

        result = _refresh(record, CREATED + timedelta(minutes=5), 400, 400)

        assert result.daily_steps == 0
        assert result.lifetime_delta == 0
        assert record[const.DATA_PET_TOTAL_STEPS] == 0

    def test_refresh_is_idempotent(self) -> None:
        """Refreshing twice with the same readings changes nothing the second time."""
        record = _new_pet()
        now = CREATED + timedelta(hours=1)
        _refresh(record, now, 1800, 1800)
        first = dict(record)

        second = _refresh(record, now, 1800, 1800)

        assert second.lifetime_delta == 0
        assert record == first

    def test_last_refreshed_stamped(self) -> None:
        """Each pass records the instant it ran."""
        record = _new_pet()
        now = CREATED + timedelta(hours=1)

        _refresh(record, now, 1800, 1800)

        assert record[const.DATA_PET_LAST_REFRESHED] == now.isoformat()


# ============================================================================
# Day rollover
# ============================================================================


class TestDayRollover:
    """Tests for the local-midnight boundary."""

    def test_next_day_snapshot_and_daily_reset(self) -> None:
        """Crossing midnight snapshots yesterday's total and restarts the daily tally."""
        record = _new_pet()
        _refresh(record, CREATED + timedelta(hours=1), 1800, 1800)

        result = _refresh(record, datetime(2025, 3, 13, 0, 5, tzinfo=UTC), 50, 850)

        assert result.day_rolled_over
        assert result.daily_steps == 50
        assert result.lifetime_delta == 50
        assert record[const.DATA_PET_TOTAL_STEPS] == 850
        assert record[const.DATA_PET_TOTAL_STEPS_BEFORE_TODAY] == 800
        assert record[const.DATA_PET_WEEKLY_STEPS] == 850

    def test_same_day_keeps_snapshot(self) -> None:
        """The snapshot only changes on rollover."""
        record = _new_pet()
        _refresh(record, datetime(2025, 3, 13, 0, 5, tzinfo=UTC), 50, 850)
        assert record[const.DATA_PET_TOTAL_STEPS_BEFORE_TODAY] == 0

        result = _refresh(record, datetime(2025, 3, 13, 8, 0, tzinfo=UTC), 950, 1750)

        assert not result.day_rolled_over
        assert record[const.DATA_PET_TOTAL_STEPS_BEFORE_TODAY] == 0
        assert record[const.DATA_PET_TOTAL_STEPS] == 1750

    def test_skipped_days_absorbed(self) -> None:
        """A refresh after several missed days counts every step once."""
        record = _new_pet()
        _refresh(record, CREATED + timedelta(hours=1), 1800, 1800)

        result = _refresh(record, datetime(2025, 3, 15, 12, 0, tzinfo=UTC), 3000, 20800)

        assert result.day_rolled_over
        assert result.lifetime_delta == 20000
        assert record[const.DATA_PET_TOTAL_STEPS] == 20800
        assert record[const.DATA_PET_DAILY_STEPS] == 3000


# ============================================================================
# Week rollover
# ============================================================================


class TestWeekRollover:
    """Tests for the weekly tally."""

    def test_new_week_restarts_from_checkpoint(self) -> None:
        """A new week counts only the steps since the last weekly checkpoint."""
        record = _new_pet()
        record[const.DATA_PET_TOTAL_STEPS] = 4000
        record[const.DATA_PET_WEEKLY_STEPS] = 4000
        record[const.DATA_PET_TOTAL_STEPS_AT_LAST_WEEKLY_CALC] = 4000
        record[const.DATA_PET_LAST_REFRESHED] = datetime(
            2025, 3, 16, 23, 0, tzinfo=UTC
        ).isoformat()

        # Monday 00:30Z, 1500 steps since midnight
        result = _refresh(record, datetime(2025, 3, 17, 0, 30, tzinfo=UTC), 1500, 5500)

        assert result.week_rolled_over
        assert result.day_rolled_over
        assert record[const.DATA_PET_WEEKLY_STEPS] == 1500
        assert record[const.DATA_PET_CURRENT_WEEK_START] == datetime(
            2025, 3, 17, tzinfo=UTC
        ).isoformat()
        assert record[const.DATA_PET_TOTAL_STEPS] == 5500

    def test_same_week_accumulates(self) -> None:
        """Within a week the tally grows by each pass's delta."""
        record = _new_pet()
        _refresh(record, CREATED + timedelta(hours=1), 1800, 1800)
        _refresh(record, datetime(2025, 3, 13, 9, 0, tzinfo=UTC), 1000, 1800)

        assert record[const.DATA_PET_WEEKLY_STEPS] == 1800
        assert record[const.DATA_PET_TOTAL_STEPS_AT_LAST_WEEKLY_CALC] == 1800


# ============================================================================
# Monotonicity
# ============================================================================


class TestMonotonicTotal:
    """Tests for stale or regressing readings."""

    def test_regressing_reading_is_noop(self) -> None:
        """A lower lifetime reading never lowers the total."""
        record = _new_pet()
        _refresh(record, CREATED + timedelta(hours=1), 6000, 6000)

        result = _refresh(record, CREATED + timedelta(hours=2), 3000, 3000)

        assert result.lifetime_delta == 0
        assert record[const.DATA_PET_TOTAL_STEPS] == 5000
        assert record[const.DATA_PET_WEEKLY_STEPS] == 5000

    def test_negative_readings_clamped(self) -> None:
        """Negative readings are treated as zero."""
        record = _new_pet()

        result = _refresh(record, CREATED + timedelta(hours=1), -10, -10)

        assert result.daily_steps == 0
        assert result.lifetime_delta == 0
