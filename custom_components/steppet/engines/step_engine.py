"""Step Accounting Engine - Pure logic for daily, weekly and lifetime tallies.

This engine turns two pedometer readings into a consistent update of a pet's
step counters:
- Daily steps (since local midnight, minus the creation-day offset)
- Absolute lifetime steps since creation
- Clamped lifetime delta (stale or regressing readings are no-ops)
- Local-midnight rollover snapshot
- Weekly accumulation through the (checkpoint, week start) pair

Every computation is a pure function of (record, now, boundaries, readings),
so repeated refreshes at the same instant produce the same record and a
skipped refresh is absorbed by the next one.

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data.
Sensor queries, locking and persistence belong in PetManager.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, cast

from .. import const
from ..utils.dt_utils import dt_to_iso, dt_to_utc

if TYPE_CHECKING:
    from ..type_defs import ProgressRecord


# =============================================================================
# STEP ACCOUNTING RESULT
# =============================================================================


@dataclass(frozen=True)
class StepAccountingResult:
    """Outcome of one step-accounting pass.

    Attributes:
        refreshed_at: The instant the readings were taken
        daily_steps: Steps attributed to the pet today
        absolute_total: Lifetime steps implied by this reading
        lifetime_delta: New lifetime steps to feed into progression (>= 0)
        total_steps: Persisted lifetime total after this pass
        total_steps_before_today: Snapshot taken at the last rollover
        weekly_steps: Steps this week
        weekly_checkpoint: Absolute total recorded for the next weekly delta
        current_week_start: Week anchor the weekly tally belongs to
        day_rolled_over: A local-midnight boundary was crossed since last pass
        week_rolled_over: A week boundary was crossed since last pass
    """

    refreshed_at: datetime
    daily_steps: int
    absolute_total: int
    lifetime_delta: int
    total_steps: int
    total_steps_before_today: int
    weekly_steps: int
    weekly_checkpoint: int
    current_week_start: datetime
    day_rolled_over: bool = False
    week_rolled_over: bool = False


# =============================================================================
# STEP ENGINE
# =============================================================================


class StepEngine:
    """Pure logic engine for step accounting.

    All methods are static - no instance state. This enables easy unit testing
    without any Home Assistant mocking.
    """

    @staticmethod
    def created_today(created_at: datetime, local_midnight: datetime) -> bool:
        """Return True if the pet was created on the current local day."""
        return created_at >= local_midnight

    @staticmethod
    def lifetime_window_start(
        created_at: datetime, local_midnight: datetime
    ) -> datetime:
        """Return the start instant for the lifetime pedometer query.

        On the creation day the window starts at local midnight so that the
        since-midnight starting_step_count can be subtracted from it. On later
        days it starts at creation.
        """
        if StepEngine.created_today(created_at, local_midnight):
            return local_midnight
        return created_at

    @staticmethod
    def last_processed_at(record: ProgressRecord) -> datetime:
        """Return the instant the record was last refreshed (or created)."""
        last = dt_to_utc(record.get(const.DATA_PET_LAST_REFRESHED)) or dt_to_utc(
            record[const.DATA_PET_CREATED_AT]
        )
        return cast("datetime", last)

    @staticmethod
    def is_day_rollover(record: ProgressRecord, local_midnight: datetime) -> bool:
        """Return True if the record was last processed before today's midnight."""
        return StepEngine.last_processed_at(record) < local_midnight

    @staticmethod
    def compute(
        record: ProgressRecord,
        now: datetime,
        local_midnight: datetime,
        week_start: datetime,
        raw_today: int,
        raw_total: int,
    ) -> StepAccountingResult:
        """Compute the step tallies for one refresh.

        Args:
            record: Current persisted record (not modified)
            now: Refresh instant
            local_midnight: Local midnight of the day containing now
            week_start: Canonical week start containing now
            raw_today: Pedometer steps from local_midnight to now
            raw_total: Pedometer steps from lifetime_window_start() to now

        Returns:
            StepAccountingResult describing the new counters
        """
        created_at = dt_to_utc(record[const.DATA_PET_CREATED_AT])
        starting = record[const.DATA_PET_STARTING_STEP_COUNT]
        previous_total = record[const.DATA_PET_TOTAL_STEPS]

        raw_today = max(0, int(raw_today))
        raw_total = max(0, int(raw_total))

        if created_at is not None and StepEngine.created_today(
            created_at, local_midnight
        ):
            daily_steps = max(0, raw_today - starting)
            absolute_total = max(0, raw_total - starting)
        else:
            daily_steps = raw_today
            absolute_total = raw_total

        lifetime_delta = max(0, absolute_total - previous_total)

        # Snapshot uses the total before this pass's delta
        day_rolled_over = StepEngine.is_day_rollover(record, local_midnight)
        if day_rolled_over:
            total_steps_before_today = previous_total
        else:
            total_steps_before_today = record[const.DATA_PET_TOTAL_STEPS_BEFORE_TODAY]

        checkpoint = record[const.DATA_PET_TOTAL_STEPS_AT_LAST_WEEKLY_CALC]
        weekly_delta = max(0, absolute_total - checkpoint)
        current_week_start = dt_to_utc(record[const.DATA_PET_CURRENT_WEEK_START])
        week_rolled_over = (
            current_week_start is None or week_start > current_week_start
        )
        if week_rolled_over:
            weekly_steps = weekly_delta
            current_week_start = week_start
        else:
            weekly_steps = record[const.DATA_PET_WEEKLY_STEPS] + weekly_delta

        return StepAccountingResult(
            refreshed_at=now,
            daily_steps=daily_steps,
            absolute_total=absolute_total,
            lifetime_delta=lifetime_delta,
            total_steps=previous_total + lifetime_delta,
            total_steps_before_today=total_steps_before_today,
            weekly_steps=weekly_steps,
            weekly_checkpoint=absolute_total,
            current_week_start=current_week_start,  # type: ignore[arg-type]
            day_rolled_over=day_rolled_over,
            week_rolled_over=week_rolled_over,
        )

    @staticmethod
    def apply(record: ProgressRecord, result: StepAccountingResult) -> None:
        """Write a StepAccountingResult into a (working copy of a) record."""
        record[const.DATA_PET_DAILY_STEPS] = result.daily_steps
        record[const.DATA_PET_TOTAL_STEPS] = result.total_steps
        record[const.DATA_PET_TOTAL_STEPS_BEFORE_TODAY] = (
            result.total_steps_before_today
        )
        record[const.DATA_PET_WEEKLY_STEPS] = result.weekly_steps
        record[const.DATA_PET_TOTAL_STEPS_AT_LAST_WEEKLY_CALC] = (
            result.weekly_checkpoint
        )
        record[const.DATA_PET_CURRENT_WEEK_START] = dt_to_iso(
            result.current_week_start
        )  # type: ignore[typeddict-item]
        record[const.DATA_PET_LAST_REFRESHED] = dt_to_iso(result.refreshed_at)
