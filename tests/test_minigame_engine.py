"""Tests for MiniGameEngine - feed, fetch and adventure windows.

These tests verify:
- Feed: once per local day at the activity threshold
- Fetch: escalating thresholds capped per day
- Adventure: start, in-progress, complete and one completion per week
- Steps walked before hatching on the hatch day do not count
- Eggs cannot play

No Home Assistant fixtures needed - pure Python tests.

Test Categories:
- Activity steps
- Feed
- Fetch
- Adventure
"""

from datetime import UTC, datetime, timedelta

import pytest

from custom_components.steppet import const
from custom_components.steppet.data_builders import build_pet
from custom_components.steppet.engines.minigame_engine import MiniGameEngine
from custom_components.steppet.engines.progression_engine import (
    InvalidClaimError,
    ProgressionEngine,
)
from custom_components.steppet.type_defs import ProgressRecord
from custom_components.steppet.utils.dt_utils import start_of_week_utc

NOW = datetime(2025, 3, 12, 18, 0, tzinfo=UTC)  # Wednesday
MIDNIGHT = datetime(2025, 3, 12, tzinfo=UTC)
WEEK_START = start_of_week_utc(NOW)


def _pet(daily_steps: int = 0, weekly_steps: int = 0) -> ProgressRecord:
    """Return a pet that hatched on a previous day."""
    record = build_pet("Scout", datetime(2025, 3, 1, 9, 0, tzinfo=UTC), 0)
    record[const.DATA_PET_TOTAL_STEPS] = 5000
    ProgressionEngine.hatch(record, datetime(2025, 3, 2, 9, 0, tzinfo=UTC), "twiggle")
    record[const.DATA_PET_DAILY_STEPS] = daily_steps
    record[const.DATA_PET_WEEKLY_STEPS] = weekly_steps
    return record


def _games(record: ProgressRecord):
    return record[const.DATA_PET_MINI_GAMES]


# ============================================================================
# Activity steps
# ============================================================================


class TestActivitySteps:
    """Tests for activity_steps()."""

    def test_hatched_earlier_counts_all_daily(self) -> None:
        """All of today's steps count when the pet hatched on an earlier day."""
        record = _pet(daily_steps=3000)

        assert MiniGameEngine.activity_steps(record, MIDNIGHT) == 3000

    def test_hatched_today_excludes_pre_hatch_steps(self) -> None:
        """Steps walked before hatching today are subtracted."""
        record = _pet(daily_steps=7000)
        record[const.DATA_PET_HATCH_DATE] = (MIDNIGHT + timedelta(hours=10)).isoformat()
        record[const.DATA_PET_DAILY_STEPS_AT_HATCH] = 5000

        assert MiniGameEngine.activity_steps(record, MIDNIGHT) == 2000

    def test_reset_daily_clears_claims(self) -> None:
        """Rollover clears the feed flag and the fetch counter."""
        record = _pet()
        _games(record)[const.GAME_FEED][const.DATA_GAME_CLAIMED_TODAY] = True
        _games(record)[const.GAME_FETCH][const.DATA_GAME_CLAIMS_TODAY] = 2

        MiniGameEngine.reset_daily(record)

        assert not _games(record)[const.GAME_FEED][const.DATA_GAME_CLAIMED_TODAY]
        assert _games(record)[const.GAME_FETCH][const.DATA_GAME_CLAIMS_TODAY] == 0


# ============================================================================
# Feed
# ============================================================================


class TestFeed:
    """Tests for claim_feed()."""

    def test_below_threshold_rejected(self) -> None:
        """Feeding needs 2500 activity steps."""
        record = _pet(daily_steps=2499)

        assert not MiniGameEngine.can_claim_feed(record, MIDNIGHT)
        with pytest.raises(InvalidClaimError) as exc_info:
            MiniGameEngine.claim_feed(record, NOW, MIDNIGHT)

        assert exc_info.value.reason == const.CLAIM_REASON_NOT_ENOUGH_STEPS

    def test_claim_awards_xp_once_per_day(self) -> None:
        """The first feed awards XP and the second is rejected."""
        record = _pet(daily_steps=2500)
        assert MiniGameEngine.can_claim_feed(record, MIDNIGHT)

        outcome = MiniGameEngine.claim_feed(record, NOW, MIDNIGHT)

        assert outcome.xp_awarded == 100
        assert outcome.progress == 2500
        assert record[const.DATA_PET_XP] == 100
        feed = _games(record)[const.GAME_FEED]
        assert feed[const.DATA_GAME_CLAIMED_TODAY]
        assert feed[const.DATA_GAME_LAST_CLAIMED] == NOW.isoformat()

        with pytest.raises(InvalidClaimError) as exc_info:
            MiniGameEngine.claim_feed(record, NOW, MIDNIGHT)
        assert exc_info.value.reason == const.CLAIM_REASON_ALREADY_CLAIMED
        assert record[const.DATA_PET_XP] == 100

    def test_egg_cannot_feed(self) -> None:
        """Eggs are rejected before any other check."""
        record = build_pet("Egg", NOW, 0)
        record[const.DATA_PET_DAILY_STEPS] = 9000

        with pytest.raises(InvalidClaimError) as exc_info:
            MiniGameEngine.claim_feed(record, NOW, MIDNIGHT)

        assert exc_info.value.reason == const.CLAIM_REASON_PET_NOT_HATCHED


# ============================================================================
# Fetch
# ============================================================================


class TestFetch:
    """Tests for claim_fetch()."""

    def test_thresholds_escalate(self) -> None:
        """Each fetch claim needs another 1000 activity steps."""
        record = _pet(daily_steps=1500)

        assert MiniGameEngine.next_fetch_threshold(record) == 1000
        outcome = MiniGameEngine.claim_fetch(record, NOW, MIDNIGHT)
        assert outcome.xp_awarded == 50
        assert MiniGameEngine.next_fetch_threshold(record) == 2000

        with pytest.raises(InvalidClaimError) as exc_info:
            MiniGameEngine.claim_fetch(record, NOW, MIDNIGHT)
        assert exc_info.value.reason == const.CLAIM_REASON_NOT_ENOUGH_STEPS

        record[const.DATA_PET_DAILY_STEPS] = 2000
        MiniGameEngine.claim_fetch(record, NOW, MIDNIGHT)
        assert record[const.DATA_PET_XP] == 100

    def test_daily_cap(self) -> None:
        """No more than two fetch claims per day regardless of steps."""
        record = _pet(daily_steps=20000)
        MiniGameEngine.claim_fetch(record, NOW, MIDNIGHT)
        MiniGameEngine.claim_fetch(record, NOW, MIDNIGHT)

        assert MiniGameEngine.next_fetch_threshold(record) is None
        assert not MiniGameEngine.can_claim_fetch(record, MIDNIGHT)
        with pytest.raises(InvalidClaimError) as exc_info:
            MiniGameEngine.claim_fetch(record, NOW, MIDNIGHT)

        assert exc_info.value.reason == const.CLAIM_REASON_DAILY_LIMIT
        assert _games(record)[const.GAME_FETCH][const.DATA_GAME_CLAIMS_TODAY] == 2


# ============================================================================
# Adventure
# ============================================================================


class TestAdventure:
    """Tests for start_or_complete_adventure()."""

    def test_start_then_in_progress(self) -> None:
        """Starting marks the adventure active; below target it stays in progress."""
        record = _pet(weekly_steps=4000)

        started = MiniGameEngine.start_or_complete_adventure(record, NOW, WEEK_START)
        again = MiniGameEngine.start_or_complete_adventure(record, NOW, WEEK_START)

        assert started.action == const.ADVENTURE_ACTION_STARTED
        assert started.xp_awarded == 0
        assert again.action == const.ADVENTURE_ACTION_IN_PROGRESS
        assert again.progress == 4000
        adventure = _games(record)[const.GAME_ADVENTURE]
        assert adventure[const.DATA_GAME_IS_ACTIVE]
        assert adventure[const.DATA_GAME_LAST_STARTED] == NOW.isoformat()
        assert record[const.DATA_PET_XP] == 0

    def test_complete_at_target(self) -> None:
        """Completing at the weekly target awards XP and ends the adventure."""
        record = _pet(weekly_steps=4000)
        MiniGameEngine.start_or_complete_adventure(record, NOW, WEEK_START)
        record[const.DATA_PET_WEEKLY_STEPS] = 15000
        assert MiniGameEngine.is_adventure_ready(record)

        outcome = MiniGameEngine.start_or_complete_adventure(record, NOW, WEEK_START)

        assert outcome.action == const.ADVENTURE_ACTION_COMPLETED
        assert outcome.xp_awarded == 300
        assert record[const.DATA_PET_XP] == 300
        adventure = _games(record)[const.GAME_ADVENTURE]
        assert not adventure[const.DATA_GAME_IS_ACTIVE]
        assert adventure[const.DATA_GAME_LAST_COMPLETED] == NOW.isoformat()

    def test_one_completion_per_week(self) -> None:
        """After completing, a new adventure waits for the next week."""
        record = _pet(weekly_steps=15000)
        MiniGameEngine.start_or_complete_adventure(record, NOW, WEEK_START)
        MiniGameEngine.start_or_complete_adventure(record, NOW, WEEK_START)

        assert not MiniGameEngine.can_start_adventure(record, WEEK_START)
        with pytest.raises(InvalidClaimError) as exc_info:
            MiniGameEngine.start_or_complete_adventure(
                record, NOW + timedelta(days=2), WEEK_START
            )
        assert exc_info.value.reason == const.CLAIM_REASON_ADVENTURE_DONE

        next_week = WEEK_START + timedelta(days=7)
        assert MiniGameEngine.can_start_adventure(record, next_week)
        outcome = MiniGameEngine.start_or_complete_adventure(
            record, next_week + timedelta(hours=1), next_week
        )
        assert outcome.action == const.ADVENTURE_ACTION_STARTED

    def test_egg_cannot_adventure(self) -> None:
        """Eggs cannot start an adventure."""
        record = build_pet("Egg", NOW, 0)

        with pytest.raises(InvalidClaimError) as exc_info:
            MiniGameEngine.start_or_complete_adventure(record, NOW, WEEK_START)

        assert exc_info.value.reason == const.CLAIM_REASON_PET_NOT_HATCHED
