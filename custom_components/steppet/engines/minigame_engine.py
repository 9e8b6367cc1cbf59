"""Mini-Game Engine - Pure eligibility and claim logic for feed, fetch, adventure.

Windows:
- Feed (daily): one claim per local day once activity steps reach the threshold
- Fetch (daily, rate-limited): escalating threshold, capped claims per day
- Adventure (weekly): start, then complete once weekly steps reach the target;
  at most one completion per calendar week

All windows read the tallies produced by the step engine on the same refresh,
so claims must be evaluated on a freshly refreshed record.

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import dt_to_iso, dt_to_utc, start_of_week_utc
from .leveling_engine import LevelUpResult
from .progression_engine import InvalidClaimError, ProgressionEngine

if TYPE_CHECKING:
    from ..type_defs import ProgressRecord


@dataclass(frozen=True)
class ClaimOutcome:
    """Result of a successful mini-game action.

    Attributes:
        game: GAME_* constant
        xp_awarded: XP granted by this action (0 for adventure start)
        level_up: Level state after the XP was applied
        action: Adventure action (started / in_progress / completed), else None
        progress: Steps counted toward the current window
    """

    game: str
    xp_awarded: int
    level_up: LevelUpResult
    action: str | None = None
    progress: int = 0


class MiniGameEngine:
    """Pure logic engine for mini-game windows.

    All methods are static - no instance state.
    """

    # -------------------------------------------------------------------------
    # Shared helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def activity_steps(record: ProgressRecord, local_midnight: datetime) -> int:
        """Return today's steps that count toward daily mini-games.

        Steps walked before hatching earlier the same day do not count.
        """
        daily = record[const.DATA_PET_DAILY_STEPS]
        hatch_date = dt_to_utc(record.get(const.DATA_PET_HATCH_DATE))
        if hatch_date is not None and hatch_date >= local_midnight:
            return max(0, daily - record[const.DATA_PET_DAILY_STEPS_AT_HATCH])
        return daily

    @staticmethod
    def reset_daily(record: ProgressRecord) -> None:
        """Clear the per-day claim state (called once per local-day rollover)."""
        games = record[const.DATA_PET_MINI_GAMES]
        games[const.GAME_FEED][const.DATA_GAME_CLAIMED_TODAY] = False
        games[const.GAME_FETCH][const.DATA_GAME_CLAIMS_TODAY] = 0

    @staticmethod
    def _require_hatched(record: ProgressRecord, game: str) -> None:
        if ProgressionEngine.is_egg(record):
            raise InvalidClaimError(
                record[const.DATA_PET_INTERNAL_ID],
                game,
                const.CLAIM_REASON_PET_NOT_HATCHED,
            )

    # -------------------------------------------------------------------------
    # Feed
    # -------------------------------------------------------------------------

    @staticmethod
    def can_claim_feed(record: ProgressRecord, local_midnight: datetime) -> bool:
        """Return True if the daily feed reward is available."""
        feed = record[const.DATA_PET_MINI_GAMES][const.GAME_FEED]
        return (
            not ProgressionEngine.is_egg(record)
            and not feed[const.DATA_GAME_CLAIMED_TODAY]
            and MiniGameEngine.activity_steps(record, local_midnight)
            >= const.FEED_STEP_THRESHOLD
        )

    @staticmethod
    def claim_feed(
        record: ProgressRecord, now: datetime, local_midnight: datetime
    ) -> ClaimOutcome:
        """Claim the daily feed reward.

        Raises:
            InvalidClaimError: Egg, already fed today, or not enough steps
        """
        MiniGameEngine._require_hatched(record, const.GAME_FEED)
        pet_id = record[const.DATA_PET_INTERNAL_ID]
        feed = record[const.DATA_PET_MINI_GAMES][const.GAME_FEED]
        steps = MiniGameEngine.activity_steps(record, local_midnight)

        if feed[const.DATA_GAME_CLAIMED_TODAY]:
            raise InvalidClaimError(
                pet_id, const.GAME_FEED, const.CLAIM_REASON_ALREADY_CLAIMED
            )
        if steps < const.FEED_STEP_THRESHOLD:
            raise InvalidClaimError(
                pet_id, const.GAME_FEED, const.CLAIM_REASON_NOT_ENOUGH_STEPS
            )

        feed[const.DATA_GAME_LAST_CLAIMED] = dt_to_iso(now)
        feed[const.DATA_GAME_CLAIMED_TODAY] = True
        level_up = ProgressionEngine.apply_xp(record, const.FEED_XP_REWARD)
        return ClaimOutcome(
            game=const.GAME_FEED,
            xp_awarded=const.FEED_XP_REWARD,
            level_up=level_up,
            progress=steps,
        )

    # -------------------------------------------------------------------------
    # Fetch
    # -------------------------------------------------------------------------

    @staticmethod
    def next_fetch_threshold(record: ProgressRecord) -> int | None:
        """Return the activity steps needed for the next fetch (None if capped)."""
        claims = record[const.DATA_PET_MINI_GAMES][const.GAME_FETCH][
            const.DATA_GAME_CLAIMS_TODAY
        ]
        if claims >= const.FETCH_MAX_CLAIMS_PER_DAY:
            return None
        return (claims + 1) * const.FETCH_STEP_THRESHOLD

    @staticmethod
    def can_claim_fetch(record: ProgressRecord, local_midnight: datetime) -> bool:
        """Return True if a fetch claim is available right now."""
        threshold = MiniGameEngine.next_fetch_threshold(record)
        return (
            not ProgressionEngine.is_egg(record)
            and threshold is not None
            and MiniGameEngine.activity_steps(record, local_midnight) >= threshold
        )

    @staticmethod
    def claim_fetch(
        record: ProgressRecord, now: datetime, local_midnight: datetime
    ) -> ClaimOutcome:
        """Claim one fetch reward.

        Raises:
            InvalidClaimError: Egg, daily cap reached, or below the next threshold
        """
        MiniGameEngine._require_hatched(record, const.GAME_FETCH)
        pet_id = record[const.DATA_PET_INTERNAL_ID]
        fetch = record[const.DATA_PET_MINI_GAMES][const.GAME_FETCH]
        threshold = MiniGameEngine.next_fetch_threshold(record)
        steps = MiniGameEngine.activity_steps(record, local_midnight)

        if threshold is None:
            raise InvalidClaimError(
                pet_id, const.GAME_FETCH, const.CLAIM_REASON_DAILY_LIMIT
            )
        if steps < threshold:
            raise InvalidClaimError(
                pet_id, const.GAME_FETCH, const.CLAIM_REASON_NOT_ENOUGH_STEPS
            )

        fetch[const.DATA_GAME_CLAIMS_TODAY] += 1
        fetch[const.DATA_GAME_LAST_CLAIMED] = dt_to_iso(now)
        level_up = ProgressionEngine.apply_xp(record, const.FETCH_XP_REWARD)
        return ClaimOutcome(
            game=const.GAME_FETCH,
            xp_awarded=const.FETCH_XP_REWARD,
            level_up=level_up,
            progress=steps,
        )

    # -------------------------------------------------------------------------
    # Adventure
    # -------------------------------------------------------------------------

    @staticmethod
    def can_start_adventure(record: ProgressRecord, week_start: datetime) -> bool:
        """Return True if no adventure was completed in the current week."""
        adventure = record[const.DATA_PET_MINI_GAMES][const.GAME_ADVENTURE]
        last_completed = dt_to_utc(adventure[const.DATA_GAME_LAST_COMPLETED])
        return last_completed is None or start_of_week_utc(last_completed) < week_start

    @staticmethod
    def is_adventure_ready(record: ProgressRecord) -> bool:
        """Return True if an active adventure has reached the weekly target."""
        adventure = record[const.DATA_PET_MINI_GAMES][const.GAME_ADVENTURE]
        return (
            adventure[const.DATA_GAME_IS_ACTIVE]
            and record[const.DATA_PET_WEEKLY_STEPS] >= const.ADVENTURE_WEEKLY_TARGET
        )

    @staticmethod
    def start_or_complete_adventure(
        record: ProgressRecord, now: datetime, week_start: datetime
    ) -> ClaimOutcome:
        """Start an adventure, or complete the active one if the target is met.

        An active adventure below target reports `in_progress` without changing
        state.

        Raises:
            InvalidClaimError: Egg, or an adventure was already completed this week
        """
        MiniGameEngine._require_hatched(record, const.GAME_ADVENTURE)
        adventure = record[const.DATA_PET_MINI_GAMES][const.GAME_ADVENTURE]
        weekly = record[const.DATA_PET_WEEKLY_STEPS]
        unchanged = ProgressionEngine.apply_xp(record, 0)

        if not adventure[const.DATA_GAME_IS_ACTIVE]:
            if not MiniGameEngine.can_start_adventure(record, week_start):
                raise InvalidClaimError(
                    record[const.DATA_PET_INTERNAL_ID],
                    const.GAME_ADVENTURE,
                    const.CLAIM_REASON_ADVENTURE_DONE,
                )
            adventure[const.DATA_GAME_IS_ACTIVE] = True
            adventure[const.DATA_GAME_LAST_STARTED] = dt_to_iso(now)
            adventure[const.DATA_GAME_CURRENT_PROGRESS] = weekly
            return ClaimOutcome(
                game=const.GAME_ADVENTURE,
                xp_awarded=0,
                level_up=unchanged,
                action=const.ADVENTURE_ACTION_STARTED,
                progress=weekly,
            )

        if weekly < const.ADVENTURE_WEEKLY_TARGET:
            return ClaimOutcome(
                game=const.GAME_ADVENTURE,
                xp_awarded=0,
                level_up=unchanged,
                action=const.ADVENTURE_ACTION_IN_PROGRESS,
                progress=weekly,
            )

        adventure[const.DATA_GAME_IS_ACTIVE] = False
        adventure[const.DATA_GAME_LAST_COMPLETED] = dt_to_iso(now)
        adventure[const.DATA_GAME_CURRENT_PROGRESS] = const.ADVENTURE_WEEKLY_TARGET
        level_up = ProgressionEngine.apply_xp(record, const.ADVENTURE_XP_REWARD)
        return ClaimOutcome(
            game=const.GAME_ADVENTURE,
            xp_awarded=const.ADVENTURE_XP_REWARD,
            level_up=level_up,
            action=const.ADVENTURE_ACTION_COMPLETED,
            progress=weekly,
        )
