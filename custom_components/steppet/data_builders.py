"""Progress record lifecycle helpers.

This module is the SINGLE SOURCE OF TRUTH for:
- Progress record field defaults
- Building a fresh record for a new pet ("get first egg")
- Decoding stored JSON into the closed reward / mini-game variants

### Build Functions
`build_pet()` generates the internal_id, stamps created_at and the week anchor,
and returns a complete record ready for storage.

### Decode Functions
`decode_progress_record()` runs every time a record crosses the store
boundary. It fills missing fields with defaults, coerces numeric fields, and
rebuilds reward and mini-game entries from their `kind` tag so the rest of the
integration never sees an unknown shape.

Consumers:
- store.py (decode on read)
- managers/pet_manager.py (create / reset)
- services.py (name validation)
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, cast
import uuid

from . import const
from .type_defs import (
    AdventureGame,
    AppearanceData,
    FeedGame,
    FetchGame,
    MilestoneData,
    MilestoneReward,
    MiniGames,
    ProgressRecord,
)
from .utils.dt_utils import dt_to_iso, dt_to_utc, start_of_week_utc

# ==============================================================================
# HELPER FUNCTIONS FOR FIELD NORMALIZATION
# ==============================================================================


def _normalize_int_field(value: Any, default: int = 0) -> int:
    """Coerce a stored numeric field to a non-negative int."""
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return default


def _normalize_dict_field(value: Any) -> dict[str, Any]:
    """Normalize a field that should be a dict."""
    if isinstance(value, dict):
        return dict(value)
    return {}


def _normalize_iso_field(value: Any) -> str | None:
    """Normalize a stored timestamp to a UTC ISO string (or None)."""
    return dt_to_iso(dt_to_utc(value)) if value else None


# ==============================================================================
# EXCEPTIONS
# ==============================================================================


class EntityValidationError(Exception):
    """Validation error for pet creation or rename input.

    Attributes:
        field: The FIELD_* constant identifying the input that failed
        translation_key: The TRANS_KEY_* constant for the error message
    """

    def __init__(self, field: str, translation_key: str) -> None:
        """Initialize EntityValidationError."""
        self.field = field
        self.translation_key = translation_key
        super().__init__(translation_key)


# ==============================================================================
# DEFAULT SUB-STRUCTURES
# ==============================================================================


def build_default_milestones() -> list[MilestoneData]:
    """Return the milestone list every new pet starts with."""
    return [
        {
            const.DATA_MILESTONE_ID: milestone_id,
            const.DATA_MILESTONE_STEPS: steps,
            const.DATA_MILESTONE_REWARD: cast("MilestoneReward", dict(reward)),
            const.DATA_MILESTONE_CLAIMED: False,
            const.DATA_MILESTONE_CLAIMED_AT: None,
        }
        for milestone_id, steps, reward in const.DEFAULT_MILESTONES
    ]


def build_default_mini_games() -> MiniGames:
    """Return fresh (never played) mini-game state."""
    return {
        const.GAME_FEED: {
            const.DATA_GAME_KIND: const.GAME_FEED,
            const.DATA_GAME_LAST_CLAIMED: None,
            const.DATA_GAME_CLAIMED_TODAY: False,
        },
        const.GAME_FETCH: {
            const.DATA_GAME_KIND: const.GAME_FETCH,
            const.DATA_GAME_LAST_CLAIMED: None,
            const.DATA_GAME_CLAIMS_TODAY: 0,
        },
        const.GAME_ADVENTURE: {
            const.DATA_GAME_KIND: const.GAME_ADVENTURE,
            const.DATA_GAME_LAST_STARTED: None,
            const.DATA_GAME_LAST_COMPLETED: None,
            const.DATA_GAME_CURRENT_PROGRESS: 0,
            const.DATA_GAME_IS_ACTIVE: False,
        },
    }


def build_default_appearance() -> AppearanceData:
    """Return the starting appearance (nothing unlocked)."""
    return {
        const.DATA_APPEARANCE_MAIN_COLOR: const.DEFAULT_MAIN_COLOR,
        const.DATA_APPEARANCE_ACCENT_COLOR: const.DEFAULT_ACCENT_COLOR,
        const.DATA_APPEARANCE_HAS_CUSTOMIZATION: False,
        const.DATA_APPEARANCE_BACKGROUND_THEME: None,
        const.DATA_APPEARANCE_HAS_ELITE_BADGE: False,
        const.DATA_APPEARANCE_HAS_ANIMATED_BACKGROUND: False,
        const.DATA_APPEARANCE_HAS_SPECIAL_ANIMATION: False,
    }


# ==============================================================================
# PETS
# ==============================================================================


def validate_pet_name(raw_name: Any) -> str:
    """Return the stripped pet name or raise EntityValidationError."""
    name = str(raw_name).strip() if raw_name else ""
    if not name:
        raise EntityValidationError(
            field=const.FIELD_PET_NAME,
            translation_key=const.TRANS_KEY_ERROR_INVALID_PET_NAME,
        )
    return name


def build_pet(
    name: str | None,
    created_at: datetime,
    starting_step_count: int,
    owner: str | None = None,
) -> ProgressRecord:
    """Build a brand-new egg record.

    Args:
        name: Display name (defaults to "Egg" when empty)
        created_at: Creation instant (aware)
        starting_step_count: Pedometer steps-today reading at creation
        owner: Home Assistant user id that created the pet

    Returns:
        Complete ProgressRecord ready for storage
    """
    created_iso = cast("str", dt_to_iso(created_at))
    return {
        const.DATA_PET_INTERNAL_ID: str(uuid.uuid4()),
        const.DATA_PET_NAME: (name or "").strip() or const.DEFAULT_PET_NAME,
        const.DATA_PET_OWNER: owner,
        const.DATA_PET_SPECIES: "",
        const.DATA_PET_CATEGORY: "",
        const.DATA_PET_CREATED_AT: created_iso,
        const.DATA_PET_STARTING_STEP_COUNT: max(0, int(starting_step_count)),
        const.DATA_PET_GROWTH_STAGE: const.GROWTH_STAGE_EGG,
        const.DATA_PET_LEVEL: 1,
        const.DATA_PET_XP: 0,
        const.DATA_PET_XP_TO_NEXT_LEVEL: const.LEVEL_REQUIREMENTS[0],
        const.DATA_PET_TOTAL_STEPS: 0,
        const.DATA_PET_TOTAL_STEPS_BEFORE_TODAY: 0,
        const.DATA_PET_DAILY_STEPS: 0,
        const.DATA_PET_WEEKLY_STEPS: 0,
        const.DATA_PET_TOTAL_STEPS_AT_LAST_WEEKLY_CALC: 0,
        const.DATA_PET_CURRENT_WEEK_START: cast(
            "str", dt_to_iso(start_of_week_utc(created_at))
        ),
        const.DATA_PET_LAST_REFRESHED: None,
        const.DATA_PET_STEPS_TO_HATCH: const.DEFAULT_STEPS_TO_HATCH,
        const.DATA_PET_HATCH_DATE: None,
        const.DATA_PET_DAILY_STEPS_AT_HATCH: 0,
        const.DATA_PET_MILESTONES: build_default_milestones(),
        const.DATA_PET_MINI_GAMES: build_default_mini_games(),
        const.DATA_PET_APPEARANCE: build_default_appearance(),
    }


# ==============================================================================
# DECODING (store boundary)
# ==============================================================================


def decode_milestone_reward(raw: Any) -> MilestoneReward:
    """Rebuild a milestone reward from its `kind` tag.

    Raises:
        ValueError: The reward has no recognized kind
    """
    data = _normalize_dict_field(raw)
    kind = data.get(const.DATA_REWARD_KIND)

    if kind == const.REWARD_KIND_XP:
        return {
            const.DATA_REWARD_KIND: const.REWARD_KIND_XP,
            const.DATA_REWARD_AMOUNT: _normalize_int_field(
                data.get(const.DATA_REWARD_AMOUNT), const.MILESTONE_XP_REWARD
            ),
        }
    if kind == const.REWARD_KIND_BACKGROUND:
        return {
            const.DATA_REWARD_KIND: const.REWARD_KIND_BACKGROUND,
            const.DATA_REWARD_THEME: str(
                data.get(const.DATA_REWARD_THEME) or const.DEFAULT_BACKGROUND_THEME
            ),
        }
    if kind in (
        const.REWARD_KIND_APPEARANCE,
        const.REWARD_KIND_ANIMATION,
        const.REWARD_KIND_BADGE,
    ):
        return cast("MilestoneReward", {const.DATA_REWARD_KIND: kind})

    raise ValueError(f"Unknown milestone reward kind: {kind!r}")


def _decode_milestones(raw: Any) -> list[MilestoneData]:
    """Decode stored milestones, falling back to defaults when absent."""
    if not isinstance(raw, list) or not raw:
        return build_default_milestones()

    milestones: list[MilestoneData] = []
    for entry in raw:
        data = _normalize_dict_field(entry)
        try:
            reward = decode_milestone_reward(data.get(const.DATA_MILESTONE_REWARD))
        except ValueError as err:
            const.LOGGER.warning(
                "WARNING: Dropping milestone '%s' with invalid reward: %s",
                data.get(const.DATA_MILESTONE_ID),
                err,
            )
            continue
        milestones.append(
            {
                const.DATA_MILESTONE_ID: str(data.get(const.DATA_MILESTONE_ID, "")),
                const.DATA_MILESTONE_STEPS: _normalize_int_field(
                    data.get(const.DATA_MILESTONE_STEPS)
                ),
                const.DATA_MILESTONE_REWARD: reward,
                const.DATA_MILESTONE_CLAIMED: bool(
                    data.get(const.DATA_MILESTONE_CLAIMED, False)
                ),
                const.DATA_MILESTONE_CLAIMED_AT: _normalize_iso_field(
                    data.get(const.DATA_MILESTONE_CLAIMED_AT)
                ),
            }
        )
    milestones.sort(key=lambda m: m[const.DATA_MILESTONE_STEPS])
    return milestones


def _decode_mini_games(raw: Any) -> MiniGames:
    """Decode stored mini-game state into the three tagged variants."""
    data = _normalize_dict_field(raw)
    feed = _normalize_dict_field(data.get(const.GAME_FEED))
    fetch = _normalize_dict_field(data.get(const.GAME_FETCH))
    adventure = _normalize_dict_field(data.get(const.GAME_ADVENTURE))

    feed_game: FeedGame = {
        const.DATA_GAME_KIND: const.GAME_FEED,
        const.DATA_GAME_LAST_CLAIMED: _normalize_iso_field(
            feed.get(const.DATA_GAME_LAST_CLAIMED)
        ),
        const.DATA_GAME_CLAIMED_TODAY: bool(
            feed.get(const.DATA_GAME_CLAIMED_TODAY, False)
        ),
    }
    fetch_game: FetchGame = {
        const.DATA_GAME_KIND: const.GAME_FETCH,
        const.DATA_GAME_LAST_CLAIMED: _normalize_iso_field(
            fetch.get(const.DATA_GAME_LAST_CLAIMED)
        ),
        const.DATA_GAME_CLAIMS_TODAY: min(
            _normalize_int_field(fetch.get(const.DATA_GAME_CLAIMS_TODAY)),
            const.FETCH_MAX_CLAIMS_PER_DAY,
        ),
    }
    adventure_game: AdventureGame = {
        const.DATA_GAME_KIND: const.GAME_ADVENTURE,
        const.DATA_GAME_LAST_STARTED: _normalize_iso_field(
            adventure.get(const.DATA_GAME_LAST_STARTED)
        ),
        const.DATA_GAME_LAST_COMPLETED: _normalize_iso_field(
            adventure.get(const.DATA_GAME_LAST_COMPLETED)
        ),
        const.DATA_GAME_CURRENT_PROGRESS: _normalize_int_field(
            adventure.get(const.DATA_GAME_CURRENT_PROGRESS)
        ),
        const.DATA_GAME_IS_ACTIVE: bool(adventure.get(const.DATA_GAME_IS_ACTIVE)),
    }
    return {
        const.GAME_FEED: feed_game,
        const.GAME_FETCH: fetch_game,
        const.GAME_ADVENTURE: adventure_game,
    }


def _decode_appearance(raw: Any) -> AppearanceData:
    """Merge stored appearance over defaults."""
    appearance = build_default_appearance()
    data = _normalize_dict_field(raw)
    for key, default in list(appearance.items()):
        if key not in data:
            continue
        if isinstance(default, bool):
            appearance[key] = bool(data[key])  # type: ignore[literal-required]
        else:
            appearance[key] = data[key]  # type: ignore[literal-required]
    return appearance


def decode_progress_record(raw: dict[str, Any]) -> ProgressRecord:
    """Normalize a stored record into a complete ProgressRecord.

    Missing fields get defaults, so records written by older versions load
    without a migration step. The input is not modified.
    """
    data = _normalize_dict_field(raw)
    created_at = dt_to_utc(data.get(const.DATA_PET_CREATED_AT))
    if created_at is None:
        raise ValueError("Progress record is missing a valid created_at")

    growth_stage = data.get(const.DATA_PET_GROWTH_STAGE, const.GROWTH_STAGE_EGG)
    if growth_stage not in const.GROWTH_STAGES:
        growth_stage = const.GROWTH_STAGE_EGG

    current_week_start = _normalize_iso_field(
        data.get(const.DATA_PET_CURRENT_WEEK_START)
    ) or dt_to_iso(start_of_week_utc(created_at))

    return {
        const.DATA_PET_INTERNAL_ID: str(data.get(const.DATA_PET_INTERNAL_ID, "")),
        const.DATA_PET_NAME: str(
            data.get(const.DATA_PET_NAME) or const.DEFAULT_PET_NAME
        ),
        const.DATA_PET_OWNER: data.get(const.DATA_PET_OWNER),
        const.DATA_PET_SPECIES: str(data.get(const.DATA_PET_SPECIES) or ""),
        const.DATA_PET_CATEGORY: str(data.get(const.DATA_PET_CATEGORY) or ""),
        const.DATA_PET_CREATED_AT: cast("str", dt_to_iso(created_at)),
        const.DATA_PET_STARTING_STEP_COUNT: _normalize_int_field(
            data.get(const.DATA_PET_STARTING_STEP_COUNT)
        ),
        const.DATA_PET_GROWTH_STAGE: growth_stage,
        const.DATA_PET_LEVEL: max(
            1, _normalize_int_field(data.get(const.DATA_PET_LEVEL), 1)
        ),
        const.DATA_PET_XP: _normalize_int_field(data.get(const.DATA_PET_XP)),
        const.DATA_PET_XP_TO_NEXT_LEVEL: _normalize_int_field(
            data.get(const.DATA_PET_XP_TO_NEXT_LEVEL), const.LEVEL_REQUIREMENTS[0]
        )
        or const.LEVEL_REQUIREMENTS[0],
        const.DATA_PET_TOTAL_STEPS: _normalize_int_field(
            data.get(const.DATA_PET_TOTAL_STEPS)
        ),
        const.DATA_PET_TOTAL_STEPS_BEFORE_TODAY: _normalize_int_field(
            data.get(const.DATA_PET_TOTAL_STEPS_BEFORE_TODAY)
        ),
        const.DATA_PET_DAILY_STEPS: _normalize_int_field(
            data.get(const.DATA_PET_DAILY_STEPS)
        ),
        const.DATA_PET_WEEKLY_STEPS: _normalize_int_field(
            data.get(const.DATA_PET_WEEKLY_STEPS)
        ),
        const.DATA_PET_TOTAL_STEPS_AT_LAST_WEEKLY_CALC: _normalize_int_field(
            data.get(const.DATA_PET_TOTAL_STEPS_AT_LAST_WEEKLY_CALC)
        ),
        const.DATA_PET_CURRENT_WEEK_START: cast("str", current_week_start),
        const.DATA_PET_LAST_REFRESHED: _normalize_iso_field(
            data.get(const.DATA_PET_LAST_REFRESHED)
        ),
        const.DATA_PET_STEPS_TO_HATCH: _normalize_int_field(
            data.get(const.DATA_PET_STEPS_TO_HATCH), const.DEFAULT_STEPS_TO_HATCH
        )
        or const.DEFAULT_STEPS_TO_HATCH,
        const.DATA_PET_HATCH_DATE: _normalize_iso_field(
            data.get(const.DATA_PET_HATCH_DATE)
        ),
        const.DATA_PET_DAILY_STEPS_AT_HATCH: _normalize_int_field(
            data.get(const.DATA_PET_DAILY_STEPS_AT_HATCH)
        ),
        const.DATA_PET_MILESTONES: _decode_milestones(
            data.get(const.DATA_PET_MILESTONES)
        ),
        const.DATA_PET_MINI_GAMES: _decode_mini_games(
            data.get(const.DATA_PET_MINI_GAMES)
        ),
        const.DATA_PET_APPEARANCE: _decode_appearance(
            data.get(const.DATA_PET_APPEARANCE)
        ),
    }
