"""Type definitions for StepPet data structures.

TypedDicts describe the persisted JSON shapes. Reward and mini-game entries are
closed tagged variants: every entry carries a `kind` literal, and
data_builders.decode_progress_record() normalizes stored data into exactly
these shapes when it crosses the store boundary.

IMPORTANT: This file must NOT import from coordinator.py, managers, or any
module that imports coordinator to avoid circular dependencies.

NOTE: TypedDict is STATIC ANALYSIS ONLY. Runtime validation lives in
data_builders.py.
"""

from typing import Literal, NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

PetId = str  # UUID string
MilestoneId = str  # "milestone-5k"
ISODatetime = str  # ISO 8601 datetime string "2026-01-18T12:30:00+00:00"

GrowthStage = Literal["egg", "baby", "juvenile", "adult"]


# =============================================================================
# Milestone rewards (tagged variants)
# =============================================================================


class XpReward(TypedDict):
    """Bonus XP applied through the level cascade."""

    kind: Literal["xp"]
    amount: int


class AppearanceReward(TypedDict):
    """Unlocks pet color customization."""

    kind: Literal["appearance"]


class BackgroundReward(TypedDict):
    """Sets the habitat background theme."""

    kind: Literal["background"]
    theme: str


class AnimationReward(TypedDict):
    """Unlocks the special pet animation."""

    kind: Literal["animation"]


class BadgeReward(TypedDict):
    """Elite badge plus animated background."""

    kind: Literal["badge"]


MilestoneReward = (
    XpReward | AppearanceReward | BackgroundReward | AnimationReward | BadgeReward
)


class MilestoneData(TypedDict):
    """A lifetime-steps milestone. `claimed` only ever goes False -> True."""

    id: MilestoneId
    steps: int
    reward: MilestoneReward
    claimed: bool
    claimed_at: NotRequired[ISODatetime | None]


# =============================================================================
# Mini-games (tagged variants)
# =============================================================================


class FeedGame(TypedDict):
    """Daily feed: one claim per local day."""

    kind: Literal["feed"]
    last_claimed: ISODatetime | None
    claimed_today: bool


class FetchGame(TypedDict):
    """Daily fetch: escalating threshold, capped claims per day."""

    kind: Literal["fetch"]
    last_claimed: ISODatetime | None
    claims_today: int


class AdventureGame(TypedDict):
    """Weekly adventure: start, then complete once the weekly target is met."""

    kind: Literal["adventure"]
    last_started: ISODatetime | None
    last_completed: ISODatetime | None
    current_progress: int
    is_active: bool


class MiniGames(TypedDict):
    """All mini-game state for one pet."""

    feed: FeedGame
    fetch: FetchGame
    adventure: AdventureGame


# =============================================================================
# Appearance
# =============================================================================


class AppearanceData(TypedDict):
    """Cosmetic state unlocked by milestone rewards."""

    main_color: str
    accent_color: str
    has_customization: bool
    background_theme: str | None
    has_elite_badge: bool
    has_animated_background: bool
    has_special_animation: bool


# =============================================================================
# Progress record
# =============================================================================


class ProgressRecord(TypedDict):
    """Persistent progress record for one pet."""

    internal_id: PetId
    name: str
    owner: str | None  # Home Assistant user id
    species: str
    category: str
    created_at: ISODatetime
    starting_step_count: int

    growth_stage: GrowthStage
    level: int
    xp: int
    xp_to_next_level: int

    total_steps: int
    total_steps_before_today: int
    daily_steps: int
    weekly_steps: int
    total_steps_at_last_weekly_calc: int
    current_week_start: ISODatetime
    last_refreshed: ISODatetime | None

    steps_to_hatch: int
    hatch_date: ISODatetime | None
    daily_steps_at_hatch: int

    milestones: list[MilestoneData]
    mini_games: MiniGames
    appearance: AppearanceData


# =============================================================================
# Pedometer sample log
# =============================================================================


class StepSample(TypedDict):
    """One observed step-sensor state.

    `total` is the monotonic accumulation of positive increments since the
    log started; it absorbs counter resets.
    """

    ts: ISODatetime
    raw: int
    total: int
