"""Progression Engine - Pure logic for the pet lifecycle.

This engine provides stateless, pure Python functions for:
- Egg hatch readiness and the one-shot Egg -> Baby transition
- Feeding step deltas and bonus XP through the leveling cascade
- Growth stage derivation (Baby / Juvenile / Adult)
- Milestone crossing detection and one-way milestone claims

States: egg -> baby -> juvenile -> adult (terminal). Only the hatch action
leaves the egg state; every other stage is a pure function of level.

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data.
State management belongs in PetManager.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
import random
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.dt_utils import dt_to_iso
from .leveling_engine import LevelingEngine, LevelUpResult

if TYPE_CHECKING:
    from ..type_defs import MilestoneData, ProgressRecord


class InvalidClaimError(Exception):
    """Raised when a claim or lifecycle action is not currently allowed.

    The record is left untouched; callers turn this into a no-op result.

    Attributes:
        pet_id: The pet the action targeted
        action: The attempted action (e.g. "hatch", "feed", a milestone id)
        reason: CLAIM_REASON_* constant explaining the rejection
    """

    def __init__(self, pet_id: str, action: str, reason: str) -> None:
        """Initialize InvalidClaimError."""
        self.pet_id = pet_id
        self.action = action
        self.reason = reason
        super().__init__(f"Invalid claim '{action}' for pet {pet_id}: {reason}")


# =============================================================================
# RESULT DATA STRUCTURES
# =============================================================================


@dataclass(frozen=True)
class ProgressionResult:
    """Outcome of feeding a refresh's step delta into progression.

    Only the final level of a multi-level cascade is reported.
    """

    leveled_up: bool = False
    levels_gained: int = 0
    new_level: int = 1
    hatch_ready: bool = False
    newly_claimable_milestone: str | None = None


@dataclass(frozen=True)
class MilestoneClaimResult:
    """Outcome of claiming a milestone."""

    milestone_id: str
    reward: dict[str, Any]
    xp_awarded: int = 0
    level_up: LevelUpResult | None = None


# =============================================================================
# PROGRESSION ENGINE
# =============================================================================


class ProgressionEngine:
    """Pure logic engine for hatching, leveling and milestones.

    All methods are static - no instance state.
    """

    # -------------------------------------------------------------------------
    # Lifecycle queries
    # -------------------------------------------------------------------------

    @staticmethod
    def is_egg(record: ProgressRecord) -> bool:
        """Return True while the pet has not hatched."""
        return record[const.DATA_PET_GROWTH_STAGE] == const.GROWTH_STAGE_EGG

    @staticmethod
    def is_hatch_ready(record: ProgressRecord) -> bool:
        """Return True if an egg has walked enough steps to hatch."""
        return (
            ProgressionEngine.is_egg(record)
            and record[const.DATA_PET_TOTAL_STEPS]
            >= record[const.DATA_PET_STEPS_TO_HATCH]
        )

    @staticmethod
    def category_for_species(species: str) -> str | None:
        """Return the catalog category of a species (None if unknown)."""
        for category, members in const.PET_SPECIES.items():
            if species in members:
                return category
        return None

    @staticmethod
    def all_species() -> list[str]:
        """Return every species in catalog order."""
        return [s for members in const.PET_SPECIES.values() for s in members]

    # -------------------------------------------------------------------------
    # XP and levels
    # -------------------------------------------------------------------------

    @staticmethod
    def apply_xp(record: ProgressRecord, amount: int) -> LevelUpResult:
        """Add XP to a hatched pet, cascading levels and refreshing its stage.

        Eggs never accumulate XP; for an egg this returns the unchanged state.
        """
        if ProgressionEngine.is_egg(record):
            return LevelUpResult(
                level=record[const.DATA_PET_LEVEL],
                xp=record[const.DATA_PET_XP],
                xp_to_next_level=record[const.DATA_PET_XP_TO_NEXT_LEVEL],
            )

        result = LevelingEngine.apply_xp(
            record[const.DATA_PET_LEVEL], record[const.DATA_PET_XP], amount
        )
        record[const.DATA_PET_LEVEL] = result.level
        record[const.DATA_PET_XP] = result.xp
        record[const.DATA_PET_XP_TO_NEXT_LEVEL] = result.xp_to_next_level
        record[const.DATA_PET_GROWTH_STAGE] = LevelingEngine.growth_stage_for_level(
            result.level
        )  # type: ignore[typeddict-item]
        return result

    @staticmethod
    def apply_progress(
        record: ProgressRecord,
        step_delta: int,
        previous_total: int,
        bonus_xp: int = 0,
    ) -> ProgressionResult:
        """Feed one refresh's lifetime delta into progression.

        The record's total_steps must already include step_delta.

        Args:
            record: Working copy of the record (modified in place)
            step_delta: New lifetime steps from the step engine (>= 0)
            previous_total: total_steps before this refresh
            bonus_xp: Extra XP to add in the same cascade

        Returns:
            ProgressionResult with the final level and any newly crossed milestone
        """
        level_up = ProgressionEngine.apply_xp(
            record, max(0, step_delta) + max(0, bonus_xp)
        )
        return ProgressionResult(
            leveled_up=level_up.leveled_up,
            levels_gained=level_up.levels_gained,
            new_level=level_up.level,
            hatch_ready=ProgressionEngine.is_hatch_ready(record),
            newly_claimable_milestone=ProgressionEngine.find_newly_claimable_milestone(
                record, previous_total
            ),
        )

    # -------------------------------------------------------------------------
    # Hatching
    # -------------------------------------------------------------------------

    @staticmethod
    def hatch(
        record: ProgressRecord,
        now: datetime,
        species: str | None = None,
        name: str | None = None,
        choose: Callable[[Sequence[str]], str] = random.choice,
    ) -> str:
        """Perform the Egg -> Baby transition.

        Args:
            record: Working copy of the record (modified in place)
            now: Hatch instant
            species: Catalog species; a random one is chosen when omitted
            name: Optional new display name
            choose: Random selection function (injectable for tests)

        Returns:
            The species the pet hatched as

        Raises:
            InvalidClaimError: Already hatched, not enough steps, or unknown species
        """
        pet_id = record[const.DATA_PET_INTERNAL_ID]
        if not ProgressionEngine.is_egg(record):
            raise InvalidClaimError(
                pet_id, const.SERVICE_HATCH, const.CLAIM_REASON_ALREADY_HATCHED
            )
        if not ProgressionEngine.is_hatch_ready(record):
            raise InvalidClaimError(
                pet_id, const.SERVICE_HATCH, const.CLAIM_REASON_NOT_READY_TO_HATCH
            )

        chosen = species or choose(ProgressionEngine.all_species())
        category = ProgressionEngine.category_for_species(chosen)
        if category is None:
            raise InvalidClaimError(
                pet_id, const.SERVICE_HATCH, const.CLAIM_REASON_UNKNOWN_SPECIES
            )

        record[const.DATA_PET_SPECIES] = chosen
        record[const.DATA_PET_CATEGORY] = category
        if name and name.strip():
            record[const.DATA_PET_NAME] = name.strip()
        record[const.DATA_PET_GROWTH_STAGE] = const.GROWTH_STAGE_BABY
        record[const.DATA_PET_LEVEL] = 1
        record[const.DATA_PET_XP] = 0
        record[const.DATA_PET_XP_TO_NEXT_LEVEL] = LevelingEngine.xp_to_next_level(1)
        record[const.DATA_PET_HATCH_DATE] = dt_to_iso(now)
        record[const.DATA_PET_DAILY_STEPS_AT_HATCH] = record[
            const.DATA_PET_DAILY_STEPS
        ]
        return chosen

    # -------------------------------------------------------------------------
    # Milestones
    # -------------------------------------------------------------------------

    @staticmethod
    def find_milestone(
        record: ProgressRecord, milestone_id: str
    ) -> MilestoneData | None:
        """Return the milestone with the given id, or None."""
        for milestone in record[const.DATA_PET_MILESTONES]:
            if milestone[const.DATA_MILESTONE_ID] == milestone_id:
                return milestone
        return None

    @staticmethod
    def claimable_milestones(record: ProgressRecord) -> list[str]:
        """Return ids of unclaimed milestones the pet has reached."""
        total = record[const.DATA_PET_TOTAL_STEPS]
        return [
            milestone[const.DATA_MILESTONE_ID]
            for milestone in sorted(
                record[const.DATA_PET_MILESTONES],
                key=lambda m: m[const.DATA_MILESTONE_STEPS],
            )
            if not milestone[const.DATA_MILESTONE_CLAIMED]
            and total >= milestone[const.DATA_MILESTONE_STEPS]
        ]

    @staticmethod
    def find_newly_claimable_milestone(
        record: ProgressRecord, previous_total: int
    ) -> str | None:
        """Return the first unclaimed milestone crossed since previous_total.

        Further milestones crossed in the same burst stay claimable but are
        not reported.
        """
        total = record[const.DATA_PET_TOTAL_STEPS]
        for milestone in sorted(
            record[const.DATA_PET_MILESTONES],
            key=lambda m: m[const.DATA_MILESTONE_STEPS],
        ):
            if milestone[const.DATA_MILESTONE_CLAIMED]:
                continue
            if previous_total < milestone[const.DATA_MILESTONE_STEPS] <= total:
                return milestone[const.DATA_MILESTONE_ID]
        return None

    @staticmethod
    def claim_milestone(
        record: ProgressRecord,
        milestone_id: str,
        now: datetime,
        background_theme: str | None = None,
    ) -> MilestoneClaimResult:
        """Claim a reached milestone and apply its reward exactly once.

        Raises:
            InvalidClaimError: Unknown id, already claimed, not reached, or an XP
                reward while the pet is still an egg
        """
        pet_id = record[const.DATA_PET_INTERNAL_ID]
        milestone = ProgressionEngine.find_milestone(record, milestone_id)
        if milestone is None:
            raise InvalidClaimError(
                pet_id, milestone_id, const.CLAIM_REASON_UNKNOWN_MILESTONE
            )
        if milestone[const.DATA_MILESTONE_CLAIMED]:
            raise InvalidClaimError(
                pet_id, milestone_id, const.CLAIM_REASON_ALREADY_CLAIMED
            )
        if record[const.DATA_PET_TOTAL_STEPS] < milestone[const.DATA_MILESTONE_STEPS]:
            raise InvalidClaimError(
                pet_id, milestone_id, const.CLAIM_REASON_NOT_ENOUGH_STEPS
            )

        reward: dict[str, Any] = dict(milestone[const.DATA_MILESTONE_REWARD])
        kind = reward[const.DATA_REWARD_KIND]
        if kind == const.REWARD_KIND_XP and ProgressionEngine.is_egg(record):
            raise InvalidClaimError(
                pet_id, milestone_id, const.CLAIM_REASON_PET_NOT_HATCHED
            )

        appearance = record[const.DATA_PET_APPEARANCE]
        xp_awarded = 0
        level_up: LevelUpResult | None = None

        if kind == const.REWARD_KIND_XP:
            xp_awarded = reward[const.DATA_REWARD_AMOUNT]
            level_up = ProgressionEngine.apply_xp(record, xp_awarded)
        elif kind == const.REWARD_KIND_APPEARANCE:
            appearance[const.DATA_APPEARANCE_HAS_CUSTOMIZATION] = True
        elif kind == const.REWARD_KIND_BACKGROUND:
            theme = background_theme or reward[const.DATA_REWARD_THEME]
            reward[const.DATA_REWARD_THEME] = theme
            appearance[const.DATA_APPEARANCE_BACKGROUND_THEME] = theme
        elif kind == const.REWARD_KIND_ANIMATION:
            appearance[const.DATA_APPEARANCE_HAS_SPECIAL_ANIMATION] = True
        elif kind == const.REWARD_KIND_BADGE:
            appearance[const.DATA_APPEARANCE_HAS_ELITE_BADGE] = True
            appearance[const.DATA_APPEARANCE_HAS_ANIMATED_BACKGROUND] = True
            if not appearance[const.DATA_APPEARANCE_BACKGROUND_THEME]:
                appearance[const.DATA_APPEARANCE_BACKGROUND_THEME] = (
                    const.DEFAULT_ANIMATED_BACKGROUND_THEME
                )

        milestone[const.DATA_MILESTONE_CLAIMED] = True
        milestone[const.DATA_MILESTONE_CLAIMED_AT] = dt_to_iso(now)

        return MilestoneClaimResult(
            milestone_id=milestone_id,
            reward=reward,
            xp_awarded=xp_awarded,
            level_up=level_up,
        )
