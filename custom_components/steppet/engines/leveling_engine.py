"""Leveling Engine - Pure ladder lookup and XP cascade.

This engine provides stateless, pure Python functions for:
- XP-to-next-level lookup on the leveling ladder
- Growth stage derivation from level
- Multi-level XP cascade (one gain may cross several thresholds)

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .. import const

# =============================================================================
# LEVEL-UP RESULT DATA STRUCTURE
# =============================================================================


@dataclass(frozen=True)
class LevelUpResult:
    """Outcome of applying XP to a (level, xp) pair.

    Attributes:
        level: Level after the cascade
        xp: Remaining XP toward the next level (always < xp_to_next_level)
        xp_to_next_level: Threshold for the new level
        levels_gained: How many thresholds were crossed (0 if none)
    """

    level: int
    xp: int
    xp_to_next_level: int
    levels_gained: int = 0

    @property
    def leveled_up(self) -> bool:
        """Return True if at least one level was gained."""
        return self.levels_gained > 0


# =============================================================================
# LEVELING ENGINE
# =============================================================================


class LevelingEngine:
    """Pure logic engine for the leveling ladder.

    All methods are static - no instance state.
    """

    @staticmethod
    def xp_to_next_level(
        level: int, ladder: Sequence[int] = const.LEVEL_REQUIREMENTS
    ) -> int:
        """Return the XP needed to go from `level` to `level + 1`.

        Levels past the end of the ladder reuse the last entry.
        """
        index = min(max(level, 1) - 1, len(ladder) - 1)
        return ladder[index]

    @staticmethod
    def growth_stage_for_level(level: int) -> str:
        """Return the hatched growth stage for a level."""
        if level >= const.ADULT_MIN_LEVEL:
            return const.GROWTH_STAGE_ADULT
        if level >= const.JUVENILE_MIN_LEVEL:
            return const.GROWTH_STAGE_JUVENILE
        return const.GROWTH_STAGE_BABY

    @staticmethod
    def apply_xp(
        level: int,
        xp: int,
        gained: int,
        ladder: Sequence[int] = const.LEVEL_REQUIREMENTS,
    ) -> LevelUpResult:
        """Add XP and cascade through as many levels as it covers.

        Args:
            level: Current level (>= 1)
            xp: Current XP toward the next level
            gained: XP to add (negative values are treated as 0)
            ladder: Per-level XP thresholds

        Returns:
            LevelUpResult with the final level and leftover XP

        Example:
            >>> LevelingEngine.apply_xp(1, 0, 12600)
            LevelUpResult(level=3, xp=100, xp_to_next_level=10000, levels_gained=2)
        """
        level = max(level, 1)
        xp = max(xp, 0) + max(gained, 0)
        threshold = LevelingEngine.xp_to_next_level(level, ladder)
        levels_gained = 0

        while xp >= threshold:
            xp -= threshold
            level += 1
            levels_gained += 1
            threshold = LevelingEngine.xp_to_next_level(level, ladder)

        return LevelUpResult(
            level=level,
            xp=xp,
            xp_to_next_level=threshold,
            levels_gained=levels_gained,
        )
