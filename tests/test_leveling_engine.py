"""Tests for LevelingEngine - ladder lookup and XP cascade.

These tests verify:
- xp_to_next_level() lookup, including levels past the end of the ladder
- apply_xp() single and multi-level cascades
- growth_stage_for_level() stage boundaries

No Home Assistant fixtures needed - pure Python tests.

Test Categories:
- Ladder lookup
- XP cascade
- Growth stages
"""

import pytest

from custom_components.steppet import const
from custom_components.steppet.engines.leveling_engine import (
    LevelingEngine,
    LevelUpResult,
)

# ============================================================================
# Ladder lookup
# ============================================================================


class TestXpToNextLevel:
    """Tests for xp_to_next_level()."""

    def test_first_level(self) -> None:
        """Level 1 needs the first ladder entry."""
        assert LevelingEngine.xp_to_next_level(1) == 5000

    def test_middle_of_ladder(self) -> None:
        """Each level uses its own ladder entry."""
        assert LevelingEngine.xp_to_next_level(4) == 12500
        assert LevelingEngine.xp_to_next_level(10) == 27500

    def test_past_end_reuses_last_entry(self) -> None:
        """Levels beyond the ladder reuse the final threshold."""
        assert LevelingEngine.xp_to_next_level(11) == 27500
        assert LevelingEngine.xp_to_next_level(40) == const.LEVEL_REQUIREMENTS[-1]

    def test_level_below_one_clamps(self) -> None:
        """A level of 0 is treated as level 1."""
        assert LevelingEngine.xp_to_next_level(0) == 5000

    def test_custom_ladder(self) -> None:
        """A custom ladder replaces the default thresholds."""
        assert LevelingEngine.xp_to_next_level(2, ladder=(10, 20)) == 20
        assert LevelingEngine.xp_to_next_level(5, ladder=(10, 20)) == 20


# ============================================================================
# XP cascade
# ============================================================================


class TestApplyXp:
    """Tests for apply_xp()."""

    def test_below_threshold_no_level_up(self) -> None:
        """XP below the threshold accumulates without leveling."""
        result = LevelingEngine.apply_xp(1, 0, 4999)

        assert result == LevelUpResult(
            level=1, xp=4999, xp_to_next_level=5000, levels_gained=0
        )
        assert not result.leveled_up

    def test_exact_threshold_levels_up(self) -> None:
        """Reaching the threshold exactly gains a level with zero leftover."""
        result = LevelingEngine.apply_xp(1, 4000, 1000)

        assert result.level == 2
        assert result.xp == 0
        assert result.xp_to_next_level == 7500
        assert result.leveled_up

    def test_multi_level_cascade(self) -> None:
        """One large gain crosses several thresholds and reports the final level."""
        result = LevelingEngine.apply_xp(1, 0, 12600)

        assert result == LevelUpResult(
            level=3, xp=100, xp_to_next_level=10000, levels_gained=2
        )

    def test_leftover_always_below_threshold(self) -> None:
        """After a cascade the remaining XP is below the next threshold."""
        result = LevelingEngine.apply_xp(3, 9000, 250000)

        assert result.xp < result.xp_to_next_level

    def test_negative_gain_is_ignored(self) -> None:
        """Negative XP never lowers the pet's progress."""
        result = LevelingEngine.apply_xp(2, 300, -1000)

        assert result.level == 2
        assert result.xp == 300
        assert result.levels_gained == 0

    def test_cascade_past_ladder_end(self) -> None:
        """Levels past the ladder keep using the final threshold."""
        result = LevelingEngine.apply_xp(11, 0, 27500 * 2)

        assert result.level == 13
        assert result.xp == 0
        assert result.xp_to_next_level == 27500


# ============================================================================
# Growth stages
# ============================================================================


class TestGrowthStageForLevel:
    """Tests for growth_stage_for_level()."""

    @pytest.mark.parametrize(
        ("level", "stage"),
        [
            (1, const.GROWTH_STAGE_BABY),
            (5, const.GROWTH_STAGE_BABY),
            (6, const.GROWTH_STAGE_JUVENILE),
            (10, const.GROWTH_STAGE_JUVENILE),
            (11, const.GROWTH_STAGE_ADULT),
            (25, const.GROWTH_STAGE_ADULT),
        ],
    )
    def test_stage_boundaries(self, level: int, stage: str) -> None:
        """Stages change at levels 6 and 11."""
        assert LevelingEngine.growth_stage_for_level(level) == stage
