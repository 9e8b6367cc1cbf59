"""Tests for data_builders - building and decoding progress records.

These tests verify:
- build_pet() produces a complete egg record
- validate_pet_name() rejects blank names
- decode_milestone_reward() rebuilds the closed reward variants
- decode_progress_record() fills defaults and repairs invalid stored data

No Home Assistant fixtures needed - pure Python tests.
"""

from datetime import UTC, datetime

import pytest

from custom_components.steppet import const
from custom_components.steppet.data_builders import (
    EntityValidationError,
    build_pet,
    decode_milestone_reward,
    decode_progress_record,
    validate_pet_name,
)

CREATED = datetime(2025, 3, 12, 9, 0, tzinfo=UTC)


# ============================================================================
# Building
# ============================================================================


class TestBuildPet:
    """Tests for build_pet()."""

    def test_new_egg_defaults(self) -> None:
        """A new pet is a level 1 egg with zeroed tallies."""
        record = build_pet("Sprout", CREATED, 1234, owner="user-1")

        assert record[const.DATA_PET_NAME] == "Sprout"
        assert record[const.DATA_PET_OWNER] == "user-1"
        assert record[const.DATA_PET_GROWTH_STAGE] == const.GROWTH_STAGE_EGG
        assert record[const.DATA_PET_STARTING_STEP_COUNT] == 1234
        assert record[const.DATA_PET_TOTAL_STEPS] == 0
        assert record[const.DATA_PET_STEPS_TO_HATCH] == 5000
        assert record[const.DATA_PET_XP_TO_NEXT_LEVEL] == 5000
        assert record[const.DATA_PET_CREATED_AT] == "2025-03-12T09:00:00+00:00"
        assert record[const.DATA_PET_CURRENT_WEEK_START] == "2025-03-10T00:00:00+00:00"
        assert record[const.DATA_PET_LAST_REFRESHED] is None
        assert [m[const.DATA_MILESTONE_ID] for m in record[const.DATA_PET_MILESTONES]] == [
            "milestone-5k",
            "milestone-10k",
            "milestone-25k",
            "milestone-50k",
            "milestone-100k",
        ]

    def test_blank_name_defaults_to_egg(self) -> None:
        """An empty name becomes the default name."""
        assert build_pet("  ", CREATED, 0)[const.DATA_PET_NAME] == "Egg"
        assert build_pet(None, CREATED, 0)[const.DATA_PET_NAME] == "Egg"

    def test_unique_ids(self) -> None:
        """Every pet gets its own internal id."""
        first = build_pet("A", CREATED, 0)
        second = build_pet("A", CREATED, 0)

        assert first[const.DATA_PET_INTERNAL_ID] != second[const.DATA_PET_INTERNAL_ID]

    def test_negative_starting_count_clamped(self) -> None:
        """Starting counts are never negative."""
        assert build_pet("A", CREATED, -5)[const.DATA_PET_STARTING_STEP_COUNT] == 0


class TestValidatePetName:
    """Tests for validate_pet_name()."""

    def test_strips_name(self) -> None:
        """Valid names are returned stripped."""
        assert validate_pet_name("  Biscuit ") == "Biscuit"

    @pytest.mark.parametrize("raw", ["", "   ", None])
    def test_blank_rejected(self, raw) -> None:
        """Blank names raise with the invalid-name translation key."""
        with pytest.raises(EntityValidationError) as exc_info:
            validate_pet_name(raw)

        assert exc_info.value.field == const.FIELD_PET_NAME
        assert exc_info.value.translation_key == const.TRANS_KEY_ERROR_INVALID_PET_NAME


# ============================================================================
# Decoding
# ============================================================================


class TestDecodeMilestoneReward:
    """Tests for decode_milestone_reward()."""

    def test_xp_default_amount(self) -> None:
        """XP rewards without an amount use the default milestone XP."""
        assert decode_milestone_reward({"kind": "xp"}) == {"kind": "xp", "amount": 500}

    def test_background_default_theme(self) -> None:
        """Background rewards without a theme use the default theme."""
        assert decode_milestone_reward({"kind": "background"}) == {
            "kind": "background",
            "theme": "#5CE1E6",
        }

    def test_flag_rewards_drop_extra_keys(self) -> None:
        """Flag-only rewards keep just their kind."""
        assert decode_milestone_reward({"kind": "badge", "amount": 3}) == {
            "kind": "badge"
        }

    @pytest.mark.parametrize("raw", [{"kind": "confetti"}, {}, None, "xp"])
    def test_unknown_kind_rejected(self, raw) -> None:
        """Anything without a known kind raises ValueError."""
        with pytest.raises(ValueError):
            decode_milestone_reward(raw)


class TestDecodeProgressRecord:
    """Tests for decode_progress_record()."""

    def test_round_trip_of_built_record(self) -> None:
        """Decoding a freshly built record returns an equal record."""
        record = build_pet("Sprout", CREATED, 42)

        assert decode_progress_record(dict(record)) == record

    def test_minimal_record_gets_defaults(self) -> None:
        """A record with only created_at decodes into a full egg."""
        record = decode_progress_record({"created_at": "2025-03-12T09:00:00+00:00"})

        assert record[const.DATA_PET_NAME] == "Egg"
        assert record[const.DATA_PET_LEVEL] == 1
        assert record[const.DATA_PET_STEPS_TO_HATCH] == 5000
        assert record[const.DATA_PET_CURRENT_WEEK_START] == "2025-03-10T00:00:00+00:00"
        assert len(record[const.DATA_PET_MILESTONES]) == 5
        assert set(record[const.DATA_PET_MINI_GAMES]) == {"feed", "fetch", "adventure"}

    def test_missing_created_at_rejected(self) -> None:
        """Records without a valid created_at cannot be decoded."""
        with pytest.raises(ValueError):
            decode_progress_record({"name": "Ghost"})

    def test_invalid_values_repaired(self) -> None:
        """Bad stored values are coerced to safe defaults."""
        raw = dict(build_pet("Sprout", CREATED, 0))
        raw[const.DATA_PET_GROWTH_STAGE] = "teenager"
        raw[const.DATA_PET_TOTAL_STEPS] = "not a number"
        raw[const.DATA_PET_LEVEL] = -3
        raw[const.DATA_PET_MINI_GAMES] = {"fetch": {"claims_today": 9}}

        record = decode_progress_record(raw)

        assert record[const.DATA_PET_GROWTH_STAGE] == const.GROWTH_STAGE_EGG
        assert record[const.DATA_PET_TOTAL_STEPS] == 0
        assert record[const.DATA_PET_LEVEL] == 1
        assert record[const.DATA_PET_MINI_GAMES]["fetch"]["claims_today"] == 2
        assert not record[const.DATA_PET_MINI_GAMES]["feed"]["claimed_today"]

    def test_invalid_milestone_dropped(self) -> None:
        """Milestones with an unknown reward kind are dropped, the rest kept."""
        raw = dict(build_pet("Sprout", CREATED, 0))
        raw[const.DATA_PET_MILESTONES] = [
            {"id": "odd", "steps": 1, "reward": {"kind": "confetti"}},
            {"id": "milestone-5k", "steps": 5000, "reward": {"kind": "xp"}, "claimed": True},
        ]

        record = decode_progress_record(raw)

        assert [m["id"] for m in record[const.DATA_PET_MILESTONES]] == ["milestone-5k"]
        assert record[const.DATA_PET_MILESTONES][0]["claimed"]

    def test_input_not_modified(self) -> None:
        """Decoding works on a copy."""
        raw = {"created_at": "2025-03-12T09:00:00+00:00", "level": "4"}

        decode_progress_record(raw)

        assert raw == {"created_at": "2025-03-12T09:00:00+00:00", "level": "4"}
