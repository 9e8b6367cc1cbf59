# File: const.py
"""Constants for the StepPet integration.

This file centralizes configuration keys, defaults, storage keys, gameplay
tuning values, event names, and platform identifiers for consistency across
the integration.
"""

import logging
from typing import Final

from homeassistant.const import Platform
import homeassistant.util.dt as dt_util

from .utils import dt_utils


def set_default_timezone(hass):
    """Set the default timezone based on the Home Assistant configuration."""
    dt_utils.set_default_timezone(dt_util.get_time_zone(hass.config.time_zone))


# ------------------------------------------------------------------------------------------------
# General / Integration Information
# ------------------------------------------------------------------------------------------------
# Integration Name
STEPPET_TITLE = "StepPet"
STEPPET_MANUFACTURER = "StepPet"

# Integration Domain
DOMAIN = "steppet"

# Logger
LOGGER = logging.getLogger(__package__)

# Supported Platforms
PLATFORMS = [
    Platform.SENSOR,
]

# Coordinator
COORDINATOR = "coordinator"
COORDINATOR_SUFFIX = "_coordinator"

# Storage and Versioning
STORE = "store"
STORAGE_KEY = "steppet_data"
STORAGE_VERSION = 1
SCHEMA_VERSION = 1

# ------------------------------------------------------------------------------------------------
# Configuration Keys / Defaults
# ------------------------------------------------------------------------------------------------
CONF_STEP_ENTITY = "step_entity"
CONF_UPDATE_INTERVAL = "update_interval"

DEFAULT_UPDATE_INTERVAL = 15  # minutes, matches the app's background fetch cadence
MIN_UPDATE_INTERVAL = 1
MAX_UPDATE_INTERVAL = 720

# Local midnight tick used to force the daily rollover refresh
DEFAULT_DAILY_RESET_TIME = {"hour": 0, "minute": 0, "second": 5}

CONFIG_FLOW_STEP_USER = "user"
OPTIONS_FLOW_STEP_INIT = "init"

# ------------------------------------------------------------------------------------------------
# Storage Data Keys
# ------------------------------------------------------------------------------------------------
DATA_META = "meta"
DATA_META_SCHEMA_VERSION = "schema_version"
DATA_PETS = "pets"
DATA_STEP_SAMPLES = "step_samples"

# Pet progress record
DATA_PET_INTERNAL_ID = "internal_id"
DATA_PET_NAME = "name"
DATA_PET_OWNER = "owner"
DATA_PET_SPECIES = "species"
DATA_PET_CATEGORY = "category"
DATA_PET_CREATED_AT = "created_at"
DATA_PET_STARTING_STEP_COUNT = "starting_step_count"
DATA_PET_GROWTH_STAGE = "growth_stage"
DATA_PET_LEVEL = "level"
DATA_PET_XP = "xp"
DATA_PET_XP_TO_NEXT_LEVEL = "xp_to_next_level"
DATA_PET_TOTAL_STEPS = "total_steps"
DATA_PET_TOTAL_STEPS_BEFORE_TODAY = "total_steps_before_today"
DATA_PET_DAILY_STEPS = "daily_steps"
DATA_PET_WEEKLY_STEPS = "weekly_steps"
DATA_PET_TOTAL_STEPS_AT_LAST_WEEKLY_CALC = "total_steps_at_last_weekly_calc"
DATA_PET_CURRENT_WEEK_START = "current_week_start"
DATA_PET_LAST_REFRESHED = "last_refreshed"
DATA_PET_STEPS_TO_HATCH = "steps_to_hatch"
DATA_PET_HATCH_DATE = "hatch_date"
DATA_PET_DAILY_STEPS_AT_HATCH = "daily_steps_at_hatch"
DATA_PET_MILESTONES = "milestones"
DATA_PET_MINI_GAMES = "mini_games"
DATA_PET_APPEARANCE = "appearance"

# Milestones
DATA_MILESTONE_ID = "id"
DATA_MILESTONE_STEPS = "steps"
DATA_MILESTONE_REWARD = "reward"
DATA_MILESTONE_CLAIMED = "claimed"
DATA_MILESTONE_CLAIMED_AT = "claimed_at"

DATA_REWARD_KIND = "kind"
DATA_REWARD_AMOUNT = "amount"
DATA_REWARD_THEME = "theme"

REWARD_KIND_XP: Final = "xp"
REWARD_KIND_APPEARANCE: Final = "appearance"
REWARD_KIND_BACKGROUND: Final = "background"
REWARD_KIND_ANIMATION: Final = "animation"
REWARD_KIND_BADGE: Final = "badge"
REWARD_KINDS = (
    REWARD_KIND_XP,
    REWARD_KIND_APPEARANCE,
    REWARD_KIND_BACKGROUND,
    REWARD_KIND_ANIMATION,
    REWARD_KIND_BADGE,
)

# Mini-games
DATA_GAME_KIND = "kind"
DATA_GAME_LAST_CLAIMED = "last_claimed"
DATA_GAME_CLAIMED_TODAY = "claimed_today"
DATA_GAME_CLAIMS_TODAY = "claims_today"
DATA_GAME_LAST_STARTED = "last_started"
DATA_GAME_LAST_COMPLETED = "last_completed"
DATA_GAME_CURRENT_PROGRESS = "current_progress"
DATA_GAME_IS_ACTIVE = "is_active"

GAME_FEED: Final = "feed"
GAME_FETCH: Final = "fetch"
GAME_ADVENTURE: Final = "adventure"

# Appearance
DATA_APPEARANCE_MAIN_COLOR = "main_color"
DATA_APPEARANCE_ACCENT_COLOR = "accent_color"
DATA_APPEARANCE_HAS_CUSTOMIZATION = "has_customization"
DATA_APPEARANCE_BACKGROUND_THEME = "background_theme"
DATA_APPEARANCE_HAS_ELITE_BADGE = "has_elite_badge"
DATA_APPEARANCE_HAS_ANIMATED_BACKGROUND = "has_animated_background"
DATA_APPEARANCE_HAS_SPECIAL_ANIMATION = "has_special_animation"

DEFAULT_MAIN_COLOR = "#8C52FF"
DEFAULT_ACCENT_COLOR = "#5CE1E6"
DEFAULT_BACKGROUND_THEME = "#5CE1E6"
DEFAULT_ANIMATED_BACKGROUND_THEME = "#FFD700"

# Step sample log (pedometer adapter)
DATA_SAMPLE_TS = "ts"
DATA_SAMPLE_RAW = "raw"
DATA_SAMPLE_TOTAL = "total"

# ------------------------------------------------------------------------------------------------
# Growth Stages
# ------------------------------------------------------------------------------------------------
GROWTH_STAGE_EGG: Final = "egg"
GROWTH_STAGE_BABY: Final = "baby"
GROWTH_STAGE_JUVENILE: Final = "juvenile"
GROWTH_STAGE_ADULT: Final = "adult"
GROWTH_STAGES = (
    GROWTH_STAGE_EGG,
    GROWTH_STAGE_BABY,
    GROWTH_STAGE_JUVENILE,
    GROWTH_STAGE_ADULT,
)

# First level of each hatched stage
JUVENILE_MIN_LEVEL = 6
ADULT_MIN_LEVEL = 11

# ------------------------------------------------------------------------------------------------
# Leveling Ladder
# ------------------------------------------------------------------------------------------------
# LEVEL_REQUIREMENTS[i] is the XP needed to go from level i+1 to level i+2.
# Levels past the end of the ladder reuse the last entry.
LEVEL_REQUIREMENTS: tuple[int, ...] = (
    5000,
    7500,
    10000,
    12500,
    15000,
    17500,
    20000,
    22500,
    25000,
    27500,
)

DEFAULT_STEPS_TO_HATCH = LEVEL_REQUIREMENTS[0]
DEFAULT_PET_NAME = "Egg"

# ------------------------------------------------------------------------------------------------
# Mini-Game Tuning
# ------------------------------------------------------------------------------------------------
FEED_STEP_THRESHOLD = 2500
FEED_XP_REWARD = 100

FETCH_STEP_THRESHOLD = 1000
FETCH_MAX_CLAIMS_PER_DAY = 2
FETCH_XP_REWARD = 50

ADVENTURE_WEEKLY_TARGET = 15000
ADVENTURE_XP_REWARD = 300

ADVENTURE_ACTION_STARTED = "started"
ADVENTURE_ACTION_IN_PROGRESS = "in_progress"
ADVENTURE_ACTION_COMPLETED = "completed"

# ------------------------------------------------------------------------------------------------
# Milestones
# ------------------------------------------------------------------------------------------------
MILESTONE_XP_REWARD = 500

# (id, steps, reward)
DEFAULT_MILESTONES: tuple[tuple[str, int, dict], ...] = (
    (
        "milestone-5k",
        5000,
        {DATA_REWARD_KIND: REWARD_KIND_XP, DATA_REWARD_AMOUNT: MILESTONE_XP_REWARD},
    ),
    ("milestone-10k", 10000, {DATA_REWARD_KIND: REWARD_KIND_APPEARANCE}),
    (
        "milestone-25k",
        25000,
        {
            DATA_REWARD_KIND: REWARD_KIND_BACKGROUND,
            DATA_REWARD_THEME: DEFAULT_BACKGROUND_THEME,
        },
    ),
    ("milestone-50k", 50000, {DATA_REWARD_KIND: REWARD_KIND_ANIMATION}),
    ("milestone-100k", 100000, {DATA_REWARD_KIND: REWARD_KIND_BADGE}),
)

# ------------------------------------------------------------------------------------------------
# Species Catalog
# ------------------------------------------------------------------------------------------------
CATEGORY_MYTHIC = "mythic"
CATEGORY_ELEMENTAL = "elemental"
CATEGORY_FOREST = "forest"
CATEGORY_SHADOW = "shadow"

PET_SPECIES: dict[str, tuple[str, ...]] = {
    CATEGORY_MYTHIC: ("lunacorn", "embermane", "aetherfin", "crystallisk"),
    CATEGORY_ELEMENTAL: ("flareep", "aquabub", "terrabun", "gustling"),
    CATEGORY_FOREST: ("mossling", "twiggle", "thistuff", "glimmowl"),
    CATEGORY_SHADOW: ("wispurr", "batbun", "noctuff", "drimkin"),
}

# ------------------------------------------------------------------------------------------------
# Pedometer Adapter
# ------------------------------------------------------------------------------------------------
STEP_SAMPLE_RETENTION_DAYS = 8
SENSOR_INVALID_STATES = ("unavailable", "unknown", "none", "")

# ------------------------------------------------------------------------------------------------
# Events (instance-scoped dispatcher signals)
# ------------------------------------------------------------------------------------------------
SIGNAL_SUFFIX_PET_CREATED = "pet_created"
SIGNAL_SUFFIX_PET_REMOVED = "pet_removed"
SIGNAL_SUFFIX_PET_HATCHED = "pet_hatched"
SIGNAL_SUFFIX_LEVEL_UP = "level_up"
SIGNAL_SUFFIX_HATCH_READY = "hatch_ready"
SIGNAL_SUFFIX_MILESTONE_REACHED = "milestone_reached"
SIGNAL_SUFFIX_ADVENTURE_READY = "adventure_ready"
SIGNAL_SUFFIX_DAY_ROLLOVER = "day_rollover"

# Bus events for automations (notification delivery lives outside the integration)
EVENT_LEVEL_UP = f"{DOMAIN}_level_up"
EVENT_HATCH_READY = f"{DOMAIN}_hatch_ready"
EVENT_PET_HATCHED = f"{DOMAIN}_pet_hatched"
EVENT_MILESTONE_REACHED = f"{DOMAIN}_milestone_reached"
EVENT_ADVENTURE_READY = f"{DOMAIN}_adventure_ready"

ATTR_PET_ID = "pet_id"
ATTR_PET_NAME = "pet_name"
ATTR_LEVEL = "level"
ATTR_LEVELS_GAINED = "levels_gained"
ATTR_MILESTONE_ID = "milestone_id"
ATTR_SPECIES = "species"

# ------------------------------------------------------------------------------------------------
# Services
# ------------------------------------------------------------------------------------------------
SERVICE_CREATE_PET = "create_pet"
SERVICE_REFRESH = "refresh"
SERVICE_HATCH = "hatch"
SERVICE_CLAIM_FEED = "claim_feed"
SERVICE_CLAIM_FETCH = "claim_fetch"
SERVICE_ADVENTURE = "start_or_complete_adventure"
SERVICE_CLAIM_MILESTONE = "claim_milestone"
SERVICE_RESET_PET = "reset_pet"

FIELD_PET_NAME = "pet_name"
FIELD_NEW_NAME = "new_name"
FIELD_SPECIES = "species"
FIELD_MILESTONE_ID = "milestone_id"
FIELD_BACKGROUND_THEME = "background_theme"

# Claim outcomes returned as service response data
RESULT_CLAIMED = "claimed"
RESULT_REASON = "reason"
RESULT_XP_AWARDED = "xp_awarded"
RESULT_LEVELED_UP = "leveled_up"
RESULT_NEW_LEVEL = "new_level"
RESULT_ACTION = "action"
RESULT_PROGRESS = "progress"
RESULT_REWARD = "reward"

CLAIM_REASON_PET_NOT_HATCHED = "pet_not_hatched"
CLAIM_REASON_ALREADY_HATCHED = "already_hatched"
CLAIM_REASON_NOT_READY_TO_HATCH = "not_ready_to_hatch"
CLAIM_REASON_UNKNOWN_SPECIES = "unknown_species"
CLAIM_REASON_ALREADY_CLAIMED = "already_claimed"
CLAIM_REASON_NOT_ENOUGH_STEPS = "not_enough_steps"
CLAIM_REASON_DAILY_LIMIT = "daily_limit_reached"
CLAIM_REASON_ADVENTURE_DONE = "adventure_completed_this_week"
CLAIM_REASON_UNKNOWN_MILESTONE = "unknown_milestone"

# ------------------------------------------------------------------------------------------------
# Entities
# ------------------------------------------------------------------------------------------------
SENSOR_UID_SUFFIX_LEVEL = "_level"
SENSOR_UID_SUFFIX_GROWTH_STAGE = "_growth_stage"
SENSOR_UID_SUFFIX_TOTAL_STEPS = "_total_steps"
SENSOR_UID_SUFFIX_DAILY_STEPS = "_daily_steps"
SENSOR_UID_SUFFIX_WEEKLY_STEPS = "_weekly_steps"

TRANS_KEY_SENSOR_LEVEL = "pet_level"
TRANS_KEY_SENSOR_GROWTH_STAGE = "pet_growth_stage"
TRANS_KEY_SENSOR_TOTAL_STEPS = "pet_total_steps"
TRANS_KEY_SENSOR_DAILY_STEPS = "pet_daily_steps"
TRANS_KEY_SENSOR_WEEKLY_STEPS = "pet_weekly_steps"

UNIT_STEPS = "steps"

# ------------------------------------------------------------------------------------------------
# Error / Abort Translation Keys
# ------------------------------------------------------------------------------------------------
TRANS_KEY_ERROR_SINGLE_INSTANCE = "single_instance_allowed"
TRANS_KEY_ERROR_ENTITY_NOT_FOUND = "entity_not_found"
TRANS_KEY_ERROR_PET_NOT_FOUND = "pet_not_found"
TRANS_KEY_ERROR_DUPLICATE_PET = "duplicate_pet"
TRANS_KEY_ERROR_INVALID_PET_NAME = "invalid_pet_name"

ERROR_PET_NOT_FOUND_FMT = "Pet '{}' not found"
ERROR_DUPLICATE_PET_FMT = "A pet named '{}' already exists"
MSG_NO_ENTRY_FOUND = "No StepPet entry found"
