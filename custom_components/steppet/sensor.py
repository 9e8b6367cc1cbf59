# File: sensor.py
"""Sensors for the StepPet integration.

Sensors are created per pet and grouped under the pet's device:

01. PetLevelSensor
02. PetGrowthStageSensor
03. PetTotalStepsSensor
04. PetDailyStepsSensor
05. PetWeeklyStepsSensor

Pets created after setup get their sensors through the pet-created signal.
"""

from __future__ import annotations

from typing import Any

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorStateClass,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from . import const
from .coordinator import SteppetDataCoordinator
from .engines import MiniGameEngine, ProgressionEngine
from .entity import SteppetPetEntity
from .helpers.entity_helpers import get_event_signal
from .utils.dt_utils import dt_to_utc


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
) -> None:
    """Set up sensors for StepPet integration."""
    data = hass.data[const.DOMAIN][entry.entry_id]
    coordinator: SteppetDataCoordinator = data[const.COORDINATOR]

    entities: list[SensorEntity] = []
    for pet_id, pet_info in coordinator.pets_data.items():
        entities.extend(
            _build_pet_sensors(coordinator, entry, pet_id, pet_info[const.DATA_PET_NAME])
        )
    async_add_entities(entities)

    @callback
    def _async_on_pet_created(payload: dict[str, Any]) -> None:
        const.LOGGER.debug(
            "DEBUG: Adding sensors for new pet %s", payload[const.ATTR_PET_ID]
        )
        async_add_entities(
            _build_pet_sensors(
                coordinator,
                entry,
                payload[const.ATTR_PET_ID],
                payload[const.ATTR_PET_NAME],
            )
        )

    entry.async_on_unload(
        async_dispatcher_connect(
            hass,
            get_event_signal(entry.entry_id, const.SIGNAL_SUFFIX_PET_CREATED),
            _async_on_pet_created,
        )
    )


def _build_pet_sensors(
    coordinator: SteppetDataCoordinator,
    entry: ConfigEntry,
    pet_id: str,
    pet_name: str,
) -> list[SensorEntity]:
    """Return every sensor for one pet."""
    return [
        PetLevelSensor(coordinator, entry, pet_id, pet_name),
        PetGrowthStageSensor(coordinator, entry, pet_id, pet_name),
        PetTotalStepsSensor(coordinator, entry, pet_id, pet_name),
        PetDailyStepsSensor(coordinator, entry, pet_id, pet_name),
        PetWeeklyStepsSensor(coordinator, entry, pet_id, pet_name),
    ]


# ------------------------------------------------------------------------------------------
class PetLevelSensor(SteppetPetEntity, SensorEntity):
    """Sensor for a pet's level.

    Attributes carry the rest of the progression state: XP, species, hatch
    readiness, claimable milestones, mini-game availability and appearance.
    """

    _attr_translation_key = const.TRANS_KEY_SENSOR_LEVEL
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_icon = "mdi:paw"

    def __init__(
        self,
        coordinator: SteppetDataCoordinator,
        entry: ConfigEntry,
        pet_id: str,
        pet_name: str,
    ) -> None:
        """Initialize the sensor."""
        super().__init__(
            coordinator, entry, pet_id, pet_name, const.SENSOR_UID_SUFFIX_LEVEL
        )

    @property
    def native_value(self) -> int | None:
        """Return the pet's level (None while it is an egg)."""
        record: Any = self.pet_info
        if not record or ProgressionEngine.is_egg(record):
            return None
        return record[const.DATA_PET_LEVEL]

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return progression details."""
        record: Any = self.pet_info
        if not record:
            return {}
        now = self.coordinator.clock.now()
        midnight = self.coordinator.clock.local_midnight(now)
        week_start = self.coordinator.clock.week_start(now)
        is_egg = ProgressionEngine.is_egg(record)
        return {
            const.ATTR_PET_ID: self._pet_id,
            const.ATTR_PET_NAME: record[const.DATA_PET_NAME],
            const.ATTR_SPECIES: record[const.DATA_PET_SPECIES] or None,
            const.DATA_PET_CATEGORY: record[const.DATA_PET_CATEGORY] or None,
            const.DATA_PET_XP: record[const.DATA_PET_XP],
            const.DATA_PET_XP_TO_NEXT_LEVEL: record[const.DATA_PET_XP_TO_NEXT_LEVEL],
            const.DATA_PET_STEPS_TO_HATCH: record[const.DATA_PET_STEPS_TO_HATCH],
            "hatch_ready": ProgressionEngine.is_hatch_ready(record),
            const.DATA_PET_HATCH_DATE: record[const.DATA_PET_HATCH_DATE],
            "claimable_milestones": ProgressionEngine.claimable_milestones(record),
            "can_claim_feed": not is_egg
            and MiniGameEngine.can_claim_feed(record, midnight),
            "can_claim_fetch": not is_egg
            and MiniGameEngine.can_claim_fetch(record, midnight),
            "can_start_adventure": not is_egg
            and MiniGameEngine.can_start_adventure(record, week_start),
            "adventure_ready": MiniGameEngine.is_adventure_ready(record),
            const.DATA_PET_APPEARANCE: dict(record[const.DATA_PET_APPEARANCE]),
            const.DATA_PET_LAST_REFRESHED: record[const.DATA_PET_LAST_REFRESHED],
        }


# ------------------------------------------------------------------------------------------
class PetGrowthStageSensor(SteppetPetEntity, SensorEntity):
    """Sensor for a pet's growth stage (egg, baby, juvenile, adult)."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_GROWTH_STAGE
    _attr_device_class = SensorDeviceClass.ENUM
    _attr_options = list(const.GROWTH_STAGES)
    _attr_icon = "mdi:egg-outline"

    def __init__(
        self,
        coordinator: SteppetDataCoordinator,
        entry: ConfigEntry,
        pet_id: str,
        pet_name: str,
    ) -> None:
        """Initialize the sensor."""
        super().__init__(
            coordinator, entry, pet_id, pet_name, const.SENSOR_UID_SUFFIX_GROWTH_STAGE
        )

    @property
    def native_value(self) -> str | None:
        """Return the growth stage."""
        return self._pet_value(const.DATA_PET_GROWTH_STAGE)


# ------------------------------------------------------------------------------------------
class _PetStepsSensor(SteppetPetEntity, SensorEntity):
    """Shared base for the step tally sensors."""

    _attr_native_unit_of_measurement = const.UNIT_STEPS
    _attr_icon = "mdi:shoe-print"
    _data_key: str

    @property
    def native_value(self) -> int | None:
        """Return the tally."""
        return self._pet_value(self._data_key)


class PetTotalStepsSensor(_PetStepsSensor):
    """Sensor for the lifetime steps counted since the pet was created."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_TOTAL_STEPS
    _attr_state_class = SensorStateClass.TOTAL_INCREASING
    _data_key = const.DATA_PET_TOTAL_STEPS

    def __init__(
        self,
        coordinator: SteppetDataCoordinator,
        entry: ConfigEntry,
        pet_id: str,
        pet_name: str,
    ) -> None:
        """Initialize the sensor."""
        super().__init__(
            coordinator, entry, pet_id, pet_name, const.SENSOR_UID_SUFFIX_TOTAL_STEPS
        )

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return the creation details behind the lifetime tally."""
        return {
            const.DATA_PET_CREATED_AT: self._pet_value(const.DATA_PET_CREATED_AT),
            const.DATA_PET_STARTING_STEP_COUNT: self._pet_value(
                const.DATA_PET_STARTING_STEP_COUNT
            ),
            const.DATA_PET_TOTAL_STEPS_BEFORE_TODAY: self._pet_value(
                const.DATA_PET_TOTAL_STEPS_BEFORE_TODAY
            ),
        }


class PetDailyStepsSensor(_PetStepsSensor):
    """Sensor for steps counted since local midnight."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_DAILY_STEPS
    _attr_state_class = SensorStateClass.TOTAL
    _data_key = const.DATA_PET_DAILY_STEPS

    def __init__(
        self,
        coordinator: SteppetDataCoordinator,
        entry: ConfigEntry,
        pet_id: str,
        pet_name: str,
    ) -> None:
        """Initialize the sensor."""
        super().__init__(
            coordinator, entry, pet_id, pet_name, const.SENSOR_UID_SUFFIX_DAILY_STEPS
        )

    @property
    def last_reset(self):
        """Return local midnight of the day the tally belongs to."""
        refreshed = dt_to_utc(self._pet_value(const.DATA_PET_LAST_REFRESHED))
        if refreshed is None:
            return None
        return self.coordinator.clock.local_midnight(refreshed)


class PetWeeklyStepsSensor(_PetStepsSensor):
    """Sensor for steps counted in the current week."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_WEEKLY_STEPS
    _attr_state_class = SensorStateClass.TOTAL
    _data_key = const.DATA_PET_WEEKLY_STEPS

    def __init__(
        self,
        coordinator: SteppetDataCoordinator,
        entry: ConfigEntry,
        pet_id: str,
        pet_name: str,
    ) -> None:
        """Initialize the sensor."""
        super().__init__(
            coordinator, entry, pet_id, pet_name, const.SENSOR_UID_SUFFIX_WEEKLY_STEPS
        )

    @property
    def last_reset(self):
        """Return the start of the week the tally belongs to."""
        return dt_to_utc(self._pet_value(const.DATA_PET_CURRENT_WEEK_START))
