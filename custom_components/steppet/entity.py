"""Base entity classes for StepPet integration."""

from __future__ import annotations

from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .coordinator import SteppetDataCoordinator
from .helpers.device_helpers import create_pet_device_info


class SteppetCoordinatorEntity(CoordinatorEntity[SteppetDataCoordinator]):
    """Base entity class for StepPet sensors with typed coordinator access."""

    @property
    def coordinator(self) -> SteppetDataCoordinator:
        """Return typed coordinator.

        Uses object.__getattribute__ to access the private _coordinator attribute
        set by the parent CoordinatorEntity class.
        """
        return object.__getattribute__(self, "_coordinator")

    @coordinator.setter
    def coordinator(self, value: SteppetDataCoordinator) -> None:
        """Set coordinator with proper typing."""
        object.__setattr__(self, "_coordinator", value)


class SteppetPetEntity(SteppetCoordinatorEntity):
    """Base entity bound to a single pet, grouped under the pet's device."""

    _attr_has_entity_name = True

    def __init__(
        self,
        coordinator: SteppetDataCoordinator,
        entry: ConfigEntry,
        pet_id: str,
        pet_name: str,
        uid_suffix: str,
    ) -> None:
        """Initialize the pet entity.

        Args:
            coordinator: SteppetDataCoordinator instance for data access.
            entry: ConfigEntry for this integration instance.
            pet_id: Internal id of the pet.
            pet_name: Display name of the pet at setup time.
            uid_suffix: SENSOR_UID_SUFFIX_* constant for this entity.
        """
        super().__init__(coordinator)
        self._pet_id = pet_id
        self._attr_unique_id = f"{entry.entry_id}_{pet_id}{uid_suffix}"
        self._attr_device_info = create_pet_device_info(pet_id, pet_name, entry)

    @property
    def pet_info(self) -> dict[str, Any]:
        """Return the stored record of this entity's pet (empty if removed)."""
        return self.coordinator.pets_data.get(self._pet_id, {})

    @property
    def available(self) -> bool:
        """Return True while the pet exists."""
        return super().available and self._pet_id in self.coordinator.pets_data

    def _pet_value(self, key: str, default: Any = None) -> Any:
        return self.pet_info.get(key, default)

