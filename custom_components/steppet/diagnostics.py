"""Diagnostics support for StepPet integration.

The config entry diagnostics return the raw storage data, identical to the
steppet_data file, so it can be inspected or restored as-is.
"""

from __future__ import annotations

from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.device_registry import DeviceEntry

from . import const
from .coordinator import SteppetDataCoordinator


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry."""
    coordinator: SteppetDataCoordinator = hass.data[const.DOMAIN][entry.entry_id][
        const.COORDINATOR
    ]
    return coordinator.store.data


async def async_get_device_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry, device: DeviceEntry
) -> dict[str, Any]:
    """Return the record of the pet behind a device."""
    coordinator: SteppetDataCoordinator = hass.data[const.DOMAIN][entry.entry_id][
        const.COORDINATOR
    ]

    pet_id = None
    for identifier in device.identifiers:
        if identifier[0] == const.DOMAIN:
            pet_id = identifier[1]
            break

    if not pet_id:
        return {"error": "Could not determine pet_id from device identifiers"}

    pet_data = coordinator.pets_data.get(pet_id)
    if not pet_data:
        return {"error": f"Pet data not found for pet_id: {pet_id}"}

    return {
        "pet_id": pet_id,
        "pet_data": pet_data,
    }
