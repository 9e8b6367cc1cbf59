# File: helpers/device_helpers.py
"""Device registry helper functions for StepPet.

Functions that construct DeviceInfo objects for Home Assistant's device registry
and remove the device of a deleted pet.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from homeassistant.helpers.device_registry import (
    DeviceEntryType,
    DeviceInfo,
    async_get as async_get_device_registry,
)

from .. import const

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant


# ==============================================================================
# Device Info Construction
# ==============================================================================


def create_pet_device_info(
    pet_id: str, pet_name: str, config_entry: ConfigEntry
) -> DeviceInfo:
    """Create device info for a pet.

    Args:
        pet_id: Internal pet id, used as the device identifier
        pet_name: Display name of the pet
        config_entry: Config entry for this integration instance

    Returns:
        DeviceInfo dict for the pet device
    """
    return DeviceInfo(
        identifiers={(const.DOMAIN, pet_id)},
        name=f"{pet_name} ({config_entry.title})",
        manufacturer="StepPet",
        model="Step Pet",
        entry_type=DeviceEntryType.SERVICE,
    )


def remove_pet_device(hass: HomeAssistant, pet_id: str) -> bool:
    """Remove the device registered for a pet. Returns True if one existed."""
    dev_reg = async_get_device_registry(hass)
    device = dev_reg.async_get_device(identifiers={(const.DOMAIN, pet_id)})
    if device is None:
        return False
    dev_reg.async_remove_device(device.id)
    const.LOGGER.debug("DEBUG: Removed device %s for pet %s", device.id, pet_id)
    return True
