"""Initialization file for the StepPet integration.

Handles setting up the integration, including loading configuration entries,
initializing data storage, and preparing the coordinator for data handling.

Key Features:
- Config entry setup and unload support.
- Coordinator initialization for scheduled pet refreshes.
- Storage management for persistent pet progress.
"""

from __future__ import annotations

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryNotReady

from . import const
from .coordinator import SteppetDataCoordinator
from .services import async_setup_services, async_unload_services
from .store import SteppetStore, StoreWriteError


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up the integration from a config entry."""
    const.LOGGER.info("INFO: Starting setup for StepPet entry: %s", entry.entry_id)

    const.set_default_timezone(hass)

    store = SteppetStore(hass, const.STORAGE_KEY)
    await store.async_initialize()

    coordinator = SteppetDataCoordinator(hass, entry, store)

    try:
        await coordinator.async_config_entry_first_refresh()
    except ConfigEntryNotReady as e:
        const.LOGGER.error("ERROR: Failed to refresh coordinator data: %s", e)
        raise

    hass.data.setdefault(const.DOMAIN, {})[entry.entry_id] = {
        const.COORDINATOR: coordinator,
        const.STORE: store,
    }

    async_setup_services(hass)

    await hass.config_entries.async_forward_entry_setups(entry, const.PLATFORMS)

    entry.async_on_unload(entry.add_update_listener(async_update_options))

    const.LOGGER.info("INFO: StepPet setup complete for entry: %s", entry.entry_id)
    return True


async def async_update_options(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload the entry after its options changed."""
    const.LOGGER.debug("DEBUG: Options changed, reloading entry %s", entry.entry_id)
    await hass.config_entries.async_reload(entry.entry_id)


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    const.LOGGER.info("INFO: Unloading StepPet entry: %s", entry.entry_id)

    unload_ok = await hass.config_entries.async_unload_platforms(entry, const.PLATFORMS)

    if unload_ok:
        data = hass.data[const.DOMAIN].pop(entry.entry_id)
        # Flush a pending delayed sample log write before the store goes away
        try:
            await data[const.STORE].async_save()
        except StoreWriteError as err:
            const.LOGGER.warning(
                "WARNING: Could not flush StepPet storage on unload: %s", err
            )
        await async_unload_services(hass)

    return unload_ok


async def async_remove_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Handle removal of a config entry by deleting all stored pets."""
    const.LOGGER.info("INFO: Removing StepPet entry: %s", entry.entry_id)

    store = SteppetStore(hass, const.STORAGE_KEY)
    await store.async_delete_storage()

    const.LOGGER.info("INFO: StepPet entry data cleared: %s", entry.entry_id)
