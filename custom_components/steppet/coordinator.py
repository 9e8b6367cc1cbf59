# File: coordinator.py
"""Coordinator for the StepPet integration.

Schedules pet refreshes (periodic update interval, local-midnight tick and
step sensor changes) and exposes the stored pets to entities. All state changes
are delegated to PetManager.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.event import async_track_time_change
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from . import const
from .managers import PetManager
from .pedometer import EntityPedometer, Pedometer, SensorUnavailableError
from .store import SteppetStore, StoreWriteError
from .utils.dt_utils import Clock


class SteppetDataCoordinator(DataUpdateCoordinator[dict[str, Any]]):
    """Coordinator for StepPet integration.

    Data is the stored pets dict keyed by internal_id.
    """

    config_entry: ConfigEntry

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        store: SteppetStore,
        pedometer: Pedometer | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Initialize the SteppetDataCoordinator.

        Args:
            hass: Home Assistant instance
            config_entry: Config entry for this integration instance
            store: Initialized progress store
            pedometer: Step source (default: EntityPedometer on the configured sensor)
            clock: Clock adapter (default: real clock, configured timezone)
        """
        update_interval_minutes = config_entry.options.get(
            const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL
        )

        super().__init__(
            hass,
            const.LOGGER,
            config_entry=config_entry,
            name=f"{const.DOMAIN}{const.COORDINATOR_SUFFIX}",
            update_interval=timedelta(minutes=update_interval_minutes),
        )
        self.config_entry = config_entry
        self.store = store
        self.step_entity: str = config_entry.options.get(
            const.CONF_STEP_ENTITY, config_entry.data.get(const.CONF_STEP_ENTITY, "")
        )
        self.pedometer: Pedometer = pedometer or EntityPedometer(
            hass, store, self.step_entity
        )
        self.clock = clock or Clock()
        self.pet_manager = PetManager(
            hass, self, store, self.pedometer, self.clock
        )

    @property
    def pets_data(self) -> dict[str, Any]:
        """Return the stored pets keyed by internal_id."""
        return self.store.data.get(const.DATA_PETS, {})

    async def _async_update_data(self) -> dict[str, Any]:
        """Refresh every pet from the step sensor."""
        for pet_id in self.store.pet_ids:
            try:
                await self.pet_manager.async_refresh(pet_id, notify=False)
            except SensorUnavailableError as err:
                const.LOGGER.warning(
                    "WARNING: Skipping refresh of pet %s: %s", pet_id, err
                )
            except StoreWriteError as err:
                raise UpdateFailed(f"Error saving StepPet data: {err}") from err
        return self.pets_data

    async def async_config_entry_first_refresh(self) -> None:
        """Set up managers and listeners, then run the first refresh."""
        await self.pet_manager.async_setup()

        # Midnight tick so daily counters roll over without waiting for the interval
        self.config_entry.async_on_unload(
            async_track_time_change(
                self.hass, self._async_midnight_tick, **const.DEFAULT_DAILY_RESET_TIME
            )
        )
        if isinstance(self.pedometer, EntityPedometer):
            self.config_entry.async_on_unload(
                self.pedometer.async_subscribe(self._async_on_steps)
            )

        await super().async_config_entry_first_refresh()

    async def _async_midnight_tick(self, now: datetime) -> None:
        """Roll every pet over into the new local day."""
        const.LOGGER.debug("DEBUG: Midnight tick at %s", now)
        await self.async_request_refresh()

    @callback
    def _async_on_steps(self) -> None:
        """Schedule a debounced refresh after a step sensor change."""
        self.hass.async_create_task(self.async_request_refresh())
