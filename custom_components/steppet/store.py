# File: store.py
"""Handles persistent data storage for the StepPet integration.

Uses Home Assistant's Storage helper to save and load pet progress records and
the pedometer sample log, so state survives restarts.

Record writes are immediate and fail loudly: a failed write restores the
in-memory record and raises StoreWriteError, so callers never observe state
that is not on disk.
"""

from __future__ import annotations

import asyncio
import copy
from typing import TYPE_CHECKING, Any

from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.storage import Store
from homeassistant.util.file import WriteError
from homeassistant.util.json import SerializationError

from . import const
from .data_builders import decode_progress_record

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from .type_defs import ProgressRecord, StepSample

# Delay for batching pedometer sample log writes
SAMPLE_SAVE_DELAY = 10


class RecordNotFoundError(HomeAssistantError):
    """Raised when no progress record exists for a pet id."""

    def __init__(self, pet_id: str) -> None:
        """Initialize RecordNotFoundError."""
        self.pet_id = pet_id
        super().__init__(f"No progress record for pet {pet_id}")


class StoreWriteError(HomeAssistantError):
    """Raised when persisting a progress record fails."""


class _ReportingStore(Store[dict[str, Any]]):
    """Store that hands immediate write failures back to the caller.

    Home Assistant's Store logs WriteError and SerializationError and returns
    normally. Failures of async_save writes are kept and re-raised from
    async_save, one save at a time (SteppetStore holds a lock around it).
    Delayed writes (data_func payloads) keep the default behavior.
    """

    _write_error: HomeAssistantError | None = None

    async def _async_write_data(self, path: str, data: dict) -> None:
        immediate = "data_func" not in data
        try:
            await super()._async_write_data(path, data)
        except (SerializationError, WriteError) as err:
            if immediate:
                self._write_error = err
            raise

    async def async_save(self, data: dict[str, Any]) -> None:
        """Save data, raising the write error Store would have swallowed."""
        self._write_error = None
        await super().async_save(data)
        err, self._write_error = self._write_error, None
        if err is not None:
            raise err


class SteppetStore:
    """Handles persistent storage operations for StepPet data.

    Thin wrapper around Home Assistant's Store API. Pets are keyed by
    internal_id.
    """

    def __init__(
        self, hass: HomeAssistant, storage_key: str = const.STORAGE_KEY
    ) -> None:
        """Initialize the store.

        Args:
            hass: Home Assistant core object.
            storage_key: Key to identify storage location (default: const.STORAGE_KEY).
        """
        self.hass = hass
        self._storage_key = storage_key
        self._store: Store = _ReportingStore(hass, const.STORAGE_VERSION, storage_key)
        self._data: dict[str, Any] = {}
        self._save_lock = asyncio.Lock()

    @staticmethod
    def get_default_structure() -> dict[str, Any]:
        """Return canonical empty data structure for fresh installations."""
        return {
            const.DATA_META: {
                const.DATA_META_SCHEMA_VERSION: const.SCHEMA_VERSION,
            },
            const.DATA_PETS: {},
            const.DATA_STEP_SAMPLES: [],
        }

    async def async_initialize(self) -> None:
        """Load data from storage during startup.

        If no data exists, initializes with an empty structure.
        """
        const.LOGGER.debug("DEBUG: SteppetStore: Loading data from storage")
        existing_data = await self._store.async_load()

        if existing_data is None:
            const.LOGGER.info("INFO: No existing storage found. Initializing new data")
            self._data = SteppetStore.get_default_structure()
            return

        self._data = existing_data
        for key, default in SteppetStore.get_default_structure().items():
            self._data.setdefault(key, default)
        const.LOGGER.debug(
            "DEBUG: Loaded existing data from storage: %s pets, %s step samples",
            len(self._data[const.DATA_PETS]),
            len(self._data[const.DATA_STEP_SAMPLES]),
        )

    @property
    def data(self) -> dict[str, Any]:
        """Retrieve the in-memory data cache."""
        return self._data

    # -------------------------------------------------------------------------
    # Progress records
    # -------------------------------------------------------------------------

    @property
    def pet_ids(self) -> list[str]:
        """Return the ids of all stored pets."""
        return list(self._data.get(const.DATA_PETS, {}))

    def has_record(self, pet_id: str) -> bool:
        """Return True if a record exists for pet_id."""
        return pet_id in self._data.get(const.DATA_PETS, {})

    def get_record(self, pet_id: str) -> ProgressRecord:
        """Return a decoded working copy of a pet's record.

        Raises:
            RecordNotFoundError: No record exists for pet_id
        """
        raw = self._data.get(const.DATA_PETS, {}).get(pet_id)
        if raw is None:
            raise RecordNotFoundError(pet_id)
        return decode_progress_record(copy.deepcopy(raw))

    def get_records(self) -> dict[str, ProgressRecord]:
        """Return decoded copies of every record keyed by pet id."""
        return {pet_id: self.get_record(pet_id) for pet_id in self.pet_ids}

    async def async_set_record(self, pet_id: str, record: ProgressRecord) -> None:
        """Persist a record (last write wins).

        Raises:
            StoreWriteError: The write failed; the previous record is restored
        """
        pets = self._data.setdefault(const.DATA_PETS, {})
        previous = pets.get(pet_id)
        pets[pet_id] = copy.deepcopy(dict(record))
        try:
            await self._async_save()
        except StoreWriteError:
            if previous is None:
                pets.pop(pet_id, None)
            else:
                pets[pet_id] = previous
            raise

    async def async_delete_record(self, pet_id: str) -> None:
        """Delete a pet's record.

        Raises:
            RecordNotFoundError: No record exists for pet_id
            StoreWriteError: The write failed; the record is restored
        """
        pets = self._data.setdefault(const.DATA_PETS, {})
        if pet_id not in pets:
            raise RecordNotFoundError(pet_id)
        previous = pets.pop(pet_id)
        try:
            await self._async_save()
        except StoreWriteError:
            pets[pet_id] = previous
            raise

    # -------------------------------------------------------------------------
    # Pedometer sample log
    # -------------------------------------------------------------------------

    @property
    def step_samples(self) -> list[StepSample]:
        """Return the persisted pedometer sample log (mutable)."""
        return self._data.setdefault(const.DATA_STEP_SAMPLES, [])

    def set_step_samples(self, samples: list[StepSample]) -> None:
        """Replace the sample log and schedule a batched save."""
        self._data[const.DATA_STEP_SAMPLES] = samples
        self._store.async_delay_save(lambda: self._data, SAMPLE_SAVE_DELAY)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    async def _async_save(self) -> None:
        """Save the current data structure, raising StoreWriteError on failure."""
        try:
            async with self._save_lock:
                await self._store.async_save(self._data)
        except WriteError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to file system error: %s. "
                "Check disk space and file permissions for %s",
                err,
                self._store.path,
            )
            raise StoreWriteError(f"Failed to write {self._store.path}") from err
        except (SerializationError, TypeError, ValueError) as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to non-serializable data: %s",
                err,
            )
            raise StoreWriteError("Progress data could not be serialized") from err
        const.LOGGER.debug("DEBUG: Data saved successfully to storage")

    async def async_save(self) -> None:
        """Save the current data structure to storage."""
        await self._async_save()

    async def async_delete_storage(self) -> None:
        """Clear in-memory data and remove the storage file from disk."""
        const.LOGGER.warning("WARNING: Clearing all StepPet data and removing storage")
        self._data = SteppetStore.get_default_structure()
        try:
            await self._store.async_remove()
            const.LOGGER.info(
                "INFO: Storage file removed successfully: %s", self._store.path
            )
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to remove storage file %s: %s. Check file permissions",
                self._store.path,
                err,
            )
