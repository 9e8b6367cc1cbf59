# File: pedometer.py
"""Pedometer adapter backed by a Home Assistant step sensor entity.

The core only needs `async_cumulative_steps(start, end)`. Home Assistant step
sensors (for example the companion app's `total_increasing` steps sensor) only
expose a current value, so this adapter keeps a persisted log of observed
states and answers window queries from it:

- Each state change appends a sample {ts, raw, total}. `total` accumulates
  positive increments; a reading lower than the previous one is a counter
  reset and counts from zero.
- steps(start, end) = total_at(end) - total_at(start), clamped at zero, where
  total_at(t) is the accumulation of the last sample at or before t.
- Samples older than the retention window are pruned, except the last sample
  before the window and the last sample at or before each pet's creation, so
  lifetime queries stay exact.
"""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Protocol, cast

from homeassistant.core import CALLBACK_TYPE, Event, EventStateChangedData, callback
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.event import async_track_state_change_event

from . import const
from .utils.dt_utils import as_utc, dt_to_iso, dt_to_utc

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant, State

    from .store import SteppetStore
    from .type_defs import StepSample


class SensorUnavailableError(HomeAssistantError):
    """Raised when the step sensor cannot provide a reading."""

    def __init__(self, entity_id: str, reason: str) -> None:
        """Initialize SensorUnavailableError."""
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(f"Step sensor {entity_id} unavailable: {reason}")


class Pedometer(Protocol):
    """Step source consumed by PetManager."""

    async def async_cumulative_steps(self, start: datetime, end: datetime) -> int:
        """Return steps taken in [start, end]; raise SensorUnavailableError."""


class EntityPedometer:
    """Pedometer implementation over a Home Assistant sensor entity."""

    def __init__(
        self,
        hass: HomeAssistant,
        store: SteppetStore,
        entity_id: str,
        retention: timedelta = timedelta(days=const.STEP_SAMPLE_RETENTION_DAYS),
    ) -> None:
        """Initialize the adapter and load the persisted sample log.

        Args:
            hass: Home Assistant instance
            store: Store holding the sample log and pet records (for anchors)
            entity_id: Step sensor entity to follow
            retention: How long unanchored samples are kept
        """
        self.hass = hass
        self._store = store
        self._entity_id = entity_id
        self._retention = retention
        self._samples: list[StepSample] = list(store.step_samples)
        self._timestamps: list[datetime] = [
            as_utc(dt_to_utc(s[const.DATA_SAMPLE_TS]))  # type: ignore[arg-type]
            for s in self._samples
        ]

    @property
    def entity_id(self) -> str:
        """Return the followed step sensor entity id."""
        return self._entity_id

    @property
    def samples(self) -> list[StepSample]:
        """Return a copy of the current sample log."""
        return list(self._samples)

    # -------------------------------------------------------------------------
    # Reading states
    # -------------------------------------------------------------------------

    def _parse_state(self, state: State | None) -> int:
        """Return the integer reading of a state or raise SensorUnavailableError."""
        if state is None:
            raise SensorUnavailableError(self._entity_id, "entity not found")
        if str(state.state).lower() in const.SENSOR_INVALID_STATES:
            raise SensorUnavailableError(self._entity_id, state.state)
        try:
            value = float(state.state)
        except (TypeError, ValueError) as err:
            raise SensorUnavailableError(
                self._entity_id, f"non-numeric state '{state.state}'"
            ) from err
        if value < 0:
            raise SensorUnavailableError(
                self._entity_id, f"negative state '{state.state}'"
            )
        return int(round(value))

    @callback
    def async_record_state(self, state: State | None) -> bool:
        """Append a sample for a state. Returns True if the log changed.

        Raises:
            SensorUnavailableError: The state is missing or not a valid reading
        """
        raw = self._parse_state(state)
        ts = as_utc(cast("State", state).last_updated)

        if self._samples:
            last = self._samples[-1]
            last_ts = self._timestamps[-1]
            previous_raw = last[const.DATA_SAMPLE_RAW]
            if raw == previous_raw:
                return False
            ts = max(ts, last_ts)
            increment = raw - previous_raw if raw >= previous_raw else raw
            total = last[const.DATA_SAMPLE_TOTAL] + increment
        else:
            total = 0

        self._samples.append(
            {
                const.DATA_SAMPLE_TS: dt_to_iso(ts),  # type: ignore[typeddict-item]
                const.DATA_SAMPLE_RAW: raw,
                const.DATA_SAMPLE_TOTAL: total,
            }
        )
        self._timestamps.append(ts)
        self._prune(ts)
        self._store.set_step_samples(list(self._samples))
        return True

    @callback
    def async_sync(self) -> None:
        """Record the entity's current state.

        Raises:
            SensorUnavailableError: The entity is missing or not reporting
        """
        self.async_record_state(self.hass.states.get(self._entity_id))

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def _total_at(self, instant: datetime) -> int:
        """Return the accumulated steps of the last sample at or before instant."""
        index = bisect_right(self._timestamps, as_utc(instant)) - 1
        if index < 0:
            return 0
        return self._samples[index][const.DATA_SAMPLE_TOTAL]

    async def async_cumulative_steps(self, start: datetime, end: datetime) -> int:
        """Return steps taken between start and end.

        Raises:
            SensorUnavailableError: The entity is missing or not reporting
        """
        self.async_sync()
        if end <= start:
            return 0
        return max(0, self._total_at(end) - self._total_at(start))

    # -------------------------------------------------------------------------
    # Retention
    # -------------------------------------------------------------------------

    def _anchors(self) -> list[datetime]:
        """Return instants whose preceding sample must survive pruning."""
        anchors: list[datetime] = []
        for record in self._store.data.get(const.DATA_PETS, {}).values():
            created_at = dt_to_utc(record.get(const.DATA_PET_CREATED_AT))
            if created_at is not None:
                anchors.append(created_at)
        return anchors

    def _prune(self, now: datetime) -> None:
        """Drop samples older than the retention window that no anchor needs."""
        cutoff = now - self._retention
        if not self._timestamps or self._timestamps[0] >= cutoff:
            return

        keep: set[int] = set()
        for anchor in (cutoff, *self._anchors()):
            index = bisect_right(self._timestamps, anchor) - 1
            if index >= 0:
                keep.add(index)

        kept = [i for i, ts in enumerate(self._timestamps) if ts >= cutoff or i in keep]
        if len(kept) == len(self._samples):
            return
        const.LOGGER.debug(
            "DEBUG: Pruned %s step samples older than %s",
            len(self._samples) - len(kept),
            cutoff,
        )
        self._samples = [self._samples[i] for i in kept]
        self._timestamps = [self._timestamps[i] for i in kept]

    # -------------------------------------------------------------------------
    # Live updates
    # -------------------------------------------------------------------------

    @callback
    def async_subscribe(self, on_steps: Callable[[], None]) -> CALLBACK_TYPE:
        """Record every sensor change and notify on_steps when the log grows.

        Returns:
            Unsubscribe callback
        """

        @callback
        def _async_state_changed(event: Event[EventStateChangedData]) -> None:
            try:
                changed = self.async_record_state(event.data["new_state"])
            except SensorUnavailableError as err:
                const.LOGGER.debug("DEBUG: Ignoring step sensor update: %s", err)
                return
            if changed:
                on_steps()

        return async_track_state_change_event(
            self.hass, [self._entity_id], _async_state_changed
        )
