"""Pet Manager - Stateful orchestration of refreshes, hatching and claims.

Every operation runs under a per-pet asyncio.Lock and follows the same shape:
read a working copy of the record, query the pedometer and clock, run the pure
engines on the copy, then persist it with a single store write. Signals and
bus events are only sent after the write succeeded, so a failed operation
leaves both the stored record and every listener untouched.

Engines:
- StepEngine: daily / weekly / lifetime tallies
- ProgressionEngine: XP, hatching, growth stages, milestones
- MiniGameEngine: feed, fetch and adventure claims
"""

from __future__ import annotations

import asyncio
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any, cast

from homeassistant.core import callback
from homeassistant.helpers.dispatcher import (
    async_dispatcher_connect,
    async_dispatcher_send,
)

from .. import const
from ..data_builders import EntityValidationError, build_pet, validate_pet_name
from ..engines import (
    ClaimOutcome,
    InvalidClaimError,
    LevelUpResult,
    MiniGameEngine,
    ProgressionEngine,
    StepEngine,
)
from ..helpers.device_helpers import remove_pet_device
from ..helpers.entity_helpers import (
    get_event_signal,
    get_pet_id_by_name,
    remove_entities_by_item_id,
)
from ..utils.dt_utils import dt_to_utc

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from homeassistant.core import HomeAssistant

    from ..coordinator import SteppetDataCoordinator
    from ..pedometer import Pedometer
    from ..store import SteppetStore
    from ..type_defs import ProgressRecord
    from ..utils.dt_utils import Clock


@dataclass(frozen=True)
class RefreshResult:
    """Outcome of one refresh of a pet.

    Attributes:
        record: The persisted record after the refresh
        leveled_up: At least one level was gained
        new_level: Level after the refresh
        levels_gained: Number of levels gained in the cascade
        hatch_ready: The pet is an egg with enough steps to hatch
        newly_claimable_milestone: First milestone crossed by this refresh
        day_rolled_over: A local-midnight boundary was crossed
        week_rolled_over: A week boundary was crossed
        lifetime_delta: New lifetime steps counted by this refresh
        adventure_ready: An active adventure has reached its weekly target
    """

    record: ProgressRecord
    leveled_up: bool = False
    new_level: int = 1
    levels_gained: int = 0
    hatch_ready: bool = False
    newly_claimable_milestone: str | None = None
    day_rolled_over: bool = False
    week_rolled_over: bool = False
    lifetime_delta: int = 0
    adventure_ready: bool = False

    def as_dict(self) -> dict[str, Any]:
        """Return the result as a service response dict."""
        return asdict(self)


class PetManager:
    """Owns every state change of every pet.

    Concurrent triggers (sensor callbacks, periodic updates, the midnight tick
    and service calls) are serialized per pet. Changes are announced through
    dispatcher signals scoped to the config entry and through bus events.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        coordinator: SteppetDataCoordinator,
        store: SteppetStore,
        pedometer: Pedometer,
        clock: Clock,
    ) -> None:
        """Initialize the PetManager.

        Args:
            hass: Home Assistant instance
            coordinator: Parent coordinator
            store: Progress store
            pedometer: Step source
            clock: Wall clock and calendar adapter
        """
        self.hass = hass
        self.coordinator = coordinator
        self.entry_id = coordinator.config_entry.entry_id
        self._store = store
        self._pedometer = pedometer
        self._clock = clock
        self._locks: dict[str, asyncio.Lock] = {}
        # Held across a name check and the write that claims the name
        self._name_lock = asyncio.Lock()

    async def async_setup(self) -> None:
        """Set up the manager."""
        self.listen(const.SIGNAL_SUFFIX_PET_REMOVED, self._on_pet_removed)

    @callback
    def _on_pet_removed(self, payload: dict[str, Any]) -> None:
        """Drop registry entries belonging to a deleted pet."""
        pet_id = payload[const.ATTR_PET_ID]
        remove_entities_by_item_id(self.hass, self.entry_id, pet_id)
        remove_pet_device(self.hass, pet_id)

    def _lock(self, pet_id: str) -> asyncio.Lock:
        return self._locks.setdefault(pet_id, asyncio.Lock())

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def get_pet_id_by_name(self, pet_name: str) -> str | None:
        """Return the id of the pet with the given name, or None."""
        return get_pet_id_by_name(self._store.data.get(const.DATA_PETS, {}), pet_name)

    def _ensure_unique_name(self, name: str, pet_id: str | None = None) -> None:
        existing = self.get_pet_id_by_name(name)
        if existing is not None and existing != pet_id:
            raise EntityValidationError(
                field=const.FIELD_PET_NAME,
                translation_key=const.TRANS_KEY_ERROR_DUPLICATE_PET,
            )

    # -------------------------------------------------------------------------
    # Creation and reset
    # -------------------------------------------------------------------------

    async def async_create_pet(
        self, name: str | None = None, owner: str | None = None
    ) -> ProgressRecord:
        """Create a new egg for the current pedometer reading.

        The steps already walked today become the starting offset, so the egg
        starts at zero.

        Raises:
            EntityValidationError: Name already used by another pet
            SensorUnavailableError: The step sensor cannot be read
            StoreWriteError: The record could not be persisted
        """
        pet_name = (name or "").strip() or const.DEFAULT_PET_NAME

        async with self._name_lock:
            self._ensure_unique_name(pet_name)

            now = self._clock.now()
            starting = await self._pedometer.async_cumulative_steps(
                self._clock.local_midnight(now), now
            )
            record = build_pet(pet_name, now, starting, owner)
            pet_id = record[const.DATA_PET_INTERNAL_ID]

            async with self._lock(pet_id):
                await self._store.async_set_record(pet_id, record)

        const.LOGGER.info(
            "INFO: Created pet '%s' (%s) with starting step count %s",
            pet_name,
            pet_id,
            starting,
        )
        self.emit(
            const.SIGNAL_SUFFIX_PET_CREATED,
            pet_id=pet_id,
            pet_name=pet_name,
        )
        self._async_notify()
        return record

    async def async_reset_pet(self, pet_id: str) -> None:
        """Delete a pet's record and its entities.

        Raises:
            RecordNotFoundError: No record exists for pet_id
            StoreWriteError: The deletion could not be persisted
        """
        async with self._lock(pet_id):
            await self._store.async_delete_record(pet_id)
        self._locks.pop(pet_id, None)

        const.LOGGER.info("INFO: Reset pet %s", pet_id)
        self.emit(const.SIGNAL_SUFFIX_PET_REMOVED, pet_id=pet_id)
        self._async_notify()

    # -------------------------------------------------------------------------
    # Refresh
    # -------------------------------------------------------------------------

    async def _async_refresh_record(
        self, record: ProgressRecord
    ) -> tuple[RefreshResult, set[str]]:
        """Run step accounting and progression on a working copy.

        Returns:
            The result and the signal suffixes of states entered on this pass

        Raises:
            SensorUnavailableError: The step sensor cannot be read
        """
        now = self._clock.now()
        midnight = self._clock.local_midnight(now)
        week_start = self._clock.week_start(now)
        created_at = cast("datetime", dt_to_utc(record[const.DATA_PET_CREATED_AT]))
        window_start = StepEngine.lifetime_window_start(created_at, midnight)

        raw_today = await self._pedometer.async_cumulative_steps(midnight, now)
        raw_total = await self._pedometer.async_cumulative_steps(window_start, now)

        was_hatch_ready = ProgressionEngine.is_hatch_ready(record)
        was_adventure_ready = MiniGameEngine.is_adventure_ready(record)
        previous_total = record[const.DATA_PET_TOTAL_STEPS]

        steps = StepEngine.compute(
            record, now, midnight, week_start, raw_today, raw_total
        )
        StepEngine.apply(record, steps)
        if steps.day_rolled_over:
            MiniGameEngine.reset_daily(record)

        progression = ProgressionEngine.apply_progress(
            record, steps.lifetime_delta, previous_total
        )
        adventure_ready = MiniGameEngine.is_adventure_ready(record)

        transitions: set[str] = set()
        if progression.hatch_ready and not was_hatch_ready:
            transitions.add(const.SIGNAL_SUFFIX_HATCH_READY)
        if adventure_ready and not was_adventure_ready:
            transitions.add(const.SIGNAL_SUFFIX_ADVENTURE_READY)

        result = RefreshResult(
            record=record,
            leveled_up=progression.leveled_up,
            new_level=progression.new_level,
            levels_gained=progression.levels_gained,
            hatch_ready=progression.hatch_ready,
            newly_claimable_milestone=progression.newly_claimable_milestone,
            day_rolled_over=steps.day_rolled_over,
            week_rolled_over=steps.week_rolled_over,
            lifetime_delta=steps.lifetime_delta,
            adventure_ready=adventure_ready,
        )
        return result, transitions

    async def async_refresh(self, pet_id: str, notify: bool = True) -> RefreshResult:
        """Refresh one pet from the pedometer and persist the result.

        Raises:
            RecordNotFoundError: No record exists for pet_id
            SensorUnavailableError: The step sensor cannot be read
            StoreWriteError: The record could not be persisted
        """
        async with self._lock(pet_id):
            record = self._store.get_record(pet_id)
            result, transitions = await self._async_refresh_record(record)
            await self._store.async_set_record(pet_id, record)

        const.LOGGER.debug(
            "DEBUG: Refreshed pet %s: delta=%s total=%s daily=%s weekly=%s",
            pet_id,
            result.lifetime_delta,
            record[const.DATA_PET_TOTAL_STEPS],
            record[const.DATA_PET_DAILY_STEPS],
            record[const.DATA_PET_WEEKLY_STEPS],
        )
        self._emit_refresh_events(result, transitions)
        if notify:
            self._async_notify()
        return result

    async def async_refresh_all(
        self, notify: bool = True
    ) -> dict[str, RefreshResult]:
        """Refresh every pet in turn.

        Raises:
            SensorUnavailableError: The step sensor cannot be read
            StoreWriteError: A record could not be persisted
        """
        results: dict[str, RefreshResult] = {}
        for pet_id in self._store.pet_ids:
            results[pet_id] = await self.async_refresh(pet_id, notify=False)
        if notify:
            self._async_notify()
        return results

    # -------------------------------------------------------------------------
    # Hatching
    # -------------------------------------------------------------------------

    async def async_hatch(
        self, pet_id: str, species: str | None = None, name: str | None = None
    ) -> dict[str, Any]:
        """Refresh, then hatch an egg that has reached its hatch threshold.

        Returns:
            {claimed: True, species, pet_name} or {claimed: False, reason}

        Raises:
            EntityValidationError: New name already used by another pet
            RecordNotFoundError: No record exists for pet_id
            SensorUnavailableError: The step sensor cannot be read
            StoreWriteError: The record could not be persisted
        """
        async with self._name_lock:
            if name:
                self._ensure_unique_name(validate_pet_name(name), pet_id)

            async with self._lock(pet_id):
                record = self._store.get_record(pet_id)
                rejection = ""
                refresh, transitions = await self._async_refresh_record(record)
                try:
                    hatched_as = ProgressionEngine.hatch(
                        record, self._clock.now(), species, name
                    )
                except InvalidClaimError as err:
                    hatched_as = None
                    rejection = err.reason
                await self._store.async_set_record(pet_id, record)

        self._emit_refresh_events(refresh, transitions)
        self._async_notify()

        if hatched_as is None:
            const.LOGGER.debug("DEBUG: Hatch rejected for pet %s: %s", pet_id, rejection)
            return {const.RESULT_CLAIMED: False, const.RESULT_REASON: rejection}

        pet_name = record[const.DATA_PET_NAME]
        const.LOGGER.info("INFO: Pet '%s' hatched as %s", pet_name, hatched_as)
        self._fire(
            const.SIGNAL_SUFFIX_PET_HATCHED,
            const.EVENT_PET_HATCHED,
            pet_id=pet_id,
            pet_name=pet_name,
            species=hatched_as,
        )
        return {
            const.RESULT_CLAIMED: True,
            const.ATTR_SPECIES: hatched_as,
            const.ATTR_PET_NAME: pet_name,
        }

    # -------------------------------------------------------------------------
    # Mini-games
    # -------------------------------------------------------------------------

    async def _async_claim_game(self, pet_id: str, game: str) -> dict[str, Any]:
        """Refresh, then apply one mini-game action with a single write."""
        async with self._lock(pet_id):
            record = self._store.get_record(pet_id)
            refresh, transitions = await self._async_refresh_record(record)
            now = self._clock.now()
            outcome: ClaimOutcome | None = None
            rejection = ""
            try:
                if game == const.GAME_FEED:
                    outcome = MiniGameEngine.claim_feed(
                        record, now, self._clock.local_midnight(now)
                    )
                elif game == const.GAME_FETCH:
                    outcome = MiniGameEngine.claim_fetch(
                        record, now, self._clock.local_midnight(now)
                    )
                else:
                    outcome = MiniGameEngine.start_or_complete_adventure(
                        record, now, self._clock.week_start(now)
                    )
            except InvalidClaimError as err:
                rejection = err.reason
            await self._store.async_set_record(pet_id, record)

        self._emit_refresh_events(refresh, transitions)
        self._async_notify()

        if outcome is None:
            const.LOGGER.debug(
                "DEBUG: %s claim rejected for pet %s: %s", game, pet_id, rejection
            )
            return {const.RESULT_CLAIMED: False, const.RESULT_REASON: rejection}

        const.LOGGER.info(
            "INFO: Pet %s claimed %s for %s XP", pet_id, game, outcome.xp_awarded
        )
        self._emit_level_up(record, outcome.level_up)
        response: dict[str, Any] = {
            const.RESULT_CLAIMED: True,
            const.RESULT_XP_AWARDED: outcome.xp_awarded,
            const.RESULT_LEVELED_UP: outcome.level_up.leveled_up,
            const.RESULT_NEW_LEVEL: outcome.level_up.level,
            const.RESULT_PROGRESS: outcome.progress,
        }
        if outcome.action is not None:
            response[const.RESULT_ACTION] = outcome.action
        return response

    async def async_claim_feed(self, pet_id: str) -> dict[str, Any]:
        """Claim the daily feed reward."""
        return await self._async_claim_game(pet_id, const.GAME_FEED)

    async def async_claim_fetch(self, pet_id: str) -> dict[str, Any]:
        """Claim the next fetch reward."""
        return await self._async_claim_game(pet_id, const.GAME_FETCH)

    async def async_start_or_complete_adventure(self, pet_id: str) -> dict[str, Any]:
        """Start the weekly adventure, or complete it once the target is met."""
        return await self._async_claim_game(pet_id, const.GAME_ADVENTURE)

    # -------------------------------------------------------------------------
    # Milestones
    # -------------------------------------------------------------------------

    async def async_claim_milestone(
        self,
        pet_id: str,
        milestone_id: str,
        background_theme: str | None = None,
    ) -> dict[str, Any]:
        """Refresh, then claim a reached milestone.

        Returns:
            {claimed: True, reward, xp_awarded, leveled_up, new_level} or
            {claimed: False, reason}
        """
        async with self._lock(pet_id):
            record = self._store.get_record(pet_id)
            rejection = ""
            refresh, transitions = await self._async_refresh_record(record)
            try:
                claim = ProgressionEngine.claim_milestone(
                    record, milestone_id, self._clock.now(), background_theme
                )
            except InvalidClaimError as err:
                claim = None
                rejection = err.reason
            await self._store.async_set_record(pet_id, record)

        self._emit_refresh_events(refresh, transitions)
        self._async_notify()

        if claim is None:
            const.LOGGER.debug(
                "DEBUG: Milestone %s rejected for pet %s: %s",
                milestone_id,
                pet_id,
                rejection,
            )
            return {const.RESULT_CLAIMED: False, const.RESULT_REASON: rejection}

        const.LOGGER.info(
            "INFO: Pet %s claimed milestone %s (%s)",
            pet_id,
            milestone_id,
            claim.reward[const.DATA_REWARD_KIND],
        )
        level = record[const.DATA_PET_LEVEL]
        if claim.level_up is not None:
            self._emit_level_up(record, claim.level_up)
        return {
            const.RESULT_CLAIMED: True,
            const.RESULT_REWARD: claim.reward,
            const.RESULT_XP_AWARDED: claim.xp_awarded,
            const.RESULT_LEVELED_UP: bool(claim.level_up and claim.level_up.leveled_up),
            const.RESULT_NEW_LEVEL: level,
        }

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def emit(self, suffix: str, **payload: Any) -> None:
        """Send an entry-scoped dispatcher signal.

        The dispatcher only passes positional args, so listeners receive the
        payload as one dict.
        """
        const.LOGGER.debug(
            "DEBUG: Emitting signal '%s' for instance %s with payload keys: %s",
            suffix,
            self.entry_id,
            list(payload),
        )
        async_dispatcher_send(
            self.hass, get_event_signal(self.entry_id, suffix), payload
        )

    def listen(self, suffix: str, target: Callable[..., Any]) -> None:
        """Subscribe to an entry-scoped signal until the entry unloads."""
        unsub = async_dispatcher_connect(
            self.hass, get_event_signal(self.entry_id, suffix), target
        )
        self.coordinator.config_entry.async_on_unload(unsub)

    def _fire(self, suffix: str, event_type: str, **payload: Any) -> None:
        """Send a dispatcher signal and the matching bus event."""
        self.emit(suffix, **payload)
        self.hass.bus.async_fire(event_type, payload)

    def _emit_level_up(self, record: ProgressRecord, level_up: LevelUpResult) -> None:
        if not level_up.leveled_up:
            return
        const.LOGGER.info(
            "INFO: Pet '%s' reached level %s (+%s)",
            record[const.DATA_PET_NAME],
            level_up.level,
            level_up.levels_gained,
        )
        self._fire(
            const.SIGNAL_SUFFIX_LEVEL_UP,
            const.EVENT_LEVEL_UP,
            pet_id=record[const.DATA_PET_INTERNAL_ID],
            pet_name=record[const.DATA_PET_NAME],
            level=level_up.level,
            levels_gained=level_up.levels_gained,
        )

    def _emit_refresh_events(
        self, result: RefreshResult, transitions: set[str]
    ) -> None:
        """Announce the transitions found by a persisted refresh."""
        record = result.record
        pet_id = record[const.DATA_PET_INTERNAL_ID]
        pet_name = record[const.DATA_PET_NAME]

        if result.day_rolled_over:
            self.emit(const.SIGNAL_SUFFIX_DAY_ROLLOVER, pet_id=pet_id)
        if result.leveled_up:
            self._emit_level_up(
                record,
                LevelUpResult(
                    level=result.new_level,
                    xp=record[const.DATA_PET_XP],
                    xp_to_next_level=record[const.DATA_PET_XP_TO_NEXT_LEVEL],
                    levels_gained=result.levels_gained,
                ),
            )
        if const.SIGNAL_SUFFIX_HATCH_READY in transitions:
            self._fire(
                const.SIGNAL_SUFFIX_HATCH_READY,
                const.EVENT_HATCH_READY,
                pet_id=pet_id,
                pet_name=pet_name,
            )
        if result.newly_claimable_milestone is not None:
            self._fire(
                const.SIGNAL_SUFFIX_MILESTONE_REACHED,
                const.EVENT_MILESTONE_REACHED,
                pet_id=pet_id,
                pet_name=pet_name,
                milestone_id=result.newly_claimable_milestone,
            )
        if const.SIGNAL_SUFFIX_ADVENTURE_READY in transitions:
            self._fire(
                const.SIGNAL_SUFFIX_ADVENTURE_READY,
                const.EVENT_ADVENTURE_READY,
                pet_id=pet_id,
                pet_name=pet_name,
            )

    @callback
    def _async_notify(self) -> None:
        """Push the stored pets to coordinator listeners."""
        self.coordinator.async_set_updated_data(self.coordinator.pets_data)
