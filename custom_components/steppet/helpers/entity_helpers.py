# File: helpers/entity_helpers.py
"""Entity registry and lookup helper functions for StepPet.

Functions that build instance-scoped signal names, resolve pet names to ids,
and remove registry entries for deleted pets.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.helpers.entity_registry import (
    async_entries_for_config_entry,
    async_get as async_get_entity_registry,
)

from .. import const

if TYPE_CHECKING:
    from collections.abc import Mapping

    from homeassistant.core import HomeAssistant


# ==============================================================================
# Event Signal Helpers (Manager Communication)
# ==============================================================================


def get_event_signal(entry_id: str, suffix: str) -> str:
    """Build instance-scoped event signal name for dispatcher.

    Format: 'steppet_{entry_id}_{suffix}'

    Args:
        entry_id: ConfigEntry.entry_id from coordinator
        suffix: Signal suffix constant from const.py (e.g., SIGNAL_SUFFIX_LEVEL_UP)

    Returns:
        Fully qualified signal name scoped to this integration instance
    """
    return f"{const.DOMAIN}_{entry_id}_{suffix}"


# ==============================================================================
# Lookup Helpers
# ==============================================================================


def get_first_steppet_entry(hass: HomeAssistant) -> str | None:
    """Retrieve the first StepPet config entry ID."""
    domain_entries = hass.data.get(const.DOMAIN)
    if not domain_entries:
        return None
    return next(iter(domain_entries.keys()), None)


def get_pet_id_by_name(
    pets: Mapping[str, Mapping[str, Any]], pet_name: str
) -> str | None:
    """Retrieve the pet_id for a display name (case-insensitive)."""
    wanted = pet_name.strip().casefold()
    for pet_id, pet_info in pets.items():
        if str(pet_info.get(const.DATA_PET_NAME, "")).casefold() == wanted:
            return pet_id
    return None


# ==============================================================================
# Registry Cleanup
# ==============================================================================


def remove_entities_by_item_id(hass: HomeAssistant, entry_id: str, item_id: str) -> int:
    """Remove all entities whose unique_id references the given item_id.

    Uses delimiter matching so pet ids that share a prefix are not confused.

    Returns:
        Count of removed entities.
    """
    ent_reg = async_get_entity_registry(hass)
    prefix = f"{entry_id}_"
    removed_count = 0

    for entity_entry in async_entries_for_config_entry(ent_reg, entry_id):
        unique_id = str(entity_entry.unique_id)
        if not unique_id.startswith(prefix):
            continue
        if f"_{item_id}_" in unique_id or unique_id.endswith(f"_{item_id}"):
            ent_reg.async_remove(entity_entry.entity_id)
            removed_count += 1
            const.LOGGER.debug(
                "Removed entity %s (uid: %s) for deleted pet %s",
                entity_entry.entity_id,
                unique_id,
                item_id,
            )

    if removed_count:
        const.LOGGER.info("Removed %d entities for deleted pet %s", removed_count, item_id)
    return removed_count
