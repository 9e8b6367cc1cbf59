# File: helpers/__init__.py
"""Home Assistant-bound helper functions for StepPet.

This module contains functions that REQUIRE Home Assistant dependencies.
These helpers interact with the HA entity and device registries.

NOTE: Functions that need `hass` object belong here, NOT in utils/.

Submodules:
    - entity_helpers: Signal names, name lookups, entity registry cleanup
    - device_helpers: DeviceInfo construction and device removal
    - flow_helpers: Config/options flow schemas and validators
"""

from . import device_helpers, entity_helpers, flow_helpers

__all__ = [
    "device_helpers",
    "entity_helpers",
    "flow_helpers",
]
