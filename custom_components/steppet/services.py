# File: services.py
"""Defines custom services for the StepPet integration.

These services allow direct actions through scripts or automations. Every
service except reset_pet returns response data describing the outcome.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

import voluptuous as vol
from homeassistant.core import (
    HomeAssistant,
    ServiceCall,
    ServiceResponse,
    SupportsResponse,
)
from homeassistant.exceptions import HomeAssistantError, ServiceValidationError
from homeassistant.helpers import config_validation as cv

from . import const
from .coordinator import SteppetDataCoordinator
from .data_builders import EntityValidationError
from .engines import ProgressionEngine
from .helpers.entity_helpers import get_first_steppet_entry
from .store import RecordNotFoundError

# --- Service Schemas ---
CREATE_PET_SCHEMA = vol.Schema(
    {
        vol.Optional(const.FIELD_PET_NAME): cv.string,
    }
)

REFRESH_SCHEMA = vol.Schema(
    {
        vol.Optional(const.FIELD_PET_NAME): cv.string,
    }
)

PET_ONLY_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_PET_NAME): cv.string,
    }
)

HATCH_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_PET_NAME): cv.string,
        vol.Optional(const.FIELD_SPECIES): vol.In(ProgressionEngine.all_species()),
        vol.Optional(const.FIELD_NEW_NAME): cv.string,
    }
)

CLAIM_MILESTONE_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_PET_NAME): cv.string,
        vol.Required(const.FIELD_MILESTONE_ID): cv.string,
        vol.Optional(const.FIELD_BACKGROUND_THEME): cv.string,
    }
)

SERVICES = (
    const.SERVICE_CREATE_PET,
    const.SERVICE_REFRESH,
    const.SERVICE_HATCH,
    const.SERVICE_CLAIM_FEED,
    const.SERVICE_CLAIM_FETCH,
    const.SERVICE_ADVENTURE,
    const.SERVICE_CLAIM_MILESTONE,
    const.SERVICE_RESET_PET,
)


def _get_coordinator(hass: HomeAssistant, service: str) -> SteppetDataCoordinator:
    """Return the coordinator of the first StepPet entry."""
    entry_id = get_first_steppet_entry(hass)
    if not entry_id:
        const.LOGGER.warning("WARNING: %s: %s", service, const.MSG_NO_ENTRY_FOUND)
        raise HomeAssistantError(const.MSG_NO_ENTRY_FOUND)
    return hass.data[const.DOMAIN][entry_id][const.COORDINATOR]


def _pet_not_found(pet_name: str) -> ServiceValidationError:
    return ServiceValidationError(
        const.ERROR_PET_NOT_FOUND_FMT.format(pet_name),
        translation_domain=const.DOMAIN,
        translation_key=const.TRANS_KEY_ERROR_PET_NOT_FOUND,
        translation_placeholders={"pet_name": pet_name},
    )


def _resolve_pet_id(coordinator: SteppetDataCoordinator, pet_name: str) -> str:
    """Map a pet name to its internal_id or raise ServiceValidationError."""
    pet_id = coordinator.pet_manager.get_pet_id_by_name(pet_name)
    if not pet_id:
        const.LOGGER.warning("WARNING: Pet '%s' not found", pet_name)
        raise _pet_not_found(pet_name)
    return pet_id


async def _async_run_for_pet(
    call: ServiceCall,
    coordinator: SteppetDataCoordinator,
    action: Callable[[str], Awaitable[dict[str, Any]]],
) -> dict[str, Any]:
    """Resolve the pet named in the call and run action on its id."""
    pet_name = call.data[const.FIELD_PET_NAME]
    pet_id = _resolve_pet_id(coordinator, pet_name)
    try:
        return await action(pet_id)
    except RecordNotFoundError as err:
        raise _pet_not_found(pet_name) from err
    except EntityValidationError as err:
        raise ServiceValidationError(
            str(err),
            translation_domain=const.DOMAIN,
            translation_key=err.translation_key,
        ) from err


def async_setup_services(hass: HomeAssistant) -> None:
    """Register StepPet services."""

    async def handle_create_pet(call: ServiceCall) -> ServiceResponse:
        """Handle creating a new egg."""
        coordinator = _get_coordinator(hass, const.SERVICE_CREATE_PET)
        try:
            record = await coordinator.pet_manager.async_create_pet(
                call.data.get(const.FIELD_PET_NAME), owner=call.context.user_id
            )
        except EntityValidationError as err:
            raise ServiceValidationError(
                const.ERROR_DUPLICATE_PET_FMT.format(
                    call.data.get(const.FIELD_PET_NAME, const.DEFAULT_PET_NAME)
                ),
                translation_domain=const.DOMAIN,
                translation_key=err.translation_key,
            ) from err
        return dict(record)

    async def handle_refresh(call: ServiceCall) -> ServiceResponse:
        """Handle refreshing one pet, or every pet when no name is given."""
        coordinator = _get_coordinator(hass, const.SERVICE_REFRESH)
        if const.FIELD_PET_NAME not in call.data:
            results = await coordinator.pet_manager.async_refresh_all()
            return {
                pet_id: result.as_dict() for pet_id, result in results.items()
            }

        async def _refresh(pet_id: str) -> dict[str, Any]:
            result = await coordinator.pet_manager.async_refresh(pet_id)
            return result.as_dict()

        return await _async_run_for_pet(call, coordinator, _refresh)

    async def handle_hatch(call: ServiceCall) -> ServiceResponse:
        """Handle hatching an egg."""
        coordinator = _get_coordinator(hass, const.SERVICE_HATCH)

        async def _hatch(pet_id: str) -> dict[str, Any]:
            return await coordinator.pet_manager.async_hatch(
                pet_id,
                species=call.data.get(const.FIELD_SPECIES),
                name=call.data.get(const.FIELD_NEW_NAME),
            )

        return await _async_run_for_pet(call, coordinator, _hatch)

    async def handle_claim_feed(call: ServiceCall) -> ServiceResponse:
        """Handle claiming the daily feed reward."""
        coordinator = _get_coordinator(hass, const.SERVICE_CLAIM_FEED)
        return await _async_run_for_pet(
            call, coordinator, coordinator.pet_manager.async_claim_feed
        )

    async def handle_claim_fetch(call: ServiceCall) -> ServiceResponse:
        """Handle claiming a fetch reward."""
        coordinator = _get_coordinator(hass, const.SERVICE_CLAIM_FETCH)
        return await _async_run_for_pet(
            call, coordinator, coordinator.pet_manager.async_claim_fetch
        )

    async def handle_adventure(call: ServiceCall) -> ServiceResponse:
        """Handle starting or completing the weekly adventure."""
        coordinator = _get_coordinator(hass, const.SERVICE_ADVENTURE)
        return await _async_run_for_pet(
            call,
            coordinator,
            coordinator.pet_manager.async_start_or_complete_adventure,
        )

    async def handle_claim_milestone(call: ServiceCall) -> ServiceResponse:
        """Handle claiming a reached milestone."""
        coordinator = _get_coordinator(hass, const.SERVICE_CLAIM_MILESTONE)

        async def _claim(pet_id: str) -> dict[str, Any]:
            return await coordinator.pet_manager.async_claim_milestone(
                pet_id,
                call.data[const.FIELD_MILESTONE_ID],
                call.data.get(const.FIELD_BACKGROUND_THEME),
            )

        return await _async_run_for_pet(call, coordinator, _claim)

    async def handle_reset_pet(call: ServiceCall) -> None:
        """Handle deleting a pet and all of its progress."""
        coordinator = _get_coordinator(hass, const.SERVICE_RESET_PET)

        async def _reset(pet_id: str) -> dict[str, Any]:
            await coordinator.pet_manager.async_reset_pet(pet_id)
            return {}

        await _async_run_for_pet(call, coordinator, _reset)
        const.LOGGER.info(
            "INFO: Pet '%s' has been reset", call.data[const.FIELD_PET_NAME]
        )

    # --- Register Services ---
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_CREATE_PET,
        handle_create_pet,
        schema=CREATE_PET_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_REFRESH,
        handle_refresh,
        schema=REFRESH_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_HATCH,
        handle_hatch,
        schema=HATCH_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_CLAIM_FEED,
        handle_claim_feed,
        schema=PET_ONLY_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_CLAIM_FETCH,
        handle_claim_fetch,
        schema=PET_ONLY_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_ADVENTURE,
        handle_adventure,
        schema=PET_ONLY_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_CLAIM_MILESTONE,
        handle_claim_milestone,
        schema=CLAIM_MILESTONE_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_RESET_PET,
        handle_reset_pet,
        schema=PET_ONLY_SCHEMA,
    )

    const.LOGGER.info("INFO: StepPet services have been registered successfully")


async def async_unload_services(hass: HomeAssistant) -> None:
    """Unregister StepPet services when unloading the integration."""
    for service in SERVICES:
        if hass.services.has_service(const.DOMAIN, service):
            hass.services.async_remove(const.DOMAIN, service)

    const.LOGGER.info("INFO: StepPet services have been unregistered")
