# File: helpers/flow_helpers.py
"""Config and options flow helpers for StepPet.

Schema builders and validators shared by the config flow and options flow.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import voluptuous as vol
from homeassistant.components.sensor import DOMAIN as SENSOR_DOMAIN
from homeassistant.helpers import selector

from .. import const

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant


def build_settings_schema(default: dict[str, Any] | None = None) -> vol.Schema:
    """Build schema for the step sensor and update interval."""
    default = default or {}
    default_entity = default.get(const.CONF_STEP_ENTITY)
    default_interval = default.get(
        const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL
    )

    entity_key = (
        vol.Required(const.CONF_STEP_ENTITY, default=default_entity)
        if default_entity
        else vol.Required(const.CONF_STEP_ENTITY)
    )
    return vol.Schema(
        {
            entity_key: selector.EntitySelector(
                selector.EntitySelectorConfig(domain=SENSOR_DOMAIN)
            ),
            vol.Required(
                const.CONF_UPDATE_INTERVAL, default=default_interval
            ): selector.NumberSelector(
                selector.NumberSelectorConfig(
                    min=const.MIN_UPDATE_INTERVAL,
                    max=const.MAX_UPDATE_INTERVAL,
                    step=1,
                    unit_of_measurement="min",
                    mode=selector.NumberSelectorMode.BOX,
                )
            ),
        }
    )


def build_settings_data(user_input: dict[str, Any]) -> dict[str, Any]:
    """Build entry options from form input."""
    return {
        const.CONF_STEP_ENTITY: user_input[const.CONF_STEP_ENTITY],
        const.CONF_UPDATE_INTERVAL: int(
            user_input.get(const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL)
        ),
    }


def validate_settings_inputs(
    hass: HomeAssistant, user_input: dict[str, Any]
) -> dict[str, str]:
    """Validate the step sensor choice.

    Returns:
        Dictionary of errors (empty if validation passes).
    """
    errors: dict[str, str] = {}
    if hass.states.get(user_input.get(const.CONF_STEP_ENTITY, "")) is None:
        errors[const.CONF_STEP_ENTITY] = const.TRANS_KEY_ERROR_ENTITY_NOT_FOUND
    return errors
