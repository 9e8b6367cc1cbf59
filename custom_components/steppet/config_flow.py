# File: config_flow.py
"""Config flow for the StepPet integration.

A single instance follows one step sensor entity. Settings live in the entry
options so the options flow can edit them.
"""

from __future__ import annotations

from typing import Any

from homeassistant import config_entries
from homeassistant.core import callback

from . import const
from .helpers import flow_helpers as fh
from .options_flow import SteppetOptionsFlowHandler


class SteppetConfigFlow(config_entries.ConfigFlow, domain=const.DOMAIN):
    """Config Flow for StepPet."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> config_entries.ConfigFlowResult:
        """Pick the step sensor and the refresh interval."""
        if any(self._async_current_entries()):
            return self.async_abort(reason=const.TRANS_KEY_ERROR_SINGLE_INSTANCE)

        errors: dict[str, str] = {}
        if user_input is not None:
            errors = fh.validate_settings_inputs(self.hass, user_input)
            if not errors:
                options = fh.build_settings_data(user_input)
                const.LOGGER.debug(
                    "DEBUG: Creating StepPet entry for step sensor %s",
                    options[const.CONF_STEP_ENTITY],
                )
                return self.async_create_entry(
                    title="StepPet", data={}, options=options
                )

        return self.async_show_form(
            step_id=const.CONFIG_FLOW_STEP_USER,
            data_schema=fh.build_settings_schema(user_input),
            errors=errors,
        )

    @staticmethod
    @callback
    def async_get_options_flow(
        config_entry: config_entries.ConfigEntry,
    ) -> SteppetOptionsFlowHandler:
        """Return the Options Flow."""
        return SteppetOptionsFlowHandler()
