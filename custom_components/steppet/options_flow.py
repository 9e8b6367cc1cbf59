# File: options_flow.py
"""Options Flow for the StepPet integration.

Edits the step sensor and update interval. Saving reloads the integration.
"""

from __future__ import annotations

from typing import Any

from homeassistant import config_entries

from . import const
from .helpers import flow_helpers as fh


class SteppetOptionsFlowHandler(config_entries.OptionsFlow):
    """Options Flow for the step sensor and update interval."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> config_entries.ConfigFlowResult:
        """Edit the integration settings."""
        errors: dict[str, str] = {}
        if user_input is not None:
            errors = fh.validate_settings_inputs(self.hass, user_input)
            if not errors:
                options = fh.build_settings_data(user_input)
                const.LOGGER.debug(
                    "DEBUG: Options updated: Step Entity=%s, Update Interval=%s",
                    options[const.CONF_STEP_ENTITY],
                    options[const.CONF_UPDATE_INTERVAL],
                )
                return self.async_create_entry(title="", data=options)

        return self.async_show_form(
            step_id=const.OPTIONS_FLOW_STEP_INIT,
            data_schema=fh.build_settings_schema(
                user_input or dict(self.config_entry.options)
            ),
            errors=errors,
        )
