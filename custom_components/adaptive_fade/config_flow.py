"""Config flow for Adaptive Fade integration."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import voluptuous as vol
from homeassistant.config_entries import ConfigEntry, ConfigFlow, ConfigFlowResult, OptionsFlow
from homeassistant.core import callback

from .const import (
    DEFAULT_FADE_BUFFER,
    DEFAULT_FADE_DURATION,
    DEFAULT_LOG_LEVEL,
    DEFAULT_NOTIFY_ON_FAILURE,
    DOMAIN,
    LOG_LEVEL_DEBUG,
    LOG_LEVEL_INFO,
    LOG_LEVEL_WARNING,
    OPTION_FADE_BUFFER,
    OPTION_FADE_DURATION,
    OPTION_LOG_LEVEL,
    OPTION_NOTIFY_ON_FAILURE,
)

TITLE = "Adaptive Fade"


def options_schema(options: Mapping[str, Any]) -> vol.Schema:
    """Options form, pre-filled from the current options."""
    return vol.Schema(
        {
            vol.Optional(
                OPTION_FADE_DURATION,
                default=options.get(OPTION_FADE_DURATION, DEFAULT_FADE_DURATION),
            ): vol.All(vol.Coerce(int), vol.Range(min=1, max=3600)),
            vol.Optional(
                OPTION_FADE_BUFFER,
                default=options.get(OPTION_FADE_BUFFER, DEFAULT_FADE_BUFFER),
            ): vol.All(vol.Coerce(int), vol.Range(min=0, max=60)),
            vol.Optional(
                OPTION_NOTIFY_ON_FAILURE,
                default=options.get(OPTION_NOTIFY_ON_FAILURE, DEFAULT_NOTIFY_ON_FAILURE),
            ): bool,
            vol.Optional(
                OPTION_LOG_LEVEL,
                default=options.get(OPTION_LOG_LEVEL, DEFAULT_LOG_LEVEL),
            ): vol.In([LOG_LEVEL_WARNING, LOG_LEVEL_INFO, LOG_LEVEL_DEBUG]),
        }
    )


class AdaptiveFadeConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Adaptive Fade.

    There is nothing to ask: the entry only carries options, so both the
    user and the import step create it straight away.
    """

    VERSION = 1
    MINOR_VERSION = 1

    def _async_create_single_entry(self) -> ConfigFlowResult:
        if self._async_current_entries():
            return self.async_abort(reason="single_instance_allowed")
        return self.async_create_entry(title=TITLE, data={})

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Handle setup started from the UI."""
        return self._async_create_single_entry()

    async def async_step_import(
        self, import_config: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Handle the entry created automatically by async_setup."""
        return self._async_create_single_entry()

    @staticmethod
    @callback
    def async_get_options_flow(config_entry: ConfigEntry) -> AdaptiveFadeOptionsFlow:
        return AdaptiveFadeOptionsFlow()


class AdaptiveFadeOptionsFlow(OptionsFlow):
    """Fade defaults, failure notifications and log level."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        if user_input is not None:
            return self.async_create_entry(data=user_input)

        return self.async_show_form(
            step_id="init",
            data_schema=options_schema(self.config_entry.options),
        )
