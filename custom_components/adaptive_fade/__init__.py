"""The Adaptive Fade integration."""

from __future__ import annotations

import contextlib
import logging
from typing import Any

import voluptuous as vol
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import ATTR_ENTITY_ID
from homeassistant.core import (
    HomeAssistant,
    ServiceCall,
    ServiceResponse,
    SupportsResponse,
)
from homeassistant.exceptions import ServiceValidationError
from homeassistant.helpers import config_validation as cv
from homeassistant.helpers.storage import Store
from homeassistant.helpers.typing import ConfigType

from .const import (
    ATTR_BUFFER,
    ATTR_DURATION,
    ATTR_FADE_DURATION,
    ATTR_MANUAL_OVERRIDE,
    ATTR_PROFILE,
    DEFAULT_FADE_BUFFER,
    DEFAULT_FADE_DURATION,
    DEFAULT_LOG_LEVEL,
    DOMAIN,
    LOG_LEVEL_DEBUG,
    LOG_LEVEL_INFO,
    LOG_LEVEL_WARNING,
    OPTION_FADE_BUFFER,
    OPTION_FADE_DURATION,
    OPTION_LOG_LEVEL,
    SERVICE_FADE_OUT,
    SERVICE_REPORT,
    SERVICE_RESTORE,
    SERVICE_UPDATE_ADAPTIVE_STATE,
    STORAGE_KEY,
    STORAGE_VERSION,
)
from .coordinator import FadeCoordinator
from .errors import DeviceNotFound, MissingDeviceId
from .notifications import async_get_notifier
from .platform import HomeAssistantPlatform
from .state_store import PersistentStateStore
from .websocket_api import async_register_websocket_api

_LOGGER = logging.getLogger(__name__)

SERVICES = (
    SERVICE_FADE_OUT,
    SERVICE_RESTORE,
    SERVICE_REPORT,
    SERVICE_UPDATE_ADAPTIVE_STATE,
)

FADE_OUT_SCHEMA = vol.Schema(
    {
        vol.Required(ATTR_ENTITY_ID): cv.entity_id,
        vol.Optional(ATTR_DURATION): vol.All(vol.Coerce(float), vol.Range(min=0, max=3600)),
        vol.Optional(ATTR_BUFFER): vol.All(vol.Coerce(float), vol.Range(min=0, max=60)),
    }
)

RESTORE_SCHEMA = vol.Schema({vol.Required(ATTR_ENTITY_ID): cv.entity_id})

REPORT_SCHEMA = vol.Schema({})

UPDATE_ADAPTIVE_STATE_SCHEMA = vol.Schema(
    {
        vol.Required(ATTR_ENTITY_ID): cv.entity_id,
        vol.Optional(ATTR_MANUAL_OVERRIDE): cv.boolean,
        vol.Optional(ATTR_PROFILE): cv.string,
        vol.Optional(ATTR_FADE_DURATION): vol.All(
            vol.Coerce(float), vol.Range(min=0, max=3600)
        ),
    }
)


# =============================================================================
# Integration Setup
# =============================================================================


async def async_setup(hass: HomeAssistant, _config: ConfigType) -> bool:
    """Set up the Adaptive Fade component."""
    if not hass.config_entries.async_entries(DOMAIN):
        hass.async_create_task(
            hass.config_entries.flow.async_init(DOMAIN, context={"source": "import"})
        )
    return True


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up Adaptive Fade from a config entry."""
    store: Store[dict[str, Any]] = Store(hass, STORAGE_VERSION, STORAGE_KEY)
    state_store = PersistentStateStore(store)
    await state_store.async_load()

    coordinator = FadeCoordinator(
        platform=HomeAssistantPlatform(hass),
        store=state_store,
        notifier=async_get_notifier(hass, entry),
    )
    hass.data[DOMAIN] = coordinator

    fade_duration = entry.options.get(OPTION_FADE_DURATION, DEFAULT_FADE_DURATION)
    fade_buffer = entry.options.get(OPTION_FADE_BUFFER, DEFAULT_FADE_BUFFER)

    async def handle_fade_out(call: ServiceCall) -> ServiceResponse:
        """Start a fade-out on one light or group."""
        try:
            result = await coordinator.async_fade_out(
                call.data.get(ATTR_ENTITY_ID),
                call.data.get(ATTR_DURATION, fade_duration),
                call.data.get(ATTR_BUFFER, fade_buffer),
            )
        except (DeviceNotFound, MissingDeviceId) as err:
            raise ServiceValidationError(str(err)) from err
        return result.as_response() if call.return_response else None

    async def handle_restore(call: ServiceCall) -> ServiceResponse:
        """Restore the settings saved by the last fade-out."""
        try:
            result = await coordinator.async_restore(call.data.get(ATTR_ENTITY_ID))
        except (DeviceNotFound, MissingDeviceId) as err:
            raise ServiceValidationError(str(err)) from err
        return result.as_response() if call.return_response else None

    async def handle_report(_call: ServiceCall) -> ServiceResponse:
        """Return the diagnostics report."""
        return {"report": await coordinator.async_report()}

    async def handle_update_adaptive_state(call: ServiceCall) -> None:
        """Record state reported by adaptive lighting control."""
        coordinator.update_adaptive_state(
            call.data[ATTR_ENTITY_ID],
            manual_override=call.data.get(ATTR_MANUAL_OVERRIDE),
            profile=call.data.get(ATTR_PROFILE),
            fade_duration_s=call.data.get(ATTR_FADE_DURATION),
        )

    hass.services.async_register(
        DOMAIN,
        SERVICE_FADE_OUT,
        handle_fade_out,
        schema=FADE_OUT_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        DOMAIN,
        SERVICE_RESTORE,
        handle_restore,
        schema=RESTORE_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        DOMAIN,
        SERVICE_REPORT,
        handle_report,
        schema=REPORT_SCHEMA,
        supports_response=SupportsResponse.ONLY,
    )
    hass.services.async_register(
        DOMAIN,
        SERVICE_UPDATE_ADAPTIVE_STATE,
        handle_update_adaptive_state,
        schema=UPDATE_ADAPTIVE_STATE_SCHEMA,
    )

    async_register_websocket_api(hass)

    entry.async_on_unload(entry.add_update_listener(async_update_options))

    # Apply stored log level on startup
    await _apply_stored_log_level(hass, entry)

    return True


async def _apply_stored_log_level(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Apply the stored log level setting."""
    log_level = entry.options.get(OPTION_LOG_LEVEL, DEFAULT_LOG_LEVEL)
    if log_level not in (LOG_LEVEL_WARNING, LOG_LEVEL_INFO, LOG_LEVEL_DEBUG):
        log_level = LOG_LEVEL_WARNING

    # Logger service may not be available in tests
    with contextlib.suppress(Exception):
        await hass.services.async_call(
            "logger",
            "set_level",
            {f"custom_components.{DOMAIN}": log_level},
        )


async def async_update_options(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Handle options update."""
    await hass.config_entries.async_reload(entry.entry_id)


async def async_unload_entry(hass: HomeAssistant, _entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    coordinator: FadeCoordinator = hass.data[DOMAIN]

    store = coordinator.store
    if isinstance(store, PersistentStateStore):
        await store.async_flush()
        store.close()

    for service in SERVICES:
        hass.services.async_remove(DOMAIN, service)
    hass.data.pop(DOMAIN, None)

    return True
