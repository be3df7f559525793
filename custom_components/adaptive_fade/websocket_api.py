"""WebSocket API for Adaptive Fade."""

from __future__ import annotations

import dataclasses
from typing import Any

import voluptuous as vol
from homeassistant.components import websocket_api
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

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
from .report import summarize

# WebSocket field -> (option key, default)
SETTINGS: dict[str, tuple[str, Any]] = {
    "fade_duration": (OPTION_FADE_DURATION, DEFAULT_FADE_DURATION),
    "fade_buffer": (OPTION_FADE_BUFFER, DEFAULT_FADE_BUFFER),
    "notify_on_failure": (OPTION_NOTIFY_ON_FAILURE, DEFAULT_NOTIFY_ON_FAILURE),
    "log_level": (OPTION_LOG_LEVEL, DEFAULT_LOG_LEVEL),
}


def async_register_websocket_api(hass: HomeAssistant) -> None:
    """Register WebSocket API commands."""
    for command in (ws_get_status, ws_get_settings, ws_save_settings):
        websocket_api.async_register_command(hass, command)


async def async_get_status(hass: HomeAssistant) -> dict[str, Any]:
    """Adaptive lighting and fade status for every registered device."""
    rows = await hass.data[DOMAIN].reporter.async_collect()
    auto, manual = summarize(rows)
    return {
        "devices": [dataclasses.asdict(row) for row in rows],
        "auto": auto,
        "manual": manual,
    }


@websocket_api.websocket_command({"type": "adaptive_fade/get_status"})
@websocket_api.async_response
async def ws_get_status(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    if DOMAIN not in hass.data:
        connection.send_error(msg["id"], "not_loaded", "Adaptive Fade is not loaded")
        return
    connection.send_result(msg["id"], await async_get_status(hass))


def _get_config_entry(hass: HomeAssistant) -> ConfigEntry | None:
    entries = hass.config_entries.async_entries(DOMAIN)
    return entries[0] if entries else None


@websocket_api.websocket_command({"type": "adaptive_fade/get_settings"})
@websocket_api.async_response
async def ws_get_settings(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    """Return the current options, with defaults for any not yet saved."""
    entry = _get_config_entry(hass)
    if entry is None:
        connection.send_error(msg["id"], "not_found", "Config entry not found")
        return

    connection.send_result(
        msg["id"],
        {
            field: entry.options.get(option, default)
            for field, (option, default) in SETTINGS.items()
        },
    )


@websocket_api.websocket_command(
    {
        "type": "adaptive_fade/save_settings",
        vol.Optional("fade_duration"): vol.All(int, vol.Range(min=1, max=3600)),
        vol.Optional("fade_buffer"): vol.All(int, vol.Range(min=0, max=60)),
        vol.Optional("notify_on_failure"): bool,
        vol.Optional("log_level"): vol.In([LOG_LEVEL_WARNING, LOG_LEVEL_INFO, LOG_LEVEL_DEBUG]),
    }
)
@websocket_api.async_response
async def ws_save_settings(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    """Merge the given fields into the options.

    Updating the options reloads the entry, which applies them.
    """
    entry = _get_config_entry(hass)
    if entry is None:
        connection.send_error(msg["id"], "not_found", "Config entry not found")
        return

    options = dict(entry.options)
    for field, (option, _default) in SETTINGS.items():
        if field in msg:
            options[option] = msg[field]
    hass.config_entries.async_update_entry(entry, options=options)

    connection.send_result(msg["id"], {"success": True})
