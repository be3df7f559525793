"""Notification helpers for fades that did not reach every light."""

from __future__ import annotations

import logging
from collections.abc import Callable

from homeassistant.components import persistent_notification
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.exceptions import HomeAssistantError

from .const import (
    DEFAULT_NOTIFY_ON_FAILURE,
    NOTIFICATION_ID,
    OPTION_NOTIFY_ON_FAILURE,
)

_LOGGER = logging.getLogger(__name__)


@callback
def _notify_degraded_fade(hass: HomeAssistant, message: str) -> None:
    """Show (or replace) the persistent notification for a degraded fade.

    Best effort: a failing notification is logged, never raised.
    """
    try:
        persistent_notification.async_create(
            hass,
            message,
            title="Adaptive Fade: Fade incomplete",
            notification_id=NOTIFICATION_ID,
        )
    except HomeAssistantError as err:
        _LOGGER.warning("Could not create notification: %s", err)


@callback
def async_get_notifier(
    hass: HomeAssistant, entry: ConfigEntry
) -> Callable[[str], None] | None:
    """Return the notification sink for the coordinator, or None when disabled."""
    if not entry.options.get(OPTION_NOTIFY_ON_FAILURE, DEFAULT_NOTIFY_ON_FAILURE):
        return None
    return lambda message: _notify_degraded_fade(hass, message)
