"""Tests for degraded fade notifications."""

from unittest.mock import patch

from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.adaptive_fade.const import (
    DOMAIN,
    NOTIFICATION_ID,
    OPTION_NOTIFY_ON_FAILURE,
)
from custom_components.adaptive_fade.notifications import (
    _notify_degraded_fade,
    async_get_notifier,
)


class TestNotifyDegradedFade:
    """Test _notify_degraded_fade function."""

    def test_creates_notification(self, hass: HomeAssistant) -> None:
        """Test a persistent notification is created with a fixed id."""
        with patch(
            "custom_components.adaptive_fade.notifications.persistent_notification.async_create"
        ) as mock_create:
            _notify_degraded_fade(hass, "Kitchen: Hardware fade failed")

        mock_create.assert_called_once()
        args, kwargs = mock_create.call_args
        assert args == (hass, "Kitchen: Hardware fade failed")
        assert kwargs["notification_id"] == NOTIFICATION_ID
        assert kwargs["title"] == "Adaptive Fade: Fade incomplete"

    def test_failure_is_not_raised(self, hass: HomeAssistant) -> None:
        """Test a failing notification does not propagate."""
        with patch(
            "custom_components.adaptive_fade.notifications.persistent_notification.async_create",
            side_effect=HomeAssistantError("boom"),
        ):
            _notify_degraded_fade(hass, "message")


class TestGetNotifier:
    """Test async_get_notifier function."""

    def test_enabled_by_default(self, hass: HomeAssistant) -> None:
        """Test the notifier is returned when the option is not set."""
        entry = MockConfigEntry(domain=DOMAIN, options={})

        notifier = async_get_notifier(hass, entry)

        assert notifier is not None
        with patch(
            "custom_components.adaptive_fade.notifications.persistent_notification.async_create"
        ) as mock_create:
            notifier("message")
        mock_create.assert_called_once()

    def test_disabled_by_option(self, hass: HomeAssistant) -> None:
        """Test no notifier when notifications are turned off."""
        entry = MockConfigEntry(domain=DOMAIN, options={OPTION_NOTIFY_ON_FAILURE: False})

        assert async_get_notifier(hass, entry) is None
