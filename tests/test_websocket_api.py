"""Tests for WebSocket API."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.adaptive_fade.const import (
    DEFAULT_FADE_BUFFER,
    DEFAULT_FADE_DURATION,
    DOMAIN,
    OPTION_FADE_DURATION,
    OPTION_LOG_LEVEL,
)
from custom_components.adaptive_fade.websocket_api import (
    async_get_status,
    async_register_websocket_api,
)


async def test_get_status(
    hass: HomeAssistant,
    hass_ws_client,
    init_integration: MockConfigEntry,
    mock_light_entity: str,
) -> None:
    """Test get_status returns one row per registered device."""
    coordinator = hass.data[DOMAIN]
    coordinator.update_adaptive_state(mock_light_entity, manual_override=True)
    coordinator.update_adaptive_state("light.removed", profile="Day")

    client = await hass_ws_client(hass)
    await client.send_json({"id": 1, "type": "adaptive_fade/get_status"})
    msg = await client.receive_json()

    assert msg["success"]
    result = msg["result"]
    assert result["auto"] == 1
    assert result["manual"] == 1
    kitchen, removed = result["devices"]
    assert kitchen["device_id"] == mock_light_entity
    assert kitchen["name"] == "Kitchen"
    assert kitchen["manual_override"] is True
    assert kitchen["dim"] == 0.8
    assert kitchen["script_fade_active"] is False
    assert removed["known"] is False
    assert removed["last_profile"] == "Day"


async def test_get_status_reports_fade(
    hass: HomeAssistant,
    init_integration: MockConfigEntry,
    mock_light_entity: str,
) -> None:
    """Test a running fade shows up in the status rows."""
    coordinator = hass.data[DOMAIN]
    coordinator.update_adaptive_state(mock_light_entity, profile="Day")
    coordinator.script_fades.mark_active(mock_light_entity, 20, 2)

    status = await async_get_status(hass)

    row = status["devices"][0]
    assert row["script_fade_active"] is True
    assert 21 <= row["script_fade_remaining_s"] <= 22


async def test_get_status_not_loaded(hass: HomeAssistant, hass_ws_client) -> None:
    """Test get_status errors when the integration is not loaded."""
    client = await hass_ws_client(hass)
    async_register_websocket_api(hass)

    await client.send_json({"id": 1, "type": "adaptive_fade/get_status"})
    msg = await client.receive_json()

    assert not msg["success"]
    assert msg["error"]["code"] == "not_loaded"


async def test_get_settings_defaults(
    hass: HomeAssistant,
    hass_ws_client,
    init_integration: MockConfigEntry,
) -> None:
    """Test get_settings returns defaults when no options are stored."""
    client = await hass_ws_client(hass)
    await client.send_json({"id": 1, "type": "adaptive_fade/get_settings"})
    msg = await client.receive_json()

    assert msg["success"]
    assert msg["result"] == {
        "fade_duration": DEFAULT_FADE_DURATION,
        "fade_buffer": DEFAULT_FADE_BUFFER,
        "notify_on_failure": True,
        "log_level": "warning",
    }


async def test_save_settings(
    hass: HomeAssistant,
    hass_ws_client,
    init_integration: MockConfigEntry,
    mock_store: MagicMock,
) -> None:
    """Test save_settings updates the entry options."""
    client = await hass_ws_client(hass)

    with patch("custom_components.adaptive_fade.Store", return_value=mock_store):
        await client.send_json(
            {
                "id": 1,
                "type": "adaptive_fade/save_settings",
                "fade_duration": 90,
                "log_level": "debug",
            }
        )
        msg = await client.receive_json()
        await hass.async_block_till_done()

    assert msg["success"]
    assert init_integration.options[OPTION_FADE_DURATION] == 90
    assert init_integration.options[OPTION_LOG_LEVEL] == "debug"


async def test_save_settings_rejects_invalid(
    hass: HomeAssistant,
    hass_ws_client,
    init_integration: MockConfigEntry,
) -> None:
    """Test save_settings validates values."""
    client = await hass_ws_client(hass)
    await client.send_json(
        {"id": 1, "type": "adaptive_fade/save_settings", "fade_duration": 0}
    )
    msg = await client.receive_json()

    assert not msg["success"]
    assert OPTION_FADE_DURATION not in init_integration.options
