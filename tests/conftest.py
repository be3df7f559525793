"""Fixtures for Adaptive Fade integration tests."""

from __future__ import annotations

from collections.abc import Callable, Generator
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from homeassistant.components.light import (
    ATTR_BRIGHTNESS,
    ATTR_COLOR_TEMP_KELVIN,
    ATTR_MAX_COLOR_TEMP_KELVIN,
    ATTR_MIN_COLOR_TEMP_KELVIN,
    ATTR_SUPPORTED_COLOR_MODES,
    ColorMode,
)
from homeassistant.const import ATTR_ENTITY_ID, ATTR_FRIENDLY_NAME, STATE_OFF, STATE_ON
from homeassistant.core import HomeAssistant, ServiceCall
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.adaptive_fade.const import (
    CAPABILITY_DIM,
    CAPABILITY_LIGHT_TEMPERATURE,
    CAPABILITY_ONOFF,
    DOMAIN,
)
from custom_components.adaptive_fade.coordinator import FadeCoordinator
from custom_components.adaptive_fade.errors import (
    CapabilityUnavailable,
    DelegationFailure,
    DeviceNotFound,
)
from custom_components.adaptive_fade.platform import Capability, Device, DevicePlatform
from custom_components.adaptive_fade.state_store import MemoryStateStore


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(
    enable_custom_integrations: None,
) -> Generator[None]:
    """Enable custom integrations for all tests."""
    yield


# =============================================================================
# Fake device platform
# =============================================================================


class FakePlatform(DevicePlatform):
    """In-memory devices that record every capability change."""

    def __init__(self) -> None:
        self.devices: dict[str, Device] = {}
        self.calls: list[tuple[Any, ...]] = []
        self.failing_transitions: set[str] = set()
        self.failing_sets: set[str] = set()
        # Called with (kind, device_id) before each change is applied
        self.observer: Callable[[str, str], None] | None = None

    def add_light(
        self,
        device_id: str,
        name: str,
        dim: float | None = 0.7,
        temperature: float | None = 0.4,
        device_class: str = "light",
        zone: str | None = None,
    ) -> Device:
        capabilities = {
            CAPABILITY_ONOFF: Capability(CAPABILITY_ONOFF, bool(dim)),
            CAPABILITY_DIM: Capability(CAPABILITY_DIM, dim),
        }
        if temperature is not None:
            capabilities[CAPABILITY_LIGHT_TEMPERATURE] = Capability(
                CAPABILITY_LIGHT_TEMPERATURE, temperature
            )
        device = Device(
            id=device_id,
            name=name,
            device_class=device_class,
            zone=zone,
            capabilities=capabilities,
        )
        self.devices[device_id] = device
        return device

    async def async_get_device(self, device_id: str) -> Device:
        if device_id not in self.devices:
            raise DeviceNotFound(device_id)
        return self.devices[device_id]

    async def async_get_devices(self) -> list[Device]:
        return list(self.devices.values())

    async def async_set_capability(self, device_id: str, capability: str, value: Any) -> None:
        device = await self.async_get_device(device_id)
        if not device.has_capability(capability):
            raise CapabilityUnavailable(device_id, capability)
        if self.observer is not None:
            self.observer("set", device_id)
        if device_id in self.failing_sets:
            raise DelegationFailure(device_id, "device unreachable")
        self.calls.append(("set", device_id, capability, value))

    async def async_run_transition(
        self,
        device_id: str,
        capability: str,
        value: Any,
        duration_s: float,
    ) -> None:
        device = await self.async_get_device(device_id)
        if not device.has_capability(capability):
            raise CapabilityUnavailable(device_id, capability)
        if self.observer is not None:
            self.observer("transition", device_id)
        if device_id in self.failing_transitions:
            raise DelegationFailure(device_id, "transition rejected")
        self.calls.append(("transition", device_id, capability, value, duration_s))

    def calls_for(self, device_id: str) -> list[tuple[Any, ...]]:
        return [call for call in self.calls if call[1] == device_id]


@pytest.fixture
def fake_platform() -> FakePlatform:
    """Create an empty fake platform."""
    return FakePlatform()


@pytest.fixture
def state_store() -> MemoryStateStore:
    """Create an empty in-memory state store."""
    return MemoryStateStore()


@pytest.fixture
def notifications() -> list[str]:
    """Collect messages sent to the coordinator's notifier."""
    return []


@pytest.fixture
def coordinator(
    fake_platform: FakePlatform,
    state_store: MemoryStateStore,
    notifications: list[str],
) -> FadeCoordinator:
    """Create a coordinator over the fake platform and memory store."""
    return FadeCoordinator(
        platform=fake_platform,
        store=state_store,
        notifier=notifications.append,
    )


# =============================================================================
# Home Assistant fixtures
# =============================================================================


@pytest.fixture
def mock_config_entry() -> MockConfigEntry:
    """Create a mock config entry for the Adaptive Fade integration."""
    return MockConfigEntry(
        domain=DOMAIN,
        title="Adaptive Fade",
        data={},
        options={},
        unique_id="adaptive_fade_unique",
    )


@pytest.fixture
def mock_store() -> MagicMock:
    """Create a mock helpers.storage.Store."""
    return MagicMock(
        async_load=AsyncMock(return_value={}),
        async_save=AsyncMock(),
        async_delay_save=MagicMock(),
    )


@pytest.fixture
async def init_integration(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,
    mock_store: MagicMock,
) -> MockConfigEntry:
    """Set up the Adaptive Fade integration for testing."""
    mock_config_entry.add_to_hass(hass)

    with patch("custom_components.adaptive_fade.Store", return_value=mock_store):
        await hass.config_entries.async_setup(mock_config_entry.entry_id)
        await hass.async_block_till_done()

    return mock_config_entry


def _light_attributes(name: str, brightness: int | None, kelvin: int | None) -> dict[str, Any]:
    return {
        ATTR_FRIENDLY_NAME: name,
        ATTR_BRIGHTNESS: brightness,
        ATTR_COLOR_TEMP_KELVIN: kelvin,
        ATTR_MIN_COLOR_TEMP_KELVIN: 2000,
        ATTR_MAX_COLOR_TEMP_KELVIN: 6500,
        ATTR_SUPPORTED_COLOR_MODES: [ColorMode.COLOR_TEMP],
    }


@pytest.fixture
def mock_light_entity(hass: HomeAssistant) -> str:
    """Create a color-temperature light at brightness 204 (80%) and 3800K (60% warm)."""
    entity_id = "light.kitchen"
    hass.states.async_set(entity_id, STATE_ON, _light_attributes("Kitchen", 204, 3800))
    return entity_id


@pytest.fixture
def mock_light_off(hass: HomeAssistant) -> str:
    """Create a color-temperature light that is off."""
    entity_id = "light.hallway"
    hass.states.async_set(entity_id, STATE_OFF, _light_attributes("Hallway", None, None))
    return entity_id


@pytest.fixture
def mock_light_group(hass: HomeAssistant) -> str:
    """Create a "Bathroom" light with two members named after it."""
    hass.states.async_set(
        "light.bathroom", STATE_ON, _light_attributes("Bathroom", 255, 6500)
    )
    hass.states.async_set(
        "light.bathroom_1", STATE_ON, _light_attributes("Bathroom 1", 255, 6500)
    )
    hass.states.async_set(
        "light.bathroom_2", STATE_ON, _light_attributes("Bathroom 2", 255, 6500)
    )
    return "light.bathroom"


@pytest.fixture
def captured_calls(hass: HomeAssistant) -> list[ServiceCall]:
    """Capture light service calls for verification."""
    calls: list[ServiceCall] = []

    async def mock_service_handler(call: ServiceCall) -> None:
        """Record the service call and update light state."""
        calls.append(call)

        entity_id = call.data.get(ATTR_ENTITY_ID)
        if entity_id:
            entity_ids = entity_id if isinstance(entity_id, list) else [entity_id]
            for eid in entity_ids:
                current_state = hass.states.get(eid)
                if current_state:
                    current_attrs = dict(current_state.attributes)

                    if call.service == "turn_on":
                        new_state = STATE_ON
                        if ATTR_BRIGHTNESS in call.data:
                            current_attrs[ATTR_BRIGHTNESS] = call.data[ATTR_BRIGHTNESS]
                        if ATTR_COLOR_TEMP_KELVIN in call.data:
                            current_attrs[ATTR_COLOR_TEMP_KELVIN] = call.data[
                                ATTR_COLOR_TEMP_KELVIN
                            ]
                    elif call.service == "turn_off":
                        new_state = STATE_OFF
                        current_attrs[ATTR_BRIGHTNESS] = None
                    else:
                        new_state = current_state.state

                    hass.states.async_set(eid, new_state, current_attrs)

    hass.services.async_register("light", "turn_on", mock_service_handler)
    hass.services.async_register("light", "turn_off", mock_service_handler)
    hass.services.async_register("switch", "turn_on", mock_service_handler)
    hass.services.async_register("switch", "turn_off", mock_service_handler)

    return calls
