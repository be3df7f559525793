"""Device directory and capability mutation for Adaptive Fade.

The coordinator only talks to a ``DevicePlatform``. ``HomeAssistantPlatform``
maps Home Assistant entity states onto devices with named capabilities:

- ``onoff``: True while the entity is on
- ``dim``: brightness on a 0-1 scale (lights only)
- ``light_temperature``: 0 (coldest) to 1 (warmest) between the light's
  kelvin limits (color-temperature lights only)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import voluptuous as vol
from homeassistant.components.light import (
    ATTR_BRIGHTNESS,
    ATTR_COLOR_TEMP_KELVIN,
    ATTR_MAX_COLOR_TEMP_KELVIN,
    ATTR_MIN_COLOR_TEMP_KELVIN,
    ATTR_SUPPORTED_COLOR_MODES,
    ATTR_TRANSITION,
    brightness_supported,
    color_temp_supported,
)
from homeassistant.components.light.const import DOMAIN as LIGHT_DOMAIN
from homeassistant.const import (
    ATTR_ENTITY_ID,
    SERVICE_TURN_OFF,
    SERVICE_TURN_ON,
    STATE_ON,
    STATE_UNAVAILABLE,
)
from homeassistant.core import HomeAssistant, State
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers import area_registry as ar
from homeassistant.helpers import device_registry as dr
from homeassistant.helpers import entity_registry as er

from .const import (
    CAPABILITY_DIM,
    CAPABILITY_LIGHT_TEMPERATURE,
    CAPABILITY_ONOFF,
    HA_MAX_BRIGHTNESS,
)
from .errors import CapabilityUnavailable, DelegationFailure, DeviceNotFound

_LOGGER = logging.getLogger(__name__)

# Domains whose entities can be switched with turn_on/turn_off
SWITCHABLE_DOMAINS = frozenset({LIGHT_DOMAIN, "switch"})

# Fallback kelvin limits when a light does not report its own
DEFAULT_MIN_KELVIN = 2000
DEFAULT_MAX_KELVIN = 6500


@dataclass(frozen=True)
class Capability:
    """A named device capability and its current value."""

    name: str
    value: Any = None
    getable: bool = True
    setable: bool = True
    units: str | None = None


@dataclass(frozen=True)
class Device:
    """Read-only view of a platform device."""

    id: str
    name: str
    device_class: str
    zone: str | None = None
    capabilities: dict[str, Capability] = field(default_factory=dict)

    def has_capability(self, name: str) -> bool:
        """True if the device exposes the capability."""
        return name in self.capabilities

    def value(self, name: str) -> Any:
        """Current value of a capability, or ``None`` when absent."""
        capability = self.capabilities.get(name)
        return capability.value if capability is not None else None


class DevicePlatform(ABC):
    """Device lookup and control, as provided by the hosting platform."""

    @abstractmethod
    async def async_get_device(self, device_id: str) -> Device:
        """Return the device, or raise DeviceNotFound."""

    @abstractmethod
    async def async_get_devices(self) -> list[Device]:
        """Return all devices in the platform's enumeration order."""

    @abstractmethod
    async def async_set_capability(self, device_id: str, capability: str, value: Any) -> None:
        """Set a capability instantly.

        Raises:
            CapabilityUnavailable: The device cannot set this capability.
            DelegationFailure: The platform rejected the change.
        """

    @abstractmethod
    async def async_run_transition(
        self,
        device_id: str,
        capability: str,
        value: Any,
        duration_s: float,
    ) -> None:
        """Move a capability to *value* over *duration_s*, handled by the device.

        Returns as soon as the transition has been handed over.

        Raises:
            CapabilityUnavailable: The device cannot set this capability.
            DelegationFailure: The platform rejected the transition.
        """


# =============================================================================
# Home Assistant implementation
# =============================================================================


class HomeAssistantPlatform(DevicePlatform):
    """Devices backed by Home Assistant entity states."""

    def __init__(self, hass: HomeAssistant) -> None:
        self.hass = hass

    async def async_get_device(self, device_id: str) -> Device:
        state = self.hass.states.get(device_id)
        if state is None or state.state == STATE_UNAVAILABLE:
            raise DeviceNotFound(device_id)
        return self._to_device(state)

    async def async_get_devices(self) -> list[Device]:
        return [
            self._to_device(state)
            for state in self.hass.states.async_all()
            if state.state != STATE_UNAVAILABLE
        ]

    async def async_set_capability(self, device_id: str, capability: str, value: Any) -> None:
        device = await self.async_get_device(device_id)
        self._require_setable(device, capability)
        domain = device.device_class

        if capability == CAPABILITY_ONOFF:
            service = SERVICE_TURN_ON if value else SERVICE_TURN_OFF
            await self._async_call(device_id, domain, service, {})
        elif capability == CAPABILITY_DIM:
            await self._async_call_dim(device_id, value, None)
        else:
            kelvin = _temperature_to_kelvin(self.hass.states.get(device_id), value)
            await self._async_call(
                device_id, LIGHT_DOMAIN, SERVICE_TURN_ON, {ATTR_COLOR_TEMP_KELVIN: kelvin}
            )

    async def async_run_transition(
        self,
        device_id: str,
        capability: str,
        value: Any,
        duration_s: float,
    ) -> None:
        device = await self.async_get_device(device_id)
        self._require_setable(device, capability)

        if capability == CAPABILITY_DIM:
            await self._async_call_dim(device_id, value, duration_s)
        elif capability == CAPABILITY_LIGHT_TEMPERATURE:
            kelvin = _temperature_to_kelvin(self.hass.states.get(device_id), value)
            await self._async_call(
                device_id,
                LIGHT_DOMAIN,
                SERVICE_TURN_ON,
                {ATTR_COLOR_TEMP_KELVIN: kelvin, ATTR_TRANSITION: duration_s},
            )
        else:
            raise CapabilityUnavailable(device_id, capability)

    # --------------------------------------------------------------------- #
    # Helpers
    # --------------------------------------------------------------------- #

    @staticmethod
    def _require_setable(device: Device, capability: str) -> None:
        cap = device.capabilities.get(capability)
        if cap is None or not cap.setable:
            raise CapabilityUnavailable(device.id, capability)

    async def _async_call_dim(
        self, device_id: str, value: float, duration_s: float | None
    ) -> None:
        """Set brightness, turning the light off at 0."""
        service_data: dict[str, Any] = {}
        if duration_s is not None:
            service_data[ATTR_TRANSITION] = duration_s

        brightness = round(max(0.0, min(1.0, value)) * HA_MAX_BRIGHTNESS)
        if brightness == 0:
            await self._async_call(device_id, LIGHT_DOMAIN, SERVICE_TURN_OFF, service_data)
        else:
            service_data[ATTR_BRIGHTNESS] = brightness
            await self._async_call(device_id, LIGHT_DOMAIN, SERVICE_TURN_ON, service_data)

    async def _async_call(
        self,
        device_id: str,
        domain: str,
        service: str,
        service_data: dict[str, Any],
    ) -> None:
        data = {ATTR_ENTITY_ID: device_id, **service_data}
        _LOGGER.debug("%s: %s.%s %s", device_id, domain, service, data)
        try:
            await self.hass.services.async_call(domain, service, data, blocking=True)
        except (HomeAssistantError, vol.Invalid) as err:
            raise DelegationFailure(device_id, str(err)) from err

    def _to_device(self, state: State) -> Device:
        attributes = state.attributes
        capabilities: dict[str, Capability] = {}

        if state.domain in SWITCHABLE_DOMAINS:
            capabilities[CAPABILITY_ONOFF] = Capability(CAPABILITY_ONOFF, state.state == STATE_ON)

        if state.domain == LIGHT_DOMAIN:
            color_modes = attributes.get(ATTR_SUPPORTED_COLOR_MODES)
            if brightness_supported(color_modes):
                brightness = attributes.get(ATTR_BRIGHTNESS)
                dim = brightness / HA_MAX_BRIGHTNESS if brightness is not None else None
                capabilities[CAPABILITY_DIM] = Capability(CAPABILITY_DIM, dim)
            if color_temp_supported(color_modes):
                capabilities[CAPABILITY_LIGHT_TEMPERATURE] = Capability(
                    CAPABILITY_LIGHT_TEMPERATURE,
                    _kelvin_to_temperature(state),
                )

        return Device(
            id=state.entity_id,
            name=state.name,
            device_class=state.domain,
            zone=self._zone_name(state.entity_id),
            capabilities=capabilities,
        )

    def _zone_name(self, entity_id: str) -> str | None:
        """Area name from the entity, or from its device if the entity has none."""
        entity = er.async_get(self.hass).async_get(entity_id)
        if entity is None:
            return None

        area_id = entity.area_id
        if not area_id and entity.device_id:
            device = dr.async_get(self.hass).async_get(entity.device_id)
            if device:
                area_id = device.area_id

        area = ar.async_get(self.hass).async_get_area(area_id) if area_id else None
        return area.name if area else None


def _kelvin_limits(state: State | None) -> tuple[int, int]:
    if state is None:
        return DEFAULT_MIN_KELVIN, DEFAULT_MAX_KELVIN
    min_kelvin = state.attributes.get(ATTR_MIN_COLOR_TEMP_KELVIN) or DEFAULT_MIN_KELVIN
    max_kelvin = state.attributes.get(ATTR_MAX_COLOR_TEMP_KELVIN) or DEFAULT_MAX_KELVIN
    return min_kelvin, max_kelvin


def _kelvin_to_temperature(state: State) -> float | None:
    """Convert the light's kelvin to 0 (coldest) .. 1 (warmest)."""
    kelvin = state.attributes.get(ATTR_COLOR_TEMP_KELVIN)
    if kelvin is None:
        return None
    min_kelvin, max_kelvin = _kelvin_limits(state)
    if max_kelvin <= min_kelvin:
        return 0.0
    kelvin = max(min_kelvin, min(max_kelvin, kelvin))
    return (max_kelvin - kelvin) / (max_kelvin - min_kelvin)


def _temperature_to_kelvin(state: State | None, temperature: float) -> int:
    """Inverse of ``_kelvin_to_temperature``."""
    min_kelvin, max_kelvin = _kelvin_limits(state)
    temperature = max(0.0, min(1.0, temperature))
    return round(max_kelvin - temperature * (max_kelvin - min_kelvin))
