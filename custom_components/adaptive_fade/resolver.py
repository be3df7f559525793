"""Resolve a device into the lights a fade should be applied to."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from .const import DEVICE_CLASS_LIGHT
from .platform import Device, DevicePlatform

_LOGGER = logging.getLogger(__name__)


class TargetResolver(ABC):
    """Turn a device into the individual lights to control."""

    @abstractmethod
    async def async_resolve_targets(self, device: Device) -> list[Device]:
        """Return the lights to control, never empty."""


class NamePrefixGroupResolver(TargetResolver):
    """Treat a device as a group when other lights are named after it.

    A device named "Lights" is a group proxy if lights named "Lights 1",
    "Lights 2", ... exist. Members keep the platform's enumeration order.
    """

    def __init__(self, platform: DevicePlatform) -> None:
        self.platform = platform

    async def async_find_members(self, device: Device) -> list[Device]:
        """Return the lights named ``"<device name> ..."``, excluding the device."""
        prefix = f"{device.name} "
        return [
            candidate
            for candidate in await self.platform.async_get_devices()
            if candidate.name.startswith(prefix)
            and candidate.name != device.name
            and candidate.id != device.id
            and candidate.device_class == DEVICE_CLASS_LIGHT
        ]

    async def async_resolve_targets(self, device: Device) -> list[Device]:
        members = await self.async_find_members(device)
        if not members:
            return [device]
        _LOGGER.debug(
            "%s: Group detected with %d members: %s",
            device.id,
            len(members),
            [member.id for member in members],
        )
        return members
