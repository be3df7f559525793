"""Exceptions for the Adaptive Fade integration."""

from __future__ import annotations

from homeassistant.exceptions import HomeAssistantError


class AdaptiveFadeError(HomeAssistantError):
    """Base class for Adaptive Fade errors."""


class MissingDeviceId(AdaptiveFadeError):
    """No device identifier was supplied."""

    def __init__(self) -> None:
        super().__init__("No device ID provided")


class DeviceNotFound(AdaptiveFadeError):
    """The identifier does not correspond to a live device."""

    def __init__(self, device_id: str) -> None:
        super().__init__(f"Device not found with ID: {device_id}")
        self.device_id = device_id


class CapabilityUnavailable(AdaptiveFadeError):
    """The device lacks the capability, or it cannot be set."""

    def __init__(self, device_id: str, capability: str) -> None:
        super().__init__(f"{device_id}: capability '{capability}' is not available")
        self.device_id = device_id
        self.capability = capability


class DelegationFailure(AdaptiveFadeError):
    """The platform rejected a capability change or timed transition."""

    def __init__(self, device_id: str, reason: str) -> None:
        super().__init__(f"{device_id}: {reason}")
        self.device_id = device_id
        self.reason = reason


class StateStoreUnavailable(AdaptiveFadeError):
    """The key-value store is not loaded or has been shut down."""
