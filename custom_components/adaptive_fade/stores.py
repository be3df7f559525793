"""Snapshot store, fade window trackers and adaptive-lighting registry."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from homeassistant.util import dt as dt_util

from .const import (
    KEY_ADAPTIVE_FADE_UNTIL,
    KEY_DEVICE_STATES,
    KEY_SAVED_DIM,
    KEY_SAVED_TEMP,
    KEY_SCRIPT_FADE_UNTIL,
)
from .state_store import StateStore

_LOGGER = logging.getLogger(__name__)


def now_ms() -> int:
    """Return the current wall-clock time in epoch milliseconds."""
    return int(dt_util.utcnow().timestamp() * 1000)


# =============================================================================
# Snapshot Store
# =============================================================================


@dataclass(frozen=True)
class SavedSettings:
    """Brightness and temperature captured before a fade-out (0-1 scale)."""

    dim: float | None = None
    temperature: float | None = None

    @property
    def is_empty(self) -> bool:
        """True when neither value has been saved."""
        return self.dim is None and self.temperature is None


class SnapshotStore:
    """Per-device saved settings, overwritten by each fade-out."""

    def __init__(self, store: StateStore) -> None:
        self._store = store

    def save(self, device_id: str, dim: float, temperature: float | None) -> None:
        """Overwrite the saved settings for *device_id*."""
        self._store.set(KEY_SAVED_DIM.format(device_id=device_id), dim)
        self._store.set(KEY_SAVED_TEMP.format(device_id=device_id), temperature)
        _LOGGER.debug("%s: Saved dim=%s, temperature=%s", device_id, dim, temperature)

    def read(self, device_id: str) -> SavedSettings:
        """Return the saved settings; fields never written are ``None``."""
        return SavedSettings(
            dim=self._store.get(KEY_SAVED_DIM.format(device_id=device_id)),
            temperature=self._store.get(KEY_SAVED_TEMP.format(device_id=device_id)),
        )


# =============================================================================
# Fade Window Tracker
# =============================================================================


class FadeWindowTracker:
    """Per-device "fade active until" timestamps.

    A window is active only while the current time is before its stored
    timestamp; a stored entry on its own means nothing.
    """

    def __init__(self, store: StateStore, key_format: str, name: str) -> None:
        self._store = store
        self._key_format = key_format
        self.name = name

    def _key(self, device_id: str) -> str:
        return self._key_format.format(device_id=device_id)

    def mark_active(
        self,
        device_id: str,
        duration_s: float,
        buffer_s: float,
        now: int | None = None,
    ) -> int:
        """Mark a fade as running for ``duration_s + buffer_s``.

        Returns:
            The stored ``active_until`` timestamp (epoch milliseconds).
        """
        if now is None:
            now = now_ms()
        active_until = now + round(duration_s * 1000) + round(buffer_s * 1000)
        self._store.set(self._key(device_id), active_until)
        _LOGGER.debug(
            "%s: %s fade active until %s (%ss + %ss buffer)",
            device_id,
            self.name,
            active_until,
            duration_s,
            buffer_s,
        )
        return active_until

    def clear(self, device_id: str) -> None:
        """Expire the window immediately."""
        self._store.set(self._key(device_id), 0)
        _LOGGER.debug("%s: %s fade window cleared", device_id, self.name)

    def active_until(self, device_id: str) -> int:
        """Return the stored timestamp, or 0 if never written."""
        return self._store.get(self._key(device_id)) or 0

    def is_active(self, device_id: str, now: int | None = None) -> bool:
        """True while ``now`` is before the stored timestamp."""
        if now is None:
            now = now_ms()
        return now < self.active_until(device_id)

    def remaining_ms(self, device_id: str, now: int | None = None) -> int:
        """Milliseconds left in the window (negative once expired)."""
        if now is None:
            now = now_ms()
        return self.active_until(device_id) - now


def script_fade_tracker(store: StateStore) -> FadeWindowTracker:
    """Tracker for fades started by the fade-out coordinator."""
    return FadeWindowTracker(store, KEY_SCRIPT_FADE_UNTIL, "script")


def adaptive_fade_tracker(store: StateStore) -> FadeWindowTracker:
    """Tracker for fades started by adaptive lighting control."""
    return FadeWindowTracker(store, KEY_ADAPTIVE_FADE_UNTIL, "adaptive")


# =============================================================================
# Adaptive-Lighting State Registry
# =============================================================================


@dataclass(frozen=True)
class DeviceState:
    """Adaptive-lighting state for one device."""

    manual_override: bool = False
    last_profile: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DeviceState:
        return cls(
            manual_override=data.get("manual") is True,
            last_profile=data.get("lastProfile") or None,
        )

    def as_dict(self) -> dict[str, Any]:
        return {"manual": self.manual_override, "lastProfile": self.last_profile}


class AdaptiveStateRegistry:
    """Per-device manual-override flag and last applied profile.

    Written by adaptive lighting control, read by diagnostics. Entries are
    created on first write and never removed; the last write wins.
    """

    def __init__(self, store: StateStore) -> None:
        self._store = store

    def _states(self) -> dict[str, dict[str, Any]]:
        return self._store.get(KEY_DEVICE_STATES) or {}

    def _write(self, device_id: str, state: DeviceState) -> None:
        # Replace the whole mapping so readers never observe a half-updated entry
        states = dict(self._states())
        states[device_id] = state.as_dict()
        self._store.set(KEY_DEVICE_STATES, states)

    def get(self, device_id: str) -> DeviceState | None:
        """Return the state for *device_id*, or ``None`` if never observed."""
        data = self._states().get(device_id)
        return DeviceState.from_dict(data) if data is not None else None

    def device_ids(self) -> list[str]:
        """Registered device ids in registration order."""
        return list(self._states())

    def items(self) -> Iterator[tuple[str, DeviceState]]:
        """Iterate over ``(device_id, state)`` pairs."""
        for device_id, data in self._states().items():
            yield device_id, DeviceState.from_dict(data)

    def set_manual_override(self, device_id: str, enabled: bool) -> DeviceState:
        """Enter or leave manual-override mode."""
        current = self.get(device_id) or DeviceState()
        state = DeviceState(manual_override=enabled, last_profile=current.last_profile)
        self._write(device_id, state)
        _LOGGER.info(
            "%s: Manual mode %s", device_id, "enabled" if enabled else "disabled"
        )
        return state

    def set_last_profile(self, device_id: str, profile: str) -> DeviceState:
        """Record an applied profile; applying a profile ends manual override."""
        state = DeviceState(manual_override=False, last_profile=profile)
        self._write(device_id, state)
        _LOGGER.debug("%s: Last profile set to %s", device_id, profile)
        return state
