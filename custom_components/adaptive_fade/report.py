"""Diagnostics report for adaptive lighting and fade state.

Joins the adaptive-lighting registry, saved snapshots, both fade window
trackers and live device readings. Read-only: nothing here writes state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from homeassistant.exceptions import HomeAssistantError

from .const import CAPABILITY_DIM, CAPABILITY_LIGHT_TEMPERATURE
from .models import format_pct
from .platform import Device, DevicePlatform
from .stores import (
    AdaptiveStateRegistry,
    FadeWindowTracker,
    SnapshotStore,
    now_ms,
)

_LOGGER = logging.getLogger(__name__)

BANNER = "═" * 51
TITLE = "       ADAPTIVE LIGHTING DIAGNOSTICS"
INDENT = " " * 9


@dataclass(frozen=True)
class DeviceStatus:
    """One row of the diagnostics report. ``None`` means not available."""

    device_id: str
    name: str
    known: bool
    zone: str | None
    manual_override: bool
    last_profile: str | None
    dim: float | None
    temperature: float | None
    saved_dim: float | None
    saved_temperature: float | None
    script_fade_active: bool
    script_fade_remaining_s: int | None
    adaptive_fade_active: bool
    adaptive_fade_remaining_s: int | None

    @property
    def is_fading(self) -> bool:
        """True if either tracker reports a fade in progress."""
        return self.script_fade_active or self.adaptive_fade_active


class DiagnosticsReporter:
    """Render the state of every device known to adaptive lighting."""

    def __init__(
        self,
        platform: DevicePlatform,
        registry: AdaptiveStateRegistry,
        snapshots: SnapshotStore,
        script_fades: FadeWindowTracker,
        adaptive_fades: FadeWindowTracker,
    ) -> None:
        self.platform = platform
        self.registry = registry
        self.snapshots = snapshots
        self.script_fades = script_fades
        self.adaptive_fades = adaptive_fades

    async def _async_live_devices(self) -> list[Device]:
        try:
            return await self.platform.async_get_devices()
        except HomeAssistantError as err:
            _LOGGER.warning("Could not read live device state: %s", err)
            return []

    async def async_collect(self, now: int | None = None) -> list[DeviceStatus]:
        """Build one status row per registered device, in registry order."""
        if now is None:
            now = now_ms()
        devices = await self._async_live_devices()

        rows: list[DeviceStatus] = []
        for device_id, state in self.registry.items():
            device = _find_device(devices, device_id)
            saved = self.snapshots.read(device_id)
            script_active = self.script_fades.is_active(device_id, now)
            adaptive_active = self.adaptive_fades.is_active(device_id, now)
            rows.append(
                DeviceStatus(
                    device_id=device_id,
                    name=device.name if device else f"Unknown ({device_id})",
                    known=device is not None,
                    zone=device.zone if device else None,
                    manual_override=state.manual_override,
                    last_profile=state.last_profile,
                    dim=device.value(CAPABILITY_DIM) if device else None,
                    temperature=device.value(CAPABILITY_LIGHT_TEMPERATURE) if device else None,
                    saved_dim=saved.dim,
                    saved_temperature=saved.temperature,
                    script_fade_active=script_active,
                    script_fade_remaining_s=(
                        _remaining_s(self.script_fades, device_id, now) if script_active else None
                    ),
                    adaptive_fade_active=adaptive_active,
                    adaptive_fade_remaining_s=(
                        _remaining_s(self.adaptive_fades, device_id, now)
                        if adaptive_active
                        else None
                    ),
                )
            )
        return rows

    async def async_report(self, now: int | None = None) -> str:
        """Return the diagnostics report as text."""
        return render(await self.async_collect(now))


def summarize(rows: list[DeviceStatus]) -> tuple[int, int]:
    """Return ``(auto_count, manual_count)``."""
    manual = sum(1 for row in rows if row.manual_override)
    return len(rows) - manual, manual


def render(rows: list[DeviceStatus]) -> str:
    """Format status rows as the human-readable report."""
    lines = [BANNER, TITLE, BANNER, ""]

    if not rows:
        lines.append("No devices registered yet.")
        lines.append("Run adaptive lighting on a device to initialize.")
    else:
        lines.append(f"Registered devices: {len(rows)}")
        lines.append("")
        for row in rows:
            icon = "🔴 MANUAL" if row.manual_override else "🟢 AUTO"
            lines.append(f"{icon}  {row.name}")
            lines.append(f"{INDENT}Last profile: {row.last_profile or 'N/A'}")
            lines.append(
                f"{INDENT}Current values: {format_pct(row.dim)} / {format_pct(row.temperature)}"
            )
            lines.append(
                f"{INDENT}Saved settings: {format_pct(row.saved_dim)}"
                f" / {format_pct(row.saved_temperature)}"
            )
            lines.append(
                f"{INDENT}Fading: script {_fade_text(row.script_fade_remaining_s)},"
                f" adaptive {_fade_text(row.adaptive_fade_remaining_s)}"
            )
            lines.append("")

    auto, manual = summarize(rows)
    lines.append(BANNER)
    lines.append(f"Summary: {auto} auto, {manual} manual")
    return "\n".join(lines)


def _find_device(devices: list[Device], device_id: str) -> Device | None:
    return next((device for device in devices if device.id == device_id), None)


def _remaining_s(tracker: FadeWindowTracker, device_id: str, now: int) -> int:
    return max(0, round(tracker.remaining_ms(device_id, now) / 1000))


def _fade_text(remaining_s: int | None) -> str:
    return "no" if remaining_s is None else f"yes ({remaining_s}s left)"
