"""FadeCoordinator for the Adaptive Fade integration.

Starts fade-outs by handing timed transitions to the lights themselves and
returns immediately; nothing here waits for a fade to finish. Before a fade is
handed over, the current brightness/temperature is snapshotted and a fade
window is recorded so a later restore can undo it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from .const import (
    ADAPTIVE_FADE_BUFFER,
    CAPABILITY_DIM,
    CAPABILITY_LIGHT_TEMPERATURE,
    CAPABILITY_ONOFF,
    DEFAULT_FADE_BUFFER,
    DEFAULT_FADE_DURATION,
    NEAR_OFF_THRESHOLD,
)
from .errors import (
    CapabilityUnavailable,
    DelegationFailure,
    DeviceNotFound,
    MissingDeviceId,
)
from .models import (
    FadeOutcome,
    FadeOutResult,
    RestoreOutcome,
    RestoreResult,
    TargetOutcome,
    TargetResult,
)
from .platform import Device, DevicePlatform
from .report import DiagnosticsReporter
from .resolver import NamePrefixGroupResolver, TargetResolver
from .state_store import StateStore
from .stores import (
    AdaptiveStateRegistry,
    DeviceState,
    SavedSettings,
    SnapshotStore,
    adaptive_fade_tracker,
    now_ms,
    script_fade_tracker,
)

_LOGGER = logging.getLogger(__name__)

# Errors a single light can raise without affecting the others
TARGET_ERRORS = (DelegationFailure, CapabilityUnavailable, DeviceNotFound)


# =============================================================================
# FadeCoordinator
# =============================================================================


class FadeCoordinator:
    """Coordinate fade-out, restore and adaptive-lighting state.

    Stored as ``hass.data[DOMAIN]``. All state lives in the injected
    ``StateStore``; the coordinator itself holds none between calls.
    """

    def __init__(
        self,
        platform: DevicePlatform,
        store: StateStore,
        resolver: TargetResolver | None = None,
        notifier: Callable[[str], None] | None = None,
        near_off_threshold: float = NEAR_OFF_THRESHOLD,
    ) -> None:
        self.platform = platform
        self.store = store
        self.resolver = resolver or NamePrefixGroupResolver(platform)
        self.notifier = notifier
        self.near_off_threshold = near_off_threshold

        self.snapshots = SnapshotStore(store)
        self.script_fades = script_fade_tracker(store)
        self.adaptive_fades = adaptive_fade_tracker(store)
        self.registry = AdaptiveStateRegistry(store)
        self.reporter = DiagnosticsReporter(
            platform,
            self.registry,
            self.snapshots,
            self.script_fades,
            self.adaptive_fades,
        )

    async def _async_get_device(self, device_id: str | None) -> Device:
        if not device_id:
            raise MissingDeviceId
        return await self.platform.async_get_device(device_id)

    # --------------------------------------------------------------------- #
    # Fade out
    # --------------------------------------------------------------------- #

    async def async_fade_out(
        self,
        device_id: str | None,
        duration_s: float = DEFAULT_FADE_DURATION,
        buffer_s: float = DEFAULT_FADE_BUFFER,
    ) -> FadeOutResult:
        """Start a fade to off and return without waiting for it.

        Raises:
            MissingDeviceId: No device id was given.
            DeviceNotFound: The id does not match a live device.
        """
        device = await self._async_get_device(device_id)
        _LOGGER.info("%s: Fading %s", device.id, device.name)

        dim = device.value(CAPABILITY_DIM) or 0
        temperature = device.value(CAPABILITY_LIGHT_TEMPERATURE)

        if dim <= self.near_off_threshold:
            return await self._async_switch_off(device)

        # Snapshot, then window, then delegation
        self.snapshots.save(device.id, dim, temperature)
        active_until = self.script_fades.mark_active(device.id, duration_s, buffer_s)

        targets = await self.resolver.async_resolve_targets(device)
        if len(targets) == 1 and targets[0].id == device.id:
            _LOGGER.debug("%s: Single device, applying hardware fade", device.id)
            results = [await self._async_fade_single(device, duration_s)]
        else:
            _LOGGER.info(
                "%s: Group with %d members, applying hardware fade to each",
                device.id,
                len(targets),
            )
            results = list(
                await asyncio.gather(
                    *(self._async_fade_member(member, duration_s) for member in targets)
                )
            )

        result = FadeOutResult(
            device_id=device.id,
            device_name=device.name,
            outcome=FadeOutcome.FADED,
            duration_s=duration_s,
            active_until=active_until,
            targets=results,
        )
        _LOGGER.info("%s", result.summary)
        self._notify_if_degraded(result)
        return result

    async def _async_switch_off(self, device: Device) -> FadeOutResult:
        """Turn off a light that is already dark instead of fading it."""
        _LOGGER.info("%s: Already off or very dim, turning off", device.id)
        try:
            await self.platform.async_set_capability(device.id, CAPABILITY_ONOFF, False)
            target = TargetResult(device.id, device.name, TargetOutcome.SWITCHED_OFF)
        except TARGET_ERRORS as err:
            _LOGGER.warning("%s: Could not turn off: %s", device.id, err)
            target = TargetResult(device.id, device.name, TargetOutcome.FAILED, str(err))

        self.script_fades.clear(device.id)

        result = FadeOutResult(
            device_id=device.id,
            device_name=device.name,
            outcome=FadeOutcome.ALREADY_OFF,
            targets=[target],
        )
        self._notify_if_degraded(result)
        return result

    async def _async_fade_single(self, device: Device, duration_s: float) -> TargetResult:
        """Fade one light, falling back to an instant off if the fade is rejected."""
        try:
            await self.platform.async_run_transition(device.id, CAPABILITY_DIM, 0, duration_s)
            return TargetResult(device.id, device.name, TargetOutcome.DELEGATED)
        except TARGET_ERRORS as err:
            _LOGGER.warning("%s: Hardware fade failed, using instant: %s", device.id, err)
            fade_error = str(err)

        try:
            await self.platform.async_set_capability(device.id, CAPABILITY_DIM, 0)
        except TARGET_ERRORS as err:
            _LOGGER.error("%s: Instant fallback failed: %s", device.id, err)
            return TargetResult(device.id, device.name, TargetOutcome.FAILED, str(err))
        return TargetResult(
            device.id,
            device.name,
            TargetOutcome.FALLBACK,
            f"hardware fade failed ({fade_error}), turned off instantly",
        )

    async def _async_fade_member(self, member: Device, duration_s: float) -> TargetResult:
        """Fade one group member; failures only affect this member."""
        try:
            await self.platform.async_run_transition(member.id, CAPABILITY_DIM, 0, duration_s)
        except TARGET_ERRORS as err:
            _LOGGER.warning("%s: Could not start fade on %s: %s", member.id, member.name, err)
            return TargetResult(member.id, member.name, TargetOutcome.FAILED, str(err))
        return TargetResult(member.id, member.name, TargetOutcome.DELEGATED)

    def _notify_if_degraded(self, result: FadeOutResult) -> None:
        if result.is_degraded and self.notifier is not None:
            self.notifier(f"{result.summary}\n\n{result.error}")

    # --------------------------------------------------------------------- #
    # Restore
    # --------------------------------------------------------------------- #

    async def async_restore(self, device_id: str | None, now: int | None = None) -> RestoreResult:
        """Restore the settings saved by the last fade-out, if it is still running.

        The fade window is cleared before any light is touched, so adaptive
        control triggered by the light turning on sees no fade in progress.
        """
        device = await self._async_get_device(device_id)
        if now is None:
            now = now_ms()

        active_until = self.script_fades.active_until(device.id)
        if active_until > 0:
            remaining_s = round((active_until - now) / 1000)
            if remaining_s > 0:
                _LOGGER.debug("%s: Fade still active (%ss remaining)", device.id, remaining_s)
            else:
                _LOGGER.debug("%s: Fade expired %ss ago", device.id, -remaining_s)

        if not self.script_fades.is_active(device.id, now):
            _LOGGER.info("%s: No active fade, skipping restore", device.id)
            return RestoreResult(device.id, device.name, RestoreOutcome.SKIPPED)

        saved = self.snapshots.read(device.id)
        self.script_fades.clear(device.id)

        targets = await self.resolver.async_resolve_targets(device)
        if len(targets) == 1 and targets[0].id == device.id:
            results = [await self._async_restore_target(device, saved)]
        else:
            _LOGGER.info("%s: Restoring %d group members", device.id, len(targets))
            results = list(
                await asyncio.gather(
                    *(self._async_restore_target(member, saved) for member in targets)
                )
            )
            # The proxy itself may lag behind its members; keep it in step for the UI
            try:
                await self._async_restore_device(device, saved)
            except TARGET_ERRORS as err:
                _LOGGER.debug("%s: Could not restore group device: %s", device.id, err)

        restored = any(t.outcome is TargetOutcome.RESTORED for t in results)
        result = RestoreResult(
            device_id=device.id,
            device_name=device.name,
            outcome=RestoreOutcome.RESTORED if restored else RestoreOutcome.FAILED,
            dim=saved.dim,
            temperature=saved.temperature,
            targets=results,
        )
        if result.error is not None:
            _LOGGER.warning("%s: %s", result.summary, result.error)
        else:
            _LOGGER.info("%s", result.summary)
        return result

    async def _async_restore_target(self, device: Device, saved: SavedSettings) -> TargetResult:
        try:
            await self._async_restore_device(device, saved)
        except TARGET_ERRORS as err:
            _LOGGER.warning("%s: Restore failed: %s", device.id, err)
            return TargetResult(device.id, device.name, TargetOutcome.FAILED, str(err))
        return TargetResult(device.id, device.name, TargetOutcome.RESTORED)

    async def _async_restore_device(self, device: Device, saved: SavedSettings) -> None:
        if saved.dim is not None and saved.dim > 0:
            await self.platform.async_set_capability(device.id, CAPABILITY_DIM, saved.dim)
        if saved.temperature is not None:
            try:
                await self.platform.async_set_capability(
                    device.id, CAPABILITY_LIGHT_TEMPERATURE, saved.temperature
                )
            except (CapabilityUnavailable, DelegationFailure) as err:
                _LOGGER.debug("%s: Temperature not restored: %s", device.id, err)

    # --------------------------------------------------------------------- #
    # Adaptive-lighting state
    # --------------------------------------------------------------------- #

    def is_fading(self, device_id: str, now: int | None = None) -> bool:
        """True if a fade started by either this integration or adaptive control is running."""
        if now is None:
            now = now_ms()
        return self.script_fades.is_active(device_id, now) or self.adaptive_fades.is_active(
            device_id, now
        )

    def mark_adaptive_fade(self, device_id: str, duration_s: float) -> int:
        """Record a fade started by adaptive control."""
        return self.adaptive_fades.mark_active(device_id, duration_s, ADAPTIVE_FADE_BUFFER)

    def update_adaptive_state(
        self,
        device_id: str,
        *,
        manual_override: bool | None = None,
        profile: str | None = None,
        fade_duration_s: float | None = None,
    ) -> DeviceState | None:
        """Apply a state update reported by adaptive lighting control.

        A profile is recorded before the manual flag, so an update carrying
        both ends up with the explicit flag.
        """
        if not device_id:
            raise MissingDeviceId
        if profile is not None:
            self.registry.set_last_profile(device_id, profile)
        if manual_override is not None:
            self.registry.set_manual_override(device_id, manual_override)
        if fade_duration_s is not None:
            self.mark_adaptive_fade(device_id, fade_duration_s)
        return self.registry.get(device_id)

    async def async_report(self) -> str:
        """Return the diagnostics report as text."""
        return await self.reporter.async_report()
