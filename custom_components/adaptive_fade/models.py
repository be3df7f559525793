"""Result models for the Adaptive Fade integration."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class FadeOutcome(StrEnum):
    """What a fade-out request did."""

    FADED = "faded"
    ALREADY_OFF = "already-off"


class RestoreOutcome(StrEnum):
    """What a restore request did."""

    RESTORED = "restored"
    SKIPPED = "skipped"
    FAILED = "failed"  # no light could be restored


class TargetOutcome(StrEnum):
    """What happened to one light during a fade-out or restore."""

    DELEGATED = "delegated"  # timed transition handed to the light
    FALLBACK = "fallback"  # timed transition failed, set to 0 instantly
    SWITCHED_OFF = "switched-off"  # already dark, turned off directly
    RESTORED = "restored"
    FAILED = "failed"


@dataclass(frozen=True)
class TargetResult:
    """Outcome for a single light."""

    device_id: str
    name: str
    outcome: TargetOutcome
    error: str | None = None


@dataclass
class FadeOutResult:
    """Result of ``FadeCoordinator.async_fade_out``.

    The fade itself keeps running on the lights after this is returned.
    """

    device_id: str
    device_name: str
    outcome: FadeOutcome
    duration_s: float = 0
    active_until: int | None = None
    targets: list[TargetResult] = field(default_factory=list)

    @property
    def delegated_count(self) -> int:
        """Number of lights fading via their own timed transition."""
        return sum(1 for t in self.targets if t.outcome is TargetOutcome.DELEGATED)

    @property
    def failed_count(self) -> int:
        """Number of lights that could not be faded or turned off."""
        return sum(1 for t in self.targets if t.outcome is TargetOutcome.FAILED)

    @property
    def is_degraded(self) -> bool:
        """True when any light failed or needed the instant fallback."""
        return any(
            t.outcome in (TargetOutcome.FAILED, TargetOutcome.FALLBACK) for t in self.targets
        )

    @property
    def error(self) -> str | None:
        """Description of failed or fallback targets, if any."""
        problems = [
            f"{t.name}: {t.error}" for t in self.targets if t.error is not None
        ]
        return "; ".join(problems) if problems else None

    @property
    def summary(self) -> str:
        """Human-readable description of what happened."""
        if self.outcome is FadeOutcome.ALREADY_OFF:
            text = f"{self.device_name}: Already off or very dim"
        elif any(t.outcome is TargetOutcome.FALLBACK for t in self.targets):
            text = f"{self.device_name}: Hardware fade failed, turned off instantly"
        else:
            text = f"{self.device_name}: Fading to off over {self.duration_s:g}s"

        if self.failed_count:
            text += f" ({self.failed_count} of {len(self.targets)} lights failed)"
        return text

    def as_response(self) -> dict[str, Any]:
        """Service response payload."""
        response: dict[str, Any] = {
            "device_name": self.device_name,
            "outcome": str(self.outcome),
            "summary": self.summary,
        }
        if self.error is not None:
            response["error"] = self.error
        return response


@dataclass
class RestoreResult:
    """Result of ``FadeCoordinator.async_restore``."""

    device_id: str
    device_name: str
    outcome: RestoreOutcome
    dim: float | None = None
    temperature: float | None = None
    targets: list[TargetResult] = field(default_factory=list)

    @property
    def failed_count(self) -> int:
        return sum(1 for t in self.targets if t.outcome is TargetOutcome.FAILED)

    @property
    def error(self) -> str | None:
        """Description of the lights that could not be restored, if any."""
        problems = [f"{t.name}: {t.error}" for t in self.targets if t.error is not None]
        return "; ".join(problems) if problems else None

    @property
    def summary(self) -> str:
        if self.outcome is RestoreOutcome.SKIPPED:
            return f"{self.device_name}: No fade in progress, nothing to restore"
        if self.outcome is RestoreOutcome.FAILED:
            return f"{self.device_name}: Restore failed"
        text = f"{self.device_name}: Restored to {format_pct(self.dim)}"
        if self.temperature is not None:
            text += f" / {format_pct(self.temperature)} temp"
        if self.failed_count:
            text += f" ({self.failed_count} of {len(self.targets)} lights failed)"
        return text

    def as_response(self) -> dict[str, Any]:
        response: dict[str, Any] = {
            "device_name": self.device_name,
            "outcome": str(self.outcome),
            "summary": self.summary,
            "dim": self.dim,
            "temperature": self.temperature,
        }
        if self.error is not None:
            response["error"] = self.error
        return response


def format_pct(value: float | None) -> str:
    """Format a 0-1 value as a whole percentage, or N/A."""
    return "N/A" if value is None else f"{round(value * 100)}%"
