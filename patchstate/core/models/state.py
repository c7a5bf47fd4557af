"""
Layer state — resolver output and the externally visible state machine.

``LayerResolution`` is what the resolver concluded about one layer
(unknown / not installed / installed at some version).

``LayerState`` is what the reducer derives from that, given the
version the app ships and any pending reboot or install:

    UNKNOWN        could not determine — render as "retry"
    NOT_INSTALLED  absence confirmed by the filesystem
    INSTALLED      installed and current
    NEEDS_UPDATE   installed < expected
    NEEDS_REBOOT   current, but an applied update is not yet active
    INSTALLING     an install is in flight

Both are recomputed on every query and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from patchstate.core.models.probe import ProbeResult
from patchstate.core.models.version import Version


class Layer(StrEnum):
    """The two managed patch layers."""

    KERNEL = "kernel"
    ANDROID = "android"


class ResolutionStatus(StrEnum):
    UNKNOWN = "unknown"
    NOT_INSTALLED = "not_installed"
    INSTALLED = "installed"


@dataclass(frozen=True)
class LayerResolution:
    """Resolved installation status of one layer."""

    layer: Layer
    status: ResolutionStatus = ResolutionStatus.UNKNOWN
    version: Version | None = None
    source: str = ""                # name of the winning probe
    low_confidence: bool = False
    cancelled: bool = False
    attempts: tuple[ProbeResult, ...] = field(default=(), compare=False)

    @classmethod
    def unknown(
        cls,
        layer: Layer,
        attempts: tuple[ProbeResult, ...] = (),
        cancelled: bool = False,
    ) -> LayerResolution:
        return cls(layer=layer, attempts=attempts, cancelled=cancelled)

    @classmethod
    def not_installed(
        cls,
        layer: Layer,
        source: str = "",
        attempts: tuple[ProbeResult, ...] = (),
    ) -> LayerResolution:
        return cls(
            layer=layer,
            status=ResolutionStatus.NOT_INSTALLED,
            source=source,
            attempts=attempts,
        )

    @classmethod
    def installed(
        cls,
        layer: Layer,
        version: Version,
        source: str = "",
        low_confidence: bool = False,
        attempts: tuple[ProbeResult, ...] = (),
    ) -> LayerResolution:
        return cls(
            layer=layer,
            status=ResolutionStatus.INSTALLED,
            version=version,
            source=source,
            low_confidence=low_confidence,
            attempts=attempts,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "layer": self.layer.value,
            "status": self.status.value,
            "version": str(self.version) if self.version is not None else None,
            "source": self.source,
            "low_confidence": self.low_confidence,
            "cancelled": self.cancelled,
            "attempts": [a.to_dict() for a in self.attempts],
        }


class LayerStatus(StrEnum):
    """Tag of a ``LayerState``."""

    UNKNOWN = "unknown"
    NOT_INSTALLED = "not_installed"
    INSTALLED = "installed"
    NEEDS_UPDATE = "needs_update"
    NEEDS_REBOOT = "needs_reboot"
    INSTALLING = "installing"


@dataclass(frozen=True)
class LayerState:
    """Externally visible state of one layer.

    ``installed`` is set for INSTALLED, NEEDS_UPDATE and NEEDS_REBOOT;
    ``expected`` is set for NEEDS_UPDATE and NEEDS_REBOOT.
    """

    status: LayerStatus
    installed: Version | None = None
    expected: Version | None = None

    @property
    def retryable(self) -> bool:
        """Whether the presentation layer should offer a retry."""
        return self.status == LayerStatus.UNKNOWN

    @classmethod
    def unknown(cls) -> LayerState:
        return cls(status=LayerStatus.UNKNOWN)

    @classmethod
    def not_installed(cls) -> LayerState:
        return cls(status=LayerStatus.NOT_INSTALLED)

    @classmethod
    def installing(cls) -> LayerState:
        return cls(status=LayerStatus.INSTALLING)

    @classmethod
    def installed_at(cls, version: Version) -> LayerState:
        return cls(status=LayerStatus.INSTALLED, installed=version)

    @classmethod
    def needs_update(cls, installed: Version, expected: Version) -> LayerState:
        return cls(status=LayerStatus.NEEDS_UPDATE, installed=installed, expected=expected)

    @classmethod
    def needs_reboot(cls, installed: Version, expected: Version) -> LayerState:
        return cls(status=LayerStatus.NEEDS_REBOOT, installed=installed, expected=expected)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "installed": str(self.installed) if self.installed is not None else None,
            "expected": str(self.expected) if self.expected is not None else None,
            "retryable": self.retryable,
        }
