"""
State reducer — resolutions + expected versions → LayerState (pure).

Rules per layer, first match wins:

    0. install in flight                     → INSTALLING
    1. resolution unknown                    → UNKNOWN
    2. resolution not installed              → NOT_INSTALLED
    3. installed <  expected                 → NEEDS_UPDATE
    4. installed >= expected, reboot pending → NEEDS_REBOOT
    5. otherwise                             → INSTALLED

Equality never triggers an update.  A dev build that reports a higher
patch number than the app ships is therefore shown as INSTALLED.

No I/O.
"""

from __future__ import annotations

from collections.abc import Collection

from patchstate.core.models.state import (
    Layer,
    LayerResolution,
    LayerState,
    ResolutionStatus,
)
from patchstate.core.models.version import Version

LayerFlag = bool | Collection[Layer]


def _flag_for(flag: LayerFlag, layer: Layer) -> bool:
    """A bare bool applies to every layer; a collection names layers."""
    if isinstance(flag, bool):
        return flag
    return layer in flag


def reduce_layer(
    resolution: LayerResolution,
    expected: Version | None,
    *,
    reboot_pending: bool = False,
    installing: bool = False,
) -> LayerState:
    """Reduce one layer's resolution to its visible state.

    ``expected`` may be None when the app ships no reference version;
    an installed layer is then simply INSTALLED.

    Raises:
        TypeError: ``expected`` and the installed version belong to
            different version domains.
    """
    if installing:
        return LayerState.installing()

    if resolution.status == ResolutionStatus.UNKNOWN:
        return LayerState.unknown()

    if resolution.status == ResolutionStatus.NOT_INSTALLED:
        return LayerState.not_installed()

    if resolution.status == ResolutionStatus.INSTALLED:
        installed = resolution.version
        if installed is None:
            return LayerState.unknown()
        if expected is None:
            return LayerState.installed_at(installed)
        if type(installed) is not type(expected):
            raise TypeError(
                f"Cannot compare {type(installed).__name__} with {type(expected).__name__}"
            )
        if installed < expected:
            return LayerState.needs_update(installed, expected)
        if reboot_pending:
            return LayerState.needs_reboot(installed, expected)
        return LayerState.installed_at(installed)

    raise ValueError(f"Unhandled resolution status: {resolution.status!r}")


def reduce(
    kernel: LayerResolution,
    android: LayerResolution,
    expected_kernel: Version | None,
    expected_android: Version | None,
    reboot_pending: LayerFlag = False,
    *,
    installing: LayerFlag = False,
) -> tuple[LayerState, LayerState]:
    """Reduce both layers.

    Args:
        kernel: Resolution of the kernel layer.
        android: Resolution of the android layer.
        expected_kernel: Packed version the app ships.
        expected_android: Helper version code the app ships.
        reboot_pending: True for all layers, or the layers with an
            applied-but-inactive update.
        installing: True for all layers, or the layers being installed.

    Returns:
        ``(kernel_state, android_state)``
    """
    return (
        reduce_layer(
            kernel,
            expected_kernel,
            reboot_pending=_flag_for(reboot_pending, Layer.KERNEL),
            installing=_flag_for(installing, Layer.KERNEL),
        ),
        reduce_layer(
            android,
            expected_android,
            reboot_pending=_flag_for(reboot_pending, Layer.ANDROID),
            installing=_flag_for(installing, Layer.ANDROID),
        ),
    )
