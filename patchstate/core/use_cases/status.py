"""
Status use case — resolve and reduce both layers.

Each layer is resolved on its own worker thread; the layers touch
disjoint resources and a shared executor serialises its sessions.
The result is what the presentation layer renders.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from patchstate.adapters.base import KernelInterface, PrivilegedExecutor
from patchstate.adapters.shell.kernel import KpatchKernel
from patchstate.adapters.shell.privileged import SuExecutor
from patchstate.core.models.config import PatchConfig
from patchstate.core.models.state import Layer, LayerResolution, LayerState
from patchstate.core.models.version import PackedVersion, Version
from patchstate.core.services.kpimg import read_kpimg_info
from patchstate.core.services.reducer import reduce, reduce_layer
from patchstate.core.services.resolver import build_resolver

logger = logging.getLogger(__name__)


@dataclass
class StatusResult:
    """Resolved and reduced state of both layers."""

    resolutions: dict[Layer, LayerResolution] = field(default_factory=dict)
    states: dict[Layer, LayerState] = field(default_factory=dict)
    error: str | None = None

    @property
    def kernel(self) -> LayerState:
        return self.states.get(Layer.KERNEL, LayerState.unknown())

    @property
    def android(self) -> LayerState:
        return self.states.get(Layer.ANDROID, LayerState.unknown())

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        result: dict[str, Any] = {"layers": {}}
        if self.error:
            result["error"] = self.error
        for layer in Layer:
            if layer not in self.resolutions and layer not in self.states:
                continue
            entry: dict[str, Any] = {"state": self.states.get(layer, LayerState.unknown()).to_dict()}
            resolution = self.resolutions.get(layer)
            if resolution is not None:
                entry["resolution"] = resolution.to_dict()
            result["layers"][layer.value] = entry
        return result


def resolve_layers(
    config: PatchConfig,
    executor: PrivilegedExecutor,
    kernel: KernelInterface | None = None,
    layers: tuple[Layer, ...] = (Layer.KERNEL, Layer.ANDROID),
    cancel: threading.Event | None = None,
) -> dict[Layer, LayerResolution]:
    """Resolve the given layers concurrently, one worker per layer.

    A worker that raises is reported as an unknown resolution.
    """
    resolutions: dict[Layer, LayerResolution] = {}
    with ThreadPoolExecutor(max_workers=len(layers), thread_name_prefix="resolve") as pool:
        futures = {
            layer: pool.submit(
                build_resolver(layer, config.layers.for_layer(layer), executor, kernel).resolve,
                cancel,
            )
            for layer in layers
        }
        for layer, future in futures.items():
            try:
                resolutions[layer] = future.result()
            except Exception as e:
                logger.error("Resolving %s raised: %s", layer, e, exc_info=True)
                resolutions[layer] = LayerResolution.unknown(layer)
    return resolutions


def expected_kernel_version(
    config: PatchConfig,
    executor: PrivilegedExecutor,
) -> PackedVersion | None:
    """The configured expected kernel version, else the bundled kpimg's."""
    expected = config.expected.kernel_version()
    if expected is not None or not (config.kpimg.kptools and config.kpimg.image):
        return expected

    info = read_kpimg_info(
        executor,
        config.kpimg.kptools,
        config.kpimg.image,
        workdir=config.kpimg.workdir,
    )
    if info is None or info.version is None:
        logger.warning("No expected kernel version: kpimg info unavailable")
        return None
    logger.info("Expected kernel version %s taken from bundled kpimg", info.version)
    return info.version


def collect_status(
    config: PatchConfig,
    executor: PrivilegedExecutor | None = None,
    kernel: KernelInterface | None = None,
    cancel: threading.Event | None = None,
    layers: tuple[Layer, ...] = (Layer.KERNEL, Layer.ANDROID),
) -> StatusResult:
    """Resolve the layers and reduce them against the expected versions.

    Args:
        config: Explicit configuration (paths, expected versions, flags).
        executor: Privileged executor; defaults to ``su`` per config.
        kernel: Native kernel binding; defaults to ``kpatch`` per config
            when a superkey is configured.
        cancel: Set to abandon resolution between probes.
        layers: Layers to resolve; the others are left out of the result.
    """
    if executor is None:
        executor = SuExecutor.from_config(config.executor)
    if kernel is None and Layer.KERNEL in layers:
        kernel = KpatchKernel.from_config(config.kernel_binding, executor)

    resolutions = resolve_layers(config, executor, kernel, layers=layers, cancel=cancel)

    try:
        if set(layers) == set(Layer):
            kernel_state, android_state = reduce(
                resolutions[Layer.KERNEL],
                resolutions[Layer.ANDROID],
                expected_kernel_version(config, executor),
                config.expected.android_version(),
                reboot_pending=config.pending.reboot_pending,
                installing=config.pending.installing,
            )
            states = {Layer.KERNEL: kernel_state, Layer.ANDROID: android_state}
        else:
            states = {
                layer: reduce_layer(
                    resolutions[layer],
                    _expected_version(layer, config, executor),
                    reboot_pending=layer in config.pending.reboot_pending,
                    installing=layer in config.pending.installing,
                )
                for layer in layers
            }
    except (TypeError, ValueError) as e:
        logger.error("Cannot reduce layer state: %s", e)
        return StatusResult(resolutions=resolutions, error=str(e))

    return StatusResult(resolutions=resolutions, states=states)


def _expected_version(
    layer: Layer,
    config: PatchConfig,
    executor: PrivilegedExecutor,
) -> Version | None:
    if layer == Layer.KERNEL:
        return expected_kernel_version(config, executor)
    return config.expected.android_version()
