"""
Native-binding probe — ask the patched kernel directly.

Reads the packed KernelPatch version and build time from an
already-initialised ``KernelInterface``; no shell round-trip.
"""

from __future__ import annotations

import logging

from patchstate.adapters.base import KernelInterface
from patchstate.core.models.probe import ProbeResult
from patchstate.core.services.probes.base import ProbeStrategy
from patchstate.core.services.version_codec import from_raw

logger = logging.getLogger(__name__)

ERROR_PREFIX = "ERROR_"


class NativeBindingProbe(ProbeStrategy):
    """Resolve the kernel layer from the native binding.

    ``ERROR_``-prefixed build time  -> failed
    negative raw version           -> failed (supercall error code)
    zero                           -> inconclusive
    positive                       -> resolved(PackedVersion)
    """

    def __init__(self, kernel: KernelInterface):
        self._kernel = kernel

    @property
    def name(self) -> str:
        return "native"

    def _probe(self) -> ProbeResult:
        build_time = self._kernel.kernel_patch_build_time()
        if build_time.startswith(ERROR_PREFIX):
            logger.info("Native binding reported %s", build_time)
            return ProbeResult.failed(f"kernel interface error: {build_time}", probe=self.name)

        raw = self._kernel.kernel_patch_version()
        if raw < 0:
            return ProbeResult.failed(f"kernel interface returned {raw}", probe=self.name)
        if raw == 0:
            return ProbeResult.inconclusive("kernel interface reported no version", probe=self.name)

        version = from_raw(raw)
        logger.debug("Native binding: %s (built %s)", version, build_time)
        return ProbeResult.resolved(version, probe=self.name, build_time=build_time)
