"""
Kernel binding over the root shell — ``kpatch <superkey> kpver``.

The management app reads the KernelPatch version through a native
supercall.  From Python the same answer comes from the ``kpatch`` user
tool, which prints the packed version in hex.  Failures are reported
the way the native binding reports them: a negative version, or a
build time prefixed ``ERROR_``.
"""

from __future__ import annotations

import logging
import shlex

from patchstate.adapters.base import KernelInterface, PrivilegedExecutor
from patchstate.core.models.config import KernelBindingConfig

logger = logging.getLogger(__name__)

_SUPERKEY = "{superkey}"


class KpatchKernel(KernelInterface):
    """``KernelInterface`` backed by commands run through an executor.

    ``PrivilegeUnavailable`` propagates; the native probe turns it into
    a failed result.
    """

    def __init__(
        self,
        executor: PrivilegedExecutor,
        version_command: list[str],
        build_time_command: list[str] | None = None,
        version_base: int = 16,
    ):
        self._executor = executor
        self._version_command = shlex.join(version_command)
        self._build_time_command = shlex.join(build_time_command) if build_time_command else None
        self._version_base = version_base

    @classmethod
    def from_config(
        cls,
        config: KernelBindingConfig,
        executor: PrivilegedExecutor,
    ) -> KpatchKernel | None:
        """Build the binding, or None if a needed superkey is missing."""
        if not config.version_command:
            return None
        commands = [config.version_command, config.build_time_command or []]
        needs_key = any(_SUPERKEY in arg for command in commands for arg in command)
        if needs_key and not config.superkey:
            logger.info("Kernel binding disabled: no superkey configured")
            return None

        def expand(command: list[str] | None) -> list[str] | None:
            if not command:
                return None
            return [arg.replace(_SUPERKEY, config.superkey or "") for arg in command]

        return cls(
            executor,
            expand(config.version_command) or [],
            expand(config.build_time_command),
            config.version_base,
        )

    def kernel_patch_version(self) -> int:
        result = self._executor.run_privileged([self._version_command])
        if not result.succeeded:
            logger.warning("kpatch version query exited with code %d", result.exit_code)
            return -abs(result.exit_code)

        text = result.output.strip()
        try:
            return int(text.split()[0], self._version_base) if text else 0
        except ValueError:
            logger.warning("kpatch printed no version: %r", text[:80])
            return -1

    def kernel_patch_build_time(self) -> str:
        if self._build_time_command is None:
            return ""
        result = self._executor.run_privileged([self._build_time_command])
        if not result.succeeded:
            return f"ERROR_{result.exit_code}"
        return result.output.strip()
