"""
Shell probe — run ``<helper> -V`` in a root shell.

The helper's stdout is authoritative: the first run of digits is the
version.  A failed privileged call is reported as ``failed``, never as
``not_installed``: only the filesystem fallback may confirm absence.
"""

from __future__ import annotations

import logging
import shlex

from patchstate.adapters.base import PrivilegedExecutor
from patchstate.core.errors import PrivilegeUnavailable
from patchstate.core.models.probe import ProbeResult
from patchstate.core.services.probes.base import ProbeStrategy
from patchstate.core.services.version_codec import first_digit_run

logger = logging.getLogger(__name__)


class ShellProbe(ProbeStrategy):
    """Resolve a layer from its helper binary's version flag."""

    def __init__(
        self,
        executor: PrivilegedExecutor,
        binary: str,
        version_flag: str = "-V",
    ):
        self._executor = executor
        self._binary = binary
        self._version_flag = version_flag

    @property
    def name(self) -> str:
        return "shell"

    @property
    def command(self) -> str:
        return f"{shlex.quote(self._binary)} {self._version_flag}"

    def _probe(self) -> ProbeResult:
        try:
            result = self._executor.run_privileged([self.command])
        except PrivilegeUnavailable as e:
            logger.warning("Shell probe %r: privilege unavailable: %s", self.command, e)
            return ProbeResult.failed(f"privilege unavailable: {e}", probe=self.name)

        output = result.output
        logger.info("Shell probe %r -> exit=%d output=%r", self.command, result.exit_code, output)

        if not result.succeeded:
            return ProbeResult.failed(
                f"{self.command} exited with code {result.exit_code}",
                probe=self.name,
                stdout=output,
            )

        digits = first_digit_run(output)
        if not digits:
            return ProbeResult.inconclusive(
                f"no version digits in output of {self.command}",
                probe=self.name,
                stdout=output,
            )
        return ProbeResult.resolved(digits, probe=self.name)
