"""
Filesystem fallback probe — infer installation from well-known paths.

Runs when the shell probe was inconclusive or failed.  First match
wins:

    1. helper binary + version file with digits  -> resolved(digits)
    2. helper binary, no usable version file      -> resolved("1")  [sentinel]
    3. no binary, install directory present       -> resolved("1")  [sentinel]
    4. neither                                    -> not_installed

The ``"1"`` sentinel means "installed, version unknown".  It is a
low-confidence positive and is flagged as such on the result.
"""

from __future__ import annotations

import logging

from patchstate.adapters.base import FilesystemView
from patchstate.core.models.probe import ProbeResult
from patchstate.core.services.probes.base import ProbeStrategy
from patchstate.core.services.version_codec import first_digit_run

logger = logging.getLogger(__name__)

INSTALLED_SENTINEL = "1"


class FilesystemFallbackProbe(ProbeStrategy):
    """Resolve a layer from helper binary / version file / install dir."""

    def __init__(
        self,
        filesystem: FilesystemView,
        binary: str | None,
        version_file: str | None = None,
        install_dir: str | None = None,
    ):
        self._fs = filesystem
        self._binary = binary
        self._version_file = version_file
        self._install_dir = install_dir

    @property
    def name(self) -> str:
        return "filesystem"

    def _probe(self) -> ProbeResult:
        if self._binary and self._fs.exists(self._binary):
            digits = self._read_version_file()
            if digits:
                logger.info("Filesystem probe: %s present, version file says %s", self._binary, digits)
                return ProbeResult.resolved(digits, probe=self.name, path=self._version_file)

            logger.info("Filesystem probe: %s present but version unknown, treating as installed", self._binary)
            return ProbeResult.resolved(
                INSTALLED_SENTINEL,
                probe=self.name,
                low_confidence=True,
                path=self._binary,
            )

        if self._install_dir and self._fs.is_dir(self._install_dir):
            logger.info("Filesystem probe: %s exists, treating as partial installation", self._install_dir)
            return ProbeResult.resolved(
                INSTALLED_SENTINEL,
                probe=self.name,
                low_confidence=True,
                path=self._install_dir,
            )

        logger.info("Filesystem probe: no installation detected")
        return ProbeResult.not_installed(probe=self.name)

    def _read_version_file(self) -> str | None:
        """Digit run from the version file, or None if absent/empty/unreadable."""
        if not self._version_file:
            return None
        try:
            content = self._fs.read_text(self._version_file)
        except OSError as e:
            logger.warning("Filesystem probe: cannot read %s: %s", self._version_file, e)
            return None
        if not content or not content.strip():
            return None
        return first_digit_run(content)
