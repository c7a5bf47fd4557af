"""
Filesystem views — what the fallback probe can see on the device.

``LocalFilesystem`` reads with the current process's permissions.
``PrivilegedFilesystem`` asks the root shell instead, for trees such
as ``/data/adb`` that an unprivileged process cannot stat.
"""

from __future__ import annotations

import logging
import shlex
from pathlib import Path

from patchstate.adapters.base import FilesystemView, PrivilegedExecutor

logger = logging.getLogger(__name__)


class LocalFilesystem(FilesystemView):
    """Plain ``pathlib`` access."""

    def exists(self, path: str) -> bool:
        return Path(path).exists()

    def is_dir(self, path: str) -> bool:
        return Path(path).is_dir()

    def read_text(self, path: str) -> str | None:
        target = Path(path)
        if not target.is_file():
            return None
        return target.read_text(encoding="utf-8", errors="replace")


class PrivilegedFilesystem(FilesystemView):
    """Filesystem checks routed through a root shell.

    ``PrivilegeUnavailable`` from the executor propagates unchanged.
    """

    def __init__(self, executor: PrivilegedExecutor):
        self._executor = executor

    def _test(self, flag: str, path: str) -> bool:
        result = self._executor.run_privileged([f"test {flag} {shlex.quote(path)}"])
        return result.succeeded

    def exists(self, path: str) -> bool:
        return self._test("-e", path)

    def is_dir(self, path: str) -> bool:
        return self._test("-d", path)

    def read_text(self, path: str) -> str | None:
        if not self._test("-f", path):
            return None
        result = self._executor.run_privileged([f"cat {shlex.quote(path)}"])
        if not result.succeeded:
            raise OSError(f"cat {path} exited with code {result.exit_code}")
        return result.output
