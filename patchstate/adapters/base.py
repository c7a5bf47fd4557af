"""
Adapter base — the boundary contracts between probes and the device.

Probes never touch ``subprocess``, the filesystem or the kernel
directly; they go through one of these three interfaces:

    PrivilegedExecutor  run command sequences in a root shell
    FilesystemView      existence checks and small file reads
    KernelInterface     an already-initialised native kernel binding

Each has a real implementation under ``patchstate.adapters.shell`` and
a test double in ``patchstate.adapters.mock``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from patchstate.core.models.execution import ExecutionResult


class PrivilegedExecutor(ABC):
    """Runs command sequences inside a privileged (root) context.

    Implementations MUST:
        - raise ``PrivilegeUnavailable`` when root cannot be acquired
          within the configured timeout
        - report the final command's exit status and the full stdout
          of the session, unmodified
        - allow only one in-flight command sequence per instance
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Executor identifier (e.g. 'su', 'mock')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether a privileged context can plausibly be acquired.

        Should be fast and never raise.
        """

    @abstractmethod
    def run_privileged(self, commands: Sequence[str]) -> ExecutionResult:
        """Run ``commands`` in order within one privileged session.

        Raises:
            PrivilegeUnavailable: root could not be acquired.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class FilesystemView(ABC):
    """Read-only view of the device filesystem used by fallback probes."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Whether ``path`` exists (file or directory)."""

    @abstractmethod
    def is_dir(self, path: str) -> bool:
        """Whether ``path`` is an existing directory."""

    @abstractmethod
    def read_text(self, path: str) -> str | None:
        """Return the file's text, or None if it does not exist.

        Raises:
            OSError: The file exists but could not be read.
        """


class KernelInterface(ABC):
    """An already-initialised binding to the patched kernel.

    Mirrors the native calls the management app makes without a
    shell round-trip.
    """

    @abstractmethod
    def kernel_patch_version(self) -> int:
        """Raw packed KernelPatch version; negative on supercall error."""

    @abstractmethod
    def kernel_patch_build_time(self) -> str:
        """Build timestamp, or a string prefixed ``ERROR_`` on failure."""
