"""
Mock adapters — test doubles for the executor, filesystem and kernel.

Used by the test suite to simulate device behaviour without root:
scripted command responses, an in-memory file tree, and a fixed
kernel binding.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import PurePosixPath

from patchstate.adapters.base import FilesystemView, KernelInterface, PrivilegedExecutor
from patchstate.core.errors import PrivilegeUnavailable
from patchstate.core.models.execution import ExecutionResult


class MockExecutor(PrivilegedExecutor):
    """Scripted privileged executor.

    By default every session succeeds with empty output. Responses are
    matched on the joined command text; a configured exception is
    raised instead of returning.
    """

    def __init__(
        self,
        executor_name: str = "mock",
        available: bool = True,
        default: ExecutionResult | None = None,
    ):
        self._name = executor_name
        self._available = available
        self._default = default or ExecutionResult(exit_code=0)
        self._responses: dict[str, ExecutionResult | Exception] = {}
        self._call_log: list[tuple[str, ...]] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[tuple[str, ...]]:
        """Every command sequence this mock has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def is_available(self) -> bool:
        return self._available

    def set_output(self, command: str, stdout: str, exit_code: int = 0) -> None:
        """Respond to ``command`` with the given stdout and exit code."""
        self._responses[command] = ExecutionResult.from_output(exit_code, stdout)

    def set_response(self, command: str, result: ExecutionResult) -> None:
        self._responses[command] = result

    def set_error(self, command: str, error: Exception | None = None) -> None:
        """Make ``command`` raise (``PrivilegeUnavailable`` by default)."""
        self._responses[command] = error or PrivilegeUnavailable("mock: root denied")

    def deny_all(self) -> None:
        """Make every session fail to acquire root."""
        self._available = False

    def run_privileged(self, commands: Sequence[str]) -> ExecutionResult:
        key = tuple(commands)
        self._call_log.append(key)

        if not self._available:
            raise PrivilegeUnavailable("mock: root unavailable")

        response = self._responses.get("\n".join(key), self._default)
        if isinstance(response, Exception):
            raise response
        return response

    def reset(self) -> None:
        """Clear call log and scripted responses."""
        self._call_log.clear()
        self._responses.clear()


class MemoryFilesystem(FilesystemView):
    """In-memory file tree.

    Directories are implied by file paths and can also be added
    explicitly.  Paths listed in ``unreadable`` raise ``OSError`` on
    read.
    """

    def __init__(
        self,
        files: dict[str, str] | None = None,
        dirs: Iterable[str] = (),
        unreadable: Iterable[str] = (),
    ):
        self.files: dict[str, str] = dict(files or {})
        self.dirs: set[str] = {d.rstrip("/") for d in dirs}
        self.unreadable: set[str] = set(unreadable)

    def _all_dirs(self) -> set[str]:
        implied = set()
        for path in self.files:
            implied.update(str(p) for p in PurePosixPath(path).parents)
        return self.dirs | implied

    def exists(self, path: str) -> bool:
        path = path.rstrip("/")
        return path in self.files or path in self._all_dirs()

    def is_dir(self, path: str) -> bool:
        return path.rstrip("/") in self._all_dirs()

    def read_text(self, path: str) -> str | None:
        if path in self.unreadable:
            raise OSError(f"Permission denied: {path}")
        return self.files.get(path)


class MockKernel(KernelInterface):
    """Fixed-answer kernel binding."""

    def __init__(
        self,
        version: int = 0,
        build_time: str = "",
        error: Exception | None = None,
    ):
        self.version = version
        self.build_time = build_time
        self.error = error
        self.calls = 0

    def kernel_patch_version(self) -> int:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.version

    def kernel_patch_build_time(self) -> str:
        if self.error is not None:
            raise self.error
        return self.build_time
