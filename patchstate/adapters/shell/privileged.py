"""
Privileged executor — run command sequences in a root shell.

This is the SINGLE PLACE where ``subprocess.run`` is called to reach
root.  One call opens one ``su`` session (or a plain ``sh`` when the
process is already uid 0), feeds the commands on stdin, and returns
the session's output untouched.

Invariants:
    - lock wait + session are bounded by one wall-clock timeout
    - timeout, missing ``su`` and denied root all raise
      ``PrivilegeUnavailable``; nothing is retried here
    - one in-flight session per executor instance
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
import threading
import time
from collections.abc import Sequence

from patchstate.adapters.base import PrivilegedExecutor
from patchstate.core.errors import PrivilegeUnavailable
from patchstate.core.models.config import ExecutorConfig
from patchstate.core.models.execution import ExecutionResult

logger = logging.getLogger(__name__)

# Emitted before the caller's commands, stripped from the output.
_UID_MARKER = "__patchstate_uid__="


class SuExecutor(PrivilegedExecutor):
    """Root shell executor backed by ``su``.

    Args:
        su_command: argv used to obtain root (default ``["su"]``).
        timeout: Seconds allowed for lock wait plus the session.
        verify_root: Check ``id -u`` inside the session and raise
            ``PrivilegeUnavailable`` unless it is 0.
    """

    def __init__(
        self,
        su_command: Sequence[str] | None = None,
        timeout: float = 10.0,
        verify_root: bool = True,
    ):
        self._su_command = list(su_command or ["su"])
        self._timeout = timeout
        self._verify_root = verify_root
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: ExecutorConfig) -> SuExecutor:
        return cls(
            su_command=config.su_command,
            timeout=config.timeout,
            verify_root=config.verify_root,
        )

    @property
    def name(self) -> str:
        return "su"

    @property
    def timeout(self) -> float:
        return self._timeout

    def is_available(self) -> bool:
        if _is_root():
            return True
        return shutil.which(self._su_command[0]) is not None

    def run_privileged(self, commands: Sequence[str]) -> ExecutionResult:
        if not commands:
            raise ValueError("run_privileged needs at least one command")

        deadline = time.monotonic() + self._timeout
        if not self._lock.acquire(timeout=self._timeout):
            raise PrivilegeUnavailable(
                f"Privileged session busy for {self._timeout:g}s"
            )
        try:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise PrivilegeUnavailable(
                    f"Privileged session timed out after {self._timeout:g}s"
                )
            return self._run_session(list(commands), remaining)
        finally:
            self._lock.release()

    # ── Internals ───────────────────────────────────────────────

    def _shell_argv(self) -> list[str]:
        # Already root: no su prefix needed
        if _is_root():
            return ["sh"]
        return list(self._su_command)

    def _build_script(self, commands: list[str]) -> str:
        """One command per line; stdin of each is detached from the script."""
        lines = []
        if self._verify_root:
            lines.append(f'echo "{_UID_MARKER}$(id -u)"')
        lines.extend(f"{{ {cmd}\n}} </dev/null" for cmd in commands)
        return "\n".join(lines) + "\n"

    def _run_session(self, commands: list[str], timeout: float) -> ExecutionResult:
        argv = self._shell_argv()
        script = self._build_script(commands)
        logger.debug("Privileged session via %s: %s", shlex.join(argv), commands)

        start = time.monotonic()
        try:
            result = subprocess.run(
                argv,
                input=script,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise PrivilegeUnavailable(
                f"Privileged session timed out after {timeout:.1f}s"
            ) from e
        except OSError as e:
            raise PrivilegeUnavailable(f"Cannot start {argv[0]}: {e}") from e

        elapsed_ms = int((time.monotonic() - start) * 1000)
        lines = result.stdout.splitlines()
        if self._verify_root:
            lines = _strip_uid_marker(lines, result.returncode, result.stderr)

        logger.debug(
            "Privileged session exit=%d lines=%d (%dms)",
            result.returncode,
            len(lines),
            elapsed_ms,
        )
        return ExecutionResult(
            exit_code=result.returncode,
            stdout_lines=tuple(lines),
            stderr=result.stderr,
            duration_ms=elapsed_ms,
        )


def _is_root() -> bool:
    return hasattr(os, "geteuid") and os.geteuid() == 0


def _strip_uid_marker(lines: list[str], returncode: int, stderr: str) -> list[str]:
    """Remove the uid marker line, raising if the session is not root."""
    for index, line in enumerate(lines):
        if line.startswith(_UID_MARKER):
            uid = line[len(_UID_MARKER):].strip()
            if uid != "0":
                raise PrivilegeUnavailable(f"Session is not root (uid={uid or '?'})")
            return lines[:index] + lines[index + 1:]

    detail = stderr.strip().splitlines()[-1] if stderr.strip() else f"exit {returncode}"
    raise PrivilegeUnavailable(f"Root shell not granted: {detail}")
