"""
ExecutionResult — what a privileged command session produced.

The executor returns this value; shell probes consume it.  It is
frozen: nothing downstream may rewrite command output.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class ExecutionResult(BaseModel):
    """Outcome of one privileged session.

    ``exit_code`` is the status of the final command; ``stdout_lines``
    is the complete session output, in order.
    """

    model_config = ConfigDict(frozen=True)

    exit_code: int
    stdout_lines: tuple[str, ...] = ()
    stderr: str = ""
    duration_ms: int = 0

    @property
    def succeeded(self) -> bool:
        """Whether the final command exited with status 0."""
        return self.exit_code == 0

    @property
    def output(self) -> str:
        """All stdout lines joined with newlines."""
        return "\n".join(self.stdout_lines)

    @classmethod
    def from_output(
        cls,
        exit_code: int,
        stdout: str,
        **kwargs: Any,
    ) -> ExecutionResult:
        """Build a result from raw stdout text."""
        return cls(
            exit_code=exit_code,
            stdout_lines=tuple(stdout.splitlines()),
            **kwargs,
        )
