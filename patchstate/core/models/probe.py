"""
ProbeResult — the closed set of answers a probe strategy can give.

    RESOLVED       a version (packed, or a raw digit string)
    NOT_INSTALLED  absence confirmed
    INCONCLUSIVE   the probe ran but could not tell
    FAILED         the probe itself broke (I/O error, no root, ...)

Only the resolver consumes these; they never reach the presentation
layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from patchstate.core.models.version import PackedVersion


class ProbeOutcome(StrEnum):
    """Tag of a ``ProbeResult``."""

    RESOLVED = "resolved"
    NOT_INSTALLED = "not_installed"
    INCONCLUSIVE = "inconclusive"
    FAILED = "failed"


@dataclass(frozen=True)
class ProbeResult:
    """Tagged result of one probe attempt.

    ``payload`` is set only for ``RESOLVED``: either a ``PackedVersion``
    (native binding) or a raw version string (shell / filesystem).
    ``reason`` explains ``INCONCLUSIVE`` and ``FAILED``.
    ``low_confidence`` marks sentinel answers ("installed, version
    unknown").
    """

    outcome: ProbeOutcome
    probe: str = ""
    payload: PackedVersion | str | None = None
    reason: str = ""
    low_confidence: bool = False
    detail: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def terminal(self) -> bool:
        """Whether this result ends the fallback chain."""
        return self.outcome in (ProbeOutcome.RESOLVED, ProbeOutcome.NOT_INSTALLED)

    @classmethod
    def resolved(
        cls,
        payload: PackedVersion | str,
        probe: str = "",
        low_confidence: bool = False,
        **detail: Any,
    ) -> ProbeResult:
        return cls(
            outcome=ProbeOutcome.RESOLVED,
            probe=probe,
            payload=payload,
            low_confidence=low_confidence,
            detail=detail,
        )

    @classmethod
    def not_installed(cls, probe: str = "", **detail: Any) -> ProbeResult:
        return cls(outcome=ProbeOutcome.NOT_INSTALLED, probe=probe, detail=detail)

    @classmethod
    def inconclusive(cls, reason: str, probe: str = "", **detail: Any) -> ProbeResult:
        return cls(
            outcome=ProbeOutcome.INCONCLUSIVE,
            probe=probe,
            reason=reason,
            detail=detail,
        )

    @classmethod
    def failed(cls, cause: str, probe: str = "", **detail: Any) -> ProbeResult:
        return cls(
            outcome=ProbeOutcome.FAILED,
            probe=probe,
            reason=cause,
            detail=detail,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "probe": self.probe,
            "outcome": self.outcome.value,
            "payload": str(self.payload) if self.payload is not None else None,
            "reason": self.reason,
            "low_confidence": self.low_confidence,
            "detail": dict(self.detail),
        }
