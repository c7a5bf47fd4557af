"""
Version value types — the two comparable version domains.

The kernel layer speaks ``PackedVersion`` (24-bit major/minor/patch).
Helper binaries such as ``apd`` report a plain integer, wrapped as
``IntegerVersion``.  The two are deliberately distinct classes: ordering
a ``PackedVersion`` against an ``IntegerVersion`` raises ``TypeError``.
"""

from __future__ import annotations

from dataclasses import dataclass

from patchstate.core.errors import RangeError

PACKED_MAX = 0xFFFFFF


@dataclass(frozen=True, order=True)
class PackedVersion:
    """A version packed as ``(major << 16) | (minor << 8) | patch``.

    Ordering is plain integer comparison of ``value``; because the
    major component is most significant, this is also semantic
    version precedence.
    """

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"PackedVersion value must be int, got {type(self.value).__name__}")
        if not 0 <= self.value <= PACKED_MAX:
            raise RangeError(f"Packed version out of range: {self.value:#x}")

    @property
    def major(self) -> int:
        return (self.value >> 16) & 0xFF

    @property
    def minor(self) -> int:
        return (self.value >> 8) & 0xFF

    @property
    def patch(self) -> int:
        return self.value & 0xFF

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass(frozen=True, order=True)
class IntegerVersion:
    """An opaque integer version (helper binary version code)."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"IntegerVersion value must be int, got {type(self.value).__name__}")
        if self.value < 0:
            raise RangeError(f"Integer version must be non-negative: {self.value}")

    def __str__(self) -> str:
        return str(self.value)


Version = PackedVersion | IntegerVersion
