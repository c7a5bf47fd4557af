"""
Version codec — dotted strings <-> 24-bit packed integers (pure).

    "0.11.1"      ->  PackedVersion(0x000B01)
    "0.9.0-dev"   ->  PackedVersion(0x000900)   (suffix dropped)

No I/O, no subprocess.
"""

from __future__ import annotations

import re

from patchstate.core.errors import ParseError, RangeError
from patchstate.core.models.version import PACKED_MAX, PackedVersion

_DIGIT_RUN = re.compile(r"[0-9]+")
_COMPONENT_MAX = 0xFF


def encode(major: int, minor: int, patch: int) -> PackedVersion:
    """Pack three components into a ``PackedVersion``.

    Raises:
        RangeError: If any component is outside ``[0, 255]``.
    """
    for label, component in (("major", major), ("minor", minor), ("patch", patch)):
        if not 0 <= component <= _COMPONENT_MAX:
            raise RangeError(f"{label} component out of range [0, 255]: {component}")
    return PackedVersion((major << 16) | (minor << 8) | patch)


def decode(version: PackedVersion) -> tuple[int, int, int]:
    """Unpack a ``PackedVersion`` into ``(major, minor, patch)``."""
    return version.major, version.minor, version.patch


def parse(text: str) -> PackedVersion:
    """Parse ``"major.minor.patch[-suffix]"`` into a ``PackedVersion``.

    The ``-suffix`` is accepted and discarded; it is never reconstructed
    by ``format``.

    Raises:
        ParseError: Fewer or more than three components, or a
            non-numeric component.
        RangeError: A component outside ``[0, 255]``.
    """
    prefix = text.strip().split("-", 1)[0]
    parts = prefix.split(".")
    if len(parts) != 3:
        raise ParseError(f"Expected 'major.minor.patch', got {text!r}")

    components: list[int] = []
    for part in parts:
        if not part.isascii() or not part.isdigit():
            raise ParseError(f"Non-numeric version component {part!r} in {text!r}")
        components.append(int(part))

    return encode(*components)


def format(version: PackedVersion) -> str:  # noqa: A001
    """Render a ``PackedVersion`` as ``"major.minor.patch"`` (no padding)."""
    major, minor, patch = decode(version)
    return f"{major}.{minor}.{patch}"


def from_raw(raw: int) -> PackedVersion:
    """Wrap a raw integer reported by the kernel interface.

    Raises:
        RangeError: If ``raw`` is negative or wider than 24 bits.
    """
    if not 0 <= raw <= PACKED_MAX:
        raise RangeError(f"Raw packed version out of range: {raw}")
    return PackedVersion(raw)


def first_digit_run(text: str) -> str | None:
    """Return the first maximal run of decimal digits in ``text``.

    ``"apd version 10763\\n"`` -> ``"10763"``; ``"garbage"`` -> ``None``.
    """
    match = _DIGIT_RUN.search(text)
    return match.group(0) if match else None
