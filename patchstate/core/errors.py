"""
Error taxonomy — exceptions raised across the resolution engine.

Probes never raise: a strategy-internal fault is converted into a
``ProbeResult`` with outcome ``failed`` at the strategy boundary.
The exceptions below are what the leaves (codec, executor, config)
raise to their callers.
"""

from __future__ import annotations


class PatchStateError(Exception):
    """Base class for all patchstate errors."""


class PrivilegeUnavailable(PatchStateError):
    """A privileged (root) context could not be acquired.

    Covers: no ``su`` binary, root denied, broker timeout, uid check
    failed.  Reported to the caller, never retried automatically and
    never interpreted as "not installed".
    """


class VersionError(PatchStateError, ValueError):
    """Base class for version codec errors."""


class ParseError(VersionError):
    """A version string is malformed (too few / non-numeric components)."""


class RangeError(VersionError):
    """A version component or raw value is outside the encodable range."""


class ConfigError(PatchStateError):
    """Raised when patchstate configuration is invalid."""
