"""
Probe strategies — the three ways a layer's version is discovered.

These READ device state but never WRITE.
"""

from patchstate.core.services.probes.base import ProbeStrategy  # noqa: F401
from patchstate.core.services.probes.filesystem import (  # noqa: F401
    INSTALLED_SENTINEL,
    FilesystemFallbackProbe,
)
from patchstate.core.services.probes.native import (  # noqa: F401
    ERROR_PREFIX,
    NativeBindingProbe,
)
from patchstate.core.services.probes.shell import ShellProbe  # noqa: F401
