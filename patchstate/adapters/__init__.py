"""Adapters — device bindings for the resolution engine.

Public re-exports for convenient access.
"""

from patchstate.adapters.base import FilesystemView, KernelInterface, PrivilegedExecutor
from patchstate.adapters.mock import MemoryFilesystem, MockExecutor, MockKernel
from patchstate.adapters.shell.filesystem import LocalFilesystem, PrivilegedFilesystem
from patchstate.adapters.shell.kernel import KpatchKernel
from patchstate.adapters.shell.privileged import SuExecutor

__all__ = [
    "FilesystemView",
    "KernelInterface",
    "KpatchKernel",
    "LocalFilesystem",
    "MemoryFilesystem",
    "MockExecutor",
    "MockKernel",
    "PrivilegedExecutor",
    "PrivilegedFilesystem",
    "SuExecutor",
]
