"""
Domain models — value types for the resolution engine.

All models are re-exported here for convenient access:

    from patchstate.core.models import PackedVersion, ProbeResult, LayerState
"""

from patchstate.core.models.config import (
    ExecutorConfig,
    ExpectedVersions,
    KernelBindingConfig,
    KpimgConfig,
    LayerConfig,
    LayersConfig,
    PatchConfig,
    PendingFlags,
    UpdateConfig,
)
from patchstate.core.models.execution import ExecutionResult
from patchstate.core.models.probe import ProbeOutcome, ProbeResult
from patchstate.core.models.state import (
    Layer,
    LayerResolution,
    LayerState,
    LayerStatus,
    ResolutionStatus,
)
from patchstate.core.models.version import IntegerVersion, PackedVersion, Version

__all__ = [
    "ExecutionResult",
    "ExecutorConfig",
    "ExpectedVersions",
    "IntegerVersion",
    "KernelBindingConfig",
    "KpimgConfig",
    "Layer",
    "LayerConfig",
    "LayerResolution",
    "LayerState",
    "LayerStatus",
    "LayersConfig",
    "PackedVersion",
    "PatchConfig",
    "PendingFlags",
    "ProbeOutcome",
    "ProbeResult",
    "ResolutionStatus",
    "UpdateConfig",
    "Version",
]
