"""
PatchConfig — explicit configuration for one resolution run.

Loaded from patchstate.yml (or built from defaults).  Everything the
resolver and reducer need — paths, timeouts, expected versions,
pending flags — travels in this object; there are no process-wide
settings.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from patchstate.core.models.state import Layer
from patchstate.core.models.version import IntegerVersion, PackedVersion

# Well-known APatch locations
APD_PATH = "/data/adb/apd"
APATCH_FOLDER = "/data/adb/ap"
APATCH_VERSION_PATH = f"{APATCH_FOLDER}/version"
KPATCH_PATH = "/data/adb/kpatch"


class ExecutorConfig(BaseModel):
    """How to obtain a root shell."""

    su_command: list[str] = Field(default_factory=lambda: ["su"])
    timeout: float = 10.0
    verify_root: bool = True


class LayerConfig(BaseModel):
    """Which probes apply to a layer, and where they look.

    A probe whose inputs are unset is skipped: ``native`` gates the
    native-binding probe, ``helper_binary`` the shell probe, and
    ``helper_binary`` / ``install_dir`` the filesystem fallback.
    """

    native: bool = False
    helper_binary: str | None = None
    version_flag: str = "-V"
    version_file: str | None = None
    install_dir: str | None = None
    filesystem: Literal["local", "privileged"] = "local"
    domain: Literal["packed", "integer"] = "integer"


def _default_kernel_layer() -> LayerConfig:
    return LayerConfig(native=True, domain="packed")


def _default_android_layer() -> LayerConfig:
    return LayerConfig(
        helper_binary=APD_PATH,
        version_file=APATCH_VERSION_PATH,
        install_dir=APATCH_FOLDER,
        domain="integer",
    )


class KernelBindingConfig(BaseModel):
    """How to ask the patched kernel for its version.

    Each command runs in the root shell; ``{superkey}`` in an argument
    is replaced by ``superkey``.  A command that needs the superkey is
    disabled until one is configured.  The version command prints the
    packed version in ``version_base`` (kpatch prints hex).
    """

    version_command: list[str] = Field(
        default_factory=lambda: [KPATCH_PATH, "{superkey}", "kpver"]
    )
    build_time_command: list[str] | None = None
    version_base: Literal[10, 16] = 16
    superkey: str | None = None


class LayersConfig(BaseModel):
    kernel: LayerConfig = Field(default_factory=_default_kernel_layer)
    android: LayerConfig = Field(default_factory=_default_android_layer)

    def for_layer(self, layer: Layer) -> LayerConfig:
        return self.kernel if layer == Layer.KERNEL else self.android


class ExpectedVersions(BaseModel):
    """Versions the management app ships.

    ``kernel`` is a dotted string (the build-time KernelPatch version,
    e.g. ``"0.11.1"``); ``android`` is the apd version code.
    """

    kernel: str | None = None
    android: int | None = None

    def kernel_version(self) -> PackedVersion | None:
        if self.kernel is None:
            return None
        # Imported here: the codec depends on models, not the reverse.
        from patchstate.core.services.version_codec import parse

        return parse(self.kernel)

    def android_version(self) -> IntegerVersion | None:
        if self.android is None:
            return None
        return IntegerVersion(self.android)


class PendingFlags(BaseModel):
    """Transient per-layer flags supplied by the caller."""

    reboot_pending: list[Layer] = Field(default_factory=list)
    installing: list[Layer] = Field(default_factory=list)


class KpimgConfig(BaseModel):
    """Location of the bundled kptools binary and kernel image."""

    kptools: str | None = None
    image: str | None = None
    workdir: str | None = None


class UpdateConfig(BaseModel):
    """Remote update-check endpoint (plain-text version code)."""

    url: str | None = None
    current_code: int = 0
    timeout: float = 5.0


class PatchConfig(BaseModel):
    """Root configuration — loaded from patchstate.yml."""

    version: int = 1

    executor: ExecutorConfig = Field(default_factory=ExecutorConfig)
    layers: LayersConfig = Field(default_factory=LayersConfig)
    kernel_binding: KernelBindingConfig = Field(default_factory=KernelBindingConfig)
    expected: ExpectedVersions = Field(default_factory=ExpectedVersions)
    pending: PendingFlags = Field(default_factory=PendingFlags)
    kpimg: KpimgConfig = Field(default_factory=KpimgConfig)
    update: UpdateConfig = Field(default_factory=UpdateConfig)
