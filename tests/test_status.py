"""
Tests for the status use case — resolve both layers, then reduce.
"""

import shlex
import threading
from pathlib import Path

import pytest

from patchstate.adapters.mock import MockExecutor, MockKernel
from patchstate.core.models.config import LayerConfig, PatchConfig
from patchstate.core.models.state import Layer, LayerStatus, ResolutionStatus
from patchstate.core.models.version import IntegerVersion
from patchstate.core.use_cases.status import collect_status, expected_kernel_version, resolve_layers


@pytest.fixture
def device(tmp_path: Path) -> dict:
    """APatch layout rooted in tmp_path."""
    ap = tmp_path / "ap"
    return {
        "apd": tmp_path / "apd",
        "ap": ap,
        "version": ap / "version",
    }


def make_config(device: dict, **expected) -> PatchConfig:
    config = PatchConfig()
    config.layers.android = LayerConfig(
        helper_binary=str(device["apd"]),
        version_file=str(device["version"]),
        install_dir=str(device["ap"]),
    )
    config.expected.kernel = expected.get("kernel")
    config.expected.android = expected.get("android")
    return config


def apd_command(device: dict) -> str:
    return f"{shlex.quote(str(device['apd']))} -V"


class TestCollectStatus:
    def test_everything_current(self, device, kernel):
        executor = MockExecutor()
        executor.set_output(apd_command(device), "10763")
        config = make_config(device, kernel="0.11.1", android=10763)

        result = collect_status(config, executor=executor, kernel=kernel)

        assert result.error is None
        assert result.kernel.status == LayerStatus.INSTALLED
        assert result.android.status == LayerStatus.INSTALLED
        assert result.resolutions[Layer.ANDROID].source == "shell"

    def test_kernel_outdated(self, device):
        config = make_config(device, kernel="0.11.1")
        result = collect_status(config, executor=MockExecutor(), kernel=MockKernel(version=0x000A07))
        assert result.kernel.status == LayerStatus.NEEDS_UPDATE
        assert str(result.kernel.installed) == "0.10.7"

    def test_nothing_installed(self, device, kernel):
        executor = MockExecutor()
        executor.deny_all()
        result = collect_status(make_config(device), executor=executor, kernel=kernel)
        assert result.android.status == LayerStatus.NOT_INSTALLED
        assert result.resolutions[Layer.ANDROID].source == "filesystem"

    def test_partial_install_reports_sentinel(self, device, kernel):
        device["ap"].mkdir()
        executor = MockExecutor()
        executor.deny_all()
        result = collect_status(make_config(device, android=10763), executor=executor, kernel=kernel)
        assert result.android.status == LayerStatus.NEEDS_UPDATE
        assert result.android.installed == IntegerVersion(1)
        assert result.resolutions[Layer.ANDROID].low_confidence

    def test_no_kernel_binding_is_unknown(self, device):
        result = collect_status(make_config(device), executor=MockExecutor())
        assert result.kernel.status == LayerStatus.UNKNOWN
        assert result.kernel.retryable

    def test_pending_flags(self, device, kernel):
        executor = MockExecutor()
        executor.set_output(apd_command(device), "10763")
        config = make_config(device, kernel="0.11.1", android=10763)
        config.pending.reboot_pending = [Layer.KERNEL]
        config.pending.installing = [Layer.ANDROID]

        result = collect_status(config, executor=executor, kernel=kernel)

        assert result.kernel.status == LayerStatus.NEEDS_REBOOT
        assert result.android.status == LayerStatus.INSTALLING

    def test_domain_mismatch_is_reported(self, device, kernel):
        executor = MockExecutor()
        executor.set_output(apd_command(device), "10763")
        config = make_config(device, android=10763)
        config.layers.android.domain = "packed"

        result = collect_status(config, executor=executor, kernel=kernel)

        assert result.error is not None
        assert "Cannot compare" in result.error
        assert result.states == {}
        assert result.to_dict()["error"] == result.error

    def test_cancelled(self, device, kernel):
        cancel = threading.Event()
        cancel.set()
        result = collect_status(make_config(device), executor=MockExecutor(), kernel=kernel, cancel=cancel)
        assert result.kernel.status == LayerStatus.UNKNOWN
        assert result.resolutions[Layer.KERNEL].cancelled

    def test_to_dict(self, device, kernel):
        executor = MockExecutor()
        executor.set_output(apd_command(device), "10763")
        data = collect_status(make_config(device, android=10763), executor=executor, kernel=kernel).to_dict()
        assert set(data["layers"]) == {"kernel", "android"}
        assert data["layers"]["android"]["state"]["status"] == "installed"
        assert data["layers"]["android"]["resolution"]["source"] == "shell"
        assert data["layers"]["kernel"]["resolution"]["version"] == "0.11.1"


class TestResolveLayers:
    def test_single_layer(self, device, kernel):
        resolutions = resolve_layers(make_config(device), MockExecutor(), kernel, layers=(Layer.KERNEL,))
        assert list(resolutions) == [Layer.KERNEL]
        assert resolutions[Layer.KERNEL].status == ResolutionStatus.INSTALLED

    def test_shared_executor_sees_both_layers(self, device, kernel):
        executor = MockExecutor()
        config = make_config(device)
        config.layers.kernel = LayerConfig(helper_binary="/data/adb/kpatch", domain="packed")
        resolve_layers(config, executor, kernel)
        commands = {cmd for call in executor.call_log for cmd in call}
        assert "/data/adb/kpatch -V" in commands
        assert apd_command(device) in commands


class TestExpectedKernelVersion:
    def test_configured_value_wins(self, executor):
        config = PatchConfig()
        config.expected.kernel = "0.11.1"
        config.kpimg.kptools, config.kpimg.image = "kptools", "kpimg"
        assert str(expected_kernel_version(config, executor)) == "0.11.1"
        assert executor.call_count == 0

    def test_falls_back_to_bundled_kpimg(self, executor):
        config = PatchConfig()
        config.kpimg.kptools, config.kpimg.image = "kptools", "kpimg"
        executor.set_output("kptools -l -k kpimg", "[kpimg]\nversion=0xb02\n")
        assert str(expected_kernel_version(config, executor)) == "0.11.2"

    def test_kpimg_unavailable(self, executor):
        config = PatchConfig()
        config.kpimg.kptools, config.kpimg.image = "kptools", "kpimg"
        executor.deny_all()
        assert expected_kernel_version(config, executor) is None

    def test_nothing_configured(self, executor):
        assert expected_kernel_version(PatchConfig(), executor) is None

    def test_kpimg_drives_kernel_state(self, device):
        executor = MockExecutor()
        executor.set_output("kptools -l -k kpimg", "[kpimg]\nversion=0xb02\n")
        config = make_config(device)
        config.kpimg.kptools, config.kpimg.image = "kptools", "kpimg"
        result = collect_status(config, executor=executor, kernel=MockKernel(version=0x000B01))
        assert result.kernel.status == LayerStatus.NEEDS_UPDATE
        assert str(result.kernel.expected) == "0.11.2"


class TestLayerSelection:
    def _mismatched_kernel(self, device) -> tuple[PatchConfig, MockExecutor]:
        executor = MockExecutor()
        executor.set_output("/data/adb/kpatch -V", "5")
        executor.set_output(apd_command(device), "10763")
        config = make_config(device, kernel="0.11.1", android=10763)
        config.layers.kernel = LayerConfig(helper_binary="/data/adb/kpatch", domain="integer")
        return config, executor

    def test_both_layers_report_mismatch(self, device):
        config, executor = self._mismatched_kernel(device)
        assert collect_status(config, executor=executor).error is not None

    def test_android_only_skips_kernel(self, device):
        config, executor = self._mismatched_kernel(device)

        result = collect_status(config, executor=executor, layers=(Layer.ANDROID,))

        assert result.error is None
        assert result.android.status == LayerStatus.INSTALLED
        assert list(result.to_dict()["layers"]) == ["android"]
        assert ("/data/adb/kpatch -V",) not in executor.call_log

    def test_single_layer_flags(self, device, kernel):
        config = make_config(device, kernel="0.11.1")
        config.pending.reboot_pending = [Layer.KERNEL]
        result = collect_status(config, executor=MockExecutor(), kernel=kernel, layers=(Layer.KERNEL,))
        assert result.kernel.status == LayerStatus.NEEDS_REBOOT
        assert Layer.ANDROID not in result.states
