"""
Tests for configuration loading (patchstate.yml).
"""

import textwrap
from pathlib import Path

import pytest

from patchstate.core.config.loader import CONFIG_FILE, find_config_file, load_config
from patchstate.core.errors import ConfigError
from patchstate.core.models.config import APD_PATH, PatchConfig
from patchstate.core.models.state import Layer
from patchstate.core.models.version import IntegerVersion, PackedVersion


def write_config(path: Path, content: str) -> Path:
    target = path / CONFIG_FILE
    target.write_text(textwrap.dedent(content))
    return target


class TestDefaults:
    def test_default_layers(self):
        config = PatchConfig()
        assert config.layers.kernel.native
        assert config.layers.kernel.domain == "packed"
        assert config.layers.android.helper_binary == APD_PATH
        assert config.layers.android.domain == "integer"
        assert config.executor.su_command == ["su"]
        assert config.executor.timeout == 10.0

    def test_for_layer(self):
        config = PatchConfig()
        assert config.layers.for_layer(Layer.KERNEL) is config.layers.kernel
        assert config.layers.for_layer(Layer.ANDROID) is config.layers.android

    def test_no_expected_versions(self):
        config = PatchConfig()
        assert config.expected.kernel_version() is None
        assert config.expected.android_version() is None

    def test_no_file_uses_defaults(self):
        assert load_config(search=False) == PatchConfig()


class TestLoadConfig:
    def test_full_file(self, tmp_path: Path):
        path = write_config(tmp_path, """\
            executor:
              su_command: [su, -c, sh]
              timeout: 4
            layers:
              android:
                helper_binary: /data/adb/apd
                filesystem: privileged
            expected:
              kernel: "0.11.1"
              android: 10763
            pending:
              reboot_pending: [kernel]
            update:
              url: https://example.invalid/version
              current_code: 10700
        """)
        config = load_config(path)
        assert config.executor.su_command == ["su", "-c", "sh"]
        assert config.executor.timeout == 4.0
        assert config.layers.android.filesystem == "privileged"
        assert config.expected.kernel_version() == PackedVersion(0xB01)
        assert config.expected.android_version() == IntegerVersion(10763)
        assert config.pending.reboot_pending == [Layer.KERNEL]
        assert config.update.current_code == 10700

    def test_empty_file(self, tmp_path: Path):
        path = tmp_path / CONFIG_FILE
        path.write_text("")
        assert load_config(path) == PatchConfig()

    def test_explicit_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = write_config(tmp_path, "executor: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = write_config(tmp_path, "- just\n- a list\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_invalid_field(self, tmp_path: Path):
        path = write_config(tmp_path, "executor:\n  timeout: soon\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(path)

    def test_invalid_domain(self, tmp_path: Path):
        path = write_config(tmp_path, "layers:\n  kernel:\n    domain: semver\n")
        with pytest.raises(ConfigError):
            load_config(path)

    @pytest.mark.parametrize("kernel", ["1.2", "1.2.300", "latest"])
    def test_bad_expected_kernel(self, tmp_path: Path, kernel):
        path = write_config(tmp_path, f'expected:\n  kernel: "{kernel}"\n')
        with pytest.raises(ConfigError, match="expected version"):
            load_config(path)

    def test_negative_expected_android(self, tmp_path: Path):
        path = write_config(tmp_path, "expected:\n  android: -1\n")
        with pytest.raises(ConfigError):
            load_config(path)


class TestFindConfigFile:
    def test_walks_upward(self, tmp_path: Path):
        path = write_config(tmp_path, "version: 1\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config_file(nested) == path.resolve()

    def test_search_from_cwd(self, tmp_path: Path, monkeypatch):
        write_config(tmp_path, 'expected:\n  kernel: "0.10.7"\n')
        monkeypatch.chdir(tmp_path)
        assert load_config().expected.kernel == "0.10.7"
