"""
Tests for the privileged executor and its test double.

SuExecutor tests drive a real ``sh`` as the "su" command; ``_is_root``
is patched off so the configured argv is always used.
"""

import threading

import pytest

from patchstate.adapters.mock import MockExecutor
from patchstate.adapters.shell import privileged
from patchstate.adapters.shell.privileged import SuExecutor
from patchstate.core.errors import PrivilegeUnavailable
from patchstate.core.models.config import ExecutorConfig
from patchstate.core.models.execution import ExecutionResult



@pytest.fixture(autouse=True)
def _not_root(monkeypatch):
    monkeypatch.setattr(privileged, "_is_root", lambda: False)


def sh_executor(**kwargs) -> SuExecutor:
    kwargs.setdefault("verify_root", False)
    kwargs.setdefault("timeout", 5.0)
    return SuExecutor(su_command=["sh"], **kwargs)


# ═══════════════════════════════════════════════════════════════════
#  SuExecutor: session behaviour
# ═══════════════════════════════════════════════════════════════════


class TestSuExecutorSession:
    def test_runs_commands_in_order(self):
        result = sh_executor().run_privileged(["echo hello", "echo world"])
        assert result.exit_code == 0
        assert result.stdout_lines == ("hello", "world")

    def test_exit_code_is_last_command(self):
        assert sh_executor().run_privileged(["true", "false"]).exit_code == 1
        assert sh_executor().run_privileged(["false", "true"]).exit_code == 0

    def test_stdin_is_detached_per_command(self):
        # cat must not swallow the rest of the script
        result = sh_executor().run_privileged(["cat", "echo after"])
        assert result.stdout_lines == ("after",)

    def test_stderr_captured(self):
        result = sh_executor().run_privileged(["echo oops >&2"])
        assert "oops" in result.stderr
        assert result.stdout_lines == ()

    def test_empty_commands_rejected(self):
        with pytest.raises(ValueError):
            sh_executor().run_privileged([])

    def test_timeout_raises_privilege_unavailable(self):
        with pytest.raises(PrivilegeUnavailable, match="timed out"):
            sh_executor(timeout=0.3).run_privileged(["sleep 2"])

    def test_missing_su_binary(self, tmp_path):
        executor = SuExecutor(su_command=[str(tmp_path / "no-such-su")], timeout=2.0)
        with pytest.raises(PrivilegeUnavailable):
            executor.run_privileged(["id"])
        assert not executor.is_available()

    def test_is_available_with_sh(self):
        assert sh_executor().is_available()

    def test_from_config(self):
        executor = SuExecutor.from_config(ExecutorConfig(su_command=["sh"], timeout=3.0))
        assert executor.timeout == 3.0
        assert executor.name == "su"


# ═══════════════════════════════════════════════════════════════════
#  SuExecutor: root verification
# ═══════════════════════════════════════════════════════════════════


class TestRootVerification:
    def test_marker_stripped_when_root(self, fake_bin, write_script):
        write_script(fake_bin / "id", "echo 0")
        result = sh_executor(verify_root=True).run_privileged(["echo payload"])
        assert result.stdout_lines == ("payload",)

    def test_non_root_session_rejected(self, fake_bin, write_script):
        write_script(fake_bin / "id", "echo 1000")
        with pytest.raises(PrivilegeUnavailable, match="not root"):
            sh_executor(verify_root=True).run_privileged(["echo payload"])

    def test_denied_su_rejected(self, tmp_path, write_script):
        su = write_script(tmp_path / "su", "echo 'Permission denied' >&2\nexit 1")
        executor = SuExecutor(su_command=[str(su)], timeout=5.0)
        with pytest.raises(PrivilegeUnavailable, match="Permission denied"):
            executor.run_privileged(["echo payload"])


# ═══════════════════════════════════════════════════════════════════
#  SuExecutor: serialisation
# ═══════════════════════════════════════════════════════════════════


class TestSerialisation:
    def test_busy_lock_times_out(self):
        executor = sh_executor(timeout=0.2)
        executor._lock.acquire()
        try:
            with pytest.raises(PrivilegeUnavailable, match="busy"):
                executor.run_privileged(["true"])
        finally:
            executor._lock.release()

    def test_concurrent_sessions_do_not_interleave(self):
        executor = sh_executor(timeout=10.0)
        outputs: list[tuple[str, ...]] = []

        def worker(tag: str) -> None:
            result = executor.run_privileged([f"echo {tag}-1", "sleep 0.1", f"echo {tag}-2"])
            outputs.append(result.stdout_lines)

        threads = [threading.Thread(target=worker, args=(t,)) for t in ("a", "b")]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(outputs) == [("a-1", "a-2"), ("b-1", "b-2")]


# ═══════════════════════════════════════════════════════════════════
#  MockExecutor
# ═══════════════════════════════════════════════════════════════════


class TestMockExecutor:
    def test_default_success(self):
        mock = MockExecutor()
        assert mock.run_privileged(["anything"]).succeeded
        assert mock.call_log == [("anything",)]

    def test_scripted_output(self):
        mock = MockExecutor()
        mock.set_output("/data/adb/apd -V", "10763\n")
        assert mock.run_privileged(["/data/adb/apd -V"]).output == "10763"

    def test_scripted_response(self):
        mock = MockExecutor()
        mock.set_response("x", ExecutionResult(exit_code=2, stderr="bad"))
        assert mock.run_privileged(["x"]).stderr == "bad"

    def test_scripted_error(self):
        mock = MockExecutor()
        mock.set_error("x")
        with pytest.raises(PrivilegeUnavailable):
            mock.run_privileged(["x"])

    def test_deny_all(self):
        mock = MockExecutor()
        mock.deny_all()
        assert not mock.is_available()
        with pytest.raises(PrivilegeUnavailable):
            mock.run_privileged(["true"])
        assert mock.call_count == 1

    def test_reset(self):
        mock = MockExecutor()
        mock.set_output("x", "1", exit_code=3)
        mock.run_privileged(["x"])
        mock.reset()
        assert mock.call_count == 0
        assert mock.run_privileged(["x"]).exit_code == 0


class TestOutputFidelity:
    def test_long_stderr_kept_whole(self):
        script = 'i=0; while [ "$i" -lt 500 ]; do echo "error-line-$i" >&2; i=$((i+1)); done'
        result = sh_executor().run_privileged([script])
        assert result.stderr.startswith("error-line-0\n")
        assert result.stderr.rstrip().endswith("error-line-499")
        assert len(result.stderr) > 2000
