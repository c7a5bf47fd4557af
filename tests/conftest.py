"""
Shared test fixtures and configuration.
"""

import os
import stat
from pathlib import Path

import pytest

from patchstate.adapters.mock import MemoryFilesystem, MockExecutor, MockKernel
from patchstate.core.models.config import APATCH_VERSION_PATH, APD_PATH


def _write_script(path: Path, body: str) -> Path:
    path.write_text(f"#!/bin/sh\n{body}\n")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def executor() -> MockExecutor:
    """A scripted executor that succeeds with empty output by default."""
    return MockExecutor()


@pytest.fixture
def kernel() -> MockKernel:
    """Kernel binding reporting KernelPatch 0.11.1."""
    return MockKernel(version=0x000B01, build_time="Tue Jan 9 2024")


@pytest.fixture
def device_fs() -> MemoryFilesystem:
    """A fully installed APatch tree."""
    return MemoryFilesystem(files={APD_PATH: "\x7fELF", APATCH_VERSION_PATH: "10763\n"})


@pytest.fixture
def write_script():
    """Factory for executable /bin/sh scripts."""
    return _write_script


@pytest.fixture
def fake_bin(tmp_path: Path, monkeypatch) -> Path:
    """A directory prepended to PATH for fake system tools."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
    return bin_dir
