"""
Bundled kernel image info — ask kptools what the app ships.

``kptools -l -k <kpimg>`` prints an INI document:

    [kpimg]
    version=0xb01
    compile_time=...
    config=linux,release
    superkey=...

Its ``version`` is the KernelPatch version bundled with the app, i.e.
the expected kernel-layer version when none is configured.
"""

from __future__ import annotations

import configparser
import logging
import shlex
from dataclasses import dataclass
from typing import Any

from patchstate.adapters.base import PrivilegedExecutor
from patchstate.core.errors import PrivilegeUnavailable, VersionError
from patchstate.core.models.version import PackedVersion
from patchstate.core.services.version_codec import from_raw, parse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KpimgInfo:
    """The ``[kpimg]`` section of ``kptools -l`` output."""

    version: PackedVersion | None
    compile_time: str = ""
    config: str = ""
    root_superkey: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": str(self.version) if self.version is not None else None,
            "compile_time": self.compile_time,
            "config": self.config,
        }


def parse_kpimg_version(raw: str) -> PackedVersion:
    """Accept ``0xb01``, ``2817`` or ``0.11.1``.

    Raises:
        ParseError / RangeError: unrecognised or out of range.
    """
    text = raw.strip()
    if text.lower().startswith("0x"):
        try:
            return from_raw(int(text, 16))
        except ValueError:
            pass
    elif text.isascii() and text.isdigit():
        return from_raw(int(text))
    return parse(text)


def parse_kpimg_output(output: str) -> KpimgInfo | None:
    """Parse kptools INI output; None if there is no ``[kpimg]`` section."""
    ini = configparser.ConfigParser(interpolation=None, strict=False)
    try:
        ini.read_string(output)
    except configparser.Error as e:
        logger.warning("Unparseable kptools output: %s", e)
        return None

    if not ini.has_section("kpimg"):
        return None
    section = ini["kpimg"]

    version: PackedVersion | None = None
    raw_version = section.get("version", "")
    if raw_version:
        try:
            version = parse_kpimg_version(raw_version)
        except VersionError as e:
            logger.warning("Bad kpimg version %r: %s", raw_version, e)

    return KpimgInfo(
        version=version,
        compile_time=section.get("compile_time", ""),
        config=section.get("config", ""),
        root_superkey=section.get("root_superkey", ""),
    )


def read_kpimg_info(
    executor: PrivilegedExecutor,
    kptools: str,
    image: str,
    workdir: str | None = None,
) -> KpimgInfo | None:
    """Run ``kptools -l -k <image>`` and parse the result.

    Returns None (and logs why) if root is unavailable, kptools fails,
    or its output carries no ``[kpimg]`` section.
    """
    commands = []
    if workdir:
        commands.append(f"cd {shlex.quote(workdir)}")
    commands.append(f"{shlex.quote(kptools)} -l -k {shlex.quote(image)}")

    try:
        result = executor.run_privileged(commands)
    except PrivilegeUnavailable as e:
        logger.warning("Cannot read kpimg info: %s", e)
        return None

    if not result.succeeded:
        logger.warning("kptools exited with code %d", result.exit_code)
        return None

    return parse_kpimg_output(result.output)
