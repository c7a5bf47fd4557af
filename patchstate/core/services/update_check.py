"""
Update check — compare the app's version code with a remote one.

The endpoint answers a plain-text body holding one integer, possibly
BOM-prefixed and padded with whitespace.  Any network, HTTP or parse
failure means "no update known" and is logged, never raised.
"""

from __future__ import annotations

import logging
import re
import urllib.error
import urllib.request
from dataclasses import dataclass

from patchstate import __version__

logger = logging.getLogger(__name__)

_BOM = "\ufeff"
_CODE = re.compile(r"[0-9]+")
# Version codes are signed 32-bit on the app side
_CODE_MAX = 0x7FFFFFFF


def parse_version_code(body: str) -> int | None:
    """Extract the version code from a response body.

    ``"\\ufeff 10763\\n"`` -> ``10763``; ``"oops"`` -> ``None``.
    """
    text = body.replace(_BOM, "").strip()
    if not _CODE.fullmatch(text):
        return None
    code = int(text)
    return code if code <= _CODE_MAX else None


def fetch_remote_version_code(url: str, timeout: float = 5.0) -> int | None:
    """GET ``url`` and parse its body as a version code.

    Returns:
        The remote code, or None on any failure.
    """
    req = urllib.request.Request(
        url,
        method="GET",
        headers={"User-Agent": f"patchstate/{__version__}"},
    )
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            status = resp.getcode()
            if status != 200:
                logger.warning("Update check %s returned HTTP %s", url, status)
                return None
            raw = resp.read().decode("utf-8", errors="replace")
    except (urllib.error.URLError, OSError, ValueError) as e:
        logger.warning("Update check failed: %s", e)
        return None

    code = parse_version_code(raw)
    logger.debug("Update check raw=%r parsed=%s", raw, code)
    if code is None:
        logger.warning("Update check: cannot parse version code from %r", raw[:80])
    return code


@dataclass(frozen=True)
class UpdateCheck:
    """Local and remote version codes; ``remote`` is None if unknown."""

    local: int
    remote: int | None

    @property
    def available(self) -> bool:
        """True only if the remote version code is strictly newer."""
        return self.remote is not None and self.remote > self.local


def check_update(url: str, current_code: int, timeout: float = 5.0) -> UpdateCheck:
    """Fetch the remote version code and compare it with ``current_code``."""
    result = UpdateCheck(local=current_code, remote=fetch_remote_version_code(url, timeout=timeout))
    logger.info("Update check: remote=%s local=%d", result.remote, current_code)
    return result
