"""
Logging setup for the ``patchstate`` CLI.

``main.py`` calls ``setup_logging`` once; modules only do
``logger = logging.getLogger(__name__)``.  Console output goes to
stderr so ``--json`` stdout stays clean.

Console level: --debug / -v / -q, else PATCHSTATE_LOG_LEVEL, else WARNING.
A file sink is added when PATCHSTATE_LOG_FILE is set; its level comes
from PATCHSTATE_LOG_FILE_LEVEL (default: the console level).
"""

from __future__ import annotations

import logging
import os
import sys

ENV_LEVEL = "PATCHSTATE_LOG_LEVEL"
ENV_FILE = "PATCHSTATE_LOG_FILE"
ENV_FILE_LEVEL = "PATCHSTATE_LOG_FILE_LEVEL"

_CONSOLE_FMT = "%(levelname)s: %(message)s"
_DETAIL_FMT = "%(asctime)s %(levelname)-7s %(name)s:%(lineno)d %(message)s"


def resolve_level(verbose: bool = False, quiet: bool = False, debug: bool = False) -> str:
    """Pick the console level from CLI flags, falling back to the env var."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get(ENV_LEVEL, "WARNING")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Attach a stderr handler (and optionally a file handler) to the root logger.

    Unknown level names fall back to WARNING.
    """
    console_level = _parse_level(level)
    handlers: list[logging.Handler] = []

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(
        logging.Formatter(_DETAIL_FMT if console_level <= logging.DEBUG else _CONSOLE_FMT)
    )
    handlers.append(console)

    root_level = console_level
    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter(_DETAIL_FMT))
        handlers.append(file_handler)
        root_level = min(root_level, file_level)

    root = logging.getLogger()
    root.handlers[:] = handlers
    root.setLevel(root_level)

    # Logging faults never propagate into probing
    logging.raiseExceptions = False


def _parse_level(name: str | None) -> int:
    level = logging.getLevelName(name.upper()) if name else logging.WARNING
    return level if isinstance(level, int) else logging.WARNING
