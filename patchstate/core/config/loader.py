"""
Configuration loader — reads patchstate.yml into a PatchConfig.

Unlike most tools the file is optional: with no file found, the
built-in APatch defaults apply.  A file that exists but does not
validate is an error.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from patchstate.core.errors import ConfigError, VersionError
from patchstate.core.models.config import PatchConfig

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "patchstate.yml"


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for patchstate.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to patchstate.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_config(path: Path | None = None, search: bool = True) -> PatchConfig:
    """Load and validate configuration.

    Args:
        path: Explicit path to patchstate.yml.  Must exist if given.
        search: When ``path`` is None, search upward from cwd.

    Returns:
        Validated PatchConfig (defaults if no file was found).

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    if path is None:
        path = find_config_file() if search else None
        if path is None:
            logger.debug("No %s found, using defaults", CONFIG_FILE)
            return PatchConfig()
    elif not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        config = PatchConfig.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    try:
        config.expected.kernel_version()
        config.expected.android_version()
    except VersionError as e:
        raise ConfigError(f"Invalid expected version in {path}: {e}") from e

    logger.info("Loaded config from %s", path)
    return config
