"""
Shared helpers for CLI commands.
"""

from __future__ import annotations

import sys

import click

from patchstate.core.config.loader import load_config
from patchstate.core.errors import ConfigError
from patchstate.core.models.config import PatchConfig


def load_config_or_exit(ctx: click.Context) -> PatchConfig:
    """Load patchstate.yml for a command, exiting 1 on ConfigError."""
    try:
        return load_config(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)
