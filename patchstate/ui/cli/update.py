"""
CLI commands for the bundled kernel image and the remote update check.

Thin wrappers over ``patchstate.core.services.kpimg`` and
``patchstate.core.services.update_check``.
"""

from __future__ import annotations

import json
import sys

import click

from patchstate.ui.cli.helpers import load_config_or_exit


@click.command("kpimg")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def kpimg(ctx: click.Context, as_json: bool) -> None:
    """Show the KernelPatch image bundled with the app (via kptools)."""
    from patchstate.adapters.shell.privileged import SuExecutor
    from patchstate.core.services.kpimg import read_kpimg_info

    config = load_config_or_exit(ctx)
    if not config.kpimg.kptools or not config.kpimg.image:
        click.secho("❌ kpimg.kptools and kpimg.image must be configured", fg="red")
        sys.exit(1)

    info = read_kpimg_info(
        SuExecutor.from_config(config.executor),
        config.kpimg.kptools,
        config.kpimg.image,
        workdir=config.kpimg.workdir,
    )

    if info is None:
        if as_json:
            click.echo(json.dumps({"error": "kpimg info unavailable"}))
        else:
            click.secho("⚠️  Could not read kpimg info (see log), retry", fg="yellow")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(info.to_dict(), indent=2))
        return

    click.secho("📦 Bundled KernelPatch image", fg="cyan", bold=True)
    click.echo(f"   Version:      {info.version if info.version is not None else '?'}")
    click.echo(f"   Compile time: {info.compile_time or '?'}")
    click.echo(f"   Config:       {info.config or '?'}")


@click.command("check-update")
@click.option("--url", default=None, help="Version endpoint (default: update.url from config).")
@click.option("--current", "current_code", type=int, default=None, help="Local version code.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def check_update_cmd(
    ctx: click.Context,
    url: str | None,
    current_code: int | None,
    as_json: bool,
) -> None:
    """Check the remote endpoint for a newer app version code."""
    from patchstate.core.services.update_check import check_update

    config = load_config_or_exit(ctx)
    url = url or config.update.url
    if not url:
        click.secho("❌ No update URL (use --url or set update.url)", fg="red")
        sys.exit(1)
    local = current_code if current_code is not None else config.update.current_code

    result = check_update(url, local, timeout=config.update.timeout)
    remote, available = result.remote, result.available

    if as_json:
        click.echo(json.dumps({"url": url, "local": local, "remote": remote, "update_available": available}))
        return

    if remote is None:
        click.secho("⚠️  Update check failed (see log)", fg="yellow")
    elif available:
        click.secho(f"⬆️  Update available: {local} → {remote}", fg="green", bold=True)
    else:
        click.secho(f"✅ Up to date ({local})", fg="green")
