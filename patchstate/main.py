"""
patchstate — CLI entrypoint.

Usage:
    python -m patchstate.main --help
    python -m patchstate.main status
    python -m patchstate.main version parse 0.11.1-dev
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from patchstate import __version__
from patchstate.core.observability.logging_config import (
    ENV_FILE,
    ENV_FILE_LEVEL,
    resolve_level,
    setup_logging,
)
from patchstate.ui.cli.helpers import load_config_or_exit

_LAYER_CHOICE = click.Choice(["kernel", "android"])

# State → (label, colour)
_STATE_STYLE = {
    "installed": ("Installed", "green"),
    "needs_update": ("Needs update", "yellow"),
    "needs_reboot": ("Needs reboot", "yellow"),
    "installing": ("Installing…", "cyan"),
    "not_installed": ("Not installed", "white"),
    "unknown": ("Unknown — could not determine, retry", "red"),
}

_NO_PROBE_HINT = {
    "kernel": "no probe configured: set kernel_binding.superkey or --superkey",
    "android": "no probe configured: set layers.android.helper_binary",
}


@click.group()
@click.version_option(version=__version__, prog_name="patchstate")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to patchstate.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """patchstate — KernelPatch / APatch installation state."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(verbose=verbose, quiet=quiet, debug=debug),
        log_file=os.environ.get(ENV_FILE),
        log_file_level=os.environ.get(ENV_FILE_LEVEL),
    )


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--layer", "only_layer", type=_LAYER_CHOICE, default=None, help="Show one layer only.")
@click.option("--expected-kernel", default=None, help="Override expected kernel version (x.y.z).")
@click.option("--expected-android", type=int, default=None, help="Override expected apd version code.")
@click.option("--reboot-pending", multiple=True, type=_LAYER_CHOICE, help="Layer with an update awaiting reboot.")
@click.option("--installing", multiple=True, type=_LAYER_CHOICE, help="Layer currently being installed.")
@click.option(
    "--superkey",
    envvar="PATCHSTATE_SUPERKEY",
    default=None,
    help="KernelPatch superkey for the kpatch version query.",
)
@click.pass_context
def status(
    ctx: click.Context,
    as_json: bool,
    only_layer: str | None,
    expected_kernel: str | None,
    expected_android: int | None,
    reboot_pending: tuple[str, ...],
    installing: tuple[str, ...],
    superkey: str | None,
) -> None:
    """Probe both patch layers and show their state."""
    from patchstate.core.errors import VersionError
    from patchstate.core.models.state import Layer
    from patchstate.core.use_cases.status import collect_status

    config = load_config_or_exit(ctx)

    if expected_kernel is not None:
        config.expected.kernel = expected_kernel
    if expected_android is not None:
        config.expected.android = expected_android
    if reboot_pending:
        config.pending.reboot_pending = [Layer(name) for name in reboot_pending]
    if installing:
        config.pending.installing = [Layer(name) for name in installing]
    if superkey:
        config.kernel_binding.superkey = superkey

    try:
        config.expected.kernel_version()
    except VersionError as e:
        click.secho(f"❌ Invalid expected kernel version: {e}", fg="red")
        sys.exit(1)

    layers = (Layer(only_layer),) if only_layer else tuple(Layer)
    result = collect_status(config, layers=layers)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    quiet = ctx.obj.get("quiet", False)
    if not quiet:
        click.secho("\n📋 Patch layers", fg="cyan", bold=True)

    for layer in layers:
        state = result.states[layer]
        label, colour = _STATE_STYLE[state.status.value]
        click.echo(f"   {layer.value:<8} ", nl=False)
        click.secho(label, fg=colour, nl=False)

        details = []
        if state.installed is not None:
            details.append(f"installed {state.installed}")
        if state.expected is not None:
            details.append(f"expected {state.expected}")
        resolution = result.resolutions.get(layer)
        if resolution is not None and resolution.source:
            source = resolution.source
            if resolution.low_confidence:
                source += ", low confidence"
            details.append(f"via {source}")
        elif resolution is not None and not resolution.attempts and not resolution.cancelled:
            details.append(_NO_PROBE_HINT[layer])
        click.echo(f"  ({'; '.join(details)})" if details else "")

        if state.retryable and ctx.obj.get("verbose") and resolution is not None:
            for attempt in resolution.attempts:
                click.echo(f"       · {attempt.probe}: {attempt.outcome.value} {attempt.reason}")

    if not quiet:
        click.echo()


# ── Sub-command groups ──────────────────────────────────────────

from patchstate.ui.cli.update import check_update_cmd, kpimg  # noqa: E402
from patchstate.ui.cli.version import version  # noqa: E402

cli.add_command(version)
cli.add_command(kpimg)
cli.add_command(check_update_cmd)


if __name__ == "__main__":
    cli()
