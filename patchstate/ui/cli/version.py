"""
CLI commands for the packed version codec.

Thin wrappers over ``patchstate.core.services.version_codec``.
"""

from __future__ import annotations

import json
import sys

import click

from patchstate.core.errors import VersionError
from patchstate.core.services import version_codec


def _emit(as_json: bool, packed: int, text: str) -> None:
    if as_json:
        click.echo(json.dumps({"packed": packed, "hex": f"{packed:#08x}", "version": text}))
    else:
        click.echo(f"{text}  ({packed} / {packed:#08x})")


@click.group()
def version() -> None:
    """Version codec — encode, decode and parse packed versions."""


@version.command("encode")
@click.argument("major", type=int)
@click.argument("minor", type=int)
@click.argument("patch", type=int)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def encode_cmd(major: int, minor: int, patch: int, as_json: bool) -> None:
    """Pack MAJOR.MINOR.PATCH into a 24-bit integer."""
    try:
        packed = version_codec.encode(major, minor, patch)
    except VersionError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)
    _emit(as_json, packed.value, version_codec.format(packed))


@version.command("decode")
@click.argument("value")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def decode_cmd(value: str, as_json: bool) -> None:
    """Unpack VALUE (decimal or 0x-hex) into major.minor.patch."""
    try:
        raw = int(value, 0)
        packed = version_codec.from_raw(raw)
    except (ValueError, VersionError) as e:
        click.secho(f"❌ Cannot decode {value!r}: {e}", fg="red")
        sys.exit(1)
    _emit(as_json, packed.value, version_codec.format(packed))


@version.command("parse")
@click.argument("text")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def parse_cmd(text: str, as_json: bool) -> None:
    """Parse a dotted version (suffix such as -dev is dropped)."""
    try:
        packed = version_codec.parse(text)
    except VersionError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)
    _emit(as_json, packed.value, version_codec.format(packed))
