"""
CLI commands for the version manifest (~/.tool-versions).

Thin wrappers over ``dotboot.core.persistence.manifest``.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

_DEFAULT_MANIFEST = "~/.tool-versions"


def _manifest_path(raw: str) -> Path:
    from dotboot.core.context import expand_path

    return Path(expand_path(raw))


@click.group()
def manifest() -> None:
    """Version manifest — show, write."""


@manifest.command()
@click.option("--file", "file", default=_DEFAULT_MANIFEST, help="Manifest path.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def show(file: str, as_json: bool) -> None:
    """Show the declared global versions."""
    from dotboot.core.persistence.manifest import read_manifest

    path = _manifest_path(file)
    entries = read_manifest(path)

    if as_json:
        click.echo(json.dumps({"path": str(path), "tools": entries}, indent=2))
        return

    if not entries:
        click.secho(f"⚠️  No versions declared in {path}", fg="yellow")
        return

    click.secho(f"📌 {path}", fg="cyan", bold=True)
    width = max(len(tool) for tool in entries)
    for tool, version in entries.items():
        click.echo(f"   {tool:<{width}}  {version}")


@manifest.command()
@click.argument("pairs", nargs=-1, required=True)
@click.option("--file", "file", default=_DEFAULT_MANIFEST, help="Manifest path.")
def write(pairs: tuple[str, ...], file: str) -> None:
    """Overwrite the manifest with TOOL=VERSION pairs.

    Example:

        dotboot manifest write ruby=3.3.3 nodejs=22.3.0
    """
    from dotboot.core.persistence.manifest import write_manifest

    entries: list[tuple[str, str]] = []
    for pair in pairs:
        tool, sep, version = pair.partition("=")
        if not sep or not tool or not version:
            click.secho(f"❌ Expected TOOL=VERSION, got '{pair}'", fg="red")
            sys.exit(1)
        entries.append((tool, version))

    path = _manifest_path(file)
    try:
        changed = write_manifest(entries, path)
    except OSError as e:
        click.secho(f"❌ Cannot write {path}: {e}", fg="red")
        sys.exit(1)

    if changed:
        click.secho(f"✅ Wrote {len(entries)} entries to {path}", fg="green")
    else:
        click.echo(f"· {path} already up to date")
