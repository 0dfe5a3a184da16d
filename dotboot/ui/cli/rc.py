"""
CLI commands for shell rc files.

Thin wrappers over ``dotboot.core.services.shell_rc``.
"""

from __future__ import annotations

import json
import sys

import click


@click.group()
def rc() -> None:
    """Shell rc files — ensure lines are present."""


@rc.command()
@click.argument("file")
@click.argument("lines", nargs=-1, required=True)
@click.option("--header", default=None, help="Append LINES as one block behind this comment.")
@click.option("--backup", is_flag=True, help="Back up FILE before changing it.")
@click.option("--dry-run", is_flag=True, help="Report without writing.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def ensure(
    file: str,
    lines: tuple[str, ...],
    header: str | None,
    backup: bool,
    dry_run: bool,
    as_json: bool,
) -> None:
    """Append LINES to FILE unless already present.

    Example:

        dotboot rc ensure ~/.zshrc 'export EDITOR=emacs'
    """
    from dotboot.core.services.shell_rc import ensure_rc_lines

    result = ensure_rc_lines(file, list(lines), header=header, backup=backup, dry_run=dry_run)

    if as_json:
        click.echo(json.dumps(result.model_dump(mode="json"), indent=2))
        sys.exit(1 if result.failed else 0)

    if result.failed:
        click.secho(f"❌ {result.reason}", fg="red")
        sys.exit(1)
    if result.outcome == "installed":
        click.secho(f"✅ {result.message}", fg="green")
    else:
        click.echo(f"· {result.message}")
