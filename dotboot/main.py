"""
dotboot — CLI entrypoint.

Usage:
    python -m dotboot.main --help
    dotboot run
    dotboot list
    dotboot reset 02_setup_asdf
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from dotboot import __version__
from dotboot.core.observability.logging_config import resolve_level, setup_logging

_OUTCOME_STYLE = {
    "installed": ("✓", "green"),
    "applied": ("↻", "cyan"),
    "skipped": ("·", "white"),
    "warning": ("⚠", "yellow"),
    "failed": ("✗", "red"),
}


@click.group()
@click.version_option(version=__version__, prog_name="dotboot")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to bootstrap.yml (default: auto-detect, then built-in units).",
)
@click.option(
    "--home",
    type=click.Path(file_okay=False),
    default=None,
    help="Home directory to bootstrap (default: $HOME).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
    home: str | None,
) -> None:
    """dotboot — ordered, idempotent workstation bootstrap."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    from dotboot.core.context import set_home

    set_home(Path(home).expanduser().resolve() if home else Path(os.environ.get("HOME") or Path.home()))

    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get("DOTBOOT_LOG_FILE"),
        log_file_level=os.environ.get("DOTBOOT_LOG_FILE_LEVEL"),
    )


@cli.command()
@click.argument("units", nargs=-1)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--force", is_flag=True, help="Run units even if they already ran.")
@click.option("--dry-run", is_flag=True, help="Probe only; show what would be installed.")
@click.option("--mock", is_flag=True, help="Use mock adapter (no real execution).")
@click.option("--timeout", type=int, default=None, help="Per-command timeout in seconds.")
@click.pass_context
def run(
    ctx: click.Context,
    units: tuple[str, ...],
    as_json: bool,
    force: bool,
    dry_run: bool,
    mock: bool,
    timeout: int | None,
) -> None:
    """Run pending bootstrap units in order.

    Examples:

        dotboot run

        dotboot run 02_setup_asdf --force

        dotboot run --dry-run
    """
    from dotboot.core.use_cases.run import run_bootstrap

    result = run_bootstrap(
        config_path=ctx.obj.get("config_path"),
        units=list(units) if units else None,
        force=force,
        dry_run=dry_run,
        mock_mode=mock,
        timeout=timeout,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(result.exit_code)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    report = result.report
    assert report is not None
    quiet = ctx.obj.get("quiet", False)

    mode_label = "[dry-run] " if dry_run else "[mock] " if mock else ""
    if not quiet:
        click.secho(f"\n🚀 {mode_label}dotboot — {len(report.ran)} unit(s) to run", fg="cyan", bold=True)
        click.echo()

    for unit_report in report.units:
        if unit_report.skipped_reason:
            if not quiet:
                click.secho(f"   ⊘ {unit_report.unit} ", fg="white", nl=False)
                click.echo(f"({unit_report.skipped_reason})")
            continue

        color = "green" if unit_report.ok else "red"
        click.secho(f"   {'✅' if unit_report.ok else '❌'} {unit_report.unit}", fg=color, bold=True)
        for step in unit_report.results:
            if quiet and step.outcome not in ("warning", "failed"):
                continue
            if step.outcome == "skipped" and not ctx.obj.get("verbose") and step.step.startswith("requires:"):
                continue
            icon, step_color = _OUTCOME_STYLE[step.outcome]
            text = step.reason if step.outcome in ("warning", "failed") else step.message
            click.secho(f"     {icon} {step.step}", fg=step_color, nl=False)
            click.echo(f"  {text}" if text else "")

    click.echo()
    if report.ok:
        click.secho(f"   Result: {report.status}", fg="green", bold=True)
        click.echo()
        return

    click.secho(f"   Result: stopped at {report.failed_unit}", fg="red", bold=True)
    click.echo("   Fix the problem above and run 'dotboot run' again.")
    click.echo()
    sys.exit(1)


@cli.command("list")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_units(ctx: click.Context, as_json: bool) -> None:
    """List units in execution order with their run-once state."""
    from dotboot.core.use_cases.status import get_status

    result = get_status(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    click.secho(f"\n📋 Units: {len(result.units)} ({result.pending} pending)", fg="cyan", bold=True)
    markers = {"ran": ("✓", "green"), "changed": ("↻", "yellow"), "pending": ("○", "white")}
    for unit in result.units:
        icon, color = markers[unit.state]
        click.secho(f"   {icon} {unit.name}", fg=color, nl=False)
        desc = f"  {unit.description}" if unit.description else ""
        when = f"  (ran {unit.ran_at})" if unit.ran_at and ctx.obj.get("verbose") else ""
        click.echo(f"{desc}{when}")

    if result.state and result.state.last_run.operation_id:
        last = result.state.last_run
        click.echo()
        click.secho("   Last run:", fg="white", bold=True)
        status_color = {"ok": "green", "noop": "white", "failed": "red"}.get(last.status, "white")
        click.echo(f"     {last.operation_id} — ", nl=False)
        click.secho(last.status, fg=status_color)
        if last.failed_unit:
            click.echo(f"     stopped at {last.failed_unit}")
    click.echo()


@cli.command()
@click.argument("units", nargs=-1)
@click.option("--all", "reset_all", is_flag=True, help="Clear every marker.")
def reset(units: tuple[str, ...], reset_all: bool) -> None:
    """Clear run-once markers so units run again."""
    from dotboot.core.use_cases.status import reset_markers

    if not units and not reset_all:
        click.secho("❌ Name at least one unit, or pass --all.", fg="red")
        sys.exit(1)

    cleared = reset_markers(None if reset_all else list(units))
    if not cleared:
        click.echo("Nothing to reset.")
        return
    for name in cleared:
        click.secho(f"   ↺ {name}", fg="yellow")


@cli.command()
@click.argument("name")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def probe(name: str, as_json: bool) -> None:
    """Check whether a command is on PATH (exit 0 if present)."""
    import shutil

    from dotboot.core.services.probe import command_exists

    present = command_exists(name)
    if as_json:
        click.echo(json.dumps({"name": name, "present": present, "path": shutil.which(name)}))
    elif present:
        click.secho(f"✅ {name} is installed", fg="green")
    else:
        click.secho(f"❌ {name} is not installed", fg="red")
    sys.exit(0 if present else 1)


@cli.command()
@click.option("-n", "count", default=20, type=int, help="Number of entries.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def history(count: int, as_json: bool) -> None:
    """Show recent unit runs from the audit ledger."""
    from dotboot.core.context import state_dir
    from dotboot.core.persistence.audit import AuditLedger

    entries = AuditLedger.in_state_dir(state_dir()).tail(count)

    if as_json:
        click.echo(json.dumps([e.model_dump(mode="json") for e in entries], indent=2))
        return

    if not entries:
        click.echo("No runs recorded yet.")
        return

    for entry in entries:
        color = "green" if entry.status == "ok" else "red"
        dry = " [dry-run]" if entry.dry_run else ""
        click.echo(f"   {entry.timestamp}  ", nl=False)
        click.secho(f"{entry.status:<6}", fg=color, nl=False)
        click.echo(f" {entry.unit}{dry}  ({entry.steps_changed} changed, {entry.steps_warned} warnings)")
        for err in entry.errors:
            click.echo(f"     │ {err}")


# ── Register sub-command groups from dotboot/ui/cli/ ──────────────

from dotboot.ui.cli.manifest import manifest
from dotboot.ui.cli.rc import rc

cli.add_command(manifest)
cli.add_command(rc)


if __name__ == "__main__":
    cli()
