"""
Run use case — execute pending bootstrap units.

This is the top-level vertical slice: load config, load run markers,
plan, run units in order through the adapter registry, persist a
marker after every successful unit and audit every unit that ran.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from dotboot.adapters.registry import AdapterRegistry
from dotboot.core.config.loader import ConfigError, load_config
from dotboot.core.context import state_dir as default_state_dir
from dotboot.core.engine.executor import (
    UnitReport,
    generate_operation_id,
    write_audit_entry,
)
from dotboot.core.engine.orchestrator import SequenceReport, plan_units, run_sequence
from dotboot.core.engine.session import Session
from dotboot.core.models.unit import BootstrapConfig
from dotboot.core.persistence.audit import AuditLedger
from dotboot.core.persistence.state_file import default_state_path, load_state, save_state

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Result of a bootstrap run."""

    report: SequenceReport | None = None
    config: BootstrapConfig | None = None
    state_path: Path | None = None
    dry_run: bool = False
    mock: bool = False
    error: str | None = None

    @property
    def exit_code(self) -> int:
        if self.error:
            return 1
        return self.report.exit_code if self.report else 0

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
            return result

        result["state_path"] = str(self.state_path)
        result["dry_run"] = self.dry_run
        result["mock"] = self.mock
        if self.report:
            result["report"] = self.report.to_dict()
        return result


def build_registry(mock_mode: bool = False) -> AdapterRegistry:
    """Registry with the real shell adapter."""
    from dotboot.adapters.shell.command import ShellCommandAdapter

    registry = AdapterRegistry(mock_mode=mock_mode)
    registry.register(ShellCommandAdapter())
    return registry


def run_bootstrap(
    config_path: Path | None = None,
    units: list[str] | None = None,
    force: bool = False,
    dry_run: bool = False,
    mock_mode: bool = False,
    registry: AdapterRegistry | None = None,
    state_dir: Path | None = None,
    config: BootstrapConfig | None = None,
    base_path: str | None = None,
    timeout: int | None = None,
) -> RunResult:
    """Run pending bootstrap units.

    Args:
        config_path: Optional explicit path to bootstrap.yml.
        units: Optional unit names to restrict the run to.
        force: Ignore run-once markers.
        dry_run: Probe only; report what would be installed.
        mock_mode: Use mock adapter responses.
        registry: Optional pre-configured adapter registry.
        state_dir: Where markers and the audit ledger live.
        config: Already-loaded configuration (skips loading).
        base_path: PATH to probe against (default: process PATH).
        timeout: Per-command timeout in seconds (default: none).

    Returns:
        RunResult; ``exit_code`` is 0 on success/no-op, 1 on failure.
    """
    result = RunResult(dry_run=dry_run, mock=mock_mode)

    # ── Load config ──────────────────────────────────────────────
    if config is None:
        try:
            config = load_config(config_path)
        except ConfigError as e:
            result.error = str(e)
            return result
    result.config = config

    if units:
        unknown = [u for u in units if config.get_unit(u) is None]
        if unknown:
            result.error = f"Unknown unit(s): {', '.join(unknown)}"
            return result

    # ── Load run markers ─────────────────────────────────────────
    state_dir = state_dir or default_state_dir()
    state_path = default_state_path(state_dir)
    result.state_path = state_path
    state = load_state(state_path)
    audit = AuditLedger.in_state_dir(state_dir)

    # ── Registry + session ───────────────────────────────────────
    if registry is None:
        registry = build_registry(mock_mode=mock_mode)
    session = Session(registry=registry, dry_run=dry_run, base_path=base_path, timeout=timeout)

    persist = not (dry_run or registry.mock_mode)
    operation_id = generate_operation_id()

    def _on_unit_done(report: UnitReport) -> None:
        write_audit_entry(report, audit, operation_id, dry_run=not persist)
        if persist and report.ok:
            save_state(state, state_path)

    planned = plan_units(config.units, state, only=units, force=force)
    result.report = run_sequence(
        planned,
        session,
        state,
        operation_id,
        on_unit_done=_on_unit_done,
        record_markers=persist,
    )

    if persist:
        save_state(state, state_path)

    return result
