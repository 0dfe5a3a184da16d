"""
Unit executor — runs the steps of one bootstrap unit in order.

Flow:
    requires → steps (package / versions / rc / command) → report

The first ``failed`` step stops the unit: nothing after it runs and
the unit report is ``failed``. Warnings are recorded and the unit
keeps going.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime

from dotboot.core.engine.session import Session
from dotboot.core.models.step import StepResult
from dotboot.core.models.unit import (
    CommandStepSpec,
    PackageSpec,
    RcBlockSpec,
    UnitSpec,
    VersionManagerSpec,
)
from dotboot.core.persistence.audit import AuditEntry, AuditLedger
from dotboot.core.services.package_installer import apply_package_step
from dotboot.core.services.probe import path_exists
from dotboot.core.services.shell_rc import ensure_rc_lines
from dotboot.core.services.version_manager import bootstrap_versions

logger = logging.getLogger(__name__)


@dataclass
class UnitReport:
    """Result of running one unit."""

    unit: str
    results: list[StepResult] = field(default_factory=list)
    duration_ms: int = 0
    skipped_reason: str | None = None  # set when the orchestrator did not run it

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def changed(self) -> int:
        return sum(1 for r in self.results if r.changed)

    @property
    def warned(self) -> int:
        return sum(1 for r in self.results if r.outcome == "warning")

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.failed)

    @property
    def ok(self) -> bool:
        return self.failed == 0

    @property
    def status(self) -> str:
        if self.skipped_reason:
            return "skipped"
        return "ok" if self.ok else "failed"

    @property
    def failure(self) -> StepResult | None:
        for r in self.results:
            if r.failed:
                return r
        return None

    def to_dict(self) -> dict:
        data: dict = {
            "unit": self.unit,
            "status": self.status,
            "total": self.total,
            "changed": self.changed,
            "warned": self.warned,
            "failed": self.failed,
            "duration_ms": self.duration_ms,
            "results": [r.model_dump(mode="json") for r in self.results],
        }
        if self.skipped_reason:
            data["skipped_reason"] = self.skipped_reason
        return data


def check_requirements(unit: UnitSpec, session: Session) -> list[StepResult]:
    """Commands a unit needs before it can start.

    A missing requirement is fatal, except when nothing is really
    installed (dry-run, mock) where earlier units only pretended.
    """
    results = []
    for name in unit.requires:
        step = f"requires:{name}"
        if session.has_command(name):
            results.append(StepResult.skipped(step, f"{name} is available"))
            continue
        reason = f"{name} is required but not found. Run the unit that installs it first."
        if session.simulated:
            results.append(StepResult.warning(step, reason))
            continue
        logger.error(reason)
        results.append(StepResult.failure(step, reason))
        break
    return results


def run_command_step(spec: CommandStepSpec, session: Session) -> StepResult:
    """Run a guarded one-off command."""
    step = f"command:{spec.name}"
    if spec.unless_path and path_exists(spec.unless_path):
        return StepResult.skipped(step, f"{spec.unless_path} exists")
    if spec.unless_command and session.has_command(spec.unless_command):
        return StepResult.skipped(step, f"{spec.unless_command} is available")

    receipt = session.run("command", spec.argv, target=spec.name, interactive=spec.interactive)
    if receipt.failed:
        return StepResult.failure(step, f"{spec.name} failed: {receipt.error}")
    if receipt.status == "skipped":
        return StepResult.skipped(step, receipt.output)
    return StepResult.applied(step, f"{spec.name} done")


def run_step(step, session: Session) -> list[StepResult]:
    """Dispatch one declared step to its service."""
    if isinstance(step, PackageSpec):
        return apply_package_step(step, session)
    if isinstance(step, VersionManagerSpec):
        return bootstrap_versions(step, session)
    if isinstance(step, RcBlockSpec):
        return [
            ensure_rc_lines(
                step.file, step.lines, header=step.header, backup=step.backup,
                dry_run=session.dry_run,
            )
        ]
    if isinstance(step, CommandStepSpec):
        return [run_command_step(step, session)]
    raise TypeError(f"Unknown step type: {type(step).__name__}")


def run_unit(unit: UnitSpec, session: Session) -> UnitReport:
    """Run all steps of a unit, stopping at the first failure."""
    session.unit = unit.name
    report = UnitReport(unit=unit.name)
    start = time.monotonic()
    logger.info("▶ %s", unit.name)

    def _done() -> UnitReport:
        report.duration_ms = int((time.monotonic() - start) * 1000)
        status_marker = "✓" if report.ok else "✗"
        logger.info("%s %s → %s", status_marker, unit.name, report.status)
        return report

    report.results.extend(check_requirements(unit, session))
    if not report.ok:
        return _done()

    for step in unit.steps:
        for result in run_step(step, session):
            report.results.append(result)
            if result.failed:
                return _done()

    return _done()


def write_audit_entry(
    report: UnitReport,
    ledger: AuditLedger,
    operation_id: str,
    dry_run: bool = False,
) -> None:
    """Write one unit's results to the audit ledger."""
    entry = AuditEntry(
        operation_id=operation_id,
        unit=report.unit,
        dry_run=dry_run,
        status=report.status,
        steps_total=report.total,
        steps_changed=report.changed,
        steps_warned=report.warned,
        steps_failed=report.failed,
        duration_ms=report.duration_ms,
        errors=[r.reason for r in report.results if r.failed and r.reason],
        warnings=[r.reason for r in report.results if r.outcome == "warning" and r.reason],
    )
    ledger.append(entry)


def generate_operation_id() -> str:
    """Generate a unique operation ID."""
    now = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    short = uuid.uuid4().hex[:6]
    return f"op-{now}-{short}"
