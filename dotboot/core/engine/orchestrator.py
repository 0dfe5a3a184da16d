"""
Orchestrator — run units once each, in order, stop on failure.

Contract:
    - units run in ascending numeric-prefix order of their names
    - a unit with a run-once marker for its current definition is
      not started again unless forced
    - a failed unit stops the whole sequence; later units are not
      started and keep no marker
    - a re-run after a partial failure picks up at the failed unit
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from dotboot.core.engine.executor import UnitReport, run_unit
from dotboot.core.engine.session import Session
from dotboot.core.models.state import RunState
from dotboot.core.models.unit import UnitSpec

logger = logging.getLogger(__name__)


@dataclass
class PlannedUnit:
    unit: UnitSpec
    run: bool
    reason: str = ""


@dataclass
class SequenceReport:
    """Result of one orchestrator run."""

    operation_id: str = ""
    started_at: str = ""
    ended_at: str = ""
    units: list[UnitReport] = field(default_factory=list)

    @property
    def ran(self) -> list[UnitReport]:
        return [u for u in self.units if u.skipped_reason is None]

    @property
    def failed_unit(self) -> str | None:
        for u in self.units:
            if u.status == "failed":
                return u.unit
        return None

    @property
    def ok(self) -> bool:
        return self.failed_unit is None

    @property
    def status(self) -> str:
        if not self.ok:
            return "failed"
        return "ok" if self.ran else "noop"

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1

    def to_dict(self) -> dict:
        return {
            "operation_id": self.operation_id,
            "status": self.status,
            "failed_unit": self.failed_unit,
            "started_at": self.started_at,
            "ended_at": self.ended_at,
            "units": [u.to_dict() for u in self.units],
        }


def plan_units(
    units: list[UnitSpec],
    state: RunState,
    only: list[str] | None = None,
    force: bool = False,
) -> list[PlannedUnit]:
    """Decide which units run, in execution order."""
    planned = []
    for unit in sorted(units, key=lambda u: u.order_key):
        if only and unit.name not in only:
            continue
        if force:
            planned.append(PlannedUnit(unit, True, "forced"))
        elif state.has_run(unit.name, unit.fingerprint()):
            planned.append(PlannedUnit(unit, False, "already ran"))
        elif state.has_run(unit.name):
            planned.append(PlannedUnit(unit, True, "definition changed"))
        else:
            planned.append(PlannedUnit(unit, True, "not run yet"))
    return planned


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


def run_sequence(
    planned: list[PlannedUnit],
    session: Session,
    state: RunState,
    operation_id: str,
    on_unit_done: Callable[[UnitReport], None] | None = None,
    record_markers: bool = True,
) -> SequenceReport:
    """Run planned units in order, stopping the sequence on failure.

    Args:
        planned: Output of ``plan_units``.
        session: Shared session; PATH changes carry over between units.
        state: Run-once markers, updated in place.
        operation_id: ID shared by all audit entries of this run.
        on_unit_done: Called after each unit that ran (persist, audit).
        record_markers: False in dry-run / mock mode.
    """
    report = SequenceReport(operation_id=operation_id, started_at=_now_iso())

    for item in planned:
        if not item.run:
            logger.info("⊘ %s (%s)", item.unit.name, item.reason)
            report.units.append(UnitReport(unit=item.unit.name, skipped_reason=item.reason))
            continue

        unit_report = run_unit(item.unit, session)
        report.units.append(unit_report)

        if unit_report.ok and record_markers:
            state.mark_ran(item.unit.name, item.unit.fingerprint(), operation_id)

        if on_unit_done is not None:
            on_unit_done(unit_report)

        if not unit_report.ok:
            logger.error("Unit %s failed, stopping", item.unit.name)
            break

    report.ended_at = _now_iso()

    state.last_run.operation_id = operation_id
    state.last_run.started_at = report.started_at
    state.last_run.ended_at = report.ended_at
    state.last_run.status = report.status
    state.last_run.units_run = [u.unit for u in report.ran]
    state.last_run.failed_unit = report.failed_unit
    return report
