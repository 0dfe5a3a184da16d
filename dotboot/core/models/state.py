"""
RunState — run-once markers for bootstrap units.

Serialized to <state_dir>/runs.json. A marker says a unit finished
successfully and records the fingerprint of the definition that ran.
Markers only decide what the orchestrator starts; units stay safe to
re-run because every step probes before it acts.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class UnitMarker(BaseModel):
    name: str
    fingerprint: str = ""
    ran_at: str = Field(default_factory=_now_iso)
    operation_id: str = ""


class LastRun(BaseModel):
    """Summary of the most recent ``dotboot run``."""

    operation_id: str = ""
    started_at: str = ""
    ended_at: str = ""
    status: str = ""               # ok | noop | failed
    units_run: list[str] = Field(default_factory=list)
    failed_unit: str | None = None


class RunState(BaseModel):
    """Contents of runs.json."""

    schema_version: int = 1
    updated_at: str = Field(default_factory=_now_iso)
    units: dict[str, UnitMarker] = Field(default_factory=dict)
    last_run: LastRun = Field(default_factory=LastRun)

    def touch(self) -> None:
        self.updated_at = _now_iso()

    def has_run(self, name: str, fingerprint: str | None = None) -> bool:
        """Marked as ran; with ``fingerprint``, only if the definition is unchanged."""
        marker = self.units.get(name)
        return marker is not None and fingerprint in (None, marker.fingerprint)

    def mark_ran(self, name: str, fingerprint: str, operation_id: str = "") -> None:
        self.units[name] = UnitMarker(name=name, fingerprint=fingerprint, operation_id=operation_id)

    def clear(self, name: str) -> bool:
        """Drop a unit's marker; False if it had none."""
        return self.units.pop(name, None) is not None
