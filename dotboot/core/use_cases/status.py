"""
Status use case — list units with their run-once markers, reset markers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from dotboot.core.config.loader import ConfigError, load_config
from dotboot.core.context import state_dir as default_state_dir
from dotboot.core.models.state import RunState
from dotboot.core.models.unit import BootstrapConfig
from dotboot.core.persistence.state_file import default_state_path, load_state, save_state

logger = logging.getLogger(__name__)


@dataclass
class UnitStatus:
    name: str
    description: str = ""
    state: str = "pending"   # pending, ran, changed
    ran_at: str | None = None
    steps: int = 0

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "state": self.state,
            "ran_at": self.ran_at,
            "steps": self.steps,
        }


@dataclass
class StatusResult:
    units: list[UnitStatus] = field(default_factory=list)
    state: RunState | None = None
    state_path: Path | None = None
    error: str | None = None

    @property
    def pending(self) -> int:
        return sum(1 for u in self.units if u.state != "ran")

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        data: dict = {
            "state_path": str(self.state_path),
            "pending": self.pending,
            "units": [u.to_dict() for u in self.units],
        }
        if self.state and self.state.last_run.operation_id:
            data["last_run"] = self.state.last_run.model_dump(mode="json")
        return data


def get_status(
    config_path: Path | None = None,
    state_dir: Path | None = None,
    config: BootstrapConfig | None = None,
) -> StatusResult:
    """Declared units in execution order with their marker state."""
    result = StatusResult()
    if config is None:
        try:
            config = load_config(config_path)
        except ConfigError as e:
            result.error = str(e)
            return result

    state_path = default_state_path(state_dir or default_state_dir())
    state = load_state(state_path)
    result.state = state
    result.state_path = state_path

    for unit in config.ordered_units():
        marker = state.units.get(unit.name)
        if marker is None:
            unit_state = "pending"
        elif marker.fingerprint != unit.fingerprint():
            unit_state = "changed"
        else:
            unit_state = "ran"
        result.units.append(UnitStatus(
            name=unit.name,
            description=unit.description,
            state=unit_state,
            ran_at=marker.ran_at if marker else None,
            steps=len(unit.steps),
        ))
    return result


def reset_markers(
    names: list[str] | None = None,
    state_dir: Path | None = None,
) -> list[str]:
    """Clear run-once markers so the orchestrator runs those units again.

    Args:
        names: Units to clear; None clears all.

    Returns:
        Names whose markers were actually removed.
    """
    state_path = default_state_path(state_dir or default_state_dir())
    state = load_state(state_path)

    targets = list(state.units) if names is None else names
    cleared = [name for name in targets if state.clear(name)]
    if cleared:
        save_state(state, state_path)
        logger.info("Cleared markers: %s", ", ".join(cleared))
    return cleared
