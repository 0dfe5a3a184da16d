"""
Run-marker file — ``<state_dir>/runs.json``.

An unreadable or invalid marker file is treated as "nothing ran yet".
That is always safe: every unit probes before it acts, so re-running
a finished unit only costs the probes.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from dotboot.core.models.state import RunState
from dotboot.core.persistence.atomic import atomic_write_text

logger = logging.getLogger(__name__)

DEFAULT_STATE_FILE = "runs.json"


def default_state_path(state_dir: Path) -> Path:
    return state_dir / DEFAULT_STATE_FILE


def load_state(path: Path) -> RunState:
    """Markers from ``path``; a fresh RunState if absent or unreadable."""
    if not path.is_file():
        logger.info("No run markers at %s yet", path)
        return RunState()

    try:
        return RunState.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as e:
        logger.warning("Ignoring unreadable run markers %s: %s", path, e)
        return RunState()


def save_state(state: RunState, path: Path) -> None:
    """Persist markers atomically. Raises OSError if the write fails."""
    state.touch()
    content = json.dumps(state.model_dump(mode="json"), indent=2, ensure_ascii=False) + "\n"
    atomic_write_text(path, content)
    logger.debug("Saved %d marker(s) to %s", len(state.units), path)
