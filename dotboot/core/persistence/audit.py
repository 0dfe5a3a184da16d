"""
Audit ledger — ``<state_dir>/audit.ndjson``, one JSON line per unit run.

Answers "what did the last bootstrap install, and where did it stop?"
after the terminal scrollback is gone. Lines are only ever appended.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_AUDIT_FILE = "audit.ndjson"


class AuditEntry(BaseModel):
    """Outcome of one unit in one run."""

    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    operation_id: str = ""
    unit: str = ""
    dry_run: bool = False
    status: str = ""               # ok, failed

    steps_total: int = 0
    steps_changed: int = 0
    steps_warned: int = 0
    steps_failed: int = 0
    duration_ms: int = 0

    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    context: dict[str, Any] = Field(default_factory=dict)


class AuditLedger:
    """Append-only NDJSON file of AuditEntry lines."""

    def __init__(self, path: Path):
        self.path = path

    @classmethod
    def in_state_dir(cls, state_dir: Path) -> AuditLedger:
        return cls(state_dir / DEFAULT_AUDIT_FILE)

    def append(self, entry: AuditEntry) -> None:
        """Add one line. A ledger write failure is logged, never fatal."""
        line = entry.model_dump_json() + "\n"
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line)
        except OSError as e:
            logger.error("Cannot append to audit ledger %s: %s", self.path, e)

    def entries(self) -> list[AuditEntry]:
        """All readable entries, oldest first; corrupt lines are skipped."""
        if not self.path.is_file():
            return []

        result = []
        with self.path.open(encoding="utf-8") as f:
            for n, raw in enumerate(f, start=1):
                if not raw.strip():
                    continue
                try:
                    result.append(AuditEntry.model_validate(json.loads(raw)))
                except (json.JSONDecodeError, ValidationError) as e:
                    logger.warning("%s:%d: skipping corrupt entry (%s)", self.path, n, e)
        return result

    def tail(self, n: int = 20) -> list[AuditEntry]:
        """The ``n`` most recent entries."""
        return self.entries()[-n:] if n > 0 else []
