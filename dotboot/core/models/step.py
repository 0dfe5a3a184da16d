"""
StepResult — the outcome of one bootstrap step.

Every step of a unit (probe a prerequisite, ensure a package, add an
asdf plugin, append an rc block) reports exactly one of:

    skipped    already in the desired state, nothing was run
    installed  something was installed or created
    applied    an idempotent command was (re)applied, e.g. ``asdf global``
    warning    degraded but not fatal, the unit keeps going
    failed     fatal, the unit stops here
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

Outcome = Literal["skipped", "installed", "applied", "warning", "failed"]


class StepResult(BaseModel):
    """Structured result of a single step."""

    step: str                       # e.g. "package:emacs", "plugin:ruby"
    outcome: Outcome
    message: str = ""
    reason: str | None = None       # failure / warning cause
    duration_ms: int = 0
    details: dict[str, Any] = Field(default_factory=dict)

    @property
    def failed(self) -> bool:
        return self.outcome == "failed"

    @property
    def changed(self) -> bool:
        """Whether this step mutated the machine."""
        return self.outcome in ("installed", "applied")

    @classmethod
    def skipped(cls, step: str, message: str = "", **kwargs: Any) -> StepResult:
        return cls(step=step, outcome="skipped", message=message, **kwargs)

    @classmethod
    def installed(cls, step: str, message: str = "", **kwargs: Any) -> StepResult:
        return cls(step=step, outcome="installed", message=message, **kwargs)

    @classmethod
    def applied(cls, step: str, message: str = "", **kwargs: Any) -> StepResult:
        return cls(step=step, outcome="applied", message=message, **kwargs)

    @classmethod
    def warning(cls, step: str, reason: str, **kwargs: Any) -> StepResult:
        return cls(step=step, outcome="warning", reason=reason, **kwargs)

    @classmethod
    def failure(cls, step: str, reason: str, **kwargs: Any) -> StepResult:
        return cls(step=step, outcome="failed", reason=reason, **kwargs)
