"""
Action and Receipt — one external command and what came of it.

Every package-manager call a step makes (``brew install``, ``asdf plugin
list``, ``git clone``) is an Action. Adapters turn Actions into
Receipts and report failure there instead of raising.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class Action(BaseModel):
    """A command a bootstrap step wants to run.

    ``read_only`` marks probes (``brew list``, ``asdf plugin list``):
    they never change the machine and therefore still run in dry-run.
    """

    id: str                         # "<unit>:<verb>[:<target>]", e.g. "02_setup_asdf:install:ruby"
    argv: list[str] = Field(default_factory=list)
    adapter: str = "shell"
    unit: str = ""
    read_only: bool = False
    interactive: bool = False       # inherit the terminal (sudo, installer prompts)
    timeout: int | None = None
    cwd: str | None = None

    @property
    def label(self) -> str:
        return " ".join(self.argv) or self.id


class Receipt(BaseModel):
    """Outcome of one Action."""

    adapter: str
    action_id: str
    status: Literal["ok", "skipped", "failed"] = "ok"
    output: str = ""                # stdout tail, or the skip reason
    error: str | None = None
    return_code: int | None = None
    duration_ms: int = 0
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @classmethod
    def success(cls, adapter: str, action_id: str, output: str = "", **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, output=output, **kwargs)

    @classmethod
    def failure(cls, adapter: str, action_id: str, error: str, **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status="failed", error=error, **kwargs)

    @classmethod
    def skip(cls, adapter: str, action_id: str, reason: str = "", **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status="skipped", output=reason, **kwargs)
