"""
Adapter contract — how bootstrap steps reach the outside world.

Steps never spawn processes themselves. They build an Action, hand it
to the AdapterRegistry, and read the Receipt that comes back.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, Field

from dotboot.core.models.action import Action, Receipt


class ExecutionContext(BaseModel):
    """An Action plus the session state it runs under.

    ``env`` is layered over the process environment: the session PATH
    (Homebrew and asdf bin dirs added during the run) and ``ASDF_DIR``.
    """

    action: Action
    env: dict[str, str] = Field(default_factory=dict)
    dry_run: bool = False


class Adapter(ABC):
    """Executes Actions of one kind. Must not raise from ``execute``."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Key Actions use to select this adapter (``Action.adapter``)."""

    def is_available(self) -> bool:
        return True

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Cheap pre-flight check; ``(False, why)`` turns into a failed Receipt."""
        return True, ""

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        """Run the Action and describe the outcome."""
