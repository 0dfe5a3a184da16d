"""
Session — mutable per-run context shared by all units.

Holds the adapter registry, the dry-run flag and the environment
overrides a run accumulates: Homebrew's bin directory after it was
installed, asdf's bin and shims after its integration was loaded.
Overrides live for the remainder of the current process only; they
are never written back to the operator's environment.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from dotboot.adapters.registry import AdapterRegistry
from dotboot.core.context import expand_path, get_home
from dotboot.core.models.action import Action, Receipt
from dotboot.core.services.probe import command_exists

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """Per-run execution context."""

    registry: AdapterRegistry
    unit: str = ""
    dry_run: bool = False
    base_path: str | None = None
    timeout: int | None = None
    path_prepend: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)

    @property
    def simulated(self) -> bool:
        """True when nothing is really installed (dry-run or mock)."""
        return self.dry_run or self.registry.mock_mode

    def search_path(self) -> str:
        """The PATH used for probes and commands in this run."""
        base = self.base_path if self.base_path is not None else os.environ.get("PATH", "")
        parts = list(self.path_prepend)
        if base:
            parts.append(base)
        return os.pathsep.join(parts)

    def prepend_path(self, entry: str) -> None:
        """Put a directory in front of PATH for the rest of this run."""
        entry = expand_path(entry)
        if entry in self.path_prepend:
            return
        self.path_prepend.insert(0, entry)
        logger.debug("PATH += %s", entry)

    def env_overrides(self) -> dict[str, str]:
        """Environment layered over os.environ for every command.

        ``HOME`` is the run's home directory, so package managers write
        where dotboot reads (``--home`` included).
        """
        overrides = {"HOME": str(get_home()), **self.env}
        overrides["PATH"] = self.search_path()
        return overrides

    def has_command(self, name: str) -> bool:
        """Capability probe against the session PATH."""
        return command_exists(name, search_path=self.search_path())

    def run(
        self,
        verb: str,
        argv: list[str],
        *,
        target: str = "",
        read_only: bool = False,
        interactive: bool = False,
        cwd: str | None = None,
    ) -> Receipt:
        """Run a command through the registry.

        The action ID is ``<unit>:<verb>[:<target>]``, stable across runs
        so mock responses and audit entries can refer to it.
        """
        action = Action(
            id=f"{self.unit}:{verb}" + (f":{target}" if target else ""),
            argv=[expand_path(a) for a in argv],
            unit=self.unit,
            read_only=read_only,
            interactive=interactive,
            timeout=self.timeout,
            cwd=expand_path(cwd) if cwd else None,
        )
        return self.registry.execute_action(
            action,
            env=self.env_overrides(),
            dry_run=self.dry_run,
        )
