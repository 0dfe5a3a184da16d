"""
Adapter registry — the single dispatch point for external commands.

Decides, per Action, whether it really runs:

    mock mode       → a mock answers (installs "succeed", listings are empty)
    dry-run         → mutating Actions come back ``skipped``; probes still run
    otherwise       → the registered adapter executes it
"""

from __future__ import annotations

import logging
import time

from dotboot.adapters.base import Adapter, ExecutionContext
from dotboot.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Adapters by name, plus the run-wide mock switch."""

    def __init__(self, mock_mode: bool = False):
        self._adapters: dict[str, Adapter] = {}
        self._mock_mode = mock_mode
        self._mock: Adapter | None = None

    @property
    def mock_mode(self) -> bool:
        return self._mock_mode

    def set_mock_mode(self, enabled: bool, mock_adapter: Adapter | None = None) -> None:
        """Route every Action to ``mock_adapter`` (or a built-in yes-man)."""
        self._mock_mode = enabled
        self._mock = mock_adapter

    def register(self, adapter: Adapter) -> None:
        if adapter.name in self._adapters:
            logger.warning("Replacing adapter %s", adapter.name)
        self._adapters[adapter.name] = adapter

    def unregister(self, name: str) -> None:
        self._adapters.pop(name, None)

    def get(self, name: str) -> Adapter | None:
        return self._adapters.get(name)

    def names(self) -> list[str]:
        return list(self._adapters)

    def _resolve(self, action: Action) -> Adapter | None:
        if self._mock_mode:
            return self._mock
        return self._adapters.get(action.adapter)

    def execute_action(
        self,
        action: Action,
        env: dict[str, str] | None = None,
        dry_run: bool = False,
    ) -> Receipt:
        """Run one Action and return its Receipt. Never raises."""
        start = time.monotonic()
        context = ExecutionContext(action=action, env=env or {}, dry_run=dry_run)

        adapter = self._resolve(action)
        if adapter is None and not self._mock_mode:
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"No adapter registered for '{action.adapter}'",
            )

        name = adapter.name if adapter is not None else action.adapter
        if adapter is not None:
            if not adapter.is_available():
                return Receipt.failure(adapter=name, action_id=action.id, error=f"Adapter '{name}' is not available")
            valid, why = adapter.validate(context)
            if not valid:
                return Receipt.failure(adapter=name, action_id=action.id, error=f"Invalid action: {why}")

        if dry_run and not action.read_only:
            return Receipt.skip(
                adapter=name,
                action_id=action.id,
                reason=f"[dry-run] would run: {action.label}",
                metadata={"dry_run": True},
            )

        # mock mode without a scripted mock: everything succeeds
        if adapter is None:
            return Receipt.success(adapter=name, action_id=action.id, metadata={"mock": True})

        try:
            receipt = adapter.execute(context)
        except Exception as e:
            logger.exception("Adapter %s raised on %s", adapter.name, action.id)
            receipt = Receipt.failure(adapter=adapter.name, action_id=action.id, error=f"Unexpected error: {e}")

        receipt.duration_ms = int((time.monotonic() - start) * 1000)
        return receipt
