"""
Mock adapter — a scriptable stand-in for the shell.

Unscripted Actions succeed with ``default_output`` (empty by default),
which reads as "nothing installed yet" to every listing probe and as
"install worked" to every installer. Tests script specific action IDs:

    mock.set_output("02_setup_asdf:plugin-list", "ruby\\nnodejs")
    mock.set_failure("04_setup_emacs:install:emacs", "no bottle")
"""

from __future__ import annotations

from dotboot.adapters.base import Adapter, ExecutionContext
from dotboot.core.models.action import Action, Receipt


class MockAdapter(Adapter):
    def __init__(self, adapter_name: str = "shell", available: bool = True, default_output: str = ""):
        self._name = adapter_name
        self._available = available
        self._default_output = default_output
        self._scripted: dict[str, Receipt] = {}
        self.call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    def is_available(self) -> bool:
        return self._available

    @property
    def call_count(self) -> int:
        return len(self.call_log)

    @property
    def called_ids(self) -> list[str]:
        return [ctx.action.id for ctx in self.call_log]

    @property
    def actions(self) -> list[Action]:
        return [ctx.action for ctx in self.call_log]

    def set_response(self, action_id: str, receipt: Receipt) -> None:
        self._scripted[action_id] = receipt

    def set_output(self, action_id: str, output: str) -> None:
        self.set_response(action_id, Receipt.success(adapter=self._name, action_id=action_id, output=output))

    def set_failure(self, action_id: str, error: str = "Mock failure", return_code: int = 1) -> None:
        self.set_response(
            action_id,
            Receipt.failure(adapter=self._name, action_id=action_id, error=error, return_code=return_code),
        )

    def execute(self, context: ExecutionContext) -> Receipt:
        self.call_log.append(context)
        scripted = self._scripted.get(context.action.id)
        if scripted is not None:
            return scripted.model_copy()
        return Receipt.success(
            adapter=self._name,
            action_id=context.action.id,
            output=self._default_output,
            metadata={"mock": True},
        )

    def reset(self) -> None:
        """Forget calls and scripted responses."""
        self.call_log.clear()
        self._scripted.clear()
