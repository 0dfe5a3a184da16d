"""
Shell adapter — runs package managers and installers.

The only place dotboot spawns processes. Captured commands keep the
tail of stdout/stderr in the Receipt; interactive ones (the Homebrew
installer, anything that may ask for a sudo password) inherit the
terminal and capture nothing.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import time
from pathlib import Path

from dotboot.adapters.base import Adapter, ExecutionContext
from dotboot.core.models.action import Receipt

logger = logging.getLogger(__name__)

_OUTPUT_TAIL = 4000


def _tail(text: str | None) -> str:
    return (text or "").strip()[-_OUTPUT_TAIL:]


class ShellCommandAdapter(Adapter):
    @property
    def name(self) -> str:
        return "shell"

    def is_available(self) -> bool:
        return shutil.which("sh") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        action = context.action
        if not action.argv:
            return False, "empty argv"
        if action.cwd and not Path(action.cwd).is_dir():
            return False, f"working directory does not exist: {action.cwd}"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        action = context.action
        env = {**os.environ, **context.env}
        meta = {"argv": action.argv}
        logger.debug("$ %s", action.label)

        capture = {} if action.interactive else {"capture_output": True, "text": True}
        start = time.monotonic()
        try:
            proc = subprocess.run(action.argv, cwd=action.cwd, env=env, timeout=action.timeout, **capture)
        except FileNotFoundError:
            return Receipt.failure(
                adapter=self.name, action_id=action.id, return_code=127, metadata=meta,
                error=f"Command not found: {action.argv[0]}",
            )
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                adapter=self.name, action_id=action.id, metadata=meta,
                error=f"Command timed out after {action.timeout}s",
            )
        except OSError as e:
            return Receipt.failure(
                adapter=self.name, action_id=action.id, metadata=meta,
                error=f"Cannot run {action.argv[0]}: {e}",
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        stdout, stderr = _tail(proc.stdout), _tail(proc.stderr)
        if proc.returncode == 0:
            return Receipt.success(
                adapter=self.name, action_id=action.id, output=stdout, return_code=0,
                duration_ms=elapsed_ms, metadata={**meta, "stderr": stderr},
            )
        return Receipt.failure(
            adapter=self.name, action_id=action.id, output=stdout, return_code=proc.returncode,
            duration_ms=elapsed_ms, metadata=meta,
            error=stderr or f"{action.argv[0]} exited with code {proc.returncode}",
        )
