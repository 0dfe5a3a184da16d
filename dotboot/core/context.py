"""
Process context — the home directory and state directory of this run.

Set ONCE at startup by the CLI (``--home`` or ``$HOME``); tests set it
to ``tmp_path``. Everything that expands ``~`` in unit definitions
reads from here instead of the process environment, so a whole run
can be pointed at a scratch home.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

# State directory default, relative to the home directory
DEFAULT_STATE_DIR = ".local/state/dotboot"

_home: Optional[Path] = None


def set_home(home: Path) -> None:
    """Register the home directory for the current process."""
    global _home
    _home = home


def get_home() -> Path:
    """Return the registered home directory, falling back to $HOME."""
    if _home is not None:
        return _home
    return Path(os.environ.get("HOME") or Path.home())


def state_dir() -> Path:
    """Directory holding run markers and the audit ledger.

    ``DOTBOOT_STATE_DIR`` overrides the default under the home directory.
    """
    override = os.environ.get("DOTBOOT_STATE_DIR")
    if override:
        return Path(expand_path(override))
    return get_home() / DEFAULT_STATE_DIR


def expand_path(raw: str) -> str:
    """Expand ``~`` and ``$HOME`` against the registered home directory."""
    home = str(get_home())
    if raw == "~":
        return home
    if raw.startswith("~/"):
        raw = home + raw[1:]
    return raw.replace("${HOME}", home).replace("$HOME", home)
