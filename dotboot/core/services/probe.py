"""
Capability probe — "is X already installed?"

Read-only checks used before every install decision. Absence is a
normal answer, never an error: a probe that cannot run (``brew`` not
there yet, ``asdf list`` for an unknown plugin) reports "absent".
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from dotboot.core.context import expand_path

if TYPE_CHECKING:
    from dotboot.core.engine.session import Session
    from dotboot.core.models.unit import PackageSpec

logger = logging.getLogger(__name__)


def command_exists(name: str, search_path: str | None = None) -> bool:
    """Whether ``name`` resolves to an executable on the search path.

    Args:
        name: Command name, e.g. ``brew``.
        search_path: PATH string to search. None uses the process PATH.
    """
    if not name:
        return False
    found = shutil.which(name, path=search_path)
    logger.debug("probe %s → %s", name, found or "absent")
    return found is not None


def path_exists(raw: str) -> bool:
    """Whether a file or directory exists (``~`` expanded)."""
    return Path(expand_path(raw)).exists()


def _listing_contains(output: str, needle: str) -> bool:
    """Whether any line of a listing starts with ``needle`` as a word."""
    for line in output.splitlines():
        words = line.strip().split()
        if words and words[0] == needle:
            return True
    return False


def probe_package(spec: PackageSpec, session: Session) -> bool:
    """Run the probe declared by a package spec."""
    target = spec.probe_target

    if spec.probe == "command":
        return session.has_command(target)

    if spec.probe == "path":
        assert spec.path is not None  # enforced by PackageSpec
        return path_exists(spec.path)

    if spec.probe == "brew":
        if not session.has_command("brew"):
            return False
        argv = ["brew", "list"]
        if spec.manager == "cask":
            argv.append("--cask")
        argv.append(target)
        receipt = session.run("probe", argv, target=spec.name, read_only=True)
        return receipt.ok

    if spec.probe == "tap":
        if not session.has_command("brew"):
            return False
        receipt = session.run("probe", ["brew", "tap"], target=spec.name, read_only=True)
        return receipt.ok and _listing_contains(receipt.output, target)

    if spec.probe == "gem":
        if not session.has_command("gem"):
            return False
        receipt = session.run(
            "probe", ["gem", "list", target], target=spec.name, read_only=True,
        )
        return receipt.ok and _listing_contains(receipt.output, target)

    logger.warning("Unknown probe kind '%s' for %s", spec.probe, spec.name)
    return False
