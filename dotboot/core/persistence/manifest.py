"""
Version manifest — the flat ``~/.tool-versions`` file.

One ``tool version`` pair per line. dotboot always writes the full
declared set (overwrite, never append), so writing the same set twice
leaves exactly one line per tool.
"""

from __future__ import annotations

import logging
from pathlib import Path

from dotboot.core.persistence.atomic import atomic_write_text

logger = logging.getLogger(__name__)


def read_manifest(path: Path) -> dict[str, str]:
    """Parse a manifest into ``{tool: version}``.

    Blank lines and ``#`` comments are ignored. Extra versions on a line
    (asdf fallbacks) are ignored; the first one wins. A repeated tool
    replaces the earlier entry.
    """
    if not path.is_file():
        return {}

    entries: dict[str, str] = {}
    for raw in path.read_bytes().decode("utf-8", errors="replace").splitlines():
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue
        parts = line.split()
        if len(parts) < 2:
            logger.warning("Ignoring malformed manifest line in %s: %r", path, raw)
            continue
        entries[parts[0]] = parts[1]
    return entries


def render_manifest(entries: list[tuple[str, str]]) -> str:
    """Render pairs in the given order, one tool per line."""
    seen: dict[str, str] = {}
    for tool, version in entries:
        seen[tool] = version
    return "".join(f"{tool} {version}\n" for tool, version in seen.items())


def write_manifest(entries: list[tuple[str, str]], path: Path) -> bool:
    """Overwrite the manifest with exactly ``entries`` (atomic write).

    A symlinked manifest is written through to its target.

    Returns:
        True if the file content changed.
    """
    content = render_manifest(entries)
    if path.is_file() and path.read_bytes() == content.encode("utf-8"):
        return False

    atomic_write_text(path, content, keep_mode=True)
    logger.debug("Manifest written to %s", path)
    return True
