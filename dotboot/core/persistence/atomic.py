"""
Atomic file replacement shared by every file dotboot writes.

Content goes to a hidden temp file in the target directory, which is
then renamed over the target. A crash mid-write leaves either the old
file or the new one, never a truncated mix. A symlinked target is
resolved first: the file it points to is replaced and the link stays.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path


def atomic_write_text(path: Path, content: str, keep_mode: bool = False) -> None:
    """Replace ``path`` with ``content`` in one rename.

    Args:
        keep_mode: Copy the permission bits of an existing ``path``
            (dotfiles are often 0600).
    """
    path = path.resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        if keep_mode and path.exists():
            shutil.copymode(path, tmp)
        tmp.replace(path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
