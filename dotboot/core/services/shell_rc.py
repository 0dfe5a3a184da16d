"""
Shell-rc mutator — keep lines present in shell startup files.

The rc file is modelled as an ordered sequence of lines (``RcFile``).
``ensure_line_present`` and ``ensure_block`` are pure: they return a
new value plus a changed flag. ``ensure_rc_lines`` loads once, decides
in memory, and then appends only the new lines to the end of the file,
and only when something changed. Applying the same lines twice leaves
the file byte-identical to applying them once.

Files are read and appended as bytes (``surrogateescape``), so lines
are matched byte-for-byte and existing content, including CRLF line
endings and non-UTF-8 comments, is never rewritten. Appending opens the
path itself, so an rc file symlinked into a dotfiles checkout stays a
symlink and the checkout receives the lines.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from dotboot.core.context import expand_path
from dotboot.core.models.step import StepResult

logger = logging.getLogger(__name__)

_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


@dataclass(frozen=True)
class RcFile:
    """Immutable ordered lines of a shell rc file."""

    lines: tuple[str, ...] = ()
    terminated: bool = True         # file ends with "\n" (or is empty)

    @classmethod
    def parse(cls, text: str) -> RcFile:
        if not text:
            return cls()
        parts = text.split("\n")
        terminated = parts[-1] == ""
        if terminated:
            parts.pop()
        return cls(tuple(parts), terminated)

    def render(self) -> str:
        if not self.lines:
            return ""
        return "\n".join(self.lines) + "\n"

    def appended_since(self, base: RcFile) -> str:
        """Text that, appended to ``base``'s file, yields this file.

        Only valid when ``self`` extends ``base``, which is all the
        ``ensure_*`` operations ever produce.
        """
        added = self.lines[len(base.lines):]
        if not added:
            return ""
        lead = "" if base.terminated else "\n"
        return lead + "\n".join(added) + "\n"

    def contains(self, line: str) -> bool:
        return line in self.lines

    def ensure_line_present(self, line: str) -> tuple[RcFile, bool]:
        """Append ``line`` unless it is already present anywhere."""
        if line in self.lines:
            return self, False
        return RcFile(self.lines + (line,)), True

    def ensure_block(self, header: str, body: list[str]) -> tuple[RcFile, bool]:
        """Append ``header`` + ``body`` verbatim unless the block is present.

        The block counts as present when the header line exists, or when
        every non-blank body line already exists (installed by hand).
        A blank separator precedes the block in a non-empty file.
        """
        if header in self.lines:
            return self, False
        wanted = [line for line in body if line.strip()]
        if wanted and all(line in self.lines for line in wanted):
            return self, False

        new = list(self.lines)
        if new and new[-1].strip():
            new.append("")
        new.append(header)
        new.extend(body)
        return RcFile(tuple(new)), True


def load_rc(path: Path) -> RcFile:
    """Read an rc file, creating it (and its directory) when absent."""
    if not path.exists():
        logger.info("Creating %s", path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch()
    return RcFile.parse(path.read_bytes().decode(_ENCODING, _ERRORS))


def append_rc(path: Path, text: str) -> None:
    """Append ``text`` to an rc file in place (follows symlinks, keeps mode)."""
    with path.open("ab") as fh:
        fh.write(text.encode(_ENCODING, _ERRORS))


def backup_rc(path: Path) -> Path:
    """Copy ``path`` to ``<path>.backup.<YYYYmmdd_HHMMSS>``."""
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    target = path.with_name(f"{path.name}.backup.{stamp}")
    shutil.copy2(path, target)
    logger.info("Backed up %s to %s", path, target)
    return target


def ensure_rc_lines(
    file: str | Path,
    lines: list[str],
    header: str | None = None,
    backup: bool = False,
    dry_run: bool = False,
) -> StepResult:
    """Ensure lines (or a headed block) are present in an rc file.

    Returns a StepResult: ``installed`` when lines were appended,
    ``skipped`` when everything was already there, ``failed`` on
    filesystem errors (permissions, read-only home).
    """
    path = Path(expand_path(str(file)))
    step = f"rc:{path.name}"

    try:
        if dry_run and not path.exists():
            current = RcFile()
        else:
            current = load_rc(path)

        if header:
            updated, changed = current.ensure_block(header, lines)
        else:
            updated, changed = current, False
            for line in lines:
                updated, added = updated.ensure_line_present(line)
                changed = changed or added

        if not changed:
            return StepResult.skipped(step, f"already present in {path}")

        added_count = len(updated.lines) - len(current.lines)
        if dry_run:
            return StepResult.skipped(
                step, f"[dry-run] would append {added_count} line(s) to {path}",
            )

        backup_path = None
        if backup and current.lines:
            backup_path = backup_rc(path)
        append_rc(path, updated.appended_since(current))
        logger.info("Appended %d line(s) to %s", added_count, path)

        details: dict = {"path": str(path), "lines_added": added_count}
        if backup_path:
            details["backup"] = str(backup_path)
        return StepResult.installed(
            step, f"appended {added_count} line(s) to {path}", details=details,
        )

    except OSError as e:
        logger.error("Cannot update %s: %s", path, e)
        return StepResult.failure(step, f"Cannot update {path}: {e}")
