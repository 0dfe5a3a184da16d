"""
Logging setup — called once by the CLI before any command runs.

Modules only ever do ``logger = logging.getLogger(__name__)``; this is
the one place handlers and formats are decided.

Console level precedence:
    --debug  >  --verbose  >  --quiet  >  DOTBOOT_LOG_LEVEL  >  WARNING

A second, usually more detailed, copy can go to DOTBOOT_LOG_FILE at
DOTBOOT_LOG_FILE_LEVEL; handy for long unattended bootstraps.
"""

from __future__ import annotations

import logging
import os
import sys

# (format, datefmt) per console level; anything above INFO prints bare messages
_CONSOLE_FORMATS = {
    logging.DEBUG: ("%(asctime)s %(levelname)-5s %(name)s:%(lineno)d  %(message)s", "%H:%M:%S"),
    logging.INFO: ("%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
}
_BARE_FORMAT = ("%(message)s", None)
_FILE_FORMAT = ("%(asctime)s %(levelname)-5s %(name)s:%(lineno)d  %(message)s", "%Y-%m-%d %H:%M:%S")


def resolve_level(debug: bool = False, verbose: bool = False, quiet: bool = False) -> str:
    """Console level name from CLI flags, then the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get("DOTBOOT_LOG_LEVEL", "WARNING")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Install a stderr handler (and optionally a file handler) on the root logger.

    Replaces any handlers from an earlier call, so calling it twice
    does not duplicate output.
    """
    console_level = _parse_level(level)
    fmt, datefmt = _CONSOLE_FORMATS.get(max(console_level, logging.DEBUG), _BARE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root = logging.getLogger()
    for old in list(root.handlers):
        root.removeHandler(old)
    root.addHandler(console)
    root_level = console_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setLevel(file_level)
        handler.setFormatter(logging.Formatter(*_FILE_FORMAT))
        root.addHandler(handler)
        root_level = min(root_level, file_level)

    root.setLevel(root_level)
    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Level name → logging constant; unknown names mean WARNING."""
    value = logging.getLevelName(level.upper()) if level else None
    return value if isinstance(value, int) else logging.WARNING
