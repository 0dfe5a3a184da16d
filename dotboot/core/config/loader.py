"""
Configuration loader — bootstrap.yml into a validated BootstrapConfig.

Where units come from, first match wins:
    1. ``--config PATH`` (must exist)
    2. bootstrap.yml in the cwd or the nearest parent that has one
    3. the built-in macOS units in ``dotboot.core.data.units``

A file may be a mapping with a ``units:`` key or just the list of units.
"""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from dotboot.core.data.units import DEFAULT_UNITS
from dotboot.core.models.unit import BootstrapConfig

logger = logging.getLogger(__name__)

BOOTSTRAP_CONFIG_FILE = "bootstrap.yml"


class ConfigError(Exception):
    """bootstrap.yml is missing, unreadable or does not describe valid units."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Nearest bootstrap.yml at or above ``start_dir`` (default: cwd)."""
    here = (start_dir or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / BOOTSTRAP_CONFIG_FILE
        if candidate.is_file():
            return candidate
    return None


def default_config() -> BootstrapConfig:
    # deep copy: validation must not alias the module-level unit dicts
    return BootstrapConfig.model_validate({"units": copy.deepcopy(DEFAULT_UNITS)})


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with path.open(encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if isinstance(data, list):
        return {"units": data}
    if isinstance(data, dict):
        return data
    raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")


def load_config(path: Path | None = None, search: bool = True) -> BootstrapConfig:
    """Load and validate the unit list.

    Args:
        path: Explicit bootstrap.yml; it is an error if it does not exist.
        search: Without ``path``, look for bootstrap.yml upward from the
            cwd before falling back to the built-in units.

    Raises:
        ConfigError: Explicit file missing, unreadable YAML, or units
            that fail validation.
    """
    if path is None and search:
        path = find_config_file()
    if path is None:
        logger.debug("No %s found, using built-in units", BOOTSTRAP_CONFIG_FILE)
        return default_config()
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    data = _read_yaml(path)
    try:
        config = BootstrapConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid bootstrap configuration in {path}: {e}") from e

    logger.info("Loaded %d units from %s", len(config.units), path)
    return config
