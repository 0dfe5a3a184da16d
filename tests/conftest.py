"""
Shared test fixtures and configuration.
"""

import stat
from pathlib import Path

import pytest

from dotboot.adapters.mock import MockAdapter
from dotboot.adapters.registry import AdapterRegistry
from dotboot.core import context
from dotboot.core.engine.session import Session


def _make_exe(bin_dir: Path, name: str) -> Path:
    """Drop a no-op executable into a fake PATH directory."""
    exe = bin_dir / name
    exe.write_text("#!/bin/sh\nexit 0\n")
    exe.chmod(exe.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return exe


@pytest.fixture(autouse=True)
def _isolated_context(monkeypatch):
    """Every test starts without a registered home or state override."""
    monkeypatch.setattr(context, "_home", None)
    monkeypatch.delenv("DOTBOOT_STATE_DIR", raising=False)


@pytest.fixture
def home(tmp_path: Path, monkeypatch) -> Path:
    """A scratch home directory registered in the process context."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setattr(context, "_home", home_dir)
    return home_dir


@pytest.fixture
def bin_dir(tmp_path: Path) -> Path:
    """An empty directory used as the whole PATH of a session."""
    path = tmp_path / "bin"
    path.mkdir()
    return path


@pytest.fixture
def state_dir(tmp_path: Path) -> Path:
    """Return a temporary directory for run markers and the audit ledger."""
    path = tmp_path / "state"
    path.mkdir()
    return path


@pytest.fixture
def mock_shell() -> MockAdapter:
    return MockAdapter(adapter_name="shell")


@pytest.fixture
def registry(mock_shell: MockAdapter) -> AdapterRegistry:
    reg = AdapterRegistry()
    reg.register(mock_shell)
    return reg


@pytest.fixture
def session(registry: AdapterRegistry, bin_dir: Path, home: Path) -> Session:
    return Session(registry=registry, unit="u", base_path=str(bin_dir))


@pytest.fixture
def make_exe(bin_dir: Path):
    """Factory: ``make_exe("brew")`` puts a fake brew on the session PATH."""
    return lambda name: _make_exe(bin_dir, name)
