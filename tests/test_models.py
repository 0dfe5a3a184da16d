"""
Tests for unit, step, state and action models.
"""

import pytest
from pydantic import ValidationError

from dotboot.core.models.action import Action, Receipt
from dotboot.core.models.state import RunState
from dotboot.core.models.step import StepResult
from dotboot.core.models.unit import (
    BootstrapConfig,
    CommandStepSpec,
    PackageSpec,
    RcBlockSpec,
    UnitSpec,
    VersionManagerSpec,
)

# ── Unit specs ──────────────────────────────────────────────────────


class TestPackageSpec:
    def test_defaults(self):
        spec = PackageSpec(name="emacs")
        assert spec.manager == "brew"
        assert spec.probe == "command"
        assert spec.probe_target == "emacs"
        assert spec.display_name == "emacs"

    def test_command_overrides_probe_target(self):
        spec = PackageSpec(name="graphviz", label="Graphviz", command="dot")
        assert spec.probe_target == "dot"
        assert spec.display_name == "Graphviz"

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            PackageSpec(name="   ")

    def test_path_probe_needs_path(self):
        with pytest.raises(ValidationError, match="needs a 'path'"):
            PackageSpec(name="iterm2", manager="cask", probe="path")

    def test_script_needs_url(self):
        with pytest.raises(ValidationError, match="needs a 'url'"):
            PackageSpec(name="homebrew", manager="script")

    def test_git_needs_url_and_path(self):
        with pytest.raises(ValidationError):
            PackageSpec(name="doom", manager="git", url="https://example.com/doom")


class TestRcBlockSpec:
    def test_lines_required(self):
        with pytest.raises(ValidationError):
            RcBlockSpec(lines=[])

    def test_embedded_newline_rejected(self):
        with pytest.raises(ValidationError, match="newlines"):
            RcBlockSpec(lines=["a\nb"])


class TestVersionManagerSpec:
    def test_manifest_entries_skip_plugin_only_tools(self):
        spec = VersionManagerSpec(tools=[
            {"tool": "ruby", "version": "3.3.3"},
            {"tool": "python"},
            {"tool": "nodejs", "version": "22.3.0"},
        ])
        assert spec.manifest_entries() == [("ruby", "3.3.3"), ("nodejs", "22.3.0")]

    def test_duplicate_tool_rejected(self):
        with pytest.raises(ValidationError, match="more than once"):
            VersionManagerSpec(tools=[
                {"tool": "ruby", "version": "3.3.3"},
                {"tool": "ruby", "version": "3.2.0"},
            ])


class TestUnitSpec:
    def test_step_union_dispatches_on_kind(self):
        unit = UnitSpec.model_validate({
            "name": "04_setup_emacs",
            "steps": [
                {"kind": "package", "name": "emacs"},
                {"kind": "rc", "lines": ["export EDITOR=emacs"]},
                {"kind": "versions", "tools": []},
                {"kind": "command", "name": "doom", "argv": ["doom", "sync"]},
            ],
        })
        assert [type(s) for s in unit.steps] == [
            PackageSpec, RcBlockSpec, VersionManagerSpec, CommandStepSpec,
        ]

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError):
            UnitSpec.model_validate({"name": "x", "steps": [{"kind": "nope"}]})

    def test_prefix(self):
        assert UnitSpec(name="02_setup_asdf").prefix == 2
        assert UnitSpec(name="setup_misc").prefix is None

    def test_order_is_numeric(self):
        names = ["10_late", "setup_misc", "02_asdf", "1_brew"]
        ordered = sorted((UnitSpec(name=n) for n in names), key=lambda u: u.order_key)
        assert [u.name for u in ordered] == ["1_brew", "02_asdf", "10_late", "setup_misc"]

    def test_fingerprint_stable(self):
        a = UnitSpec(name="03_setup_iterm", steps=[{"kind": "package", "name": "x"}])
        b = UnitSpec(name="03_setup_iterm", steps=[{"kind": "package", "name": "x"}])
        assert a.fingerprint() == b.fingerprint()

    def test_fingerprint_ignores_description(self):
        a = UnitSpec(name="u", description="one")
        b = UnitSpec(name="u", description="two")
        assert a.fingerprint() == b.fingerprint()

    def test_fingerprint_changes_with_steps(self):
        a = UnitSpec(name="u", steps=[{"kind": "package", "name": "x"}])
        b = UnitSpec(name="u", steps=[{"kind": "package", "name": "y"}])
        assert a.fingerprint() != b.fingerprint()


class TestBootstrapConfig:
    def test_duplicate_units_rejected(self):
        with pytest.raises(ValidationError, match="duplicate unit names"):
            BootstrapConfig(units=[UnitSpec(name="a"), UnitSpec(name="a")])

    def test_ordered_units_and_lookup(self):
        config = BootstrapConfig(units=[UnitSpec(name="03_c"), UnitSpec(name="01_a")])
        assert [u.name for u in config.ordered_units()] == ["01_a", "03_c"]
        assert config.get_unit("03_c") is not None
        assert config.get_unit("missing") is None


# ── StepResult ──────────────────────────────────────────────────────


class TestStepResult:
    def test_outcomes(self):
        assert StepResult.installed("package:x").changed
        assert StepResult.applied("global:ruby").changed
        assert not StepResult.skipped("package:x").changed
        assert not StepResult.warning("integration:asdf", "missing").failed
        assert StepResult.failure("package:x", "boom").failed

    def test_invalid_outcome_rejected(self):
        with pytest.raises(ValidationError):
            StepResult(step="x", outcome="maybe")


# ── RunState ────────────────────────────────────────────────────────


class TestRunState:
    def test_mark_and_query(self):
        state = RunState()
        assert not state.has_run("01_setup_homebrew")
        state.mark_ran("01_setup_homebrew", "abc", "op-1")
        assert state.has_run("01_setup_homebrew")
        assert state.has_run("01_setup_homebrew", "abc")
        assert not state.has_run("01_setup_homebrew", "def")

    def test_clear(self):
        state = RunState()
        state.mark_ran("a", "f")
        assert state.clear("a")
        assert not state.clear("a")

    def test_roundtrip_json(self):
        state = RunState()
        state.mark_ran("a", "f", "op-1")
        restored = RunState.model_validate_json(state.model_dump_json())
        assert restored.units["a"].operation_id == "op-1"


# ── Action / Receipt ────────────────────────────────────────────────


class TestReceipt:
    def test_factories(self):
        assert Receipt.success(adapter="shell", action_id="a").ok
        assert Receipt.failure(adapter="shell", action_id="a", error="x").failed
        skip = Receipt.skip(adapter="shell", action_id="a", reason="dry")
        assert skip.status == "skipped"
        assert skip.output == "dry"

    def test_action_defaults(self):
        action = Action(id="02_setup_asdf:install:ruby")
        assert action.adapter == "shell"
        assert action.read_only is False


class TestPackageExports:
    def test_all_names_resolve(self):
        import dotboot.core.models as models

        assert sorted(models.__all__) == models.__all__
        assert all(hasattr(models, name) for name in models.__all__)
