"""
Tests for capability probes and the package installer.
"""

from pathlib import Path

from dotboot.adapters.mock import MockAdapter
from dotboot.core.engine.session import Session
from dotboot.core.models.unit import PackageSpec
from dotboot.core.services.package_installer import (
    apply_package_step,
    ensure_package,
    install_command,
)
from dotboot.core.services.probe import command_exists, path_exists, probe_package

# ── Probes ──────────────────────────────────────────────────────────


class TestCommandProbe:
    def test_found_on_search_path(self, bin_dir: Path, make_exe):
        make_exe("brew")
        assert command_exists("brew", search_path=str(bin_dir))

    def test_absent(self, bin_dir: Path):
        assert not command_exists("brew", search_path=str(bin_dir))

    def test_empty_name(self):
        assert not command_exists("")

    def test_path_probe_expands_home(self, home: Path):
        (home / ".oh-my-zsh").mkdir()
        assert path_exists("~/.oh-my-zsh")
        assert not path_exists("~/.emacs.d")


class TestPackageProbe:
    def test_brew_probe_without_brew(self, session: Session, mock_shell: MockAdapter):
        spec = PackageSpec(name="font-meslo-lg-nerd-font", manager="cask", probe="brew")
        assert not probe_package(spec, session)
        assert mock_shell.call_count == 0

    def test_brew_probe_cask(self, session: Session, mock_shell: MockAdapter, make_exe):
        make_exe("brew")
        spec = PackageSpec(name="font-meslo-lg-nerd-font", manager="cask", probe="brew")
        assert probe_package(spec, session)
        call = mock_shell.call_log[0]
        assert call.action.read_only
        assert call.action.argv == ["brew", "list", "--cask", "font-meslo-lg-nerd-font"]

    def test_brew_probe_missing_formula(self, session: Session, mock_shell: MockAdapter, make_exe):
        make_exe("brew")
        mock_shell.set_failure("u:probe:powerlevel10k", "Error: No such keg")
        spec = PackageSpec(name="powerlevel10k", probe="brew")
        assert not probe_package(spec, session)

    def test_tap_probe(self, session: Session, mock_shell: MockAdapter, make_exe):
        make_exe("brew")
        spec = PackageSpec(name="homebrew/cask-fonts", manager="tap", probe="tap")
        mock_shell.set_output("u:probe:homebrew/cask-fonts", "homebrew/core\nhomebrew/cask-fonts")
        assert probe_package(spec, session)
        mock_shell.set_output("u:probe:homebrew/cask-fonts", "homebrew/core")
        assert not probe_package(spec, session)

    def test_gem_probe_matches_whole_name(self, session: Session, mock_shell: MockAdapter, make_exe):
        make_exe("gem")
        spec = PackageSpec(name="colorls", manager="gem", probe="gem")
        mock_shell.set_output("u:probe:colorls", "colorls-extra (1.0.0)")
        assert not probe_package(spec, session)
        mock_shell.set_output("u:probe:colorls", "colorls (1.5.0)")
        assert probe_package(spec, session)


# ── Install commands ────────────────────────────────────────────────


class TestInstallCommand:
    def test_brew(self):
        assert install_command(PackageSpec(name="emacs")) == ["brew", "install", "emacs"]

    def test_cask(self):
        spec = PackageSpec(name="iterm2", manager="cask", probe="path", path="/Applications/iTerm.app")
        assert install_command(spec) == ["brew", "install", "--cask", "iterm2"]

    def test_tap(self):
        assert install_command(PackageSpec(name="homebrew/cask-fonts", manager="tap")) == [
            "brew", "tap", "homebrew/cask-fonts",
        ]

    def test_gem(self):
        assert install_command(PackageSpec(name="colorls", manager="gem")) == [
            "gem", "install", "colorls",
        ]

    def test_script_forwards_args(self):
        spec = PackageSpec(
            name="oh-my-zsh",
            manager="script",
            url="https://example.com/install.sh",
            args=["", "--unattended"],
        )
        argv = install_command(spec)
        assert argv[:2] == ["/bin/bash", "-c"]
        assert argv[-3:] == ["https://example.com/install.sh", "", "--unattended"]

    def test_git(self):
        spec = PackageSpec(
            name="zsh-autosuggestions",
            manager="git",
            url="https://github.com/zsh-users/zsh-autosuggestions",
            probe="path",
            path="~/.oh-my-zsh/custom/plugins/zsh-autosuggestions",
        )
        assert install_command(spec) == [
            "git", "clone", "--depth", "1",
            "https://github.com/zsh-users/zsh-autosuggestions",
            "~/.oh-my-zsh/custom/plugins/zsh-autosuggestions",
        ]


# ── ensure_package ──────────────────────────────────────────────────


class TestEnsurePackage:
    def test_present_never_calls_manager(self, session: Session, mock_shell: MockAdapter, make_exe):
        make_exe("emacs")
        result = ensure_package(PackageSpec(name="emacs", label="Emacs"), session)
        assert result.outcome == "skipped"
        assert "already installed" in result.message
        assert mock_shell.call_count == 0

    def test_absent_installs(self, session: Session, mock_shell: MockAdapter):
        result = ensure_package(PackageSpec(name="emacs", label="Emacs"), session)
        assert result.outcome == "installed"
        assert result.step == "package:emacs"
        assert mock_shell.called_ids == ["u:install:emacs"]
        assert mock_shell.call_log[0].action.argv == ["brew", "install", "emacs"]

    def test_install_failure(self, session: Session, mock_shell: MockAdapter):
        mock_shell.set_failure("u:install:emacs", "Error: No available formula")
        result = ensure_package(PackageSpec(name="emacs", label="Emacs"), session)
        assert result.failed
        assert "Emacs installation failed" in result.reason
        assert "No available formula" in result.reason

    def test_dry_run_reports_without_installing(self, session: Session, mock_shell: MockAdapter):
        session.dry_run = True
        result = ensure_package(PackageSpec(name="emacs"), session)
        assert result.outcome == "skipped"
        assert "[dry-run]" in result.message
        assert mock_shell.call_count == 0

    def test_post_install_after_fresh_install(self, session: Session, mock_shell: MockAdapter, home: Path):
        spec = PackageSpec(
            name="doomemacs",
            manager="git",
            url="https://github.com/doomemacs/doomemacs",
            dest="~/.emacs.d",
            probe="path",
            path="~/.emacs.d/bin/doom",
            post_install=[["~/.emacs.d/bin/doom", "install", "--yes"]],
        )
        result = ensure_package(spec, session)
        assert result.outcome == "installed"
        assert mock_shell.called_ids == ["u:install:doomemacs", "u:post-install-0:doomemacs"]
        clone_argv = mock_shell.call_log[0].action.argv
        assert clone_argv[-1] == str(home / ".emacs.d")
        post_argv = mock_shell.call_log[1].action.argv
        assert post_argv == [str(home / ".emacs.d/bin/doom"), "install", "--yes"]

    def test_post_install_skipped_when_present(self, session: Session, mock_shell: MockAdapter, home: Path):
        doom = home / ".emacs.d" / "bin"
        doom.mkdir(parents=True)
        (doom / "doom").write_text("")
        spec = PackageSpec(
            name="doomemacs",
            manager="git",
            url="https://github.com/doomemacs/doomemacs",
            probe="path",
            path="~/.emacs.d/bin/doom",
            post_install=[["~/.emacs.d/bin/doom", "install"]],
        )
        assert ensure_package(spec, session).outcome == "skipped"
        assert mock_shell.call_count == 0

    def test_post_install_failure(self, session: Session, mock_shell: MockAdapter):
        mock_shell.set_failure("u:post-install-0:tool", "sync failed")
        spec = PackageSpec(name="tool", post_install=[["tool", "sync"]])
        result = ensure_package(spec, session)
        assert result.failed
        assert "post-install" in result.reason


class TestApplyPackageStep:
    def _homebrew(self, arch=None) -> PackageSpec:
        return PackageSpec(
            name="homebrew",
            label="Homebrew",
            manager="script",
            url="https://example.com/install.sh",
            command="brew",
            post_install_arch=arch,
            path_prepend=["/opt/homebrew/bin"],
            post_install_rc={
                "file": "~/.zprofile",
                "lines": ['eval "$(/opt/homebrew/bin/brew shellenv)"'],
            },
        )

    def test_fresh_machine(self, session: Session, mock_shell: MockAdapter, home: Path):
        results = apply_package_step(self._homebrew(), session)
        assert [r.outcome for r in results] == ["installed", "installed"]
        assert mock_shell.called_ids == ["u:install:homebrew"]
        assert session.path_prepend == ["/opt/homebrew/bin"]
        assert session.search_path().startswith("/opt/homebrew/bin")
        assert "brew shellenv" in (home / ".zprofile").read_text()

    def test_second_run_changes_nothing(self, session: Session, mock_shell: MockAdapter, make_exe, home: Path):
        apply_package_step(self._homebrew(), session)
        make_exe("brew")
        mock_shell.reset()
        before = (home / ".zprofile").read_bytes()

        results = apply_package_step(self._homebrew(), session)

        assert [r.outcome for r in results] == ["skipped", "skipped"]
        assert mock_shell.call_count == 0
        assert (home / ".zprofile").read_bytes() == before

    def test_other_arch_skips_wiring(self, session: Session, home: Path, monkeypatch):
        monkeypatch.setattr("platform.machine", lambda: "x86_64")
        results = apply_package_step(self._homebrew(arch="arm64"), session)
        assert [r.outcome for r in results] == ["installed"]
        assert session.path_prepend == []
        assert not (home / ".zprofile").exists()

    def test_failed_install_skips_wiring(self, session: Session, mock_shell: MockAdapter, home: Path):
        mock_shell.set_failure("u:install:homebrew")
        results = apply_package_step(self._homebrew(), session)
        assert len(results) == 1
        assert results[0].failed
        assert not (home / ".zprofile").exists()
