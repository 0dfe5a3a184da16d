"""
Version-manager bootstrapper — asdf and the toolchains it manages.

Per (tool, version) pair:

    absent → plugin-added → version-installed → set-as-global

Each transition is idempotent on its own: the plugin is added only if
``asdf plugin list`` lacks it, the version is installed only if
``asdf list <tool>`` lacks it, and ``asdf global`` is reapplied every
time. Pairs are processed in declared order. When all pairs are done
the manifest (``~/.tool-versions``) is overwritten with exactly the
declared set.

A missing shell-integration script is not fatal: it is reported as a
warning and, if asdf still cannot be found, every toolchain step is
downgraded to a warning for the rest of the run.
"""

from __future__ import annotations

import logging
from pathlib import Path

from dotboot.core.context import expand_path
from dotboot.core.engine.session import Session
from dotboot.core.models.step import StepResult
from dotboot.core.models.unit import PackageSpec, ToolVersion, VersionManagerSpec
from dotboot.core.persistence.manifest import write_manifest
from dotboot.core.services.package_installer import ensure_package
from dotboot.core.services.shell_rc import ensure_rc_lines

logger = logging.getLogger(__name__)


def parse_plugin_list(output: str) -> set[str]:
    """Plugin names from ``asdf plugin list`` (first column)."""
    names = set()
    for line in output.splitlines():
        words = line.split()
        if words:
            names.add(words[0])
    return names


def parse_version_list(output: str) -> set[str]:
    """Installed versions from ``asdf list <tool>`` (``*`` marks current)."""
    versions = set()
    for line in output.splitlines():
        v = line.strip().lstrip("*").strip()
        if v and not v.startswith("No versions"):
            versions.add(v)
    return versions


def _rc_source_path(raw: str) -> str:
    """Path as written into the rc file: ``~`` becomes ``$HOME``."""
    if raw.startswith("~/"):
        return "$HOME" + raw[1:]
    return raw


class VersionManagerBootstrapper:
    """Drives one ``versions`` step of a unit."""

    def __init__(self, spec: VersionManagerSpec, session: Session):
        self.spec = spec
        self.session = session
        self.results: list[StepResult] = []
        self._plugins: set[str] | None = None

    @property
    def manager(self) -> str:
        return self.spec.manager

    # ── Manager + integration ───────────────────────────────────

    def integration_path(self) -> Path | None:
        """Where the manager's shell integration script should be."""
        if self.spec.integration:
            return Path(expand_path(self.spec.integration))
        if not self.session.has_command("brew"):
            return None
        receipt = self.session.run(
            "brew-prefix", ["brew", "--prefix", self.spec.formula], read_only=True,
        )
        prefix = receipt.output.strip().splitlines()[-1] if receipt.ok and receipt.output.strip() else ""
        if not prefix:
            return None
        return Path(prefix) / "libexec" / f"{self.manager}.sh"

    def _rc_line(self, path: Path | None) -> str:
        if self.spec.integration:
            return f'. "{_rc_source_path(self.spec.integration)}"'
        if path is not None:
            return f'. "{path}"'
        return f'. "$(brew --prefix {self.spec.formula})/libexec/{self.manager}.sh"'

    def ensure_manager(self) -> StepResult:
        package = PackageSpec(
            name=self.spec.formula,
            label=self.manager,
            manager="brew",
            probe="command",
            command=self.manager,
        )
        return ensure_package(package, self.session)

    def load_integration(self, path: Path | None) -> StepResult:
        """Put the manager's bin and shims on PATH for this run."""
        step = f"integration:{self.manager}"
        # plugins and installs land under data_dir, which follows --home
        self.session.env["ASDF_DATA_DIR"] = expand_path(self.spec.data_dir)
        if path is None or not path.is_file():
            where = str(path) if path else f"$(brew --prefix {self.spec.formula})/libexec"
            logger.warning(
                "%s shell integration not found at %s, continuing without it",
                self.manager, where,
            )
            return StepResult.warning(
                step, f"{self.manager} shell integration not found at {where}",
            )

        self.session.env["ASDF_DIR"] = str(path.parent)
        self.session.prepend_path(str(Path(expand_path(self.spec.data_dir)) / "shims"))
        self.session.prepend_path(str(path.parent / "bin"))
        logger.info("Loaded %s integration from %s", self.manager, path)
        return StepResult.applied(step, f"loaded {path}")

    # ── Per-tool transitions ────────────────────────────────────

    def plugins(self) -> set[str]:
        if self._plugins is None:
            receipt = self.session.run("plugin-list", [self.manager, "plugin", "list"], read_only=True)
            self._plugins = parse_plugin_list(receipt.output) if receipt.ok else set()
        return self._plugins

    def ensure_plugin(self, tv: ToolVersion) -> StepResult:
        step = f"plugin:{tv.tool}"
        if tv.tool in self.plugins():
            return StepResult.skipped(step, f"{tv.tool} plugin already added")

        argv = [self.manager, "plugin", "add", tv.tool]
        if tv.plugin_url:
            argv.append(tv.plugin_url)
        logger.info("Adding %s plugin", tv.tool)
        receipt = self.session.run("plugin-add", argv, target=tv.tool)
        if receipt.failed:
            logger.error("Adding %s plugin failed: %s", tv.tool, receipt.error)
            return StepResult.failure(step, f"{self.manager} plugin add {tv.tool} failed: {receipt.error}")
        self.plugins().add(tv.tool)
        if receipt.status == "skipped":
            return StepResult.skipped(step, receipt.output)
        return StepResult.installed(step, f"{tv.tool} plugin added")

    def ensure_version(self, tv: ToolVersion) -> StepResult:
        assert tv.version is not None
        step = f"install:{tv.tool}@{tv.version}"
        listing = self.session.run("list", [self.manager, "list", tv.tool], target=tv.tool, read_only=True)
        if listing.ok and tv.version in parse_version_list(listing.output):
            return StepResult.skipped(step, f"{tv.tool} {tv.version} already installed")

        logger.info("Installing %s %s", tv.tool, tv.version)
        receipt = self.session.run(
            "install", [self.manager, "install", tv.tool, tv.version], target=tv.tool,
        )
        if receipt.failed:
            logger.error("Installing %s %s failed: %s", tv.tool, tv.version, receipt.error)
            return StepResult.failure(
                step, f"{self.manager} install {tv.tool} {tv.version} failed: {receipt.error}",
            )
        if receipt.status == "skipped":
            return StepResult.skipped(step, receipt.output)
        return StepResult.installed(step, f"{tv.tool} {tv.version} installed")

    def set_global(self, tv: ToolVersion) -> StepResult:
        """Reapply the global version; cheap and safe to repeat."""
        assert tv.version is not None
        step = f"global:{tv.tool}"
        receipt = self.session.run(
            "global", [self.manager, "global", tv.tool, tv.version], target=tv.tool,
        )
        if receipt.failed:
            logger.warning("Setting global %s %s failed: %s", tv.tool, tv.version, receipt.error)
            return StepResult.warning(step, f"could not set global {tv.tool} {tv.version}: {receipt.error}")
        if receipt.status == "skipped":
            return StepResult.skipped(step, receipt.output)
        return StepResult.applied(step, f"global {tv.tool} {tv.version}")

    def write_manifest(self) -> StepResult:
        path = Path(expand_path(self.spec.manifest))
        entries = self.spec.manifest_entries()
        if self.session.dry_run:
            return StepResult.skipped("manifest", f"[dry-run] would write {len(entries)} entries to {path}")
        try:
            changed = write_manifest(entries, path)
        except OSError as e:
            logger.error("Cannot write %s: %s", path, e)
            return StepResult.failure("manifest", f"Cannot write {path}: {e}")
        if not changed:
            return StepResult.skipped("manifest", f"{path} already up to date")
        return StepResult.installed(
            "manifest", f"wrote {len(entries)} entries to {path}", details={"path": str(path)},
        )

    # ── Driver ──────────────────────────────────────────────────

    def _record(self, result: StepResult) -> bool:
        """Keep a result; False means stop."""
        self.results.append(result)
        return not result.failed

    def run(self) -> list[StepResult]:
        if not self._record(self.ensure_manager()):
            return self.results

        path = self.integration_path()
        if (path is not None and path.is_file()) or self.session.simulated:
            rc = ensure_rc_lines(
                self.spec.rc_file,
                [self._rc_line(path)],
                header=self.spec.rc_header,
                dry_run=self.session.dry_run,
            )
            if not self._record(rc):
                return self.results

        self._record(self.load_integration(path))

        available = self.session.has_command(self.manager) or self.session.simulated
        for tv in self.spec.tools:
            if not available:
                self._record(StepResult.warning(
                    f"plugin:{tv.tool}",
                    f"{self.manager} unavailable in this run; skipped {tv.tool}",
                ))
                continue
            if not self._record(self.ensure_plugin(tv)):
                return self.results
            if tv.version is None:
                continue
            if not self._record(self.ensure_version(tv)):
                return self.results
            self._record(self.set_global(tv))

        self._record(self.write_manifest())
        return self.results


def bootstrap_versions(spec: VersionManagerSpec, session: Session) -> list[StepResult]:
    """Run a ``versions`` step; stops at the first fatal result."""
    return VersionManagerBootstrapper(spec, session).run()
