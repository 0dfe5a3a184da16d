"""
Package installer — ensure a package is present, install it if not.

    probe present   → "skipped", the package manager is never called
    probe absent    → run the manager; exit 0 → "installed"
                                       exit ≠ 0 → "failed" (fatal to the unit)

No retry and no partial-success path: a failed install stops the unit
and the operator re-runs it after fixing the machine. Re-running is
safe because the probe turns finished work into "skipped".
"""

from __future__ import annotations

import logging
import platform
import time

from dotboot.core.engine.session import Session
from dotboot.core.models.step import StepResult
from dotboot.core.models.unit import PackageSpec
from dotboot.core.services.probe import probe_package
from dotboot.core.services.shell_rc import ensure_rc_lines

logger = logging.getLogger(__name__)

# Fetch an installer script and run it with bash, forwarding extra args.
# Equivalent to: /bin/bash -c "$(curl -fsSL URL)" ARGS...
_SCRIPT_RUNNER = 'script="$(curl -fsSL "$1")" || exit 1; shift; exec /bin/bash -c "$script" "$@"'


def install_command(spec: PackageSpec) -> list[str]:
    """The package-manager command that installs ``spec``."""
    if spec.manager == "brew":
        return ["brew", "install", spec.name, *spec.args]
    if spec.manager == "cask":
        return ["brew", "install", "--cask", spec.name, *spec.args]
    if spec.manager == "tap":
        return ["brew", "tap", spec.name, *spec.args]
    if spec.manager == "gem":
        return ["gem", "install", spec.name, *spec.args]
    if spec.manager == "script":
        assert spec.url is not None
        return ["/bin/bash", "-c", _SCRIPT_RUNNER, "dotboot", spec.url, *spec.args]
    if spec.manager == "git":
        dest = spec.dest or spec.path
        assert spec.url is not None and dest is not None
        return ["git", "clone", "--depth", "1", *spec.args, spec.url, dest]
    raise ValueError(f"Unknown package manager: {spec.manager}")


def ensure_package(spec: PackageSpec, session: Session) -> StepResult:
    """Ensure one package is installed. Never raises."""
    step = f"package:{spec.name}"
    start = time.monotonic()

    if probe_package(spec, session):
        logger.info("%s is already installed", spec.display_name)
        return StepResult.skipped(step, f"{spec.display_name} is already installed")

    argv = install_command(spec)
    logger.info("Installing %s: %s", spec.display_name, " ".join(argv))
    receipt = session.run(
        "install", argv, target=spec.name, interactive=spec.interactive,
    )
    elapsed_ms = int((time.monotonic() - start) * 1000)

    if receipt.failed:
        logger.error("%s installation failed: %s", spec.display_name, receipt.error)
        return StepResult.failure(
            step,
            f"{spec.display_name} installation failed: {receipt.error}",
            duration_ms=elapsed_ms,
            details={"argv": argv, "return_code": receipt.return_code},
        )

    if receipt.status == "skipped":
        return StepResult.skipped(step, receipt.output, duration_ms=elapsed_ms)

    for i, cmd in enumerate(spec.post_install):
        post = session.run(f"post-install-{i}", cmd, target=spec.name, interactive=spec.interactive)
        if post.failed:
            logger.error("%s post-install failed: %s", spec.display_name, post.error)
            return StepResult.failure(
                step,
                f"{spec.display_name} post-install '{' '.join(cmd)}' failed: {post.error}",
                duration_ms=int((time.monotonic() - start) * 1000),
            )

    return StepResult.installed(
        step,
        f"{spec.display_name} installation successful",
        duration_ms=int((time.monotonic() - start) * 1000),
        details={"argv": argv},
    )


def _arch_matches(spec: PackageSpec) -> bool:
    if spec.post_install_arch is None:
        return True
    return platform.machine() == spec.post_install_arch


def apply_package_step(spec: PackageSpec, session: Session) -> list[StepResult]:
    """Ensure a package plus its shell wiring.

    PATH entries and rc lines are ensured whenever the package ended up
    present, so a run that died between install and rc edit repairs
    itself next time.
    """
    results = [ensure_package(spec, session)]
    if results[0].failed or not _arch_matches(spec):
        return results

    for entry in spec.path_prepend:
        session.prepend_path(entry)

    if spec.post_install_rc is not None:
        rc = spec.post_install_rc
        results.append(
            ensure_rc_lines(
                rc.file, rc.lines, header=rc.header, backup=rc.backup, dry_run=session.dry_run,
            )
        )
    return results
