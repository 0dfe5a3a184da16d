"""
Unit models — declarative bootstrap units.

A bootstrap unit is one idempotent installer responsible for one tool
or a small cluster of related tools (Homebrew, asdf and its language
toolchains, iTerm2, Emacs, ...). Units are loaded from bootstrap.yml,
or from the built-in defaults, and validated here.

Step kinds are a discriminated union on ``kind``:

    package   ensure a package is present (brew, cask, tap, gem, script, git)
    versions  ensure a version manager plus (tool, version) pairs
    rc        ensure lines or a block in a shell startup file
    command   run a command unless a marker path/command already exists
"""

from __future__ import annotations

import hashlib
import re
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, field_validator, model_validator

_PREFIX_RE = re.compile(r"^(\d+)")


class RcBlockSpec(BaseModel):
    """Lines to keep present in a shell rc file.

    With a ``header`` the lines form a block appended verbatim behind
    the header comment. Without one, every line is ensured on its own.
    """

    kind: Literal["rc"] = "rc"
    file: str = "~/.zshrc"
    lines: list[str] = Field(min_length=1)
    header: str | None = None
    backup: bool = False

    @field_validator("lines")
    @classmethod
    def _single_lines(cls, v: list[str]) -> list[str]:
        for line in v:
            if "\n" in line:
                raise ValueError(f"rc lines must not contain newlines: {line!r}")
        return v


class PackageSpec(BaseModel):
    """A package that must be present on the machine.

    ``command`` names what the probe looks for: an executable for
    ``probe: command``, a formula/cask/gem name for ``brew``/``gem``,
    a tap for ``tap``. It defaults to the package name.
    """

    kind: Literal["package"] = "package"
    name: str = Field(min_length=1)
    label: str = ""
    manager: Literal["brew", "cask", "tap", "gem", "script", "git"] = "brew"
    probe: Literal["command", "path", "brew", "tap", "gem"] = "command"
    command: str | None = None
    path: str | None = None
    url: str | None = None
    dest: str | None = None          # git clone target (default: path)
    args: list[str] = Field(default_factory=list)
    interactive: bool = False

    # Post-install. Commands run only after a fresh install; rc lines and
    # PATH entries are ensured whenever the package ends up present.
    post_install: list[list[str]] = Field(default_factory=list)
    post_install_rc: RcBlockSpec | None = None
    path_prepend: list[str] = Field(default_factory=list)
    post_install_arch: str | None = None

    @field_validator("name")
    @classmethod
    def _non_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("package identifier must be non-empty")
        return v

    @model_validator(mode="after")
    def _check_fields(self) -> PackageSpec:
        if self.probe == "path" and not self.path:
            raise ValueError(f"package '{self.name}': probe 'path' needs a 'path'")
        if self.manager == "script" and not self.url:
            raise ValueError(f"package '{self.name}': manager 'script' needs a 'url'")
        if self.manager == "git" and not (self.url and (self.dest or self.path)):
            raise ValueError(f"package '{self.name}': manager 'git' needs 'url' and 'dest' or 'path'")
        return self

    @property
    def probe_target(self) -> str:
        return self.command or self.name

    @property
    def display_name(self) -> str:
        return self.label or self.name


class ToolVersion(BaseModel):
    """One (tool, version) pair managed by the version manager.

    A pair without a version only ensures the plugin.
    """

    tool: str = Field(min_length=1)
    version: str | None = None
    plugin_url: str | None = None


class VersionManagerSpec(BaseModel):
    """asdf plus the toolchains it manages."""

    kind: Literal["versions"] = "versions"
    manager: str = "asdf"
    formula: str = "asdf"
    integration: str | None = None      # default: $(brew --prefix asdf)/libexec/asdf.sh
    data_dir: str = "~/.asdf"
    rc_file: str = "~/.zshrc"
    rc_header: str = "# ASDF version manager"
    manifest: str = "~/.tool-versions"
    tools: list[ToolVersion] = Field(default_factory=list)

    @field_validator("tools")
    @classmethod
    def _unique_tools(cls, v: list[ToolVersion]) -> list[ToolVersion]:
        seen: set[str] = set()
        for tv in v:
            if tv.tool in seen:
                raise ValueError(f"tool '{tv.tool}' declared more than once")
            seen.add(tv.tool)
        return v

    def manifest_entries(self) -> list[tuple[str, str]]:
        """Declared (tool, version) pairs, in declared order."""
        return [(tv.tool, tv.version) for tv in self.tools if tv.version]


class CommandStepSpec(BaseModel):
    """A one-off command guarded by an existence check."""

    kind: Literal["command"] = "command"
    name: str = Field(min_length=1)
    argv: list[str] = Field(min_length=1)
    unless_path: str | None = None
    unless_command: str | None = None
    interactive: bool = False


Step = Annotated[
    Union[PackageSpec, VersionManagerSpec, RcBlockSpec, CommandStepSpec],
    Field(discriminator="kind"),
]


class UnitSpec(BaseModel):
    """One bootstrap unit.

    Units run in ascending order of the numeric prefix of their name
    (``01_setup_homebrew`` before ``02_setup_asdf``).
    """

    name: str = Field(min_length=1)
    description: str = ""
    requires: list[str] = Field(default_factory=list)
    steps: list[Step] = Field(default_factory=list)

    @property
    def prefix(self) -> int | None:
        m = _PREFIX_RE.match(self.name)
        return int(m.group(1)) if m else None

    @property
    def order_key(self) -> tuple[int, int, str]:
        """Sort key: numbered units first by number, then the rest by name."""
        prefix = self.prefix
        if prefix is None:
            return (1, 0, self.name)
        return (0, prefix, self.name)

    def fingerprint(self) -> str:
        """Content hash of the definition; a changed unit runs again."""
        raw = self.model_dump_json(exclude={"description"})
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()[:16]


class BootstrapConfig(BaseModel):
    """Root configuration — loaded from bootstrap.yml."""

    version: int = 1
    units: list[UnitSpec] = Field(default_factory=list)

    @field_validator("units")
    @classmethod
    def _unique_units(cls, v: list[UnitSpec]) -> list[UnitSpec]:
        names = [u.name for u in v]
        dupes = sorted({n for n in names if names.count(n) > 1})
        if dupes:
            raise ValueError(f"duplicate unit names: {', '.join(dupes)}")
        return v

    def ordered_units(self) -> list[UnitSpec]:
        return sorted(self.units, key=lambda u: u.order_key)

    def get_unit(self, name: str) -> UnitSpec | None:
        for unit in self.units:
            if unit.name == name:
                return unit
        return None
