"""
Built-in bootstrap units — the default macOS workstation.

Pure data, no logic. Used when no bootstrap.yml is found; validated
into ``BootstrapConfig`` by the loader like any YAML file.
"""

from __future__ import annotations

HOMEBREW_INSTALL_URL = "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"
OHMYZSH_INSTALL_URL = "https://raw.github.com/ohmyzsh/ohmyzsh/master/tools/install.sh"

_ZSH_CUSTOM_PLUGINS = "~/.oh-my-zsh/custom/plugins"

_COLORLS_BLOCK = [
    "if command -v colorls &> /dev/null; then",
    "    # Load colorls tab completion if available",
    "    if gem which colorls &> /dev/null; then",
    '        COLORLS_TAB_COMPLETE="$(dirname $(gem which colorls))/tab_complete.sh"',
    '        if [ -f "$COLORLS_TAB_COMPLETE" ]; then',
    '            source "$COLORLS_TAB_COMPLETE"',
    "        fi",
    "    fi",
    "",
    "    # colorls aliases",
    "    alias ls='colorls --light'",
    "    alias lc='colorls -lA --sd --light'",
    "    alias la='colorls -la --light'",
    "    alias ll='colorls -l --light'",
    "    alias tree='colorls --tree --light'",
    "fi",
]


DEFAULT_UNITS: list[dict] = [

    # ── 01: Homebrew ────────────────────────────────────────────

    {
        "name": "01_setup_homebrew",
        "description": "Homebrew package manager",
        "steps": [
            {
                "kind": "package",
                "name": "homebrew",
                "label": "Homebrew",
                "manager": "script",
                "url": HOMEBREW_INSTALL_URL,
                "command": "brew",
                "interactive": True,
                # Apple Silicon installs to /opt/homebrew, which is not on PATH yet
                "post_install_arch": "arm64",
                "path_prepend": ["/opt/homebrew/bin"],
                "post_install_rc": {
                    "file": "~/.zprofile",
                    "lines": ['eval "$(/opt/homebrew/bin/brew shellenv)"'],
                },
            },
        ],
    },

    # ── 02: asdf + language toolchains ──────────────────────────

    {
        "name": "02_setup_asdf",
        "description": "asdf version manager and global toolchains",
        "requires": ["brew"],
        "steps": [
            {
                "kind": "versions",
                "manager": "asdf",
                "tools": [
                    # Java first: Erlang builds need it
                    {
                        "tool": "java",
                        "version": "temurin-21.0.5+11.0.LTS",
                        "plugin_url": "https://github.com/halcyon/asdf-java.git",
                    },
                    {
                        "tool": "erlang",
                        "version": "27.2.1",
                        "plugin_url": "https://github.com/asdf-vm/asdf-erlang.git",
                    },
                    {
                        "tool": "elixir",
                        "version": "1.18-otp-27",
                        "plugin_url": "https://github.com/asdf-vm/asdf-elixir.git",
                    },
                    {"tool": "ruby", "version": "3.3.3"},
                    {"tool": "nodejs", "version": "22.3.0"},
                    {"tool": "python"},
                    {"tool": "pandoc"},
                    {"tool": "chezmoi", "version": "2.58.0"},
                ],
            },
        ],
    },

    # ── 03: iTerm2 ──────────────────────────────────────────────

    {
        "name": "03_setup_iterm",
        "description": "iTerm2 terminal",
        "requires": ["brew"],
        "steps": [
            {
                "kind": "package",
                "name": "iterm2",
                "label": "iTerm2",
                "manager": "cask",
                "probe": "path",
                "path": "/Applications/iTerm.app",
            },
        ],
    },

    # ── 04: Emacs + Doom Emacs ──────────────────────────────────

    {
        "name": "04_setup_emacs",
        "description": "Emacs, org-roam helpers and Doom Emacs",
        "requires": ["brew"],
        "steps": [
            {"kind": "package", "name": "emacs", "label": "Emacs"},
            # Graphviz for org-roam graphs
            {"kind": "package", "name": "graphviz", "label": "Graphviz", "command": "dot"},
            {"kind": "package", "name": "aspell", "label": "Aspell"},
            {
                "kind": "package",
                "name": "doomemacs",
                "label": "Doom Emacs",
                "manager": "git",
                "url": "https://github.com/doomemacs/doomemacs",
                "dest": "~/.emacs.d",
                "probe": "path",
                "path": "~/.emacs.d/bin/doom",
                "interactive": True,
                "post_install": [["~/.emacs.d/bin/doom", "install", "--yes"]],
            },
        ],
    },

    # ── 06: colorls ─────────────────────────────────────────────

    {
        "name": "06_setup_colorls",
        "description": "colorls gem and shell aliases",
        "requires": ["ruby", "gem"],
        "steps": [
            {"kind": "package", "name": "colorls", "manager": "gem", "probe": "gem"},
            {
                "kind": "rc",
                "file": "~/.zshrc",
                "header": "# colorls configuration",
                "lines": _COLORLS_BLOCK,
                "backup": True,
            },
        ],
    },

    # ── 07: fonts + Powerlevel10k ───────────────────────────────

    {
        "name": "07_setup_fonts",
        "description": "Powerlevel10k theme and Meslo Nerd Font",
        "requires": ["brew"],
        "steps": [
            {
                "kind": "package",
                "name": "romkatv/powerlevel10k/powerlevel10k",
                "label": "Powerlevel10k",
                "probe": "brew",
                "command": "powerlevel10k",
                "post_install_rc": {
                    "file": "~/.zshrc",
                    "header": "# Powerlevel10k theme",
                    "lines": ["source $(brew --prefix)/share/powerlevel10k/powerlevel10k.zsh-theme"],
                },
            },
            {"kind": "package", "name": "homebrew/cask-fonts", "manager": "tap", "probe": "tap"},
            {
                "kind": "package",
                "name": "font-meslo-lg-nerd-font",
                "label": "Meslo LG Nerd Font",
                "manager": "cask",
                "probe": "brew",
            },
        ],
    },

    # ── 08: Oh My Zsh + plugins ─────────────────────────────────

    {
        "name": "08_setup_ohmyzsh",
        "description": "Oh My Zsh and custom plugins",
        "steps": [
            {
                "kind": "package",
                "name": "oh-my-zsh",
                "label": "Oh My Zsh",
                "manager": "script",
                "url": OHMYZSH_INSTALL_URL,
                "args": ["", "--unattended"],
                "probe": "path",
                "path": "~/.oh-my-zsh",
            },
            {
                "kind": "package",
                "name": "zsh-autosuggestions",
                "manager": "git",
                "url": "https://github.com/zsh-users/zsh-autosuggestions",
                "probe": "path",
                "path": f"{_ZSH_CUSTOM_PLUGINS}/zsh-autosuggestions",
            },
            {
                "kind": "package",
                "name": "zsh-syntax-highlighting",
                "manager": "git",
                "url": "https://github.com/zsh-users/zsh-syntax-highlighting",
                "probe": "path",
                "path": f"{_ZSH_CUSTOM_PLUGINS}/zsh-syntax-highlighting",
            },
        ],
    },

    # ── 09: secrets ─────────────────────────────────────────────

    {
        "name": "09_setup_secrets",
        "description": "Keeper Commander CLI for chezmoi secrets",
        "requires": ["brew"],
        "steps": [
            {
                "kind": "package",
                "name": "keeper-commander",
                "label": "Keeper CLI",
                "command": "keeper",
            },
        ],
    },
]
