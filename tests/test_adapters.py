"""
Adapter layer: scripted mock, registry dispatch rules, real subprocesses.
"""

from pathlib import Path

import pytest

from dotboot.adapters.base import ExecutionContext
from dotboot.adapters.mock import MockAdapter
from dotboot.adapters.registry import AdapterRegistry
from dotboot.adapters.shell.command import ShellCommandAdapter
from dotboot.core.models.action import Action, Receipt

BREW_INSTALL = Action(id="04_setup_emacs:install:emacs", argv=["brew", "install", "emacs"], unit="04_setup_emacs")
PLUGIN_LIST = Action(id="02_setup_asdf:plugin-list", argv=["asdf", "plugin", "list"], read_only=True)


def _shell(argv: list[str], **kwargs) -> Receipt:
    action = Action(id=f"t:{argv[0]}", argv=argv, **{k: v for k, v in kwargs.items() if k != "env"})
    return ShellCommandAdapter().execute(ExecutionContext(action=action, env=kwargs.get("env", {})))


class TestMockAdapter:
    def test_unscripted_actions_succeed_silently(self, mock_shell: MockAdapter):
        receipt = mock_shell.execute(ExecutionContext(action=BREW_INSTALL))
        assert receipt.ok
        assert receipt.output == ""
        assert receipt.metadata == {"mock": True}

    def test_scripted_output_and_failure(self, mock_shell: MockAdapter):
        mock_shell.set_output(PLUGIN_LIST.id, "ruby\nnodejs")
        mock_shell.set_failure(BREW_INSTALL.id, error="No available formula", return_code=1)

        listed = mock_shell.execute(ExecutionContext(action=PLUGIN_LIST))
        installed = mock_shell.execute(ExecutionContext(action=BREW_INSTALL))

        assert listed.output.splitlines() == ["ruby", "nodejs"]
        assert installed.failed
        assert installed.error == "No available formula"
        assert installed.return_code == 1

    def test_set_response_is_copied_per_call(self, mock_shell: MockAdapter):
        mock_shell.set_response(PLUGIN_LIST.id, Receipt.success("shell", PLUGIN_LIST.id, output="java"))
        first = mock_shell.execute(ExecutionContext(action=PLUGIN_LIST))
        first.duration_ms = 99
        assert mock_shell.execute(ExecutionContext(action=PLUGIN_LIST)).duration_ms == 0

    def test_records_every_call_in_order(self, mock_shell: MockAdapter):
        for action in (PLUGIN_LIST, BREW_INSTALL, PLUGIN_LIST):
            mock_shell.execute(ExecutionContext(action=action))
        assert mock_shell.called_ids == [PLUGIN_LIST.id, BREW_INSTALL.id, PLUGIN_LIST.id]
        assert mock_shell.actions[1].argv == ["brew", "install", "emacs"]

    def test_reset_forgets_script_and_log(self, mock_shell: MockAdapter):
        mock_shell.set_failure(BREW_INSTALL.id)
        mock_shell.execute(ExecutionContext(action=BREW_INSTALL))
        mock_shell.reset()
        assert mock_shell.call_count == 0
        assert mock_shell.execute(ExecutionContext(action=BREW_INSTALL)).ok

    def test_availability_flag(self):
        assert MockAdapter().is_available()
        assert not MockAdapter(available=False).is_available()


class TestAdapterRegistry:
    def test_lookup_by_name(self, registry: AdapterRegistry, mock_shell: MockAdapter):
        assert registry.get("shell") is mock_shell
        assert registry.names() == ["shell"]
        registry.unregister("shell")
        assert registry.get("shell") is None
        assert registry.names() == []

    def test_unknown_adapter_is_a_failed_receipt(self):
        receipt = AdapterRegistry().execute_action(Action(id="x", argv=["true"], adapter="ssh"))
        assert receipt.failed
        assert receipt.error == "No adapter registered for 'ssh'"

    def test_validation_failure_stops_dispatch(self):
        registry = AdapterRegistry()
        registry.register(ShellCommandAdapter())
        receipt = registry.execute_action(Action(id="x"))
        assert receipt.failed
        assert receipt.error == "Invalid action: empty argv"

    def test_dry_run_skips_installs(self, registry: AdapterRegistry, mock_shell: MockAdapter):
        receipt = registry.execute_action(BREW_INSTALL, dry_run=True)
        assert receipt.status == "skipped"
        assert receipt.output == "[dry-run] would run: brew install emacs"
        assert mock_shell.call_count == 0

    def test_dry_run_still_probes(self, registry: AdapterRegistry, mock_shell: MockAdapter):
        mock_shell.set_output(PLUGIN_LIST.id, "ruby")
        receipt = registry.execute_action(PLUGIN_LIST, dry_run=True)
        assert receipt.output == "ruby"
        assert mock_shell.called_ids == [PLUGIN_LIST.id]

    def test_session_env_is_forwarded(self, registry: AdapterRegistry, mock_shell: MockAdapter):
        registry.execute_action(BREW_INSTALL, env={"PATH": "/opt/homebrew/bin"})
        assert mock_shell.call_log[0].env == {"PATH": "/opt/homebrew/bin"}

    def test_mock_mode_without_mock_adapter(self):
        receipt = AdapterRegistry(mock_mode=True).execute_action(BREW_INSTALL)
        assert receipt.ok
        assert receipt.metadata["mock"] is True

    def test_unavailable_adapter_is_not_executed(self):
        registry = AdapterRegistry()
        offline = MockAdapter(available=False)
        registry.register(offline)
        receipt = registry.execute_action(BREW_INSTALL)
        assert receipt.failed
        assert receipt.error == "Adapter 'shell' is not available"
        assert offline.call_count == 0

    def test_mock_mode_dry_run_still_skips_installs(self):
        registry = AdapterRegistry(mock_mode=True)
        installed = registry.execute_action(BREW_INSTALL, dry_run=True)
        listed = registry.execute_action(PLUGIN_LIST, dry_run=True)
        assert installed.status == "skipped"
        assert installed.output == "[dry-run] would run: brew install emacs"
        assert listed.ok

    def test_mock_mode_routes_everything_to_mock(self):
        registry = AdapterRegistry()
        registry.register(ShellCommandAdapter())
        fake = MockAdapter(adapter_name="fake", default_output="pretend")
        registry.set_mock_mode(True, mock_adapter=fake)
        assert registry.mock_mode
        assert registry.execute_action(BREW_INSTALL).output == "pretend"
        assert fake.call_count == 1

    def test_adapter_exception_becomes_failure(self, registry: AdapterRegistry):
        class Broken(MockAdapter):
            def execute(self, context):
                raise RuntimeError("kaboom")

        registry.register(Broken())
        receipt = registry.execute_action(BREW_INSTALL)
        assert receipt.failed
        assert receipt.error == "Unexpected error: kaboom"

    def test_duration_is_measured(self, registry: AdapterRegistry):
        assert registry.execute_action(BREW_INSTALL).duration_ms >= 0


class TestShellCommandAdapter:
    def test_identity(self):
        assert ShellCommandAdapter().name == "shell"

    @pytest.mark.parametrize(
        ("action", "message"),
        [
            (Action(id="x"), "empty argv"),
            (Action(id="x", argv=["ls"], cwd="/no/such/dir"), "working directory does not exist"),
        ],
    )
    def test_rejects_unrunnable_actions(self, action: Action, message: str):
        ok, why = ShellCommandAdapter().validate(ExecutionContext(action=action))
        assert not ok
        assert message in why

    def test_captures_stdout(self, tmp_path: Path):
        receipt = _shell(["pwd"], cwd=str(tmp_path))
        assert receipt.ok
        assert receipt.return_code == 0
        assert receipt.output == str(tmp_path.resolve())

    def test_nonzero_exit_reports_stderr(self):
        receipt = _shell(["sh", "-c", "echo 'formula not found' >&2; exit 3"])
        assert receipt.failed
        assert receipt.return_code == 3
        assert "formula not found" in receipt.error

    def test_nonzero_exit_without_stderr(self):
        receipt = _shell(["false"])
        assert receipt.error == "false exited with code 1"

    def test_missing_binary(self):
        receipt = _shell(["dotboot-no-such-tool"])
        assert receipt.failed
        assert receipt.return_code == 127
        assert "dotboot-no-such-tool" in receipt.error

    def test_env_is_layered_over_process_env(self):
        receipt = _shell(["sh", "-c", 'echo "$ASDF_DIR"'], env={"ASDF_DIR": "/tmp/asdf"})
        assert receipt.output == "/tmp/asdf"

    def test_timeout(self):
        receipt = _shell(["sleep", "5"], timeout=1)
        assert receipt.failed
        assert "timed out after 1s" in receipt.error
