"""Tests for plugin discovery.

The scanner runs against a virtual directory tree: the lister and loader
are fakes, so no plugin file is written or imported here except in
:class:`TestModuleLoader`.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest

from ticli.core.events import EventBus
from ticli.core.models import DEFAULT_HOOK_PRIORITY, CommandRegistration
from ticli.core.plugin_scanner import PluginScanner, merge_commands
from ticli.exceptions import PluginLoadError
from ticli.infra.module_loader import list_directory, load_module

SDK = Path("/sdk/3.1.0")
SDK_COMMANDS = SDK / "cli" / "commands"
SDK_HOOKS = SDK / "cli" / "hooks"
IOS_COMMANDS = SDK / "platforms" / "ios" / "cli" / "commands"
IOS_HOOKS = SDK / "platforms" / "ios" / "cli" / "hooks"


# ---------------------------------------------------------------------------
# Virtual tree
# ---------------------------------------------------------------------------

class VirtualTree:
    """Fake lister and loader over an in-memory ``{path: module}`` table."""

    def __init__(self, modules: dict[Path, Any]) -> None:
        self.modules = modules
        self.loaded: list[Path] = []

    def list(self, path: Path) -> list[Path]:
        return [p for p in self.modules if p.parent == path]

    def load(self, path: Path) -> Any:
        self.loaded.append(path)
        module = self.modules[path]
        if isinstance(module, Exception):
            raise module
        return module

    def scanner(self) -> PluginScanner:
        return PluginScanner(self.list, self.load)


def _command(desc: str = "", **extra: Any) -> SimpleNamespace:
    return SimpleNamespace(config={"desc": desc}, run=lambda ctx, inv: 0, **extra)


def _hooks(table: dict[str, Any], **extra: Any) -> SimpleNamespace:
    return SimpleNamespace(HOOKS=table, **extra)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

class TestScanCommands:
    def test_registers_python_modules_in_sorted_order(self) -> None:
        tree = VirtualTree({
            SDK_COMMANDS / "create.py": _command("creates"),
            SDK_COMMANDS / "build.py": _command("builds"),
            SDK_COMMANDS / "README.md": _command(),
            SDK_COMMANDS / "_helpers.py": _command(),
        })
        regs = tree.scanner().scan_commands(SDK_COMMANDS)
        assert [r.name for r in regs] == ["build", "create"]
        assert regs[0].configuration.description == "builds"
        assert regs[0].source_path == SDK_COMMANDS / "build.py"
        assert not regs[0].is_builtin

    def test_handler_is_not_called_during_scan(self) -> None:
        calls: list[str] = []
        module = SimpleNamespace(config={}, run=lambda ctx, inv: calls.append("run"))
        tree = VirtualTree({SDK_COMMANDS / "build.py": module})
        tree.scanner().scan_commands(SDK_COMMANDS)
        assert calls == []

    def test_callable_config_and_name_override(self) -> None:
        module = SimpleNamespace(
            config=lambda: {"flags": {"force": {"abbr": "f"}}},
            run=lambda ctx, inv: 0,
            NAME="make",
            DESCRIPTION="makes things",
        )
        tree = VirtualTree({SDK_COMMANDS / "build.py": module})
        (reg,) = tree.scanner().scan_commands(SDK_COMMANDS)
        assert reg.name == "make"
        assert reg.configuration.description == "makes things"
        assert "force" in reg.configuration.flags

    def test_load_failure_is_skipped_and_recorded(
        self, caplog: pytest.LogCaptureFixture,
    ) -> None:
        tree = VirtualTree({
            SDK_COMMANDS / "a.py": PluginLoadError(SDK_COMMANDS / "a.py", "SyntaxError"),
            SDK_COMMANDS / "b.py": RuntimeError("boom"),
            SDK_COMMANDS / "c.py": _command(),
        })
        scanner = tree.scanner()
        regs = scanner.scan_commands(SDK_COMMANDS)
        assert [r.name for r in regs] == ["c"]
        assert [e.path.name for e in scanner.errors] == ["a.py", "b.py"]
        assert "(skipped)" in caplog.text

    def test_invalid_configuration_is_skipped(self) -> None:
        tree = VirtualTree({
            SDK_COMMANDS / "a.py": SimpleNamespace(config=["nope"], run=lambda c, i: 0),
            SDK_COMMANDS / "b.py": SimpleNamespace(config={}, run="not callable"),
            SDK_COMMANDS / "c.py": SimpleNamespace(config={"flags": {"x": 1}}, run=lambda c, i: 0),
        })
        scanner = tree.scanner()
        assert scanner.scan_commands(SDK_COMMANDS) == []
        assert len(scanner.errors) == 3

    def test_module_without_config_is_ignored(self) -> None:
        tree = VirtualTree({SDK_COMMANDS / "util.py": SimpleNamespace(run=lambda c, i: 0)})
        scanner = tree.scanner()
        assert scanner.scan_commands(SDK_COMMANDS) == []
        assert scanner.errors == []

    def test_root_is_scanned_once(self) -> None:
        tree = VirtualTree({SDK_COMMANDS / "build.py": _command()})
        scanner = tree.scanner()
        assert len(scanner.scan_commands(SDK_COMMANDS)) == 1
        assert scanner.scan_commands(SDK_COMMANDS) == []
        assert tree.loaded == [SDK_COMMANDS / "build.py"]

    def test_missing_root_yields_nothing(self) -> None:
        assert VirtualTree({}).scanner().scan_commands(SDK_COMMANDS) == []


# ---------------------------------------------------------------------------
# Hooks
# ---------------------------------------------------------------------------

class TestScanHooks:
    def test_hook_forms(self) -> None:
        first = lambda *a: None  # noqa: E731
        second = lambda *a: None  # noqa: E731
        tree = VirtualTree({
            SDK_HOOKS / "analytics.py": _hooks({
                "cli:pre-validate": first,
                "cli:post-execute": [{"handler": second, "priority": 5}, first],
            }),
        })
        regs = tree.scanner().scan_hooks(SDK_HOOKS)
        assert [(r.event_name, r.priority) for r in regs] == [
            ("cli:pre-validate", DEFAULT_HOOK_PRIORITY),
            ("cli:post-execute", 5),
            ("cli:post-execute", DEFAULT_HOOK_PRIORITY),
        ]
        assert regs[1].handler is second

    def test_module_priority_is_the_default(self) -> None:
        tree = VirtualTree({
            SDK_HOOKS / "a.py": _hooks({"cli:pre-validate": lambda *a: None}, PRIORITY=10),
        })
        (reg,) = tree.scanner().scan_hooks(SDK_HOOKS)
        assert reg.priority == 10

    def test_bad_hook_table_is_skipped(self) -> None:
        tree = VirtualTree({
            SDK_HOOKS / "a.py": _hooks(["not", "a", "mapping"]),  # type: ignore[arg-type]
            SDK_HOOKS / "b.py": _hooks({"cli:pre-validate": "not callable"}),
            SDK_HOOKS / "c.py": _hooks({"cli:pre-validate": {"handler": print, "priority": "x"}}),
        })
        scanner = tree.scanner()
        assert scanner.scan_hooks(SDK_HOOKS) == []
        assert len(scanner.errors) == 3


# ---------------------------------------------------------------------------
# SDK then platform
# ---------------------------------------------------------------------------

class TestSdkThenPlatform:
    def test_platform_command_replaces_sdk_command_and_hooks_keep_order(self) -> None:
        fired: list[str] = []
        sdk_build = _command("sdk build")
        ios_build = _command("ios build")
        tree = VirtualTree({
            SDK_COMMANDS / "build.py": sdk_build,
            IOS_COMMANDS / "build.py": ios_build,
            SDK_HOOKS / "log.py": _hooks({"cli:pre-execute": lambda *a: fired.append("sdk")}),
            IOS_HOOKS / "log.py": _hooks({"cli:pre-execute": lambda *a: fired.append("ios")}),
        })
        scanner = tree.scanner()
        commands: dict[str, CommandRegistration] = {}
        bus = EventBus()

        for root in (SDK_COMMANDS, IOS_COMMANDS):
            merge_commands(commands, scanner.scan_commands(root))
        for root in (SDK_HOOKS, IOS_HOOKS):
            bus.register_all(scanner.scan_hooks(root))

        assert list(commands) == ["build"]
        assert commands["build"].source_path == IOS_COMMANDS / "build.py"
        assert asyncio.run(bus.emit("cli:pre-execute")) == 2
        assert fired == ["sdk", "ios"]


# ---------------------------------------------------------------------------
# Real module loading
# ---------------------------------------------------------------------------

class TestModuleLoader:
    def test_loads_file_by_path(self, tmp_path: Path) -> None:
        path = tmp_path / "build.py"
        path.write_text("config = {'desc': 'builds'}\n\ndef run(ctx, inv):\n    return 3\n")
        module = load_module(path)
        assert module.config == {"desc": "builds"}
        assert module.run(None, None) == 3
        assert load_module(path) is module

    def test_same_stem_in_two_directories(self, tmp_path: Path) -> None:
        for label in ("sdk", "ios"):
            (tmp_path / label).mkdir()
            (tmp_path / label / "build.py").write_text(f"ORIGIN = {label!r}\n")
        assert load_module(tmp_path / "sdk" / "build.py").ORIGIN == "sdk"
        assert load_module(tmp_path / "ios" / "build.py").ORIGIN == "ios"

    def test_syntax_error_becomes_plugin_load_error(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.py"
        path.write_text("def run(:\n")
        with pytest.raises(PluginLoadError, match="broken.py"):
            load_module(path)

    def test_list_directory(self, tmp_path: Path) -> None:
        (tmp_path / "b.py").write_text("")
        (tmp_path / "a.py").write_text("")
        assert list_directory(tmp_path) == [tmp_path / "a.py", tmp_path / "b.py"]
        assert list_directory(tmp_path / "missing") == []
