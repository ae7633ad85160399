"""Tests for the built-in ``config``, ``sdk`` and ``help`` commands.

Commands are run through :func:`ticli.cli.app.main` so that argv
parsing, SDK discovery and config loading are exercised as well.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from ticli.cli import exit_codes
from ticli.cli.app import main
from ticli.cli.builtins import builtin_commands
from ticli.cli.config_command import parse_value
from ticli.cli.context import BootstrapContext
from ticli.exceptions import (
    CommandArgumentError,
    CommandFailedError,
    SDKIncompatibleError,
    SDKNotFoundError,
)


def _saved(config_path: Path) -> dict:
    return json.loads(config_path.read_text(encoding="utf-8"))


class TestRegistry:
    def test_builtins_have_no_source(self) -> None:
        regs = builtin_commands()
        assert [r.name for r in regs] == ["config", "help", "sdk"]
        assert all(r.is_builtin for r in regs)


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------

class TestParseValue:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [("5", 5), ("true", True), ('["a"]', ["a"]), ("hello", "hello"), ("3.1.0", "3.1.0")],
    )
    def test_json_or_string(self, text: str, expected: object) -> None:
        assert parse_value(text) == expected


class TestConfigCommand:
    def test_set_and_save(
        self,
        ctx: BootstrapContext,
        config_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert main(["config", "cli.width", "100"], context=ctx) == exit_codes.SUCCESS
        assert _saved(config_path)["cli"]["width"] == 100
        assert "cli.width saved" in capsys.readouterr().out

    def test_several_values_make_a_list(
        self, ctx: BootstrapContext, config_path: Path,
    ) -> None:
        main(["config", "paths.sdks", "/a", "/b"], context=ctx)
        assert _saved(config_path)["paths"]["sdks"] == ["/a", "/b"]

    def test_get_value(
        self, ctx: BootstrapContext, write_config, capsys: pytest.CaptureFixture[str],
    ) -> None:
        write_config({"app": {"sdk": "3.1.0"}})
        main(["config", "app.sdk"], context=ctx)
        assert capsys.readouterr().out.strip() == "3.1.0"

    def test_get_missing_key(self, ctx: BootstrapContext) -> None:
        with pytest.raises(CommandFailedError, match='Key "nope" not found'):
            main(["config", "nope"], context=ctx)

    def test_list_hides_transient_overrides(
        self, ctx: BootstrapContext, write_config, capsys: pytest.CaptureFixture[str],
    ) -> None:
        write_config({"user": {"locale": "en_US", "name": "dev"}})
        main(["--no-colors", "config"], context=ctx)
        out = capsys.readouterr().out
        assert "user.name   = dev" in out
        assert "cli.colors" not in out

    def test_list_as_json(
        self, ctx: BootstrapContext, write_config, capsys: pytest.CaptureFixture[str],
    ) -> None:
        write_config({"user": {"locale": "en_US"}})
        main(["config", "-o", "json"], context=ctx)
        assert json.loads(capsys.readouterr().out) == {"user": {"locale": "en_US"}}

    def test_remove(self, ctx: BootstrapContext, write_config, config_path: Path) -> None:
        write_config({"user": {"locale": "en_US", "name": "dev"}})
        assert main(["config", "--remove", "user.name"], context=ctx) == exit_codes.SUCCESS
        assert _saved(config_path)["user"] == {"locale": "en_US"}

    def test_remove_missing_key(self, ctx: BootstrapContext) -> None:
        with pytest.raises(CommandFailedError, match="key not found"):
            main(["config", "-r", "user.name"], context=ctx)

    def test_remove_without_key(self, ctx: BootstrapContext) -> None:
        with pytest.raises(CommandArgumentError):
            main(["config", "--remove"], context=ctx)


# ---------------------------------------------------------------------------
# sdk
# ---------------------------------------------------------------------------

class TestSdkCommand:
    @pytest.fixture()
    def installed(self, write_config, sdk_root: Path, make_sdk) -> Path:
        write_config({"paths": {"sdks": [str(sdk_root)]}})
        make_sdk(sdk_root, "2.9.0.GA", "2.9.0")
        make_sdk(sdk_root, "3.1.0.GA", "3.1.0", platforms=["android", "ios"])
        make_sdk(sdk_root, "4.0.0.GA", "4.0.0")
        return sdk_root

    def test_list_json(
        self, ctx: BootstrapContext, installed: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        main(["sdk", "list", "--output", "json"], context=ctx)
        document = json.loads(capsys.readouterr().out)
        assert [s["name"] for s in document["installed"]] == ["2.9.0.GA", "3.1.0.GA", "4.0.0.GA"]
        assert document["installed"][1]["platforms"] == ["android", "ios"]
        assert document["selected"] is None

    def test_list_table(
        self, ctx: BootstrapContext, installed: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert main(["sdk"], context=ctx) == exit_codes.SUCCESS
        out = capsys.readouterr().out
        assert "3.1.0.GA" in out
        assert "unsupported" in out
        assert "latest" in out

    def test_list_without_sdks(
        self, ctx: BootstrapContext, capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert main(["sdk", "list"], context=ctx) == exit_codes.SUCCESS
        assert "No SDKs installed." in capsys.readouterr().out

    def test_select_version(
        self, ctx: BootstrapContext, installed: Path, config_path: Path,
    ) -> None:
        assert main(["sdk", "select", "3.1.0.GA"], context=ctx) == exit_codes.SUCCESS
        assert _saved(config_path)["sdk"]["selected"] == "3.1.0.GA"

    def test_select_latest(
        self, ctx: BootstrapContext, installed: Path, config_path: Path,
    ) -> None:
        main(["sdk", "select", "latest"], context=ctx)
        assert _saved(config_path)["sdk"]["selected"] == "4.0.0.GA"

    def test_select_too_old(self, ctx: BootstrapContext, installed: Path) -> None:
        with pytest.raises(SDKIncompatibleError, match="too old"):
            main(["sdk", "select", "2.9.0.GA"], context=ctx)

    def test_select_unknown(self, ctx: BootstrapContext, installed: Path) -> None:
        with pytest.raises(SDKNotFoundError) as exc_info:
            main(["sdk", "select", "4.0.0.G"], context=ctx)
        assert "4.0.0.GA" in (exc_info.value.hint or "")

    def test_select_without_version_and_no_prompt(
        self, ctx: BootstrapContext, installed: Path,
    ) -> None:
        with pytest.raises(CommandArgumentError, match="No SDK version specified"):
            main(["--no-prompt", "sdk", "select"], context=ctx)

    def test_select_prompts_for_version(
        self,
        ctx: BootstrapContext,
        installed: Path,
        config_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(sys, "stdin", SimpleNamespace(isatty=lambda: True))
        with patch(
            "ticli.cli.sdk_prompt.prompt_sdk_selection", return_value="3.1.0.GA",
        ) as prompt:
            main(["sdk", "select"], context=ctx)
        offered = [sdk.name for sdk in prompt.call_args.args[0]]
        assert offered == ["3.1.0.GA", "4.0.0.GA"]
        assert _saved(config_path)["sdk"]["selected"] == "3.1.0.GA"

    def test_unknown_subcommand(self, ctx: BootstrapContext) -> None:
        with pytest.raises(CommandArgumentError, match="Unknown sdk subcommand"):
            main(["sdk", "install"], context=ctx)


# ---------------------------------------------------------------------------
# help
# ---------------------------------------------------------------------------

class TestHelpCommand:
    def test_usage_lists_builtins_and_globals(
        self, ctx: BootstrapContext, config_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert main(["help"], context=ctx) == exit_codes.SUCCESS
        out = capsys.readouterr().out
        for text in ("config", "sdk", "--no-colors", "-s, --sdk <version>", str(config_path)):
            assert text in out

    def test_help_for_builtin(
        self, ctx: BootstrapContext, capsys: pytest.CaptureFixture[str],
    ) -> None:
        main(["help", "config"], context=ctx)
        out = capsys.readouterr().out
        assert "Usage: ticli config [options]" in out
        assert "-r, --remove" in out

    def test_help_for_unknown_topic(
        self, ctx: BootstrapContext, capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert main(["help", "confg"], context=ctx) == exit_codes.GENERAL_ERROR
        err = capsys.readouterr().err
        assert 'Unrecognized command "confg"' in err
        assert "config" in err
