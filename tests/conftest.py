"""Shared pytest fixtures and configuration for the ticli test suite.

Guidelines
----------
* No internet access in any test.
* The host locale probe is always replaced with a fake.
* Core tests must be pure — no side effects.
* Tests must not depend on OS state: ``HOME`` points into ``tmp_path``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import Any

import pytest

from ticli.cli.context import BootstrapContext, create_context
from ticli.infra.analytics import LoggingAnalytics
from ticli.utils.logger import LOGGER_NAME


# ---------------------------------------------------------------------------
# SDK tree factory
# ---------------------------------------------------------------------------

COMMAND_SOURCE = '''\
config = {{"desc": "{desc}", "flags": {{"force": {{"abbr": "f"}}}}}}


def run(ctx, invocation):
    ctx.out.print("ran {name} from {origin}", markup=False)
    return 0
'''


def write_sdk(
    root: Path,
    name: str,
    version: str | None = None,
    *,
    platforms: Iterable[str] = (),
    commands: Mapping[str, str] | None = None,
    platform_commands: Mapping[str, Mapping[str, str]] | None = None,
) -> Path:
    """Create ``root/name`` as an installed SDK and return its path.

    *commands* maps file stems to module source; *platform_commands*
    maps a platform name to the same kind of table.
    """
    sdk_dir = root / name
    sdk_dir.mkdir(parents=True)
    manifest: dict[str, Any] = {"name": name}
    if version is not None:
        manifest["version"] = version
    (sdk_dir / "manifest.json").write_text(json.dumps(manifest), encoding="utf-8")

    for stem, source in (commands or {}).items():
        target = sdk_dir / "cli" / "commands"
        target.mkdir(parents=True, exist_ok=True)
        (target / f"{stem}.py").write_text(source, encoding="utf-8")

    for platform in platforms:
        (sdk_dir / "platforms" / platform).mkdir(parents=True)
    for platform, table in (platform_commands or {}).items():
        target = sdk_dir / "platforms" / platform / "cli" / "commands"
        target.mkdir(parents=True, exist_ok=True)
        for stem, source in table.items():
            (target / f"{stem}.py").write_text(source, encoding="utf-8")
    return sdk_dir


def command_source(name: str, origin: str, desc: str = "a plugin command") -> str:
    return COMMAND_SOURCE.format(name=name, origin=origin, desc=desc)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

async def _fake_locale() -> str:
    return "en_US"


@pytest.fixture(autouse=True)
def _isolate_host(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> Iterator[None]:
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    monkeypatch.setenv("LANG", "en_US.UTF-8")
    monkeypatch.setattr("ticli.cli.processor.probe_system_locale", _fake_locale)
    yield
    logging.getLogger(LOGGER_NAME).handlers.clear()


@pytest.fixture()
def sdk_root(tmp_path: Path) -> Path:
    root = tmp_path / "sdks"
    root.mkdir()
    return root


@pytest.fixture()
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "ticli" / "config.json"


@pytest.fixture()
def write_config(config_path: Path):
    def _write(document: Mapping[str, Any]) -> Path:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(json.dumps(document), encoding="utf-8")
        return config_path

    return _write


@pytest.fixture()
def analytics() -> LoggingAnalytics:
    return LoggingAnalytics()


@pytest.fixture()
def ctx(config_path: Path, analytics: LoggingAnalytics) -> BootstrapContext:
    return create_context(config_path=config_path, analytics=analytics)


@pytest.fixture()
def make_sdk():
    """:func:`write_sdk` as a fixture."""
    return write_sdk


@pytest.fixture()
def plugin_command():
    """:func:`command_source` as a fixture."""
    return command_source
