"""Commands that ship with ticli and work without an installed SDK."""

from __future__ import annotations

from ticli.cli import config_command, help_command, sdk_command
from ticli.core.models import CommandRegistration


def builtin_commands() -> list[CommandRegistration]:
    return [
        CommandRegistration("config", None, config_command.SCHEMA, config_command.run),
        CommandRegistration("help", None, help_command.SCHEMA, help_command.run),
        CommandRegistration("sdk", None, sdk_command.SCHEMA, sdk_command.run),
    ]
