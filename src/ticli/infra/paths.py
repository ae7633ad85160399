"""Per-user filesystem locations used by ticli."""

from __future__ import annotations

from pathlib import Path

CONFIG_DIR_NAME: str = ".ticli"
CONFIG_FILE_NAME: str = "config.json"
ANALYTICS_FILE_NAMES: tuple[str, ...] = ("analytics.json", "analytics_session.json")


def user_home_dir() -> Path:
    """Return the ticli home directory (``~/.ticli``).

    :meth:`Path.home` reads ``USERPROFILE`` on Windows and ``HOME``
    elsewhere.
    """
    return Path.home() / CONFIG_DIR_NAME


def default_config_path() -> Path:
    return user_home_dir() / CONFIG_FILE_NAME


def analytics_file_paths() -> tuple[Path, ...]:
    home = user_home_dir()
    return tuple(home / name for name in ANALYTICS_FILE_NAMES)


def resolve_path(value: str | Path) -> Path:
    """Expand ``~`` and make *value* absolute without touching the disk."""
    return Path(value).expanduser().absolute()
