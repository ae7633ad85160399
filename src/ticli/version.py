"""Version and identity constants for ticli."""

from __future__ import annotations

__version__: str = "1.4.0"

APP_ID: str = "com.ticli.cli"
APP_NAME: str = "ticli"
APP_GUID: str = "cf5c67ed-1c3b-494b-afe0-01b958ef0f40"

MIN_SDK_VERSION: str = "3.0.0"
"""Oldest SDK whose plugins this CLI will load."""
