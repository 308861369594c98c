"""
Configuration for the calendar export job and subscription server.

Everything is read from environment variables when AppConfig() is created.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


def _env_str(name: str, default: str) -> str:
    return os.getenv(name) or default


def _env_int(name: str, default: int) -> int:
    """Read an integer environment variable, returning default on missing/invalid values."""
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _env_path(name: str, default: str) -> Path:
    return Path(_env_str(name, default))


@dataclass(frozen=True)
class AppConfig:
    """
    Immutable app configuration.

    Environment:
      - PB_URL: PocketBase base URL
      - PB_TOKEN: optional auth token sent with every request
      - CALENDAR_TZ, CALENDAR_NAME, CALENDAR_LANGUAGE (de|en)
      - REQUEST_TIMEOUT: seconds per PocketBase request
      - OUTPUT_DIR, CACHE_DIR, PREFERENCES_PATH
    """

    pb_url: str = field(default_factory=lambda: _env_str("PB_URL", "http://127.0.0.1:8090"))
    pb_token: str = field(default_factory=lambda: os.getenv("PB_TOKEN", ""))

    tz: str = field(default_factory=lambda: _env_str("CALENDAR_TZ", "Europe/Zurich"))
    calendar_name: str = field(default_factory=lambda: _env_str("CALENDAR_NAME", "KSCW Volleyball"))
    language: str = field(default_factory=lambda: _env_str("CALENDAR_LANGUAGE", "de"))

    request_timeout: int = field(default_factory=lambda: _env_int("REQUEST_TIMEOUT", 15))

    output_dir: Path = field(default_factory=lambda: _env_path("OUTPUT_DIR", "public"))
    cache_dir: Path = field(default_factory=lambda: _env_path("CACHE_DIR", "cache"))
    preferences_path: Path = field(
        default_factory=lambda: _env_path("PREFERENCES_PATH", "preferences.json")
    )
