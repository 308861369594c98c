"""Persisted user preferences (language, theme).

Read lazily with load_preferences() and written back with save_preferences()
whenever a value changes.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, replace
from pathlib import Path

LANGUAGES = ("de", "en")
THEMES = ("light", "dark", "system")


@dataclass(frozen=True)
class Preferences:
    language: str = "de"
    theme: str = "system"

    def with_changes(self, **changes: str) -> Preferences:
        """Return a copy with changed values; invalid values keep the old ones."""
        return _validated(replace(self, **changes), fallback=self)


def _validated(prefs: Preferences, fallback: Preferences) -> Preferences:
    return Preferences(
        language=prefs.language if prefs.language in LANGUAGES else fallback.language,
        theme=prefs.theme if prefs.theme in THEMES else fallback.theme,
    )


def load_preferences(path: Path) -> Preferences:
    """Load preferences, falling back to defaults when missing or corrupt."""
    defaults = Preferences()
    if not path.exists():
        return defaults
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        print(f"  Warning: ignoring unreadable preferences {path}: {e}")
        return defaults
    if not isinstance(data, dict):
        return defaults
    return _validated(
        Preferences(language=str(data.get("language", "")), theme=str(data.get("theme", ""))),
        fallback=defaults,
    )


def save_preferences(path: Path, prefs: Preferences) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(prefs), indent=2), encoding="utf-8")
