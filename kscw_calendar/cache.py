"""Calendar caching for fallback on fetch failures."""

from __future__ import annotations

from pathlib import Path


def _cache_file(cache_dir: Path, name: str) -> Path:
    stem = name.lower().removesuffix(".ics")
    return cache_dir / f"{stem}.ics"


def save_to_cache(cache_dir: Path, name: str, ics_data: bytes) -> None:
    """Save ICS data to cache directory."""
    cache_dir.mkdir(parents=True, exist_ok=True)
    _cache_file(cache_dir, name).write_bytes(ics_data)


def load_cached_calendar(cache_dir: Path, name: str) -> bytes | None:
    """Load cached ICS data for an export. Returns None if no cache exists."""
    cache_file = _cache_file(cache_dir, name)
    if cache_file.exists():
        return cache_file.read_bytes()
    return None


def validate_ics(data: bytes) -> bool:
    """Basic validation that ICS data is well-formed."""
    text = data.decode("utf-8", errors="replace")
    return text.startswith("BEGIN:VCALENDAR") and text.rstrip().endswith("END:VCALENDAR")
