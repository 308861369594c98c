"""Pushover alerts for the calendar export job."""

from __future__ import annotations

import os
from collections.abc import Sequence

import requests

PUSHOVER_URL = "https://api.pushover.net/1/messages.json"
ALERT_TITLE = "KSCW Calendar Export Error"

# Pushover rejects longer messages
MAX_MESSAGE_LENGTH = 1024


def send_error_notification(message: str, title: str = ALERT_TITLE) -> bool:
    """Send an error notification via Pushover.

    Reads PUSHOVER_USER_KEY and PUSHOVER_API_TOKEN from environment.
    Returns True if sent, False if credentials missing or send failed.
    """
    user_key = os.environ.get("PUSHOVER_USER_KEY", "")
    api_token = os.environ.get("PUSHOVER_API_TOKEN", "")
    if not user_key or not api_token:
        print("  Pushover not configured (set PUSHOVER_USER_KEY and PUSHOVER_API_TOKEN)")
        return False

    payload = {
        "token": api_token,
        "user": user_key,
        "title": title,
        "message": message[:MAX_MESSAGE_LENGTH],
        "priority": 0,
    }
    try:
        resp = requests.post(PUSHOVER_URL, data=payload, timeout=10)
        resp.raise_for_status()
    except requests.RequestException as e:
        print(f"  Failed to send Pushover notification: {e}")
        return False

    print(f"  Pushover notification sent: {title}")
    return True


def export_alert_message(errors: Sequence[str], missing: Sequence[str]) -> str:
    """Alert text for one export run.

    `errors` are fetch/write failures; `missing` are export files that could
    neither be generated nor restored from the cache.
    """
    parts = []
    if errors:
        parts.append(
            f"Calendar export completed with {len(errors)} error(s):\n"
            + "\n".join(f"- {e}" for e in errors)
        )
    if missing:
        parts.append(
            "No calendar generated for (no cached data, subscribers see nothing):\n"
            + "\n".join(f"- {name}" for name in missing)
        )
    return "\n\n".join(parts)


def send_export_alert(errors: Sequence[str], missing: Sequence[str] = ()) -> bool:
    """One Pushover alert summarizing an export run. No-op for a clean run."""
    if not errors and not missing:
        return False
    title = f"{ALERT_TITLE}: {len(missing)} calendar(s) missing" if missing else ALERT_TITLE
    return send_error_notification(export_alert_message(errors, missing), title=title)
