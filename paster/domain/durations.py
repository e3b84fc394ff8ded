from __future__ import annotations

from datetime import datetime, timezone

HOUR = 3600
DAY = 86400
WEEK = 604800
MONTH = 2592000  # rounded to 30 days

DURATIONS: dict[str, int] = {
    "day": DAY,
    "hour": HOUR,
    "week": WEEK,
    "month": MONTH,
}

DEFAULT_DURATION = DAY
DEFAULT_TITLE = "Untitled"
DEFAULT_AUTHOR = "Anonymous"


def parse_duration(label: str | None) -> int:
    """
    Map a duration label (``hour``, ``day``, ``week``, ``month``) to seconds.

    A missing label gives the default lifetime; an unknown one gives a month.
    """
    if label is None or not label.strip():
        return DEFAULT_DURATION
    return DURATIONS.get(label.strip().lower(), MONTH)


def ttl(created_at: datetime, duration: int, now: datetime | None = None) -> str:
    """Describe the remaining lifetime of a paste, e.g. ``"3 hour(s)"``."""
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)

    left = max(0, int(duration - (now - created_at).total_seconds()))

    if left < HOUR:
        return f"{left // 60} minute(s)"
    if left < DAY:
        return f"{left // HOUR} hour(s)"
    return f"{left // DAY} day(s)"
