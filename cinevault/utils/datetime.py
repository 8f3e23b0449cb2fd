"""Date and year helpers for source payloads and watch history timestamps."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any


def year_prefix(value: Any) -> str | None:
    """Return the leading 4 characters of a date-like string, if any."""
    if not value or not isinstance(value, str):
        return None
    prefix = value.strip()[:4]
    return prefix or None


def coerce_year(value: Any) -> int | None:
    """Coerce a year value ("2019", 2019, "2019–2021") into an int."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()[:4]
    return int(text) if text.isdigit() else None


def to_epoch_ms(value: Any) -> float | None:
    """Normalize epoch milliseconds, datetimes, or ISO strings to epoch milliseconds."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, datetime):
        moment = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        return moment.timestamp() * 1000
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return to_epoch_ms(parsed)
    return None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_tz_aware(value: datetime | None) -> datetime | None:
    """SQLite hands back naive timestamps; treat them as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
