from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    """UTC now as ISO string with trailing Z, no microseconds."""
    return utc_now().replace(microsecond=0).isoformat().replace("+00:00", "Z")


def epoch_millis(dt: Optional[datetime] = None) -> int:
    return int((dt or utc_now()).timestamp() * 1000)


def to_epoch_seconds(value: Any) -> float:
    """Sort key for backend timestamps. Missing or unknown values sort as 0."""
    if value is None:
        return 0.0
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.timestamp()
    if isinstance(value, (int, float)):
        return float(value)
    seconds = getattr(value, "seconds", None)
    if isinstance(seconds, (int, float)):
        return float(seconds)
    if isinstance(value, str):
        parsed = parse_iso(value)
        return parsed.timestamp() if parsed else 0.0
    return 0.0


def parse_iso(s: str) -> Optional[datetime]:
    if not s:
        return None
    try:
        dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_local(value: Any) -> str:
    """Human-readable timestamp for tables; blank while a server timestamp is pending."""
    secs = to_epoch_seconds(value)
    if not secs:
        return ""
    return datetime.fromtimestamp(secs).strftime("%Y-%m-%d %H:%M")
