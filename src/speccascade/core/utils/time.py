"""Timezone-aware time helpers."""
from __future__ import annotations

from datetime import datetime, timezone


def utc_now(*, strip_microseconds: bool = True) -> datetime:
    """Return a timezone-aware UTC datetime."""
    now = datetime.now(timezone.utc)
    if strip_microseconds:
        now = now.replace(microsecond=0)
    return now


def utc_timestamp(*, use_z_suffix: bool = True) -> str:
    """Return an ISO 8601 UTC timestamp such as ``2024-05-01T12:00:00Z``."""
    ts = utc_now().isoformat(timespec="seconds")
    if use_z_suffix:
        ts = ts.replace("+00:00", "Z")
    return ts


def parse_iso8601(timestamp_str: str) -> datetime:
    """Parse an ISO 8601 timestamp string into a UTC datetime."""
    ts = timestamp_str.strip()
    if ts.endswith("Z"):
        ts = ts[:-1] + "+00:00"
    dt = datetime.fromisoformat(ts)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


__all__ = ["utc_now", "utc_timestamp", "parse_iso8601"]
