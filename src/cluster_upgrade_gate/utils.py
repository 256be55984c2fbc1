"""Shared utility functions."""

from __future__ import annotations

from datetime import datetime


def parse_iso_timestamp(ts_str: str | None) -> datetime | None:
    """Parse an ISO 8601 timestamp string to a timezone-aware datetime.

    Returns None for empty/None input or unparseable strings, so a malformed
    timestamp on a status object degrades to "unknown" instead of failing.
    """
    if not ts_str:
        return None
    try:
        return datetime.fromisoformat(ts_str)
    except (ValueError, TypeError):
        return None


def format_timestamp(ts: datetime | None) -> str:
    """Render a timestamp as RFC 3339 for log output, or 'unknown'."""
    if ts is None:
        return "unknown"
    return ts.isoformat()
