"""Utilities for timestamp parsing and formatting in stored documents.

This module centralizes date parsing/formatting so the repository and the
rest of the app depend on a single behavior. Parsing is best-effort and
does not raise; callers should expect `None` when data is not usable.
"""

from __future__ import annotations

from datetime import datetime

from loguru import logger


def parse_stored_datetime(value: str | int | float | None) -> datetime | None:
    """Parse an ISO-8601 string or an epoch value in milliseconds.

    Epoch milliseconds are accepted for documents exported by the earlier
    browser build, which stored `Date.now()` values.
    """
    if value is None or value == "":
        return None
    try:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return datetime.fromtimestamp(float(value) / 1000.0)
        return datetime.fromisoformat(str(value).strip())
    except (ValueError, TypeError, OverflowError, OSError) as ex:
        logger.debug("Unparseable timestamp {!r}: {}", value, ex)
        return None


def format_stored_datetime(dt: datetime | None) -> str:
    """Format datetime for storage; empty string when None."""
    try:
        return dt.isoformat(timespec="microseconds") if dt else ""
    except (ValueError, TypeError, AttributeError):
        return ""
