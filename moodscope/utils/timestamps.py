"""Timestamp parsing and day-key formatting for emotion records."""

from __future__ import annotations

import re
from datetime import datetime, timezone, tzinfo

# "2025-06-01 09:15:22": storage format without a zone, always UTC
_SPACE_PATTERN = re.compile(r"^(\d{4}-\d{2}-\d{2}) (\d{2}:\d{2}:\d{2}(?:\.\d+)?)$")

# Storage object keys: ".../0fc1d2c3_20250416_232933_summary.json"
_KEY_PATTERN = re.compile(r"_(\d{8})_(\d{6})_summary\.json$")


def parse_timestamp(value: str) -> datetime:
    """Parse a record timestamp into an aware UTC datetime.

    Supports:
      - ISO-8601 with ``Z`` or a numeric offset
      - ISO-8601 without a zone (taken as UTC)
      - ``YYYY-MM-DD HH:mm:ss`` (taken as UTC)
      - storage keys ending ``_YYYYMMDD_HHMMSS_summary.json``

    Raises ``ValueError`` for anything else.
    """
    text = value.strip()
    if not text:
        raise ValueError("empty timestamp")

    m = _KEY_PATTERN.search(text)
    if m:
        day, clock = m.groups()
        parsed = datetime.strptime(day + clock, "%Y%m%d%H%M%S")
        return parsed.replace(tzinfo=timezone.utc)

    m = _SPACE_PATTERN.match(text)
    if m:
        text = f"{m.group(1)}T{m.group(2)}+00:00"
    elif text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def day_key(moment: datetime, tz: tzinfo = timezone.utc) -> str:
    """Calendar day of *moment* in *tz*, formatted ``YYYY-MM-DD``."""
    return moment.astimezone(tz).date().isoformat()
