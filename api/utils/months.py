"""Month-key helpers ("YYYY-MM" buckets used by reports and rollups)."""
from __future__ import annotations

import re
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from config import settings
from errors import ValidationError

MONTH_KEY_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"
_MONTH_KEY_RE = re.compile(MONTH_KEY_PATTERN)


def validate_month_key(value: str) -> str:
    """Return ``value`` unchanged if it is a valid month key."""
    if not isinstance(value, str) or not _MONTH_KEY_RE.match(value):
        raise ValidationError(f"Invalid month key: {value!r} (expected YYYY-MM)", field="month")
    return value


def month_key_of(moment: datetime | date, tz_name: str | None = None) -> str:
    """Month key of a moment in the configured timezone."""
    if isinstance(moment, datetime):
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        moment = moment.astimezone(ZoneInfo(tz_name or settings.TIMEZONE))
    return f"{moment.year:04d}-{moment.month:02d}"


def current_month_key(tz_name: str | None = None) -> str:
    return month_key_of(datetime.now(timezone.utc), tz_name)


def format_month_key(month_key: str) -> str:
    """'2026-02' → 'February 2026'."""
    year, month = validate_month_key(month_key).split("-")
    return date(int(year), int(month), 1).strftime("%B %Y")
