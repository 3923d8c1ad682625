"""Timezone notation parsing for catalog deadlines.

Instances carry free-form notations: "UTC-8", "UTC+8", "AoE" (Anywhere on
Earth, the latest timezone) or junk. Anything we cannot read is treated as
an absolute (UTC) timestamp.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

AOE_OFFSET_HOURS = -12
MAX_OFFSET_HOURS = 14

_UTC_OFFSET_RE = re.compile(r"^UTC\s*([+-]\s*\d{1,2})$", re.IGNORECASE)

DEADLINE_FORMATS = [
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%d",
]

TBD_MARKERS = {"TBD", "TBA"}


def is_tbd(deadline: Optional[str]) -> bool:
    """True for missing or placeholder deadlines."""
    return not deadline or deadline.strip().upper() in TBD_MARKERS


def parse_utc_offset(notation: Optional[str]) -> int:
    """Map a timezone notation to an offset in whole hours."""
    if not notation:
        return 0
    value = notation.strip()
    if value.lower() == "aoe":
        return AOE_OFFSET_HOURS

    match = _UTC_OFFSET_RE.match(value)
    if not match:
        return 0
    offset = int(match.group(1).replace(" ", ""))
    if abs(offset) > MAX_OFFSET_HOURS:
        return 0
    return offset


def parse_local_timestamp(text: Optional[str]) -> Optional[datetime]:
    """Parse a naive local timestamp, or None if unparseable."""
    if is_tbd(text):
        return None
    value = text.strip()
    for fmt in DEADLINE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


def to_absolute(local: datetime, offset_hours: int) -> datetime:
    """Attach a fixed UTC offset to a naive local timestamp."""
    return local.replace(tzinfo=timezone(timedelta(hours=offset_hours)))


def ensure_aware(moment: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment
