"""Next-deadline resolution and countdown banding."""

from datetime import datetime
from typing import Optional

from conf_tracker.models import Conference, DeadlineStatus, ResolvedDeadline
from conf_tracker.normalizers.timezones import (
    ensure_aware,
    is_tbd,
    parse_local_timestamp,
    parse_utc_offset,
    to_absolute,
)

# Above this many whole days the countdown shows days only
COUNTDOWN_DAYS_ONLY_AFTER = 3

COUNTDOWN_TEMPLATES = {
    "en": {
        "expired": "expired",
        "days": "{days} days left",
        "days_hours": "{days} days {hours} hours left",
        "hours_minutes": "{hours} hours {minutes} minutes left",
    },
    "zh": {
        "expired": "已截止",
        "days": "还剩{days}天",
        "days_hours": "还剩{days}天{hours}小时",
        "hours_minutes": "还剩{hours}小时{minutes}分钟",
    },
}


def resolve_deadlines(conference: Conference) -> list[ResolvedDeadline]:
    """All parseable deadlines of a conference as absolute instants, ascending.

    TBD items and unparseable timestamps are skipped.
    """
    resolved = []
    for instance in conference.instances:
        offset = parse_utc_offset(instance.timezone)
        for item in instance.timeline:
            if is_tbd(item.deadline):
                continue
            local = parse_local_timestamp(item.deadline)
            if local is None:
                continue
            resolved.append(
                ResolvedDeadline(
                    at=to_absolute(local, offset),
                    offset_hours=offset,
                    instance=instance,
                    item=item,
                )
            )

    resolved.sort(key=lambda d: d.at)
    return resolved


def next_deadline(conference: Conference, now: datetime) -> Optional[ResolvedDeadline]:
    """Earliest deadline strictly after `now`, else the most recent past one."""
    now = ensure_aware(now)
    deadlines = resolve_deadlines(conference)
    if not deadlines:
        return None

    for deadline in deadlines:
        if deadline.at > now:
            return deadline
    return deadlines[-1]


def is_expired(deadline_at: datetime, now: datetime) -> bool:
    return deadline_at <= ensure_aware(now)


def deadline_status(deadline_at: datetime, now: datetime, lang: str = "en") -> DeadlineStatus:
    """Countdown text for a deadline.

    More than 3 whole days left shows days only, 1-3 days shows days and
    hours, under a day shows hours and minutes.
    """
    templates = COUNTDOWN_TEMPLATES.get(lang, COUNTDOWN_TEMPLATES["en"])
    now = ensure_aware(now)

    if is_expired(deadline_at, now):
        return DeadlineStatus(expired=True, text=templates["expired"])

    remaining = int((deadline_at - now).total_seconds())
    days = remaining // 86400
    hours = (remaining % 86400) // 3600
    minutes = (remaining % 3600) // 60

    if days > COUNTDOWN_DAYS_ONLY_AFTER:
        key = "days"
    elif days > 0:
        key = "days_hours"
    else:
        key = "hours_minutes"

    return DeadlineStatus(
        expired=False,
        text=templates[key].format(days=days, hours=hours, minutes=minutes),
        days=days,
        hours=hours,
        minutes=minutes,
    )


def days_until(deadline_at: datetime, now: datetime) -> int:
    """Whole days until the deadline (negative once past)."""
    return int((deadline_at - ensure_aware(now)).total_seconds() // 86400)
