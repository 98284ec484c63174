"""Daily streak rules; "today" is always the calendar day in the user's timezone."""
import logging
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

STREAK_MILESTONES = [
    (7, "7 Day Streak!"),
    (30, "30 Day Streak!"),
    (100, "100 Day Streak!"),
    (365, "1 Year Streak!"),
]


def resolve_timezone(name: str | None, default: str = "UTC"):
    """ZoneInfo for ``name`` (or ``default``); UTC when neither is a known zone."""
    for candidate in (name, default):
        if not candidate:
            continue
        try:
            return ZoneInfo(candidate)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("Invalid timezone %r, falling back", candidate)
    return timezone.utc


def today_in_timezone(tz_name: str | None, now: datetime | None = None, default: str = "UTC") -> date:
    now = now or datetime.now(timezone.utc)
    return now.astimezone(resolve_timezone(tz_name, default)).date()


def day_bounds(tz_name: str | None, now: datetime | None = None, default: str = "UTC") -> tuple[datetime, datetime]:
    """[start, end) of the user's current day, as UTC datetimes."""
    tz = resolve_timezone(tz_name, default)
    now = now or datetime.now(timezone.utc)
    local_day = now.astimezone(tz).date()
    start = datetime.combine(local_day, time.min, tzinfo=tz)
    end = datetime.combine(local_day + timedelta(days=1), time.min, tzinfo=tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def next_streak(current: int, last_activity: date | None, today: date) -> int:
    """Streak count after activity on ``today``."""
    if last_activity is None:
        return 1
    if last_activity == today:
        return max(current, 1)
    if last_activity == today - timedelta(days=1):
        return (current or 0) + 1
    if last_activity > today:
        # Clock moved backwards (timezone change); keep the streak as is
        return max(current, 1)
    return 1


def get_milestones(streak_count: int) -> list[dict]:
    return [
        {"days": days, "message": message, "achieved": streak_count >= days}
        for days, message in STREAK_MILESTONES
    ]


def next_milestone(streak_count: int) -> dict | None:
    for milestone in get_milestones(streak_count):
        if not milestone["achieved"]:
            return milestone
    return None


def format_streak(streak_count: int) -> str:
    if streak_count == 0:
        return "No streak yet"
    if streak_count == 1:
        return "1 day"
    return f"{streak_count} days"


def is_active_today(last_activity: date | None, today: date) -> bool:
    return last_activity is not None and last_activity == today


def record_activity(user, now: datetime | None = None, default_tz: str = "UTC") -> bool:
    """Apply today's activity to ``user``'s streak fields; True when the count changed."""
    today = today_in_timezone(user.timezone, now, default_tz)
    before = user.streak_count or 0
    user.streak_count = next_streak(before, user.last_activity_date, today)
    if user.last_activity_date is None or user.last_activity_date < today:
        user.last_activity_date = today
        user.last_streak_date = today
    return user.streak_count != before
