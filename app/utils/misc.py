import datetime
from zoneinfo import ZoneInfo

from app.core.config import settings


def get_utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


def get_utc_iso_now() -> str:
    return get_utc_now().isoformat()


def get_club_tz() -> ZoneInfo:
    return ZoneInfo(settings.club_timezone)


def as_utc(value: datetime.datetime) -> datetime.datetime:
    """Treat naive datetimes (SQLite drops tzinfo) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.UTC)
    return value.astimezone(datetime.UTC)


def club_day_bounds(value: datetime.datetime) -> tuple[datetime.datetime, datetime.datetime]:
    """Return the UTC [start, end) of the club-local calendar day containing ``value``."""
    tz = get_club_tz()
    local = as_utc(value).astimezone(tz)
    start = datetime.datetime.combine(local.date(), datetime.time.min, tzinfo=tz)
    end = start + datetime.timedelta(days=1)
    return start.astimezone(datetime.UTC), end.astimezone(datetime.UTC)
