from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from pastelaria.config import get_settings


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def local_tz() -> ZoneInfo:
    return ZoneInfo(get_settings().timezone)


def day_bounds(day: date, tz: Optional[ZoneInfo] = None) -> Tuple[datetime, datetime]:
    """Início e fim (UTC) de um dia civil no fuso da loja."""
    tz = tz or local_tz()
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = start + timedelta(days=1)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def local_day_start(moment: datetime, tz: Optional[ZoneInfo] = None) -> datetime:
    """Meia-noite local (em UTC) do dia de `moment`."""
    tz = tz or local_tz()
    local_day = moment.astimezone(tz).date()
    return day_bounds(local_day, tz)[0]
