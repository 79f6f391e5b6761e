import re
from datetime import date, time, datetime
from typing import Annotated
from zoneinfo import ZoneInfo
from pydantic import BeforeValidator, PlainSerializer

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")


def parse_calendar_date(value: date | str) -> date:
    if isinstance(value, datetime):
        raise ValueError("Invalid date format. Use YYYY-MM-DD")
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not DATE_RE.match(value.strip()):
        raise ValueError("Invalid date format. Use YYYY-MM-DD")
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise ValueError("Invalid date format. Use YYYY-MM-DD")


def parse_clock_time(value: time | str) -> time:
    if isinstance(value, time):
        return value
    match = TIME_RE.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValueError("Invalid time format. Use HH:MM")
    return time(int(match.group(1)), int(match.group(2)))


def today_in(tz_name: str) -> date:
    return datetime.now(ZoneInfo(tz_name)).date()


CalendarDate = Annotated[
    date,
    BeforeValidator(parse_calendar_date),
    PlainSerializer(lambda d: d.isoformat(), return_type=str),
]

ClockTime = Annotated[
    time,
    BeforeValidator(parse_clock_time),
    PlainSerializer(lambda t: t.strftime("%H:%M"), return_type=str),
]
