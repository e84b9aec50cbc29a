"""
Opening-hours helpers.

Two kinds of input show up in place data:
- display strings on place summaries ("10:00 AM - 10:00 PM", "10:00-22:00", "Open 24 hours"),
  used for the "closing soon" badge;
- OpenStreetMap ``opening_hours`` tags ("Mo-Fr 09:00-22:00; Sa,Su 10:00-23:00", "24/7"),
  turned into weekly slots by the detail service.
"""

import re
from datetime import datetime

from pydantic import BaseModel

DAYS_OF_WEEK = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
OSM_DAY_CODES = ["Mo", "Tu", "We", "Th", "Fr", "Sa", "Su"]

MINUTES_PER_DAY = 24 * 60
# Beyond this the closing time most likely belongs to a period that already ended
MAX_MINUTES_AHEAD = 12 * 60

_TIME_24H = re.compile(r"^(\d{1,2}):(\d{2})$")
_TIME_12H = re.compile(r"^(\d{1,2}):(\d{2})\s*(AM|PM)$", re.IGNORECASE)
_CLOSING_TIME = re.compile(r"[-–]\s*(\d{1,2}:\d{2}(?:\s*(?:AM|PM))?)", re.IGNORECASE)
_ALWAYS_OPEN = re.compile(r"24\s*(?:hours|hrs|h\b|/\s*7)", re.IGNORECASE)

_OSM_TIME_RANGE = re.compile(r"^(\d{1,2}):(\d{2})\s*-\s*(\d{1,2}):(\d{2})$")
_OSM_DAY_SELECTOR = re.compile(r"^(?:Mo|Tu|We|Th|Fr|Sa|Su)(?:-(?:Mo|Tu|We|Th|Fr|Sa|Su))?$")


class ClosingSoonInfo(BaseModel):
    is_closing_soon: bool = False
    minutes_until_close: int | None = None
    closing_time: str | None = None


def parse_time_to_minutes(time_str: str | None) -> int | None:
    """Parse "22:00" or "10:00 PM" to minutes since midnight. Returns None if unrecognized."""
    if not time_str:
        return None
    value = time_str.strip()

    match = _TIME_24H.match(value)
    if match:
        return int(match.group(1)) * 60 + int(match.group(2))

    match = _TIME_12H.match(value)
    if match:
        hours = int(match.group(1))
        minutes = int(match.group(2))
        period = match.group(3).upper()
        if period == "PM" and hours != 12:
            hours += 12
        if period == "AM" and hours == 12:
            hours = 0
        return hours * 60 + minutes

    return None


def extract_closing_time(opening_hours: str | None) -> str | None:
    """
    Pull the closing time out of a display string.

    Handles "10:00 AM - 10:00 PM" and "10:00-22:00". Places open around the clock
    have no closing time.
    """
    if not opening_hours:
        return None
    if _ALWAYS_OPEN.search(opening_hours):
        return None
    match = _CLOSING_TIME.search(opening_hours)
    if match:
        return match.group(1).strip()
    return None


def get_closing_soon_info(
    opening_hours: str | None,
    now: datetime | None = None,
    threshold_minutes: int = 60,
) -> ClosingSoonInfo:
    """
    Check if a place is closing soon based on its opening-hours string.

    Args:
        opening_hours: Display string such as "10:00 AM - 10:00 PM".
        now: Reference time (local wall clock). Defaults to datetime.now().
        threshold_minutes: How close to closing counts as "soon".

    Returns:
        ClosingSoonInfo; minutes_until_close is None when the closing time is unknown
        or more than 12 hours away.
    """
    closing_time = extract_closing_time(opening_hours)
    if not closing_time:
        return ClosingSoonInfo()

    close_minutes = parse_time_to_minutes(closing_time)
    if close_minutes is None:
        return ClosingSoonInfo()

    current = now or datetime.now()
    current_minutes = current.hour * 60 + current.minute

    minutes_until_close = close_minutes - current_minutes
    if minutes_until_close < 0:
        # Closes after midnight
        minutes_until_close += MINUTES_PER_DAY

    if minutes_until_close > MAX_MINUTES_AHEAD:
        return ClosingSoonInfo(closing_time=closing_time)

    return ClosingSoonInfo(
        is_closing_soon=0 < minutes_until_close <= threshold_minutes,
        minutes_until_close=minutes_until_close,
        closing_time=closing_time,
    )


def format_time_until_close(minutes: int) -> str:
    """Human-readable countdown, e.g. "Closes in 45 min" or "Closes in 1h 30m"."""
    if minutes <= 0:
        return "Closing now"
    if minutes < 60:
        return f"Closes in {minutes} min"

    hours, remaining = divmod(minutes, 60)
    if remaining == 0:
        return f"Closes in {hours}h"
    return f"Closes in {hours}h {remaining}m"


def format_hhmm(value: str | None) -> str | None:
    """Format an "HHMM" slot time as "9:00 PM". Other shapes are returned unchanged."""
    if not value or len(value) != 4 or not value.isdigit():
        return value
    hours = int(value[:2])
    minutes = value[2:]
    period = "PM" if 12 <= hours < 24 else "AM"
    display_hours = hours % 12 or 12
    return f"{display_hours}:{minutes} {period}"


def _expand_days(selector: str) -> list[int] | None:
    """"Mo-Fr,Su" -> [1, 2, 3, 4, 5, 7]. None when the selector is not a day list."""
    days: list[int] = []
    for part in selector.split(","):
        part = part.strip()
        if not _OSM_DAY_SELECTOR.match(part):
            return None
        if "-" in part:
            start, end = (OSM_DAY_CODES.index(code) for code in part.split("-"))
            span = range(start, end + 1) if start <= end else [*range(start, 7), *range(0, end + 1)]
            days.extend(index + 1 for index in span)
        else:
            days.append(OSM_DAY_CODES.index(part) + 1)
    return days


def _parse_time_ranges(selector: str) -> tuple[str, str] | None:
    """"09:00-14:00,17:00-22:00" -> ("0900", "2200"): first open, last close."""
    ranges = []
    for part in selector.split(","):
        match = _OSM_TIME_RANGE.match(part.strip())
        if not match:
            return None
        open_h, open_m, close_h, close_m = (int(group) for group in match.groups())
        ranges.append((f"{open_h % 24:02d}{open_m:02d}", f"{close_h % 24:02d}{close_m:02d}"))
    if not ranges:
        return None
    return ranges[0][0], ranges[-1][1]


def parse_osm_opening_hours(value: str | None) -> list[dict]:
    """
    Parse an OpenStreetMap opening_hours tag into weekly slots.

    Returns a list of {"day": 1..7 (Monday first), "open": "HHMM", "close": "HHMM"},
    one per open day, sorted by day. Rules the parser does not understand (public
    holidays, week numbers, sunrise...) are skipped; later rules override earlier
    ones for the days they name.
    """
    if not value:
        return []
    text = value.strip()
    if text == "24/7":
        return [{"day": day, "open": "0000", "close": "2359"} for day in range(1, 8)]

    slots: dict[int, dict] = {}
    for rule in text.split(";"):
        rule = rule.strip()
        if not rule:
            continue

        head, _, tail = rule.partition(" ")
        days = _expand_days(head)
        if days is None:
            # No leading day list: the rule applies to every day
            days = list(range(1, 8))
            tail = rule

        tail = tail.strip()
        if tail.lower() in ("off", "closed"):
            for day in days:
                slots.pop(day, None)
            continue

        times = _parse_time_ranges(tail)
        if times is None:
            continue
        for day in days:
            slots[day] = {"day": day, "open": times[0], "close": times[1]}

    return [slots[day] for day in sorted(slots)]
