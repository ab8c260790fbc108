"""
Absolute calendar date matching ("12 Des 2025", "2023-01-05", "Mar 4, 2023").

Patterns are tried in order and the first one that yields a date wins.
Parsing is lenient: out-of-range days and months roll over into the next
month or year instead of being rejected.

A trailing time of day ("12 Des 2025 10:30", "Mar 4, 2023, 08:00:15",
"05/01/2023 21.45") is applied as wall-clock time in the configured timezone.
Dates without one resolve to midnight.
"""

import re
from datetime import datetime, timedelta, tzinfo
from typing import List, Optional, Pattern, Tuple

from chapterdate.normalization.vocabulary import lookup_month

# Optional "HH:MM[:SS]" (or "HH.MM") after the date
TIME_OF_DAY = r"(?:,?\s+(?P<hour>\d{1,2})[:.](?P<minute>\d{2})(?:[:.](?P<second>\d{2}))?)?$"

# (name, pattern) in precedence order
ABSOLUTE_PATTERNS: List[Tuple[str, Pattern]] = [
    ("day_month_name_year",
     re.compile(r"^(?P<day>\d{1,2})[\s\-]+(?P<month>[a-z]+)\.?,?[\s\-]+(?P<year>\d{4})" + TIME_OF_DAY)),
    ("year_month_day",
     re.compile(r"^(?P<year>\d{4})-(?P<month>\d{1,2})-(?P<day>\d{1,2})" + TIME_OF_DAY)),
    ("day_month_year",
     re.compile(r"^(?P<day>\d{1,2})/(?P<month>\d{1,2})/(?P<year>\d{4})" + TIME_OF_DAY)),
    ("month_name_day_year",
     re.compile(r"^(?P<month>[a-z]+)\.?\s+(?P<day>\d{1,2}),?\s+(?P<year>\d{4})" + TIME_OF_DAY)),
]


def lenient_date(year: int, month: int, day: int, tz: tzinfo) -> datetime:
    """Midnight of the given date in ``tz``, rolling over out-of-range fields."""
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    first_of_month = datetime(year, month, 1, tzinfo=tz)
    return first_of_month + timedelta(days=day - 1)


def _time_of_day(match) -> timedelta:
    if match.group("hour") is None:
        return timedelta(0)
    return timedelta(
        hours=int(match.group("hour")),
        minutes=int(match.group("minute")),
        seconds=int(match.group("second") or 0),
    )


def _month_number(token: str) -> Optional[int]:
    if token.isdigit():
        return int(token)
    return lookup_month(token)


def match_absolute_date(text: str, tz: tzinfo) -> Optional[datetime]:
    """
    Match ``text`` against the absolute date patterns.

    Args:
        text: Lowercased, whitespace-collapsed date string
        tz: Timezone the date (and optional time of day) is read in

    Returns:
        Aware datetime, or None if no pattern applies
    """
    for _name, pattern in ABSOLUTE_PATTERNS:
        match = pattern.match(text)
        if not match:
            continue

        month = _month_number(match.group("month"))
        if month is None:
            continue

        try:
            moment = lenient_date(int(match.group("year")), month, int(match.group("day")), tz)
            return moment + _time_of_day(match)
        except (OverflowError, ValueError):
            # year 0000 and friends
            continue

    return None
