"""
Relative date matching ("3 hari yang lalu", "an hour ago", "5 mnt").

Seconds, minutes and hours are subtracted as exact durations. Days and weeks
move the wall clock in the configured timezone, and months and years move
the calendar, clamping the day of month the way ``java.util.Calendar.add``
does (31 March minus one month is the last day of February).
"""

import calendar
import logging
import re
from datetime import datetime, timedelta, tzinfo
from typing import Optional

from chapterdate.normalization.vocabulary import (
    AGO_SUFFIXES,
    DAY,
    HOUR,
    INDEFINITE_ARTICLES,
    MINUTE,
    SECOND,
    UNIT_MILLIS,
    WEEK,
    YEAR,
    lookup_unit,
)

logger = logging.getLogger(__name__)

# <magnitude> <unit> [<suffix>], magnitude is a number or an article
RELATIVE_RE = re.compile(
    r"^(?:(?P<number>\d+)\s*|(?P<article>[a-z]+)\s+)"
    r"(?P<unit>[^\d\s]+)"
    r"(?:\s+(?P<suffix>.+))?$"
)

TRAILING_PUNCTUATION = ".,;:!"


def shift_months(moment: datetime, months: int) -> datetime:
    """Move ``moment`` by a number of calendar months, clamping the day."""
    total = moment.year * 12 + (moment.month - 1) + months
    year, month_index = divmod(total, 12)
    month = month_index + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def subtract_offset(reference: datetime, magnitude: int, unit: str, tz: tzinfo) -> datetime:
    """Return ``reference`` minus ``magnitude`` units."""
    if unit in (SECOND, MINUTE, HOUR):
        return reference - timedelta(milliseconds=magnitude * UNIT_MILLIS[unit])

    local = reference.astimezone(tz)
    if unit in (DAY, WEEK):
        return local - timedelta(milliseconds=magnitude * UNIT_MILLIS[unit])

    months = magnitude * 12 if unit == YEAR else magnitude
    return shift_months(local, -months)


def match_relative_date(text: str, reference: datetime, tz: tzinfo) -> Optional[datetime]:
    """
    Match a relative offset expression.

    Args:
        text: Lowercased, whitespace-collapsed date string
        reference: Aware datetime the offset is counted back from
        tz: Timezone used for calendar arithmetic

    Returns:
        The resolved aware datetime, or None when ``text`` is not relative
    """
    match = RELATIVE_RE.match(text)
    if not match:
        return None

    if match.group("number") is not None:
        magnitude = int(match.group("number"))
    elif match.group("article") in INDEFINITE_ARTICLES:
        magnitude = 1
    else:
        return None

    # trailing sentence punctuation ("3 hari yang lalu.")
    suffix = match.group("suffix")
    if suffix is not None and suffix.rstrip(TRAILING_PUNCTUATION) not in AGO_SUFFIXES:
        return None

    unit = lookup_unit(match.group("unit").rstrip(TRAILING_PUNCTUATION))
    if unit is None:
        return None

    try:
        return subtract_offset(reference, magnitude, unit, tz)
    except (OverflowError, ValueError) as e:
        # year out of datetime's range
        logger.debug(f"Relative offset '{text}' out of range: {e}")
        return None
