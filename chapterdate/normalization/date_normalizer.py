"""
Date normalization module for scraped chapter upload dates.

Turns relative, ISO-8601 and absolute date strings (English or Indonesian)
into epoch milliseconds. Anything that cannot be parsed becomes 0.
"""

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, List, Optional, Union
from zoneinfo import ZoneInfo

import ciso8601
import dateparser

from chapterdate.config import Config
from chapterdate.normalization.absolute_date import match_absolute_date
from chapterdate.normalization.relative_date import match_relative_date
from chapterdate.normalization.vocabulary import JUST_NOW

logger = logging.getLogger(__name__)

UNKNOWN_TIMESTAMP = Config.UNKNOWN_TIMESTAMP
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Date and time must both be present, date-only strings go to the absolute patterns
ISO_DATETIME_RE = re.compile(r"^\d{4}-\d{2}-\d{2}[t ]\d{2}:\d{2}")

Reference = Union[int, datetime, None]
Matcher = Callable[[str, datetime], Optional[datetime]]


def to_millis(moment: datetime) -> int:
    """Epoch milliseconds of an aware datetime"""
    return (moment - EPOCH) // timedelta(milliseconds=1)


def from_millis(millis: int) -> datetime:
    """Aware UTC datetime for epoch milliseconds"""
    return EPOCH + timedelta(milliseconds=millis)


def resolve_reference(reference: Reference) -> datetime:
    """
    Turn a reference clock into an aware datetime.

    Args:
        reference: Epoch milliseconds, a datetime (naive means UTC) or None for now

    Returns:
        Aware datetime
    """
    if reference is None:
        return datetime.now(timezone.utc)
    if isinstance(reference, datetime):
        if reference.tzinfo is None:
            return reference.replace(tzinfo=timezone.utc)
        return reference
    if isinstance(reference, (int, float)):
        return from_millis(int(reference))
    raise TypeError(f"Unsupported reference clock: {reference!r}")


class DateNormalizer:
    """
    Normalizes scraped date strings to epoch milliseconds.

    Shapes are tried in a fixed order and the first match wins:
    1. "just now" words -> the reference clock
    2. relative offsets ("3 hari yang lalu", "2 hours ago")
    3. ISO-8601 date-times
    4. absolute calendar dates ("12 Des 2025", "2023-01-05")
    5. dateparser, only when the fallback parser is enabled

    Instances only hold immutable settings, so one normalizer can be shared
    between threads.
    """

    def __init__(self, tz_name: Optional[str] = None, use_fallback_parser: Optional[bool] = None):
        """
        Args:
            tz_name: IANA timezone for calendar math and offset-less dates
            use_fallback_parser: Consult dateparser after the built-in shapes
        """
        self.tz_name = tz_name or Config.DATE_TIMEZONE
        self.tz = ZoneInfo(self.tz_name)
        if use_fallback_parser is None:
            use_fallback_parser = Config.USE_FALLBACK_PARSER
        self.use_fallback_parser = use_fallback_parser

        self._matchers: List[Matcher] = [
            self._match_just_now,
            self._match_relative,
            self._match_iso8601,
            self._match_absolute,
        ]
        if self.use_fallback_parser:
            self._matchers.append(self._match_fallback)

    def normalize_date(self, date_str: str, reference: Reference = None) -> int:
        """
        Normalize a date string to epoch milliseconds.

        Args:
            date_str: Raw text from a page or API payload
            reference: Clock relative expressions are resolved against

        Returns:
            Milliseconds since the epoch, or 0 when the date is unknown

        Example:
            >>> DateNormalizer(tz_name="UTC").normalize_date("3 hari yang lalu", 1700000000000)
            1699740800000
        """
        reference_dt = resolve_reference(reference)

        if not isinstance(date_str, str):
            return UNKNOWN_TIMESTAMP

        text = " ".join(date_str.split()).lower()
        if not text:
            return UNKNOWN_TIMESTAMP

        for matcher in self._matchers:
            moment = matcher(text, reference_dt)
            if moment is not None:
                return max(to_millis(moment), UNKNOWN_TIMESTAMP)

        logger.debug(f"Unparseable date: '{date_str[:50]}'")
        return UNKNOWN_TIMESTAMP

    def normalize_batch(self, date_strs: Iterable[str], reference: Reference = None) -> List[int]:
        """
        Normalize many dates against one shared reference clock.

        Args:
            date_strs: Raw date strings
            reference: Clock shared by every row (resolved once)

        Returns:
            List of epoch milliseconds in input order
        """
        reference_dt = resolve_reference(reference)
        return [self.normalize_date(date_str, reference_dt) for date_str in date_strs]

    def _match_just_now(self, text: str, reference: datetime) -> Optional[datetime]:
        if text in JUST_NOW:
            return reference
        return None

    def _match_relative(self, text: str, reference: datetime) -> Optional[datetime]:
        return match_relative_date(text, reference, self.tz)

    def _match_iso8601(self, text: str, reference: datetime) -> Optional[datetime]:
        if not ISO_DATETIME_RE.match(text):
            return None
        try:
            moment = ciso8601.parse_datetime(text.upper())
        except ValueError:
            return None
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=self.tz)
        return moment

    def _match_absolute(self, text: str, reference: datetime) -> Optional[datetime]:
        return match_absolute_date(text, self.tz)

    def _match_fallback(self, text: str, reference: datetime) -> Optional[datetime]:
        # Flexible fallback
        try:
            return dateparser.parse(
                text,
                languages=Config.FALLBACK_LANGUAGES,
                settings={
                    "RELATIVE_BASE": reference.astimezone(self.tz).replace(tzinfo=None),
                    "TIMEZONE": self.tz_name,
                    "RETURN_AS_TIMEZONE_AWARE": True,
                    "PREFER_DATES_FROM": "past",
                },
            )
        except Exception as e:
            logger.debug(f"dateparser failed on '{text[:50]}': {e}")
            return None


# Global instance (singleton)
_date_normalizer_instance = None


def get_date_normalizer() -> DateNormalizer:
    """Get global DateNormalizer instance"""
    global _date_normalizer_instance
    if _date_normalizer_instance is None:
        _date_normalizer_instance = DateNormalizer()
    return _date_normalizer_instance


def normalize(date_str: str, reference_clock: Reference = None) -> int:
    """Normalize ``date_str`` with the shared normalizer. See DateNormalizer.normalize_date."""
    return get_date_normalizer().normalize_date(date_str, reference_clock)
