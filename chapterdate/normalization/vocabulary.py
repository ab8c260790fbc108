"""
Bilingual (Indonesian / English) date vocabulary.

Plain lookup tables consumed by the date matchers. Keeping the words here as
data means parsing never depends on which locales the host platform ships.
"""

from typing import Dict, FrozenSet, List, Tuple

# Canonical units
SECOND = "second"
MINUTE = "minute"
HOUR = "hour"
DAY = "day"
WEEK = "week"
MONTH = "month"
YEAR = "year"

# Substring synonyms, checked in order. "minggu" must come before "min".
# "hr" is left out: it abbreviates both "hari" (day) and "hour"
UNIT_SYNONYMS: List[Tuple[str, str]] = [
    ("minggu", WEEK),
    ("mgg", WEEK),
    ("week", WEEK),
    ("wk", WEEK),
    ("bulan", MONTH),
    ("bln", MONTH),
    ("month", MONTH),
    ("detik", SECOND),
    ("dtk", SECOND),
    ("second", SECOND),
    ("sec", SECOND),
    ("menit", MINUTE),
    ("mnt", MINUTE),
    ("minute", MINUTE),
    ("min", MINUTE),
    ("jam", HOUR),
    ("hour", HOUR),
    ("hari", DAY),
    ("day", DAY),
    ("tahun", YEAR),
    ("thn", YEAR),
    ("year", YEAR),
    ("yr", YEAR),
]

# Fixed lengths for the units that are subtracted as plain durations
UNIT_MILLIS: Dict[str, int] = {
    SECOND: 1_000,
    MINUTE: 60_000,
    HOUR: 3_600_000,
    DAY: 86_400_000,
    WEEK: 604_800_000,
}

JUST_NOW: FrozenSet[str] = frozenset({"just now", "now", "baru saja", "baru"})

# Words standing in for a magnitude of one
INDEFINITE_ARTICLES: FrozenSet[str] = frozenset({"a", "an", "one", "sebuah", "satu"})

AGO_SUFFIXES: FrozenSet[str] = frozenset({"ago", "yang lalu", "yg lalu", "lalu", "the past"})

MONTH_NAMES: Dict[str, int] = {
    # English
    "january": 1, "jan": 1,
    "february": 2, "feb": 2,
    "march": 3, "mar": 3,
    "april": 4, "apr": 4,
    "may": 5,
    "june": 6, "jun": 6,
    "july": 7, "jul": 7,
    "august": 8, "aug": 8,
    "september": 9, "sep": 9, "sept": 9,
    "october": 10, "oct": 10,
    "november": 11, "nov": 11,
    "december": 12, "dec": 12,
    # Indonesian
    "januari": 1,
    "februari": 2, "pebruari": 2, "peb": 2,
    "maret": 3,
    "mei": 5,
    "juni": 6,
    "juli": 7,
    "agustus": 8, "agu": 8, "agt": 8, "ags": 8,
    "oktober": 10, "okt": 10,
    "nopember": 11, "nop": 11,
    "desember": 12, "des": 12,
}


def lookup_unit(word: str):
    """Return the canonical unit whose synonym occurs in ``word``, or None."""
    for synonym, unit in UNIT_SYNONYMS:
        if synonym in word:
            return unit
    return None


def lookup_month(word: str):
    """Return the month number (1-12) for a month name or abbreviation, or None."""
    return MONTH_NAMES.get(word.rstrip("."))


def is_date_word(word: str) -> bool:
    """True when ``word`` belongs to any of the date vocabularies above."""
    return (
        lookup_month(word) is not None
        or lookup_unit(word) is not None
        or word in JUST_NOW
    )
