"""
Generate messy scraped chapter dates for testing.

This module creates a CSV of chapter rows whose upload dates look the way
Indonesian and English manga sites print them:
- Relative dates in both languages (3 hari yang lalu, 2 hours ago, 5 mnt)
- ISO-8601 timestamps with offsets, "Z" and fractional seconds
- Absolute dates with Indonesian/English month names and numeric layouts
- Edge cases (blank cells, placeholders, random casing and spacing)

Every row gets a ground-truth timestamp computed independently of the
normalizer (pandas DateOffset for calendar months).

Usage:
    python -m chapterdate.generate_messy_dates

Output:
    data/raw/messy_chapter_dates.csv (columns: chapter, date)
    data/ground_truth/ground_truth.csv
"""

import random
import sys
from collections import Counter
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo

import pandas as pd

from chapterdate.config import Config


class MessyDateGenerator:
    """Generates intentionally messy chapter date data for testing"""

    # (template, unit, language)
    RELATIVE_TEMPLATES = [
        ("{n} detik yang lalu", "seconds", "id"),
        ("{n} dtk", "seconds", "id"),
        ("{n} menit yang lalu", "minutes", "id"),
        ("{n} mnt", "minutes", "id"),
        ("{n} jam yang lalu", "hours", "id"),
        ("{n} hari yang lalu", "days", "id"),
        ("{n} hari", "days", "id"),
        ("{n} minggu yang lalu", "weeks", "id"),
        ("{n} mgg", "weeks", "id"),
        ("{n} bulan yang lalu", "months", "id"),
        ("{n} bln", "months", "id"),
        ("{n} tahun yang lalu", "years", "id"),
        ("{n} thn", "years", "id"),
        ("{n} seconds ago", "seconds", "en"),
        ("{n} minutes ago", "minutes", "en"),
        ("{n} hours ago", "hours", "en"),
        ("{n} days ago", "days", "en"),
        ("{n} weeks ago", "weeks", "en"),
        ("{n} months ago", "months", "en"),
        ("{n} years ago", "years", "en"),
    ]

    ARTICLE_TEMPLATES = [
        ("a day ago", "days"),
        ("an hour ago", "hours"),
        ("a month ago", "months"),
        ("a year ago", "years"),
    ]

    MONTHS_ID = ["Januari", "Februari", "Maret", "April", "Mei", "Juni", "Juli",
                 "Agustus", "September", "Oktober", "November", "Desember"]
    MONTHS_ID_SHORT = ["Jan", "Feb", "Mar", "Apr", "Mei", "Jun", "Jul",
                       "Agu", "Sep", "Okt", "Nov", "Des"]
    MONTHS_EN = ["January", "February", "March", "April", "May", "June", "July",
                 "August", "September", "October", "November", "December"]
    MONTHS_EN_SHORT = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul",
                       "Aug", "Sep", "Oct", "Nov", "Dec"]

    ISO_OFFSETS = ["+07:00", "+00:00", "-05:00", "+09:30", "Z"]

    JUST_NOW_WORDS = ["baru saja", "Baru", "just now", "now"]

    # Cells scrapers really return when the selector misses
    EDGE_CASE_DATES = [
        "",
        "   ",
        "N/A",
        "-",
        "garbage text",
        "Chapter 12",
        "12 Foo 2023",
        "2022-13-45T99:99:99+07:00",
    ]

    def __init__(self, num_rows: Optional[int] = None, reference_ms: Optional[int] = None,
                 seed: Optional[int] = None):
        """
        Initialize generator

        Args:
            num_rows: Number of chapter rows to generate
            reference_ms: "Now" used for relative dates
            seed: Random seed for reproducible output
        """
        self.num_rows = num_rows if num_rows else Config.NUM_SAMPLE_ROWS
        self.reference_ms = reference_ms if reference_ms is not None else Config.SAMPLE_REFERENCE_MS
        self.tz = ZoneInfo(Config.DATE_TIMEZONE)
        self.rng = random.Random(seed)
        self.output_path = Config.RAW_DATA_DIR / "messy_chapter_dates.csv"

    @property
    def reference(self) -> pd.Timestamp:
        """Reference clock in the configured timezone"""
        return pd.Timestamp(self.reference_ms, unit="ms", tz="UTC").tz_convert(self.tz)

    @staticmethod
    def _millis(moment: pd.Timestamp) -> int:
        return int(moment.value // 1_000_000)

    def _expected_relative(self, n: int, unit: str) -> int:
        """Reference minus n units; calendar units via pandas DateOffset"""
        if unit in ("days", "weeks", "months", "years"):
            shifted = self.reference - pd.DateOffset(**{unit: n})
        else:
            shifted = self.reference - pd.Timedelta(**{unit: n})
        return self._millis(shifted)

    def _random_past_date(self) -> Tuple[int, int, int]:
        """Random calendar date within roughly two years before the reference"""
        day = self.reference.date() - timedelta(days=self.rng.randint(0, 730))
        return day.year, day.month, day.day

    def _midnight_millis(self, year: int, month: int, day: int) -> int:
        return self._millis(pd.Timestamp(datetime(year, month, day), tz=self.tz))

    def generate_relative_date(self) -> Tuple[str, int]:
        """Generate a relative date like '3 hari yang lalu'"""
        if self.rng.random() < 0.15:
            text, unit = self.rng.choice(self.ARTICLE_TEMPLATES)
            return text, self._expected_relative(1, unit)

        template, unit, _language = self.rng.choice(self.RELATIVE_TEMPLATES)
        upper = {"seconds": 59, "minutes": 59, "hours": 23, "days": 6,
                 "weeks": 4, "months": 11, "years": 5}[unit]
        n = self.rng.randint(1, upper)
        return template.format(n=n), self._expected_relative(n, unit)

    def generate_iso_date(self) -> Tuple[str, int]:
        """Generate an ISO-8601 timestamp with a random offset"""
        millis = self.reference_ms - self.rng.randint(0, 400 * 86_400_000)
        with_fraction = self.rng.random() < 0.3
        if not with_fraction:
            millis -= millis % 1000

        offset = self.rng.choice(self.ISO_OFFSETS)
        if offset == "Z":
            tz = timezone.utc
        else:
            sign = 1 if offset[0] == "+" else -1
            hours, minutes = int(offset[1:3]), int(offset[4:6])
            tz = timezone(sign * timedelta(hours=hours, minutes=minutes))

        moment = datetime.fromtimestamp(millis // 1000, tz=tz)
        text = moment.strftime("%Y-%m-%dT%H:%M:%S")
        if with_fraction:
            text += f".{millis % 1000:03d}"
        return text + offset, millis

    def generate_absolute_date(self) -> Tuple[str, int]:
        """Generate an absolute date in one of the layouts sites use"""
        year, month, day = self._random_past_date()
        layout = self.rng.choice([
            "day_month_id",
            "day_month_id_short",
            "day_month_en",
            "iso_date",
            "slash_date",
            "month_en_short_day",
            "month_id_day",
        ])

        if layout == "day_month_id":
            text = f"{day} {self.MONTHS_ID[month - 1]} {year}"
        elif layout == "day_month_id_short":
            text = f"{day:02d} {self.MONTHS_ID_SHORT[month - 1]} {year}"
        elif layout == "day_month_en":
            text = f"{day} {self.MONTHS_EN[month - 1]} {year}"
        elif layout == "iso_date":
            text = f"{year}-{month:02d}-{day:02d}"
        elif layout == "slash_date":
            text = f"{day:02d}/{month:02d}/{year}"
        elif layout == "month_en_short_day":
            # KomikIndo style: "Mar 4, 2023"
            text = f"{self.MONTHS_EN_SHORT[month - 1]} {day}, {year}"
        else:
            # MangaThemesia style: "Desember 04, 2023"
            text = f"{self.MONTHS_ID[month - 1]} {day:02d}, {year}"

        return text, self._midnight_millis(year, month, day)

    def generate_date(self) -> Tuple[str, int, str]:
        """
        Generate one messy date cell.

        Returns:
            Tuple of (date_text, expected_timestamp, shape)
        """
        roll = self.rng.random()
        if roll < 0.40:
            text, expected = self.generate_relative_date()
            shape = "relative"
        elif roll < 0.55:
            text, expected = self.generate_iso_date()
            shape = "iso8601"
        elif roll < 0.85:
            text, expected = self.generate_absolute_date()
            shape = "absolute"
        elif roll < 0.92:
            text, expected = self.rng.choice(self.JUST_NOW_WORDS), self.reference_ms
            shape = "just_now"
        else:
            text, expected = self.rng.choice(self.EDGE_CASE_DATES), Config.UNKNOWN_TIMESTAMP
            shape = "unparseable"

        # Random casing and whitespace, as scraped text comes
        if shape != "iso8601" and self.rng.random() < 0.2:
            text = self.rng.choice([text.upper(), text.lower(), text.title()])
        if self.rng.random() < 0.1:
            text = self.rng.choice([f" {text} ", f"{text}  ", f"\n  {text}", text.replace(" ", "  ")])

        return text, expected, shape

    def generate_rows(self) -> Tuple[List[Dict], List[Dict]]:
        """
        Generate chapter rows and their ground truth.

        Returns:
            Tuple of (rows, ground_truths)
        """
        rows = []
        ground_truths = []

        for i in range(self.num_rows):
            text, expected, shape = self.generate_date()
            rows.append({
                "chapter": f"Chapter {self.num_rows - i}",
                "date": text
            })
            ground_truths.append({
                "row_index": i,
                "messy_date": text,
                "shape": shape,
                "expected_timestamp": expected
            })

        return rows, ground_truths

    def generate_csv(self) -> Tuple[Path, Path]:
        """
        Generate both messy CSV and ground truth CSV.

        Returns:
            Tuple of (messy_csv_path, ground_truth_csv_path)
        """
        print(f"Generating {self.num_rows} messy chapter dates...")

        rows, ground_truths = self.generate_rows()

        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        pd.DataFrame(rows).to_csv(self.output_path, index=False)

        print(f"   Generated messy data: {self.output_path}")
        print(f"   Total rows: {self.num_rows}")

        gt_path = Config.GROUND_TRUTH_DIR / "ground_truth.csv"
        gt_path.parent.mkdir(parents=True, exist_ok=True)
        pd.DataFrame(ground_truths).to_csv(gt_path, index=False)

        print(f"   Generated ground truth: {gt_path}")

        self._print_statistics(ground_truths)

        return self.output_path, gt_path

    def _print_statistics(self, ground_truths: list):
        """Print statistics about generated data"""
        print("\nData Statistics:")

        shape_counts = Counter(gt["shape"] for gt in ground_truths)
        for shape, count in sorted(shape_counts.items(), key=lambda x: x[1], reverse=True):
            percentage = (count / len(ground_truths)) * 100
            print(f"      {shape:15s} {count:4d} ({percentage:5.1f}%)")


def main():
    """Main entry point"""
    print("=" * 70)
    print("Messy Chapter Date Generator")
    print("=" * 70)

    # Ensure directories exist
    Config.ensure_directories()

    generator = MessyDateGenerator(num_rows=Config.NUM_SAMPLE_ROWS)
    messy_csv_path, ground_truth_path = generator.generate_csv()

    print("\n" + "=" * 70)
    print(f"  Success! Generated data:")
    print(f"   Messy CSV: {messy_csv_path}")
    print(f"   Ground Truth: {ground_truth_path}")
    print("=" * 70)

    return 0


if __name__ == "__main__":
    sys.exit(main())
