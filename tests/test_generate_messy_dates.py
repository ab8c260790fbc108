"""
Tests for the messy chapter date generator.

The generator's ground truth is computed independently of the normalizer,
so normalizing every generated row must reproduce it exactly.
"""

from collections import Counter

import pytest
from chapterdate.config import Config
from chapterdate.normalization.date_normalizer import DateNormalizer
from chapterdate.generate_messy_dates import MessyDateGenerator


class TestMessyDateGenerator:
    """Test suite for MessyDateGenerator"""

    @pytest.fixture
    def generator(self):
        """Seeded generator with the fixed sample clock"""
        return MessyDateGenerator(num_rows=400, reference_ms=Config.SAMPLE_REFERENCE_MS, seed=7)

    def test_rows_and_ground_truth_align(self, generator):
        """One ground-truth entry per row, in order"""
        rows, ground_truths = generator.generate_rows()

        assert len(rows) == len(ground_truths) == 400
        for i, (row, gt) in enumerate(zip(rows, ground_truths)):
            assert gt['row_index'] == i
            assert gt['messy_date'] == row['date']

    def test_every_shape_is_generated(self, generator):
        """The sample covers all date shapes"""
        _, ground_truths = generator.generate_rows()
        shapes = Counter(gt['shape'] for gt in ground_truths)
        assert set(shapes) == {"relative", "iso8601", "absolute", "just_now", "unparseable"}

    def test_seed_is_reproducible(self):
        """Same seed, same rows"""
        first, _ = MessyDateGenerator(num_rows=50, seed=3).generate_rows()
        second, _ = MessyDateGenerator(num_rows=50, seed=3).generate_rows()
        assert first == second

    def test_normalizer_matches_ground_truth(self, generator):
        """Every generated date normalizes to its ground truth"""
        normalizer = DateNormalizer(tz_name=Config.DATE_TIMEZONE, use_fallback_parser=False)
        _, ground_truths = generator.generate_rows()

        mismatches = [
            gt['messy_date'] for gt in ground_truths
            if normalizer.normalize_date(gt['messy_date'], generator.reference_ms) != gt['expected_timestamp']
        ]
        assert mismatches == []

    def test_generate_csv(self, generator, tmp_path, monkeypatch):
        """CSV output has the chapter/date columns and a ground truth file"""
        import pandas as pd

        monkeypatch.setattr(Config, "GROUND_TRUTH_DIR", tmp_path / "ground_truth")
        generator.output_path = tmp_path / "raw" / "messy_chapter_dates.csv"

        messy_path, gt_path = generator.generate_csv()

        messy_df = pd.read_csv(messy_path, dtype=str, keep_default_na=False)
        gt_df = pd.read_csv(gt_path)
        assert list(messy_df.columns) == ["chapter", "date"]
        assert len(messy_df) == len(gt_df) == 400


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
