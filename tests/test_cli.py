"""
Tests for the CLI helpers.
"""

import logging

import pandas as pd
import pytest
from chapterdate.cli import compare_with_ground_truth, configure_file_logging, format_timestamp, normalize_single
from chapterdate.config import Config


class TestCli:
    """Test suite for CLI helpers"""

    @pytest.fixture
    def result_files(self, tmp_path):
        """Pipeline output and ground truth with one wrong row"""
        clean_path = tmp_path / "clean_chapter_dates.csv"
        gt_path = tmp_path / "ground_truth.csv"

        pd.DataFrame({
            "chapter": ["Chapter 3", "Chapter 2", "Chapter 1"],
            Config.DATE_COLUMN: ["baru saja", "3 hari yang lalu", "garbage"],
            "original_row_index": [0, 1, 2],
            Config.TIMESTAMP_COLUMN: [5000, 1699740800000, 42],
        }).to_csv(clean_path, index=False)

        pd.DataFrame({
            "row_index": [0, 1, 2],
            "messy_date": ["baru saja", "3 hari yang lalu", "garbage"],
            "shape": ["just_now", "relative", "unparseable"],
            "expected_timestamp": [5000, 1699740800000, 0],
        }).to_csv(gt_path, index=False)

        return clean_path, gt_path

    def test_compare_with_ground_truth(self, result_files):
        """Accuracy is reported overall and per shape"""
        metrics = compare_with_ground_truth(*result_files)

        assert metrics['matches'] == 2
        assert metrics['total'] == 3
        assert metrics['accuracy'] == pytest.approx(200 / 3)
        assert metrics['by_shape']['relative'] == {'matches': 1, 'total': 1}
        assert metrics['by_shape']['unparseable'] == {'matches': 0, 'total': 1}
        assert metrics['mismatches'] == ["garbage"]

    def test_compare_with_missing_files(self, tmp_path):
        """Unreadable inputs are reported, not raised"""
        metrics = compare_with_ground_truth(tmp_path / "a.csv", tmp_path / "b.csv")
        assert 'error' in metrics
        assert metrics['total'] == 0

    def test_format_timestamp(self):
        """Unknown stays readable, real values become ISO text"""
        assert format_timestamp(0) == "unknown"
        assert format_timestamp(1644708078000) == "2022-02-12T23:21:18.000+00:00"

    def test_normalize_single(self, capsys):
        """Single-string mode prints and returns the timestamp"""
        assert normalize_single("2022-02-13T06:21:18+07:00") == 1644708078000
        assert "1644708078000" in capsys.readouterr().out

    def test_configure_file_logging(self, tmp_path, monkeypatch):
        """Log records land in the configured log file, with one handler per path"""
        log_file = tmp_path / "logs" / "chapterdate.log"
        monkeypatch.setattr(Config, "MAIN_LOG_FILE", log_file)

        handler = configure_file_logging()
        try:
            assert configure_file_logging() is handler
            assert handler.baseFilename == str(log_file)

            logging.getLogger("chapterdate.test").warning("written to file")
            handler.flush()
            assert "WARNING - written to file" in log_file.read_text(encoding="utf-8")
        finally:
            logging.getLogger().removeHandler(handler)
            handler.close()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
