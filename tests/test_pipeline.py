"""
Tests for the chapter date pipeline.

Covers the in-process path, CSV handling and the Ray batch path.
"""

import pandas as pd
import pytest
import ray

from chapterdate.config import Config
from chapterdate.normalization.date_normalizer import DateNormalizer
from chapterdate.pipeline.ray_pipeline import ChapterDatePipeline

REFERENCE = 1700000000000  # 2023-11-14T22:13:20Z

ROWS = [
    {"chapter": "Chapter 5", "date": "baru saja"},
    {"chapter": "Chapter 4", "date": "3 hari yang lalu"},
    {"chapter": "Chapter 3", "date": "2022-02-13T06:21:18+07:00"},
    {"chapter": "Chapter 2", "date": ""},
    {"chapter": "Chapter 1", "date": "garbage text"},
]

EXPECTED = [
    REFERENCE,
    REFERENCE - 3 * 86_400_000,
    1644708078000,
    0,
    0,
]


@pytest.fixture
def pipeline():
    """In-process pipeline pinned to UTC"""
    return ChapterDatePipeline(normalizer=DateNormalizer(tz_name="UTC", use_fallback_parser=False), use_ray=False)


class TestChapterDatePipeline:
    """Test suite for ChapterDatePipeline"""

    def test_process_dataframe(self, pipeline):
        """Dates are normalized into the timestamp column"""
        df, metadata = pipeline.process_dataframe(pd.DataFrame(ROWS), reference=REFERENCE)

        assert df[Config.TIMESTAMP_COLUMN].tolist() == EXPECTED
        assert df['original_row_index'].tolist() == [0, 1, 2, 3, 4]
        assert df['chapter'].tolist() == [row['chapter'] for row in ROWS]

        assert metadata['total_rows'] == 5
        assert metadata['parsed_rows'] == 3
        assert metadata['unparsed_rows'] == 2
        assert metadata['reference_ms'] == REFERENCE
        assert metadata['used_ray'] is False
        assert metadata['validation_summary']['issues_by_type'] == {
            'missing_date': 1,
            'no_date_content': 1
        }

    def test_input_dataframe_is_not_modified(self, pipeline):
        """The caller's DataFrame keeps its columns"""
        source = pd.DataFrame(ROWS)
        pipeline.process_dataframe(source, reference=REFERENCE)
        assert list(source.columns) == ["chapter", "date"]

    def test_missing_date_column(self, pipeline):
        """A table without a date column is rejected"""
        with pytest.raises(ValueError, match="Missing required column"):
            pipeline.process_dataframe(pd.DataFrame([{"chapter": "Chapter 1"}]))

    def test_process_csv(self, pipeline, tmp_path):
        """CSV input keeps blank cells as unknown dates"""
        csv_path = tmp_path / "chapters.csv"
        pd.DataFrame(ROWS).to_csv(csv_path, index=False)

        df, metadata = pipeline.process_csv(csv_path, reference=REFERENCE)

        assert df[Config.TIMESTAMP_COLUMN].tolist() == EXPECTED
        assert metadata['input_file'] == str(csv_path)

    def test_missing_csv(self, pipeline, tmp_path):
        """A missing file raises FileNotFoundError"""
        with pytest.raises(FileNotFoundError):
            pipeline.process_csv(tmp_path / "missing.csv")

    def test_small_tables_stay_in_process(self):
        """Ray is only used from ray_min_rows upwards"""
        pipeline = ChapterDatePipeline(normalizer=DateNormalizer(tz_name="UTC"), use_ray=True)
        pipeline.ray_min_rows = len(ROWS) + 1
        _, metadata = pipeline.process_dataframe(pd.DataFrame(ROWS), reference=REFERENCE)
        assert metadata['used_ray'] is False


class TestRayPipeline:
    """Ray batch path"""

    @pytest.fixture(scope="class")
    def ray_cluster(self):
        """Single-CPU local Ray cluster"""
        ray.init(num_cpus=1, include_dashboard=False, ignore_reinit_error=True)
        yield
        ray.shutdown()

    def test_ray_matches_in_process(self, ray_cluster, pipeline):
        """Batches normalized on Ray workers come back in order and identical"""
        ray_pipeline = ChapterDatePipeline(normalizer=DateNormalizer(tz_name="UTC", use_fallback_parser=False), use_ray=True)
        ray_pipeline.ray_min_rows = 1
        ray_pipeline.batch_size = 2

        df = pd.DataFrame(ROWS * 3)
        ray_df, ray_metadata = ray_pipeline.process_dataframe(df, reference=REFERENCE)
        local_df, _ = pipeline.process_dataframe(df, reference=REFERENCE)

        assert ray_metadata['used_ray'] is True
        assert ray_df[Config.TIMESTAMP_COLUMN].tolist() == EXPECTED * 3
        assert ray_df[Config.TIMESTAMP_COLUMN].tolist() == local_df[Config.TIMESTAMP_COLUMN].tolist()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
