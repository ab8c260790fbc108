"""
Batch processing pipeline for scraped chapter dates, using Ray for large tables.

1. Ingest a CSV (or DataFrame) of scraped chapter rows
2. Validate each date cell and note issues
3. Resolve the reference clock once so every row shares the same "now"
4. Normalize dates in-process, or split into batches across Ray workers
5. Return the table with an epoch-millisecond upload timestamp column
"""

import logging
import time
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pandas as pd
import ray

from chapterdate.config import Config
from chapterdate.normalization.date_normalizer import (
    UNKNOWN_TIMESTAMP,
    DateNormalizer,
    Reference,
    get_date_normalizer,
    resolve_reference,
    to_millis,
)
from chapterdate.validation.data_validator import get_data_validator

logger = logging.getLogger(__name__)


class ChapterDatePipeline:
    """
    Pipeline for normalizing the upload dates of scraped chapter rows.

    Small tables are normalized in-process. Tables with at least
    ``ray_min_rows`` rows are split into batches that Ray workers normalize
    in parallel; each worker builds its own DateNormalizer from the same
    settings, so results do not depend on where a row was processed.
    """

    def __init__(self, normalizer: Optional[DateNormalizer] = None, use_ray: Optional[bool] = None):
        """Initialize pipeline with all components"""
        self.data_validator = get_data_validator()
        self.date_normalizer = normalizer or get_date_normalizer()
        self.use_ray = Config.RAY_ENABLED if use_ray is None else use_ray
        self.batch_size = Config.BATCH_SIZE
        self.ray_min_rows = Config.RAY_MIN_ROWS

        logger.info("Pipeline initialized")

    def process_csv(self, csv_path: Path, reference: Reference = None) -> Tuple[pd.DataFrame, Dict]:
        """
        Process a CSV file through the complete pipeline.

        Args:
            csv_path: Path to CSV file with a date column
            reference: Clock relative dates are resolved against (default: now)

        Returns:
            Tuple of (dataframe_with_timestamps, metadata_dict)
        """
        logger.info(f"Processing CSV: {csv_path}")

        # check the input path
        if not csv_path.exists():
            raise FileNotFoundError(f"CSV file not found: {csv_path}")

        try:
            # keep_default_na=False so blank cells stay "" instead of NaN
            df = pd.read_csv(csv_path, dtype=str, keep_default_na=False)
        except Exception as e:
            raise ValueError(f"Failed to read CSV file: {e}")

        df, metadata = self.process_dataframe(df, reference)
        metadata['input_file'] = str(csv_path)
        return df, metadata

    def process_dataframe(self, df: pd.DataFrame, reference: Reference = None) -> Tuple[pd.DataFrame, Dict]:
        """
        Normalize the date column of a DataFrame.

        Args:
            df: Scraped rows, must contain Config.DATE_COLUMN
            reference: Clock relative dates are resolved against (default: now)

        Returns:
            Tuple of (dataframe_with_timestamps, metadata_dict)
        """
        start_time = time.time()

        # enforce correct columns in data
        if Config.DATE_COLUMN not in df.columns:
            raise ValueError(f"Missing required column: {Config.DATE_COLUMN}")

        df = df.copy()

        # Preserve original row index for ground truth matching
        if 'original_row_index' not in df.columns:
            df['original_row_index'] = range(len(df))

        reference_ms = to_millis(resolve_reference(reference))
        date_values = df[Config.DATE_COLUMN].tolist()
        logger.info(f"Loaded {len(date_values)} rows, reference clock {reference_ms}")

        # data validation
        validation_summary = self.data_validator.validate_batch(date_values)

        # date normalization
        logger.info("Starting date normalization")
        used_ray = self.use_ray and len(date_values) >= self.ray_min_rows
        if used_ray:
            timestamps = self._normalize_with_ray(date_values, reference_ms)
        else:
            timestamps = self.date_normalizer.normalize_batch(date_values, reference_ms)
        df[Config.TIMESTAMP_COLUMN] = pd.Series(timestamps, index=df.index, dtype="int64")
        logger.info("Date normalization complete")

        parsed_rows = sum(1 for ts in timestamps if ts != UNKNOWN_TIMESTAMP)
        metadata = {
            'total_rows': len(df),
            'parsed_rows': parsed_rows,
            'unparsed_rows': len(df) - parsed_rows,
            'validation_summary': validation_summary,
            'reference_ms': reference_ms,
            'used_ray': used_ray,
            'processing_time_seconds': time.time() - start_time
        }

        logger.info(f"Pipeline complete in {metadata['processing_time_seconds']:.2f}s: "
                    f"{parsed_rows}/{len(df)} dates parsed")

        return df, metadata

    def _normalize_with_ray(self, date_values: List, reference_ms: int) -> List[int]:
        """
        Split the dates into batches and normalize them on Ray workers.

        Args:
            date_values: Raw date cells
            reference_ms: Shared reference clock

        Returns:
            Timestamps in input order
        """
        initialize_ray()

        batches = [date_values[i:i + self.batch_size] for i in range(0, len(date_values), self.batch_size)]
        logger.info(f"Split into {len(batches)} batches of size: {self.batch_size}")

        # parallel processing
        futures = [
            normalize_batch_remote.remote(
                batch,
                reference_ms,
                self.date_normalizer.tz_name,
                self.date_normalizer.use_fallback_parser
            )
            for batch in batches
        ]

        # ray.get keeps the order of futures, so rows stay aligned
        batch_results = ray.get(futures)

        timestamps = []
        for batch_result in batch_results:
            timestamps.extend(batch_result)
        return timestamps


@ray.remote
def normalize_batch_remote(
    date_batch: List,
    reference_ms: int,
    tz_name: str,
    use_fallback_parser: bool
) -> List[int]:
    """
    Ray remote function to normalize one batch of dates.

    Args:
        date_batch: Raw date cells for this batch
        reference_ms: Shared reference clock
        tz_name: Timezone of the driver's normalizer
        use_fallback_parser: Fallback setting of the driver's normalizer

    Returns:
        Timestamps for the batch in order
    """
    normalizer = DateNormalizer(tz_name=tz_name, use_fallback_parser=use_fallback_parser)
    return normalizer.normalize_batch(date_batch, reference_ms)


def initialize_ray():
    """Start a local Ray cluster if one is not running yet"""
    if not ray.is_initialized():
        logger.info(f"Initializing local Ray with {Config.RAY_NUM_CPUS} CPUs")
        ray.init(
            num_cpus=Config.RAY_NUM_CPUS,
            object_store_memory=Config.RAY_OBJECT_STORE_MEMORY,
            logging_level=logging.INFO
        )


# Helper function for CLI
def process_chapter_dates(csv_path: str, reference: Reference = None) -> Tuple[pd.DataFrame, Dict]:
    """
    Helper function to process a CSV file.

    Args:
        csv_path: Path to CSV file (string)
        reference: Clock relative dates are resolved against

    Returns:
        Tuple of (dataframe_with_timestamps, metadata)
    """
    pipeline = ChapterDatePipeline()
    return pipeline.process_csv(Path(csv_path), reference)


def shutdown_ray():
    """Shutdown Ray cluster. Call this when exiting the CLI."""
    if ray.is_initialized():
        ray.shutdown()
        logger.info("Ray shutdown complete")
