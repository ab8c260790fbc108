"""
Chapter Date Normalizer CLI

Normalizes scraped chapter upload dates to epoch milliseconds.

Usage:
    python -m chapterdate.cli <num_rows>      # Generate and process N sample rows
    python -m chapterdate.cli <file.csv>      # Normalize the date column of a CSV
    python -m chapterdate.cli                 # Interactive: choose from a menu
"""

import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict

import pandas as pd

from chapterdate.config import Config
from chapterdate.generate_messy_dates import MessyDateGenerator
from chapterdate.normalization.date_normalizer import UNKNOWN_TIMESTAMP, from_millis, normalize
from chapterdate.pipeline.ray_pipeline import process_chapter_dates, shutdown_ray

# Configure logging for CLI
logging.basicConfig(
    level=Config.LOG_LEVEL,
    format=Config.LOG_FORMAT,
    datefmt=Config.LOG_DATE_FORMAT
)
logger = logging.getLogger(__name__)


def configure_file_logging() -> logging.FileHandler:
    """Mirror root log records into Config.MAIN_LOG_FILE, once per path"""
    log_path = os.path.abspath(Config.MAIN_LOG_FILE)
    root = logging.getLogger()
    for handler in root.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == log_path:
            return handler

    Path(log_path).parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(Config.LOG_FORMAT, datefmt=Config.LOG_DATE_FORMAT))
    root.addHandler(handler)
    return handler


def compare_with_ground_truth(clean_csv_path, ground_truth_csv_path) -> dict:
    """
    Compare clean_chapter_dates.csv with ground_truth.csv.
    Reports exact-match accuracy overall and per date shape.
    """
    try:
        clean_df = pd.read_csv(clean_csv_path)
        gt_df = pd.read_csv(ground_truth_csv_path)

        merged_df = clean_df.merge(
            gt_df,
            left_on='original_row_index',
            right_on='row_index',
            how='inner'
        )
        logger.info(f"Matched {len(merged_df)} rows by original_row_index")

        merged_df['correct'] = merged_df[Config.TIMESTAMP_COLUMN] == merged_df['expected_timestamp']

        by_shape = {}
        for shape, group in merged_df.groupby('shape'):
            by_shape[shape] = {
                'matches': int(group['correct'].sum()),
                'total': len(group)
            }

        total = len(merged_df)
        matches = int(merged_df['correct'].sum())

        return {
            'matches': matches,
            'total': total,
            'accuracy': (matches / total) * 100 if total > 0 else 0.0,
            'by_shape': by_shape,
            'mismatches': merged_df.loc[~merged_df['correct'], 'messy_date'].head(10).tolist()
        }

    except Exception as e:
        logger.error(f"Error comparing with ground truth: {e}", exc_info=True)
        return {
            'matches': 0,
            'total': 0,
            'accuracy': 0.0,
            'by_shape': {},
            'error': str(e)
        }


def display_accuracy_metrics(metrics: dict):
    """
    Display accuracy metrics comparing pipeline output with ground truth.

    Args:
        metrics: Dictionary with accuracy metrics from compare_with_ground_truth
    """
    if 'error' in metrics:
        print(f"\nWarning: Could not calculate accuracy metrics: {metrics['error']}")
        return

    print("\n" + "=" * Config.CLI_MAX_WIDTH)
    print("Accuracy Metrics (vs Ground Truth)")
    print("=" * Config.CLI_MAX_WIDTH)
    print(f"\nOverall: {metrics['matches']}/{metrics['total']} ({metrics['accuracy']:.2f}%)")

    print("\nBy date shape:")
    for shape, counts in metrics['by_shape'].items():
        print(f"  {shape:15s} {counts['matches']:4d}/{counts['total']:<4d}")

    if metrics.get('mismatches'):
        print("\nFirst mismatches:")
        for text in metrics['mismatches']:
            print(f"  {text!r}")

    print("=" * Config.CLI_MAX_WIDTH + "\n")


def format_timestamp(millis: int) -> str:
    """Human readable form of a normalized timestamp"""
    if millis == UNKNOWN_TIMESTAMP:
        return "unknown"
    return from_millis(millis).isoformat(timespec="milliseconds")


def display_results(df: pd.DataFrame, metadata: Dict):
    """Display processing results in a formatted table"""
    print("\n" + "=" * 80)
    print("PROCESSING RESULTS")
    print("=" * 80)
    print(f"Total rows: {metadata.get('total_rows', len(df))}")
    print(f"Parsed dates: {metadata.get('parsed_rows', 0)}")
    print(f"Unknown dates: {metadata.get('unparsed_rows', 0)}")
    print(f"Reference clock: {format_timestamp(metadata.get('reference_ms', 0))}")
    print(f"Processing time: {metadata.get('processing_time_seconds', 0):.2f} seconds")
    print(f"Ray used: {metadata.get('used_ray', False)}")

    issues = metadata.get('validation_summary', {}).get('issues_by_type', {})
    if issues:
        print("\nValidation issues:")
        print("-" * 80)
        for issue, count in sorted(issues.items(), key=lambda x: x[1], reverse=True):
            print(f"  {issue:30s} {count}")

    print("\nSample rows (first 10):")
    print("-" * 80)
    sample = df[[Config.DATE_COLUMN, Config.TIMESTAMP_COLUMN]].head(10).copy()
    sample['resolved'] = sample[Config.TIMESTAMP_COLUMN].map(format_timestamp)
    print(sample.to_string(index=False))


def save_results(df: pd.DataFrame) -> Path:
    """Write the normalized table to the processed data directory"""
    output_path = Config.PROCESSED_DATA_DIR / "clean_chapter_dates.csv"
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output_path, index=False)
    print(f"\nResults saved to: {output_path}")
    print(f"Total rows saved: {len(df)}")
    return output_path


def generate_and_process(num_rows: int) -> bool:
    """
    Generate sample chapter dates and process them.

    Args:
        num_rows: Number of rows to generate

    Returns:
        True if successful, False otherwise
    """
    print("\n" + "=" * 80)
    print("Chapter Date Normalizer")
    print("=" * 80)
    print(f"Generating {num_rows} sample chapter rows...")
    print("-" * 80)

    try:
        generator = MessyDateGenerator(num_rows=num_rows)
        messy_csv_path, ground_truth_path = generator.generate_csv()

        # the generator's fixed clock, otherwise every relative date would miss
        df, metadata = process_chapter_dates(str(messy_csv_path), reference=generator.reference_ms)

        display_results(df, metadata)
        output_path = save_results(df)

        accuracy_metrics = compare_with_ground_truth(output_path, ground_truth_path)
        display_accuracy_metrics(accuracy_metrics)

        return True

    except Exception as e:
        logger.error(f"Error generating/processing data: {e}", exc_info=True)
        print(f"\nError: Failed to generate or process data: {e}")
        return False


def process_existing_csv(csv_path: str) -> bool:
    """
    Normalize the date column of an existing CSV against the current time.

    Args:
        csv_path: Path to a CSV with a 'date' column

    Returns:
        True if successful, False otherwise
    """
    try:
        df, metadata = process_chapter_dates(csv_path)
        display_results(df, metadata)
        save_results(df)
        return True

    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Error processing {csv_path}: {e}")
        print(f"\nError: {e}")
        return False


def normalize_single(date_str: str) -> int:
    """Normalize one date string against the current time and print it"""
    millis = normalize(date_str, datetime.now(timezone.utc))
    print(f"  {date_str!r} -> {millis} ({format_timestamp(millis)})")
    return millis


def main():
    """Main entry point for CLI"""
    Config.ensure_directories()
    configure_file_logging()

    if len(sys.argv) > 1:
        argument = sys.argv[1]
        try:
            if argument.lower().endswith(".csv"):
                success = process_existing_csv(argument)
            else:
                num_rows = int(argument)
                if num_rows <= 0:
                    print("Error: Number of rows must be positive")
                    sys.exit(1)
                success = generate_and_process(num_rows)
            shutdown_ray()
            sys.exit(0 if success else 1)
        except ValueError:
            print("Error: Argument must be a positive integer or a .csv path")
            print("Usage: python -m chapterdate.cli <num_rows | file.csv>")
            shutdown_ray()
            sys.exit(1)
        except KeyboardInterrupt:
            print("\n\nInterrupted by user. Shutting down...")
            shutdown_ray()
            sys.exit(1)

    # Interactive loop mode
    print("\n" + "=" * 80)
    print("Chapter Date Normalizer")
    print("=" * 80)
    print("Interactive Mode")
    print("-" * 80)

    while True:
        print("\nOptions:")
        print("  0. Exit")
        print("  1. Generate and process sample chapter dates")
        print("  2. Normalize a single date string")

        try:
            choice = input("\nEnter your choice: ").strip()

            if choice == "0":
                print("\nExiting. Goodbye!")
                break
            elif choice == "1":
                try:
                    num_str = input("Enter number of rows to generate: ").strip()
                    num_rows = int(num_str)

                    if num_rows <= 0:
                        print("Error: Number of rows must be positive")
                        continue

                    success = generate_and_process(num_rows)
                    if not success:
                        print("Error: Processing failed. Please try again.")

                except ValueError:
                    print("Error: Invalid number. Please enter a positive integer.")
            elif choice == "2":
                normalize_single(input("Enter a date string: "))
            else:
                print("Error: Invalid choice. Please enter 0, 1 or 2.")

        except KeyboardInterrupt:
            print("\n\nInterrupted by user. Exiting...")
            break
        except Exception as e:
            logger.error(f"Unexpected error: {e}", exc_info=True)
            print(f"Error: {e}. Please try again.")

    # Cleanup on exit
    shutdown_ray()

if __name__ == '__main__':
    main()
