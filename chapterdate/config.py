"""
Central configuration for the chapter date normalizer.

This module contains all application settings, paths, and constants.
All other modules import configuration from here to maintain consistency.
"""

import os
from pathlib import Path
from typing import List
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

class Config:
    """Application configuration and constants"""

    # ==========================================
    # Project Paths
    # ==========================================
    PROJECT_ROOT = Path(__file__).parent.parent
    DATA_DIR = PROJECT_ROOT / "data"
    RAW_DATA_DIR = DATA_DIR / "raw"
    PROCESSED_DATA_DIR = DATA_DIR / "processed"
    GROUND_TRUTH_DIR = DATA_DIR / "ground_truth"

    # ==========================================
    # Date Normalization
    # ==========================================
    # Timezone for calendar arithmetic and for dates that carry no offset
    DATE_TIMEZONE = os.getenv("DATE_TIMEZONE", "UTC")

    # dateparser is only consulted after every built-in shape fails
    USE_FALLBACK_PARSER = os.getenv("USE_FALLBACK_PARSER", "false").lower() == "true"
    FALLBACK_LANGUAGES: List[str] = ["id", "en"]

    # Returned for anything that cannot be parsed
    UNKNOWN_TIMESTAMP = 0

    # ==========================================
    # Ray Configuration
    # ==========================================
    RAY_ENABLED = os.getenv("RAY_ENABLED", "true").lower() == "true"
    RAY_NUM_CPUS = int(os.getenv("RAY_NUM_CPUS", "2"))
    RAY_OBJECT_STORE_MEMORY = int(os.getenv("RAY_OBJECT_STORE_MEMORY", str(100 * 1024 * 1024)))
    RAY_MIN_ROWS = int(os.getenv("RAY_MIN_ROWS", "5000"))  # smaller batches run in-process

    # ==========================================
    # Application Settings
    # ==========================================
    BATCH_SIZE = int(os.getenv("BATCH_SIZE", "1000"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")          # DEBUG, INFO, WARNING, ERROR

    # CSV columns
    DATE_COLUMN = "date"
    TIMESTAMP_COLUMN = "date_upload"

    # ==========================================
    # Data Validation Rules
    # ==========================================
    # Scraped dates longer than this are almost always a wrong selector
    MAX_DATE_STRING_LENGTH = 120

    # ==========================================
    # Test Data Settings
    # ==========================================
    # For chapterdate/generate_messy_dates.py
    NUM_SAMPLE_ROWS = 200

    # Fixed "now" for generated data so runs are reproducible (2023-11-14T22:13:20Z)
    SAMPLE_REFERENCE_MS = 1700000000000

    # ==========================================
    # Logging Configuration
    # ==========================================
    LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

    # Log file paths
    LOGS_DIR = PROJECT_ROOT / "logs"
    MAIN_LOG_FILE = LOGS_DIR / "chapterdate.log"

    # ==========================================
    # Output Formatting
    # ==========================================
    CLI_MAX_WIDTH = 100

    # ==========================================
    # Class Methods
    # ==========================================
    @classmethod
    def ensure_directories(cls) -> None:
        """
        Create all necessary directories if they don't exist.

        This should be called at application startup to ensure
        the file system is properly initialized.
        """
        directories = [
            cls.DATA_DIR,
            cls.RAW_DATA_DIR,
            cls.PROCESSED_DATA_DIR,
            cls.GROUND_TRUTH_DIR,
            cls.LOGS_DIR
        ]

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)

