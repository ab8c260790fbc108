"""
Data validation module for checking scraped date cells.

Validates data for:
- Missing or empty dates
- Values that are not text
- Overlong values (usually a selector that grabbed the wrong element)
- Text with nothing date-like in it

Flags issues without stopping processing
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from chapterdate.config import Config
from chapterdate.normalization.vocabulary import is_date_word

logger = logging.getLogger(__name__)


class DateInputValidator:
    """Validates scraped date strings before normalization"""

    def __init__(self):
        """Initialize data validator with config rules"""
        self.max_length = Config.MAX_DATE_STRING_LENGTH

    def validate_date(self, date_str: Any) -> Tuple[bool, Optional[str]]:
        """
        Validate a date cell.

        Checks:
        - Not empty
        - Is text
        - Not longer than the configured limit
        - Contains a digit or a known date word

        Note: Actual parsing happens in date_normalizer.
        This just checks if it looks like a date.

        Args:
            date_str: Value to validate

        Returns:
            Tuple of (is_valid, issue_description)
        """
        if date_str is None:
            return (False, "missing_date")

        if not isinstance(date_str, str):
            return (False, "not_text")

        cleaned = date_str.strip()
        if not cleaned:
            return (False, "missing_date")

        if len(cleaned) > self.max_length:
            return (False, "date_too_long")

        if any(char.isdigit() for char in cleaned):
            return (True, None)

        lowered = " ".join(cleaned.lower().split())
        if is_date_word(lowered) or any(is_date_word(word) for word in lowered.split()):
            return (True, None)

        return (False, "no_date_content")

    def validate_batch(self, date_strs: List[Any]) -> Dict[str, Any]:
        """
        Validate a batch of date cells.

        Args:
            date_strs: List of raw values

        Returns:
            Dict with validation summary:
            {
                'total': int,
                'valid': int,
                'with_issues': int,
                'issues_by_type': dict,
                'invalid_indices': list
            }
        """
        valid_count = 0
        invalid_indices = []
        issues_by_type = {}

        for idx, value in enumerate(date_strs):
            is_valid, issue = self.validate_date(value)

            if is_valid:
                valid_count += 1
                continue

            invalid_indices.append(idx)
            issues_by_type[issue] = issues_by_type.get(issue, 0) + 1

        summary = {
            'total': len(date_strs),
            'valid': valid_count,
            'with_issues': len(invalid_indices),
            'issues_by_type': issues_by_type,
            'invalid_indices': invalid_indices
        }

        logger.info(f"Batch validation: {valid_count}/{len(date_strs)} valid, "
                    f"{len(invalid_indices)} with issues")

        return summary


# Global instance (singleton)
_data_validator_instance = None


def get_data_validator() -> DateInputValidator:
    """Get global DateInputValidator instance"""
    global _data_validator_instance
    if _data_validator_instance is None:
        _data_validator_instance = DateInputValidator()
    return _data_validator_instance
