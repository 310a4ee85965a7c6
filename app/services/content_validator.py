"""
Content fingerprinting and a content filter for parsed CSV data.

The hash identifies re-uploads of identical bytes. The denylist scan is a
content filter over the first rows; inserts are parameterized, so it
does not stand between field values and SQL.
"""
import hashlib
from typing import List

from .csv_parser import ParsedDataset

DEFAULT_SAMPLE_SIZE = 100

# Compared against upper-cased field values. "\\x00" and "\\0" are the
# literal escape sequences, a raw NUL is checked separately.
DENYLIST = [";DROP", "--", "/*", "*/", "\\X00", "\\0"]


def compute_content_hash(data: bytes) -> str:
    """SHA-256 of the exact file bytes, lowercase hex"""
    return hashlib.sha256(data).hexdigest()


def validate_columns(columns: List[str]) -> List[str]:
    errors = []
    for index, column in enumerate(columns):
        if len(column) == 0:
            errors.append(f"Column {index + 1} has an empty name")
        if "\0" in column or "\\x00" in column:
            errors.append(f'Column "{column}" contains null bytes')
    return errors


def validate_dataset(dataset: ParsedDataset, sample_size: int = DEFAULT_SAMPLE_SIZE) -> List[str]:
    """
    Return rejection reasons for the dataset, empty when it is clean.

    Column names are checked for emptiness and NUL bytes; string fields of
    the first ``sample_size`` records are scanned (case-insensitively) for
    the denylist. Rows are numbered from 1.
    """
    errors = validate_columns(dataset.columns)

    for row_number, record in enumerate(dataset.records[:sample_size], start=1):
        for column in dataset.columns:
            value = record.get(column)
            if not isinstance(value, str):
                continue
            upper = value.upper()
            for pattern in DENYLIST:
                if pattern in upper:
                    errors.append(
                        f'Row {row_number}, Column "{column}": Contains dangerous pattern "{_display(pattern)}"'
                    )
            if "\0" in value:
                errors.append(f'Row {row_number}, Column "{column}": Contains null bytes')

    return errors


def _display(pattern: str) -> str:
    # Escape sequences are matched upper-cased but reported as written
    return "\\x00" if pattern == "\\X00" else pattern
