"""
CSV parsing for uploaded platform exports.

The whole file is read as text (no type conversion, no NA detection):
typing is decided later by the type inferencer. Each data row becomes a
``{column: value}`` dict keyed by the normalized header.
"""
import io
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Union

import pandas as pd

from .errors import CsvParseError

_INVALID_HEADER_CHARS = re.compile(r"[^a-z0-9_]")
_REPEATED_UNDERSCORES = re.compile(r"_+")


@dataclass
class ParsedDataset:
    records: List[Dict[str, str]]
    columns: List[str]
    source_filename: str = ""
    content_hash: Optional[str] = None
    column_sources: Dict[str, str] = field(default_factory=dict)  # normalized -> raw header

    @property
    def row_count(self) -> int:
        return len(self.records)


def normalize_header(header: str) -> str:
    """Make a header usable as a column name: lowercase, [a-z0-9_] only"""
    name = _INVALID_HEADER_CHARS.sub("_", str(header).lower())
    name = _REPEATED_UNDERSCORES.sub("_", name)
    return name.strip("_")


def _dedupe(names: List[str]) -> List[str]:
    """Suffix repeated names with _1, _2, ... keeping the first occurrence as is"""
    seen = set(names)
    counts: Dict[str, int] = {}
    result = []
    for name in names:
        if name not in counts:
            counts[name] = 0
            result.append(name)
            continue
        while True:
            counts[name] += 1
            candidate = f"{name}_{counts[name]}"
            if candidate not in seen:
                break
        seen.add(candidate)
        result.append(candidate)
    return result


def decode_content(content: Union[str, bytes]) -> str:
    if isinstance(content, bytes):
        try:
            text = content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise CsvParseError("CSV parsing failed", [f"File is not valid UTF-8 text: {e}"])
    else:
        text = content
    return text.lstrip("\ufeff")


def parse_csv(
    content: Union[str, bytes],
    source_filename: str = "",
    content_hash: Optional[str] = None,
    header_transform: Callable[[str], str] = normalize_header,
) -> ParsedDataset:
    """
    Parse CSV text into records.

    Raises CsvParseError when the tokenizer reports structural problems
    (unterminated quotes, rows with too many or too few fields) or when
    the file has no data rows. Blank lines are skipped.
    """
    text = decode_content(content)

    try:
        df = pd.read_csv(
            io.StringIO(text),
            header=None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError:
        raise CsvParseError("No data found in CSV")
    except pd.errors.ParserError as e:
        raise CsvParseError("CSV parsing failed", [str(e).strip()])

    if df.empty:
        raise CsvParseError("No data found in CSV")

    # Fields missing from short rows are the only NaN values left
    short_rows = df.index[df.isna().any(axis=1)].tolist()
    if short_rows:
        expected = len(df.columns)
        raise CsvParseError(
            "CSV parsing failed",
            [f"Too few fields: expected {expected} fields in row {index}" for index in short_rows[:10]],
        )

    raw_headers = [str(value) for value in df.iloc[0].tolist()]
    columns = _dedupe([header_transform(header) for header in raw_headers])

    body = df.iloc[1:]
    if body.empty:
        raise CsvParseError("No data found in CSV")

    records = [dict(zip(columns, row)) for row in body.itertuples(index=False, name=None)]

    return ParsedDataset(
        records=records,
        columns=columns,
        source_filename=source_filename,
        content_hash=content_hash,
        column_sources=dict(zip(columns, raw_headers)),
    )
