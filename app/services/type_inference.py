"""
Column type inference and value coercion for uploaded CSV rows.

Inference looks at a prefix sample of each column, so a column whose
values change shape after the sample keeps the sampled type and the
odd values coerce to None at insert time.
"""
import math
import re
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

DEFAULT_SAMPLE_SIZE = 100

BOOLEAN_LITERALS = {"true", "false", "1", "0", "yes", "no"}
TRUE_VALUES = {"true", "1", "yes", "y"}
FALSE_VALUES = {"false", "0", "no", "n"}

_DECIMAL_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
_INFINITY_RE = re.compile(r"^[+-]?Infinity$")
_RADIX_RE = re.compile(r"^0([xX][0-9a-fA-F]+|[bB][01]+|[oO][0-7]+)$")
_INT_PREFIX_RE = re.compile(r"^\s*([+-]?)(0[xX][0-9a-fA-F]+|\d+)")
_FLOAT_PREFIX_RE = re.compile(r"^\s*([+-]?(Infinity|(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?))")


class ColumnType(str, Enum):
    BOOLEAN = "BOOLEAN"
    INTEGER = "INTEGER"
    DECIMAL = "DECIMAL"
    TEXT = "TEXT"


def is_empty(value: Any) -> bool:
    return value is None or value == ""


def to_number(value: Any) -> Optional[float]:
    """
    Strict numeric reading of a whole value.

    Surrounding whitespace is ignored and a blank string reads as 0.
    Returns None when the value is not a number.
    """
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return None if isinstance(value, float) and math.isnan(value) else float(value)

    text = str(value).strip()
    if text == "":
        return 0.0
    if _DECIMAL_RE.match(text):
        return float(text)
    if _INFINITY_RE.match(text):
        return -math.inf if text.startswith("-") else math.inf
    if _RADIX_RE.match(text):
        return float(int(text, 0))
    return None


def _is_whole(number: float) -> bool:
    return math.isfinite(number) and number == int(number)


def infer_type(values: Iterable[Any]) -> ColumnType:
    """Classify a sample of non-empty values, BOOLEAN > INTEGER > DECIMAL > TEXT"""
    values = list(values)
    if not values:
        return ColumnType.TEXT

    if all(isinstance(v, bool) or str(v).lower() in BOOLEAN_LITERALS for v in values):
        return ColumnType.BOOLEAN

    numbers = [to_number(v) for v in values]
    if any(n is None for n in numbers):
        return ColumnType.TEXT
    if all(_is_whole(n) for n in numbers):
        return ColumnType.INTEGER
    return ColumnType.DECIMAL


def sample_column(records: List[Dict[str, Any]], column: str,
                  sample_size: int = DEFAULT_SAMPLE_SIZE) -> List[Any]:
    """Non-empty values of ``column`` among the first ``sample_size`` values"""
    values = []
    for record in records:
        value = record.get(column)
        if is_empty(value):
            continue
        values.append(value)
        if len(values) >= sample_size:
            break
    return values


def infer_column_types(records: List[Dict[str, Any]], columns: List[str],
                       sample_size: int = DEFAULT_SAMPLE_SIZE) -> Dict[str, ColumnType]:
    return {
        column: infer_type(sample_column(records, column, sample_size))
        for column in columns
    }


def _parse_int_prefix(text: str) -> Optional[int]:
    match = _INT_PREFIX_RE.match(text)
    if not match:
        return None
    sign, digits = match.groups()
    number = int(digits, 16) if digits[:2].lower() == "0x" else int(digits)
    return -number if sign == "-" else number


def _parse_float_prefix(text: str) -> Optional[float]:
    match = _FLOAT_PREFIX_RE.match(text)
    if not match:
        return None
    literal = match.group(1)
    if literal.lstrip("+-") == "Infinity":
        return -math.inf if literal.startswith("-") else math.inf
    return float(literal)


def coerce_value(value: Any, column_type: ColumnType) -> Any:
    """Convert a raw CSV value to the column's type; unusable values become None"""
    if is_empty(value):
        return None

    if column_type == ColumnType.INTEGER:
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        return _parse_int_prefix(str(value))

    if column_type == ColumnType.DECIMAL:
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return None if isinstance(value, float) and math.isnan(value) else float(value)
        return _parse_float_prefix(str(value))

    if column_type == ColumnType.BOOLEAN:
        text = str(value).lower()
        if text in TRUE_VALUES:
            return True
        if text in FALSE_VALUES:
            return False
        return None

    return str(value)


def coerce_record(record: Dict[str, Any], column_types: Dict[str, ColumnType]) -> Dict[str, Any]:
    return {
        key: coerce_value(value, column_types.get(key, ColumnType.TEXT))
        for key, value in record.items()
    }
