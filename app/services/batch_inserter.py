"""
Batched inserts into an upload target table.

Batches run in order and the first failing batch ends the run. Batches
inserted before the failure stay committed: there is no transaction
spanning batches.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List

from ..logger import get_logger
from .datastore import StoreError
from .type_inference import ColumnType, coerce_record

logger = get_logger(__name__)

DEFAULT_BATCH_SIZE = 100


@dataclass
class BatchInsertResult:
    inserted_rows: int = 0
    errors: List[str] = field(default_factory=list)
    batches_total: int = 0
    batches_attempted: int = 0

    @property
    def failed(self) -> bool:
        return bool(self.errors)


def partition(records: List[Dict[str, Any]], size: int = DEFAULT_BATCH_SIZE) -> Iterator[List[Dict[str, Any]]]:
    """Yield consecutive slices of ``size`` records; only the last may be shorter"""
    if size < 1:
        raise ValueError("Batch size must be at least 1")
    for start in range(0, len(records), size):
        yield records[start:start + size]


def insert_in_batches(
    store,
    table_name: str,
    records: List[Dict[str, Any]],
    column_types: Dict[str, ColumnType],
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> BatchInsertResult:
    """
    Coerce and insert ``records`` batch by batch.

    ``store`` needs an ``insert_rows(table_name, rows)`` method raising
    StoreError on failure.
    """
    batches = list(partition(records, batch_size))
    result = BatchInsertResult(batches_total=len(batches))

    for index, batch in enumerate(batches, start=1):
        rows = [coerce_record(record, column_types) for record in batch]
        result.batches_attempted += 1
        try:
            store.insert_rows(table_name, rows)
        except StoreError as e:
            result.errors.append(f"Batch {index}: {e.message}")
            if result.inserted_rows:
                logger.warning(
                    "Batch %d/%d into %s failed (%s); %d rows from earlier batches remain committed",
                    index, result.batches_total, table_name, e.kind.value, result.inserted_rows,
                )
            else:
                logger.warning(
                    "Batch %d/%d into %s failed (%s); nothing inserted",
                    index, result.batches_total, table_name, e.kind.value,
                )
            break
        result.inserted_rows += len(rows)

    return result
