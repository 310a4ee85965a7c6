"""
Upload service: runs one CSV upload from raw bytes to a recorded outcome.

Steps: check inputs, parse, filter content, infer column types, check
the target table, insert in batches, then record or clean the upload
history. Batch failures end up in the outcome; anything unexpected
becomes an UploadFailure.
"""
import re
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import settings
from ..logger import get_logger
from ..schemas import DuplicateInfo, UploadOutcome
from ..sources import source_tables
from .batch_inserter import insert_in_batches
from .content_validator import compute_content_hash, validate_dataset
from .csv_parser import ParsedDataset, parse_csv
from .datastore import TableState
from .duplicate_checker import DuplicateMatch, find_duplicate
from .errors import (
    ContentRejected,
    TableNotAllowed,
    UploadError,
    UploadFailure,
    UploadValidationError,
)
from .type_inference import ColumnType, infer_column_types
from .upload_history import record_outcome

logger = get_logger(__name__)

POLICY_ALLOW_LIST = "allow_list"
POLICY_AUTO_CREATE = "auto_create"

TABLE_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,62}$")


@dataclass
class UploadRequest:
    content: Optional[bytes]
    table_name: Optional[str]
    file_name: Optional[str] = None
    data_source: Optional[str] = None
    content_hash: Optional[str] = None


@dataclass
class UploadOptions:
    batch_size: int = 100
    inference_sample_size: int = 100
    validation_sample_size: int = 100
    halt_on_rejection: bool = True
    table_policy: str = POLICY_ALLOW_LIST
    allowed_tables: Sequence[str] = field(default_factory=source_tables)
    duplicate_scope: str = "source"

    def __post_init__(self):
        if self.table_policy not in (POLICY_ALLOW_LIST, POLICY_AUTO_CREATE):
            raise ValueError(f"Unknown table policy: {self.table_policy}")

    @classmethod
    def from_settings(cls, config=settings) -> "UploadOptions":
        return cls(
            batch_size=config.BATCH_SIZE,
            inference_sample_size=config.INFERENCE_SAMPLE_SIZE,
            validation_sample_size=config.VALIDATION_SAMPLE_SIZE,
            halt_on_rejection=config.HALT_ON_CONTENT_REJECTION,
            table_policy=config.TABLE_POLICY,
            allowed_tables=source_tables() + list(config.EXTRA_ALLOWED_TABLES),
            duplicate_scope=config.DUPLICATE_HASH_SCOPE,
        )


def process_upload(
    request: UploadRequest,
    store,
    db: Session,
    options: Optional[UploadOptions] = None,
) -> UploadOutcome:
    """
    Process an uploaded CSV file into its target table.

    Raises UploadValidationError (and subclasses) for unusable input and
    UploadFailure for anything unexpected. Batch insert failures do not
    raise: they are reported in the returned UploadOutcome.
    """
    options = options or UploadOptions.from_settings()

    if request.content is None:
        raise UploadValidationError("No file provided")

    table_name = (request.table_name or "").strip()
    if not table_name:
        raise UploadValidationError("No table name provided")
    if not TABLE_NAME_RE.match(table_name):
        raise UploadValidationError(
            "Invalid table name",
            ["Table names may contain letters, digits and underscores and must not start with a digit"],
        )

    try:
        return _run_upload(request, table_name, store, db, options)
    except UploadError:
        raise
    except Exception as e:
        logger.exception("Upload into %s failed", table_name)
        raise UploadFailure("Internal server error", [str(e)]) from e


def _run_upload(request: UploadRequest, table_name: str, store, db: Session,
                options: UploadOptions) -> UploadOutcome:
    content_hash = compute_content_hash(request.content)
    if request.content_hash and request.content_hash.lower() != content_hash:
        logger.warning(
            "Client hash %s for %s does not match the received bytes; using %s",
            request.content_hash, request.file_name, content_hash,
        )

    dataset = parse_csv(request.content, request.file_name or "", content_hash)
    renamed = {column: raw for column, raw in dataset.column_sources.items() if column != raw}
    if renamed:
        logger.info(
            "Normalized %d header(s) in %s: %s", len(renamed), request.file_name,
            ", ".join(f"\"{raw}\" -> {column}" for column, raw in renamed.items()),
        )

    reasons = validate_dataset(dataset, options.validation_sample_size)
    if reasons:
        if options.halt_on_rejection:
            raise ContentRejected("Validation failed - disallowed content detected", reasons)
        logger.warning("%d content warnings in %s; continuing", len(reasons), request.file_name)

    column_types = infer_column_types(dataset.records, dataset.columns, options.inference_sample_size)

    duplicate = _check_duplicate(db, dataset, request.data_source, options.duplicate_scope)

    ensure_table(store, table_name, column_types, options)

    result = insert_in_batches(store, table_name, dataset.records, column_types, options.batch_size)

    record_outcome(db, content_hash, request.file_name, request.data_source, table_name, result.inserted_rows)

    return build_outcome(dataset, table_name, result.inserted_rows, result.errors, duplicate)


def ensure_table(store, table_name: str, column_types: Dict[str, ColumnType],
                 options: UploadOptions) -> TableState:
    """
    Make sure the target table can receive rows.

    With the allow-list policy the table must be listed and exist. With
    auto-create a missing table is created from the inferred types.
    Returns the state the table was found in.
    """
    allowed = list(options.allowed_tables)
    suggestion = [f"Allowed tables: {', '.join(allowed)}"] if allowed else []

    if options.table_policy == POLICY_ALLOW_LIST and table_name not in allowed:
        raise TableNotAllowed(f"Table '{table_name}' is not an allowed upload target", suggestion)

    state = store.table_state(table_name)
    if state == TableState.EXISTS:
        return state

    if options.table_policy == POLICY_AUTO_CREATE:
        store.create_table(table_name, column_types)
        return state

    raise TableNotAllowed(f"Table '{table_name}' does not exist", suggestion)


def _check_duplicate(db: Session, dataset: ParsedDataset, data_source: Optional[str],
                     scope: str) -> Optional[DuplicateMatch]:
    try:
        match = find_duplicate(db, dataset.content_hash, dataset.source_filename, data_source, scope)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Duplicate check failed for %s", dataset.source_filename)
        return None
    if match is not None:
        logger.warning(
            "%s matches earlier upload %d by %s (uploaded %s)",
            dataset.source_filename, match.upload_id, match.match_type, match.upload_date,
        )
    return match


def build_outcome(dataset: ParsedDataset, table_name: str, inserted_rows: int,
                  errors, duplicate: Optional[DuplicateMatch] = None) -> UploadOutcome:
    total = dataset.row_count
    errors = list(errors)

    if inserted_rows and not errors:
        message = f"Successfully processed {inserted_rows} records"
    elif inserted_rows:
        message = f"Inserted {inserted_rows} of {total} records before a batch failed"
    else:
        message = "No records were inserted"

    return UploadOutcome(
        success=inserted_rows > 0 and not errors,
        partial_success=inserted_rows > 0 and bool(errors),
        message=message,
        total_rows=total,
        inserted_rows=inserted_rows,
        failed_rows=total - inserted_rows,
        errors=errors,
        columns=dataset.columns,
        table_name=table_name,
        duplicate=DuplicateInfo(
            type=duplicate.match_type,
            upload_id=duplicate.upload_id,
            original_filename=duplicate.original_filename,
            data_source=duplicate.data_source,
            upload_date=duplicate.upload_date,
        ) if duplicate else None,
    )
