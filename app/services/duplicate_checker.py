"""
Duplicate detection against the upload history.

Advisory only: callers decide whether a match blocks the upload.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ..models.upload_history import UploadHistory

SCOPE_SOURCE = "source"
SCOPE_GLOBAL = "global"


@dataclass
class DuplicateMatch:
    match_type: str  # "content" or "filename"
    upload_id: int
    original_filename: str
    data_source: str
    upload_date: Optional[datetime]


def _to_match(record: UploadHistory, match_type: str) -> DuplicateMatch:
    return DuplicateMatch(
        match_type=match_type,
        upload_id=record.id,
        original_filename=record.original_filename,
        data_source=record.data_source,
        upload_date=record.upload_date,
    )


def find_by_hash(db: Session, content_hash: str, data_source: Optional[str],
                 scope: str = SCOPE_SOURCE) -> Optional[UploadHistory]:
    if scope not in (SCOPE_SOURCE, SCOPE_GLOBAL):
        raise ValueError(f"Unknown duplicate scope: {scope}")

    query = db.query(UploadHistory).filter(UploadHistory.file_hash == content_hash)
    if scope == SCOPE_SOURCE:
        query = query.filter(UploadHistory.data_source == data_source)
    return query.order_by(UploadHistory.id.asc()).first()


def find_by_filename(db: Session, filename: str) -> Optional[UploadHistory]:
    return db.query(UploadHistory).filter(
        UploadHistory.original_filename == filename
    ).order_by(UploadHistory.id.asc()).first()


def find_duplicate(
    db: Session,
    content_hash: str,
    filename: str,
    data_source: Optional[str],
    scope: str = SCOPE_SOURCE,
) -> Optional[DuplicateMatch]:
    """
    Look for an earlier upload of the same file.

    A content match (same hash, within ``scope``) wins over a filename
    match (same name, any source). Returns None when neither exists.
    """
    if content_hash:
        record = find_by_hash(db, content_hash, data_source, scope)
        if record is not None:
            return _to_match(record, "content")

    if filename:
        record = find_by_filename(db, filename)
        if record is not None:
            return _to_match(record, "filename")

    return None
