"""
Upload history bookkeeping.

History writes never decide the outcome of an upload: failures are
rolled back, logged and swallowed.
"""
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..logger import get_logger
from ..models.upload_history import UploadHistory

logger = get_logger(__name__)


def record_outcome(
    db: Session,
    content_hash: Optional[str],
    filename: Optional[str],
    data_source: Optional[str],
    table_name: str,
    inserted_rows: int,
) -> Optional[UploadHistory]:
    """
    Record a successful upload, or clear residue of a failed one.

    inserted_rows > 0 adds one history row. inserted_rows == 0 deletes
    rows left by earlier attempts with the same (hash, source, filename).
    Returns the new record, or None.
    """
    if not (content_hash and filename and data_source):
        logger.info("Upload history skipped for %s: missing hash, filename or source", table_name)
        return None

    try:
        if inserted_rows > 0:
            record = UploadHistory(
                file_hash=content_hash,
                original_filename=filename,
                data_source=data_source,
                table_name=table_name,
                rows_inserted=inserted_rows,
                upload_date=datetime.now(timezone.utc),
            )
            db.add(record)
            db.commit()
            db.refresh(record)
            return record

        deleted = db.query(UploadHistory).filter(
            UploadHistory.file_hash == content_hash,
            UploadHistory.data_source == data_source,
            UploadHistory.original_filename == filename,
        ).delete(synchronize_session=False)
        db.commit()
        if deleted:
            logger.info("Removed %d stale history record(s) for %s", deleted, filename)
        return None

    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to update upload history for %s", filename)
        return None


def cleanup_failed_uploads(db: Session) -> int:
    """Delete history rows that recorded zero inserted rows"""
    deleted = db.query(UploadHistory).filter(
        UploadHistory.rows_inserted == 0
    ).delete(synchronize_session=False)
    db.commit()
    return deleted


def list_upload_history(db: Session, data_source: Optional[str] = None, limit: int = 50) -> List[UploadHistory]:
    query = db.query(UploadHistory)
    if data_source:
        query = query.filter(UploadHistory.data_source == data_source)
    return query.order_by(UploadHistory.upload_date.desc(), UploadHistory.id.desc()).limit(limit).all()
