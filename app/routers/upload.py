from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..config import settings
from ..database import create_tables, get_db, get_store
from ..logger import get_logger
from ..schemas import (
    CleanupResponse,
    DataSourceResponse,
    DuplicateCheckRequest,
    DuplicateCheckResponse,
    SetupResponse,
    UploadHistoryResponse,
    UploadOutcome,
)
from ..services.datastore import DataStore
from ..services.duplicate_checker import find_duplicate
from ..services.errors import UploadError
from ..services.upload_history import cleanup_failed_uploads, list_upload_history
from ..services.upload_service import UploadOptions, UploadRequest, process_upload
from ..sources import DataSource, parse_source

logger = get_logger(__name__)

router = APIRouter()


@router.post("/upload", response_model=UploadOutcome)
async def upload_csv(
    http_request: Request,
    file: Optional[UploadFile] = File(None),
    table_name: Optional[str] = Form(None),
    data_source: Optional[str] = Form(None),
    file_name: Optional[str] = Form(None),
    content_hash: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    store: DataStore = Depends(get_store),
):
    """
    Upload a CSV file and insert its rows into the target table.

    The table defaults to the data source's table. Returns 200 for full
    and partial success, 500 with the outcome when no batch went in.
    """
    source = parse_source(data_source)
    if data_source and source is None:
        raise HTTPException(status_code=400, detail={"error": f"Unknown data source: {data_source}"})

    if not table_name and source is not None:
        table_name = source.table_name

    content = None
    if file is not None and file.filename:
        content = await file.read()
        if len(content) > settings.MAX_FILE_SIZE:
            raise HTTPException(
                status_code=400,
                detail={"error": f"File size exceeds maximum allowed size of {settings.MAX_FILE_SIZE // (1024 * 1024)}MB"}
            )

    request = UploadRequest(
        content=content,
        table_name=table_name,
        file_name=file_name or (file.filename if file is not None else None),
        data_source=source.value if source else None,
        content_hash=content_hash,
    )

    logger.info(
        "Upload of %s into %s by %s",
        request.file_name, table_name, getattr(http_request.state, "user_email", "anonymous"),
    )
    try:
        outcome = process_upload(request, store, db, UploadOptions.from_settings(settings))
    except UploadError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())

    if outcome.inserted_rows == 0 and outcome.errors:
        return JSONResponse(status_code=500, content=outcome.model_dump(mode="json"))
    return outcome


@router.post("/check-duplicate", response_model=DuplicateCheckResponse)
async def check_duplicate(payload: DuplicateCheckRequest, db: Session = Depends(get_db)):
    """Check whether a file was uploaded before, by content or by filename"""
    if not payload.content_hash or not payload.file_name or not payload.data_source:
        raise HTTPException(status_code=400, detail={"error": "Missing required parameters"})

    match = find_duplicate(
        db,
        payload.content_hash.lower(),
        payload.file_name,
        payload.data_source.value,
        settings.DUPLICATE_HASH_SCOPE,
    )
    if match is None:
        return DuplicateCheckResponse(is_duplicate=False)

    return DuplicateCheckResponse(
        is_duplicate=True,
        type=match.match_type,
        upload_date=match.upload_date,
        original_filename=match.original_filename,
        data_source=match.data_source,
        upload_id=match.upload_id,
    )


@router.get("/upload/history", response_model=List[UploadHistoryResponse])
async def get_upload_history(
    data_source: Optional[DataSource] = Query(None, description="Filter by data source"),
    limit: int = Query(50, ge=1, le=500, description="Number of records to return"),
    db: Session = Depends(get_db)
):
    """Get upload history, newest first"""
    return list_upload_history(db, data_source.value if data_source else None, limit)


@router.post("/cleanup-failed-uploads", response_model=CleanupResponse)
async def cleanup_failed(db: Session = Depends(get_db)):
    """Delete history records where no rows were actually inserted"""
    deleted = cleanup_failed_uploads(db)
    return CleanupResponse(
        success=True,
        message=f"Cleaned up {deleted} failed upload records",
        deleted_count=deleted,
    )


@router.post("/setup-tables", response_model=SetupResponse)
async def setup_tables(db: Session = Depends(get_db)):
    """Create the upload_history table and its indexes if missing"""
    create_tables(bind=db.get_bind())
    return SetupResponse(success=True, message="Upload history table created successfully")


@router.get("/sources", response_model=List[DataSourceResponse])
async def get_sources():
    """Get the data sources for the upload form dropdown"""
    return [
        DataSourceResponse(value=source.value, label=source.label, table_name=source.table_name)
        for source in DataSource
    ]
