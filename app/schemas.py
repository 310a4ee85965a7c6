"""
Pydantic schemas for request/response validation.
All API endpoints should use these schemas instead of raw dicts.
"""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict, model_validator

from .sources import DataSource


# =============================================================================
# Duplicate Check Schemas
# =============================================================================

class DuplicateCheckRequest(BaseModel):
    """Schema for a duplicate check before upload"""
    content_hash: Optional[str] = Field(None, max_length=64, description="SHA-256 of the file bytes")
    file_name: Optional[str] = Field(None, max_length=255, description="Original filename")
    data_source: Optional[DataSource] = Field(None, description="Data source tag")


class DuplicateInfo(BaseModel):
    """An earlier upload matching the current file"""
    type: str = Field(..., pattern=r"^(content|filename)$")
    upload_id: int
    original_filename: str
    data_source: str
    upload_date: Optional[datetime] = None


class DuplicateCheckResponse(BaseModel):
    """Schema for duplicate check response"""
    is_duplicate: bool
    type: Optional[str] = None
    upload_date: Optional[datetime] = None
    original_filename: Optional[str] = None
    data_source: Optional[str] = None
    upload_id: Optional[int] = None


# =============================================================================
# Upload Schemas
# =============================================================================

class UploadOutcome(BaseModel):
    """Result of one upload; partial success is reported, not raised"""
    success: bool
    partial_success: bool = False
    message: str = ""
    total_rows: int = Field(0, ge=0)
    inserted_rows: int = Field(0, ge=0)
    failed_rows: int = Field(0, ge=0)
    errors: List[str] = Field(default_factory=list)
    columns: List[str] = Field(default_factory=list)
    table_name: str = ""
    duplicate: Optional[DuplicateInfo] = None

    @model_validator(mode="after")
    def check_flags(self) -> "UploadOutcome":
        if self.success and (self.errors or self.inserted_rows == 0):
            raise ValueError("success requires inserted rows and no errors")
        if self.partial_success and (not self.errors or self.inserted_rows == 0):
            raise ValueError("partial_success requires inserted rows and errors")
        if self.success and self.partial_success:
            raise ValueError("success and partial_success are exclusive")
        return self


class UploadHistoryResponse(BaseModel):
    """Schema for upload history response"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    file_hash: str
    original_filename: str
    data_source: str
    table_name: str
    rows_inserted: int
    upload_date: Optional[datetime] = None
    created_at: Optional[datetime] = None


class CleanupResponse(BaseModel):
    success: bool
    message: str
    deleted_count: int


class SetupResponse(BaseModel):
    success: bool
    message: str


class DataSourceResponse(BaseModel):
    value: str
    label: str
    table_name: str


# =============================================================================
# Auth Schemas
# =============================================================================

class LoginRequest(BaseModel):
    """Schema for password login"""
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=255)
