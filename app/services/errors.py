"""
Exceptions raised by the upload pipeline.

Routers turn these into HTTPException responses using ``status_code``
and ``to_detail()``.
"""
from typing import List, Optional


class UploadError(Exception):
    """Base class for errors that end an upload request"""

    status_code = 500

    def __init__(self, message: str, details: Optional[List[str]] = None):
        self.message = message
        self.details = list(details or [])
        super().__init__(message)

    def to_detail(self) -> dict:
        detail = {"error": self.message}
        if self.details:
            detail["details"] = self.details
        return detail


class UploadValidationError(UploadError):
    """Bad input shape: missing file or table, unusable CSV, rejected content"""

    status_code = 400


class CsvParseError(UploadValidationError):
    pass


class ContentRejected(UploadValidationError):
    pass


class TableNotAllowed(UploadValidationError):
    pass


class UploadFailure(UploadError):
    """Unexpected failure after the request was accepted"""

    status_code = 500
