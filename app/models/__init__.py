from .upload_history import UploadHistory

__all__ = [
    "UploadHistory",
]
