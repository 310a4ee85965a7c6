from sqlalchemy import Column, Integer, String, DateTime, Index
from sqlalchemy.sql import func
from ..database import Base


class UploadHistory(Base):
    __tablename__ = "upload_history"

    id = Column(Integer, primary_key=True, index=True)
    file_hash = Column(String(64), nullable=False)  # SHA-256 of the uploaded bytes
    original_filename = Column(String(255), nullable=False)
    data_source = Column(String(50), nullable=False)  # tiktok, shopee, aipost, goaffpro
    table_name = Column(String(100), nullable=False)
    rows_inserted = Column(Integer, nullable=False, default=0)
    upload_date = Column(DateTime(timezone=True), server_default=func.now())
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("idx_upload_history_file_hash", "file_hash"),
        Index("idx_upload_history_data_source", "data_source"),
        Index("idx_upload_history_upload_date", "upload_date"),
    )
