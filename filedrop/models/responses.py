"""Pydantic models for API responses."""
from pydantic import BaseModel
from typing import List
from datetime import datetime

from filedrop.models.records import FileRecord


class FileMetadata(BaseModel):
    """File metadata as exposed to clients."""

    id: str
    filename: str
    size: int
    upload_date: datetime
    mimetype: str

    @classmethod
    def from_record(cls, record: FileRecord) -> "FileMetadata":
        return cls(
            id=record.id,
            filename=record.display_name,
            size=record.size_bytes,
            upload_date=record.created_at,
            mimetype=record.content_type,
        )


class UploadResponse(BaseModel):
    """Response for a successful upload."""

    message: str = "File uploaded successfully"
    file: FileMetadata


class DeleteResponse(BaseModel):
    """Response for a successful deletion."""

    message: str = "File deleted successfully"
    file: FileMetadata


class FileListResponse(BaseModel):
    """Response for the file listing."""

    files: List[FileMetadata]
    cached: bool


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    redis: bool
    timestamp: datetime
