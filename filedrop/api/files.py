"""
File API

Upload, download, listing and deletion. Validation and consistency rules
live in ConsistencyCoordinator; this module only translates HTTP.
"""

import logging
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import StreamingResponse

from filedrop.config import settings
from filedrop.dependencies import get_coordinator
from filedrop.exceptions import EmptyUploadError, TooLargeError
from filedrop.models.responses import (
    DeleteResponse,
    FileListResponse,
    FileMetadata,
    UploadResponse,
)
from filedrop.services.coordinator import ConsistencyCoordinator

logger = logging.getLogger(__name__)
router = APIRouter()


def content_disposition(filename: str) -> str:
    """Attachment header value; non-ASCII names use RFC 5987 encoding."""
    try:
        filename.encode('latin-1')
    except UnicodeEncodeError:
        return f"attachment; filename*=utf-8''{quote(filename)}"
    escaped = filename.replace('\\', '\\\\').replace('"', '\\"')
    return f'attachment; filename="{escaped}"'


@router.post("/upload", response_model=UploadResponse)
async def upload_file(
    file: Optional[UploadFile] = File(None),
    coordinator: ConsistencyCoordinator = Depends(get_coordinator),
):
    """
    Upload a single file (multipart field "file").

    Returns:
        UploadResponse with the stored file's metadata
    """
    if file is None:
        raise EmptyUploadError("No file uploaded")

    # Reject before buffering when the client declared the size
    if file.size is not None and file.size > settings.max_file_size_bytes:
        raise TooLargeError(
            f"File size too large. Maximum size is {settings.MAX_FILE_SIZE_MB}MB."
        )

    file_data = await file.read()
    logger.info(f"📤 Received upload: {file.filename} ({len(file_data)} bytes)")

    record = await coordinator.upload(
        content=file_data,
        display_name=file.filename or "",
        content_type=file.content_type or "application/octet-stream",
    )

    return UploadResponse(file=FileMetadata.from_record(record))


@router.get("/download/{file_id}")
async def download_file(
    file_id: str,
    coordinator: ConsistencyCoordinator = Depends(get_coordinator),
):
    """Stream a file's content in fixed-size chunks."""
    record, stream = await coordinator.open_download(file_id)

    return StreamingResponse(
        stream,
        media_type=record.content_type,
        headers={
            "Content-Disposition": content_disposition(record.display_name),
            "Content-Length": str(record.size_bytes),
        },
    )


@router.get("/files", response_model=FileListResponse)
async def list_files(coordinator: ConsistencyCoordinator = Depends(get_coordinator)):
    """List all files, newest first."""
    records, was_cached = await coordinator.list_all()
    return FileListResponse(
        files=[FileMetadata.from_record(r) for r in records],
        cached=was_cached,
    )


@router.delete("/files/{file_id}", response_model=DeleteResponse)
async def delete_file(
    file_id: str,
    coordinator: ConsistencyCoordinator = Depends(get_coordinator),
):
    """Delete a file and its cached metadata."""
    record = await coordinator.delete(file_id)
    return DeleteResponse(file=FileMetadata.from_record(record))
