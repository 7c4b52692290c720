"""Metadata derivation: build a FileRecord from storage state."""
from pathlib import PurePosixPath
from typing import Dict

from filedrop.interfaces.storage import IByteStorage
from filedrop.models.records import FileRecord, StorageKey

DEFAULT_CONTENT_TYPE = "application/octet-stream"

CONTENT_TYPES: Dict[str, str] = {
    '.pdf': 'application/pdf',
    '.jpg': 'image/jpeg',
    '.jpeg': 'image/jpeg',
    '.png': 'image/png',
    '.gif': 'image/gif',
    '.webp': 'image/webp',
    '.mp4': 'video/mp4',
    '.mpeg': 'video/mpeg',
    '.mov': 'video/quicktime',
}


def content_type_for(display_name: str) -> str:
    """Map a file name's extension to a content type (unknown -> binary)."""
    ext = PurePosixPath(display_name).suffix.lower()
    return CONTENT_TYPES.get(ext, DEFAULT_CONTENT_TYPE)


async def derive_record(storage: IByteStorage, key: StorageKey) -> FileRecord:
    """
    Compute a file's record from its stored object.

    Args:
        storage: Byte storage holding the object
        key: Key of an object expected to exist

    Returns:
        FileRecord for the object

    Raises:
        NotFoundError: If the object vanished before it could be stat'ed
    """
    stat = await storage.stat(key)

    return FileRecord(
        id=key.file_id,
        display_name=key.display_name,
        storage_key=key,
        size_bytes=stat.size_bytes,
        created_at=stat.created_at,
        content_type=content_type_for(key.display_name),
    )
