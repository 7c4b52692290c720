"""Metadata records shared by storage, cache and API layers."""
from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, TypeAdapter


class StorageKey(BaseModel):
    """
    Structured reference to a stored object.

    The on-disk name that combines both fields is private to the storage
    implementation; the rest of the service works with the fields.
    """

    model_config = ConfigDict(frozen=True)

    file_id: str
    display_name: str


class StorageStat(BaseModel):
    """Physical metadata reported by byte storage."""

    size_bytes: int
    created_at: datetime


class FileRecord(BaseModel):
    """Descriptive metadata for one uploaded file."""

    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
    storage_key: StorageKey
    size_bytes: int
    created_at: datetime
    content_type: str


# Cache encoding for the aggregate listing
FileListingAdapter = TypeAdapter(List[FileRecord])
