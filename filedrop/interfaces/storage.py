"""Collaborator interfaces for durable byte storage and the metadata cache."""
from typing import AsyncIterator, List, Optional, Protocol

from filedrop.models.records import StorageKey, StorageStat


class IByteStorage(Protocol):
    """Durable file content (source of truth)."""

    async def store(self, key: StorageKey, content: bytes) -> StorageKey:
        """
        Persist content under key.

        Raises:
            StorageFailure: If the write does not complete
        """
        ...

    async def stat(self, key: StorageKey) -> StorageStat:
        """
        Get size and creation time for a stored object.

        Raises:
            NotFoundError: If the object does not exist
        """
        ...

    async def exists(self, key: StorageKey) -> bool:
        """Check whether the object is physically present."""
        ...

    async def list_keys(self) -> List[StorageKey]:
        """Enumerate stored objects (order unspecified)."""
        ...

    async def open_read_stream(
        self,
        key: StorageKey,
        chunk_size: Optional[int] = None
    ) -> AsyncIterator[bytes]:
        """
        Open the object for reading from offset 0.

        The object is opened before this returns; iterating yields chunks
        and closing the iterator releases the underlying handle.

        Raises:
            NotFoundError: If the object does not exist
        """
        ...

    async def delete(self, key: StorageKey) -> bool:
        """Remove the object. Returns False if it was already gone."""
        ...


class ICacheBackend(Protocol):
    """
    Byte-string key/value cache with expiry.

    Implementations raise CacheFailure for any backend error.
    """

    async def get(self, key: str) -> Optional[bytes]:
        """Get a value, None on miss."""
        ...

    async def set_with_ttl(self, key: str, value: bytes, ttl_seconds: int) -> None:
        """Set a value that expires after ttl_seconds."""
        ...

    async def delete(self, key: str) -> None:
        """Delete a key (no-op if absent)."""
        ...

    async def ping(self) -> bool:
        """Round-trip to the backend."""
        ...

    async def close(self) -> None:
        """Release connections."""
        ...
