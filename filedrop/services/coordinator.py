"""Consistency coordinator.

Orchestrates byte storage, metadata derivation and the metadata cache so
uploads, downloads and listings see a coherent view.

Ordering rules:
- Durable writes/deletes complete before any cache mutation; a failed
  storage operation leaves the cache untouched.
- Upload caches the new record first and invalidates the listing last.
- Reads trust the cache only after confirming the object still exists;
  storage is always the fallback.

No locks: concurrent misses may derive and cache the same record or
listing twice, which is harmless since cache writes are full overwrites.
A listing rebuild is only cached if no invalidation happened while it
scanned storage (see CacheBackedMetadataStore.listing_generation).
"""
import asyncio
import logging
import secrets
from typing import AsyncIterator, List, Tuple

from filedrop.exceptions import NotFoundError
from filedrop.interfaces.storage import IByteStorage
from filedrop.models.records import FileRecord, StorageKey
from filedrop.services.metadata import derive_record
from filedrop.services.metadata_store import CacheBackedMetadataStore
from filedrop.utils.validators import sanitize_display_name, validate_upload

logger = logging.getLogger(__name__)


def generate_file_id() -> str:
    """128-bit random id, hex encoded."""
    return secrets.token_hex(16)


class ConsistencyCoordinator:
    """Entry point for upload / fetch / list / delete."""

    def __init__(self, storage: IByteStorage, metadata_store: CacheBackedMetadataStore):
        self.storage = storage
        self.metadata_store = metadata_store

    async def upload(self, content: bytes, display_name: str, content_type: str) -> FileRecord:
        """
        Validate, store durably, cache the record, invalidate the listing.

        Args:
            content: File bytes
            display_name: Client-supplied file name
            content_type: Declared MIME type (validated, not stored)

        Returns:
            The new FileRecord

        Raises:
            InvalidTypeError, TooLargeError, EmptyUploadError: Rejected upload
            StorageFailure: Durable write failed
        """
        validate_upload(len(content), content_type)

        key = StorageKey(
            file_id=generate_file_id(),
            display_name=sanitize_display_name(display_name)
        )

        await self.storage.store(key, content)
        record = await derive_record(self.storage, key)

        await self.metadata_store.put_record(record)
        await self.metadata_store.invalidate_listing()

        logger.info(f"✅ File uploaded: {record.display_name} → {record.id} ({record.size_bytes} bytes)")
        return record

    async def fetch_by_id(self, file_id: str) -> FileRecord:
        """
        Resolve a file id to its record, cache first.

        Raises:
            NotFoundError: If the file is not in storage
        """
        record = await self.metadata_store.get_record(file_id)

        if record is not None:
            if await self.storage.exists(record.storage_key):
                logger.debug(f"📦 Record cache hit: {file_id}")
                return record

            logger.warning(f"⚠️  Cached record for {file_id} points at a missing file, invalidating")
            await self.metadata_store.invalidate_record(file_id)

        key = await self._find_key(file_id)
        record = await derive_record(self.storage, key)
        await self.metadata_store.put_record(record)
        return record

    async def _find_key(self, file_id: str) -> StorageKey:
        # Linear scan; storage keys are not indexed by id
        for key in await self.storage.list_keys():
            if key.file_id == file_id:
                return key
        raise NotFoundError(f"File not found: {file_id}")

    async def open_download(self, file_id: str) -> Tuple[FileRecord, AsyncIterator[bytes]]:
        """
        Resolve a file and open its content for streaming.

        Lookup (and any cache repopulation) finishes before the stream is
        opened; the stream itself never touches the cache.

        Returns:
            (record, chunk iterator positioned at offset 0)

        Raises:
            NotFoundError: If the file is missing
        """
        record = await self.fetch_by_id(file_id)

        try:
            stream = await self.storage.open_read_stream(record.storage_key)
        except NotFoundError:
            # Removed between lookup and open
            await self.metadata_store.invalidate_record(file_id)
            raise

        logger.info(f"📥 Downloading: {record.display_name} ({record.id})")
        return record, stream

    async def list_all(self) -> Tuple[List[FileRecord], bool]:
        """
        All records, newest first.

        Returns:
            (records, was_cached)
        """
        cached = await self.metadata_store.get_listing()
        if cached is not None:
            logger.info("📦 Serving files list from cache")
            return cached, True

        generation = await self.metadata_store.listing_generation()
        keys = await self.storage.list_keys()
        results = await asyncio.gather(
            *(derive_record(self.storage, key) for key in keys),
            return_exceptions=True
        )

        records: List[FileRecord] = []
        for key, result in zip(keys, results):
            if isinstance(result, NotFoundError):
                logger.warning(f"⚠️  Skipping {key.file_id}: vanished during listing")
                continue
            if isinstance(result, BaseException):
                raise result
            records.append(result)

        # Stable sorts: id ascending breaks ties in created_at descending
        records.sort(key=lambda r: r.id)
        records.sort(key=lambda r: r.created_at, reverse=True)

        if await self.metadata_store.listing_generation() == generation:
            await self.metadata_store.put_listing(records)
        else:
            # An upload or delete landed mid-scan; this result may miss it
            logger.debug("Listing changed during rebuild, not caching it")

        logger.info(f"📋 Listed {len(records)} files")
        return records, False

    async def delete(self, file_id: str) -> FileRecord:
        """
        Remove a file and every cache entry that mentions it.

        Raises:
            NotFoundError: If the file is missing
            StorageFailure: Durable delete failed (cache left untouched)
        """
        record = await self.fetch_by_id(file_id)

        await self.storage.delete(record.storage_key)
        await self.metadata_store.invalidate_record(file_id)
        await self.metadata_store.invalidate_listing()

        logger.info(f"🗑️  File deleted: {record.display_name} ({record.id})")
        return record

    async def cache_available(self) -> bool:
        return await self.metadata_store.is_available()
