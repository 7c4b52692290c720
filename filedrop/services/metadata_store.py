"""Cache-backed metadata store.

Typed get/put/invalidate for single file records and the aggregate
listing on top of a byte-oriented cache backend.

Every backend call goes through _best_effort(): a CacheFailure is logged
and turned into the miss / no-op result, so callers never see cache
errors and the service keeps working with the cache fully down.
"""
import logging
import secrets
from typing import Any, Awaitable, List, Optional

from pydantic import ValidationError

from filedrop.config import settings
from filedrop.exceptions import CacheFailure
from filedrop.interfaces.storage import ICacheBackend
from filedrop.models.records import FileListingAdapter, FileRecord

logger = logging.getLogger(__name__)

LISTING_CACHE_KEY = "files:list"
LISTING_GENERATION_KEY = "files:list:generation"


def record_cache_key(file_id: str) -> str:
    return f"file:{file_id}"


class CacheBackedMetadataStore:
    """Metadata cache for file records and the file listing."""

    def __init__(
        self,
        backend: ICacheBackend,
        record_ttl: Optional[int] = None,
        listing_ttl: Optional[int] = None
    ):
        """
        Args:
            backend: Key/value cache backend
            record_ttl: TTL for single records (default: settings, 1 hour)
            listing_ttl: TTL for the listing (default: settings, 5 minutes)
        """
        self.backend = backend
        self.record_ttl = settings.RECORD_CACHE_TTL_SECONDS if record_ttl is None else record_ttl
        self.listing_ttl = settings.LISTING_CACHE_TTL_SECONDS if listing_ttl is None else listing_ttl

    async def _best_effort(self, operation: Awaitable[Any], default: Any = None) -> Any:
        """Await a backend call; on CacheFailure log and return default."""
        try:
            return await operation
        except CacheFailure as e:
            logger.warning(f"⚠️  Cache unavailable, continuing without it: {e}")
            return default

    # Single records

    async def get_record(self, file_id: str) -> Optional[FileRecord]:
        raw = await self._best_effort(self.backend.get(record_cache_key(file_id)))
        if raw is None:
            return None

        try:
            return FileRecord.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"⚠️  Discarding undecodable cache entry for {file_id}: {e}")
            return None

    async def put_record(self, record: FileRecord, ttl: Optional[int] = None) -> None:
        await self._best_effort(
            self.backend.set_with_ttl(
                record_cache_key(record.id),
                record.model_dump_json().encode('utf-8'),
                self.record_ttl if ttl is None else ttl
            )
        )

    async def invalidate_record(self, file_id: str) -> None:
        await self._best_effort(self.backend.delete(record_cache_key(file_id)))

    # Aggregate listing

    async def get_listing(self) -> Optional[List[FileRecord]]:
        raw = await self._best_effort(self.backend.get(LISTING_CACHE_KEY))
        if raw is None:
            return None

        try:
            return FileListingAdapter.validate_json(raw)
        except ValidationError as e:
            logger.warning(f"⚠️  Discarding undecodable cached listing: {e}")
            return None

    async def put_listing(self, records: List[FileRecord], ttl: Optional[int] = None) -> None:
        await self._best_effort(
            self.backend.set_with_ttl(
                LISTING_CACHE_KEY,
                FileListingAdapter.dump_json(records),
                self.listing_ttl if ttl is None else ttl
            )
        )

    async def invalidate_listing(self) -> None:
        """Drop the cached listing and move the listing generation on."""
        await self._best_effort(
            self.backend.set_with_ttl(
                LISTING_GENERATION_KEY,
                secrets.token_hex(8).encode('utf-8'),
                self.listing_ttl
            )
        )
        await self._best_effort(self.backend.delete(LISTING_CACHE_KEY))

    async def listing_generation(self) -> Optional[bytes]:
        """
        Opaque token that changes on every invalidate_listing().

        A rebuild reads it before scanning storage and caches its result
        only if the token is unchanged afterwards, so a listing that
        predates a concurrent upload or delete is not written back.
        """
        return await self._best_effort(self.backend.get(LISTING_GENERATION_KEY))

    async def is_available(self) -> bool:
        """Backend reachability (uncached)."""
        return bool(await self._best_effort(self.backend.ping(), default=False))
