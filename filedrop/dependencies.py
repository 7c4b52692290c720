"""Dependency injection for services.

Storage root and the Redis client are process-lifetime singletons:
created lazily here, initialized by init_resources() at startup and
released by close_resources() at shutdown.
"""
import logging

from filedrop.implementations.disk_storage import DiskByteStorage
from filedrop.implementations.redis_cache import RedisCacheBackend
from filedrop.services.coordinator import ConsistencyCoordinator
from filedrop.services.metadata_store import CacheBackedMetadataStore

logger = logging.getLogger(__name__)

# Singletons
_storage = None
_cache_backend = None
_metadata_store = None
_coordinator = None


def get_storage() -> DiskByteStorage:
    """
    Get durable byte storage (singleton).

    Returns:
        DiskByteStorage rooted at settings.UPLOAD_DIR
    """
    global _storage
    if _storage is None:
        _storage = DiskByteStorage()
    return _storage


def get_cache_backend() -> RedisCacheBackend:
    """
    Get cache backend (singleton).

    Returns:
        RedisCacheBackend for settings.REDIS_URL
    """
    global _cache_backend
    if _cache_backend is None:
        _cache_backend = RedisCacheBackend()
    return _cache_backend


def get_metadata_store() -> CacheBackedMetadataStore:
    global _metadata_store
    if _metadata_store is None:
        _metadata_store = CacheBackedMetadataStore(get_cache_backend())
    return _metadata_store


def get_coordinator() -> ConsistencyCoordinator:
    """
    Get consistency coordinator (singleton).

    Returns:
        ConsistencyCoordinator wired to the storage and metadata store singletons
    """
    global _coordinator
    if _coordinator is None:
        _coordinator = ConsistencyCoordinator(
            storage=get_storage(),
            metadata_store=get_metadata_store()
        )
    return _coordinator


async def init_resources() -> None:
    """Prepare process-lifetime resources (upload directory)."""
    await get_storage().initialize()


async def close_resources() -> None:
    """Release process-lifetime resources and forget the singletons."""
    global _storage, _cache_backend, _metadata_store, _coordinator

    if _cache_backend is not None:
        await _cache_backend.close()

    _storage = None
    _cache_backend = None
    _metadata_store = None
    _coordinator = None
