"""Pytest configuration and shared fixtures."""
import time
from datetime import datetime, timedelta, timezone
from typing import AsyncIterator, Dict, List, Optional, Tuple

import pytest

from filedrop.exceptions import CacheFailure, NotFoundError, StorageFailure
from filedrop.implementations.disk_storage import DiskByteStorage
from filedrop.models.records import StorageKey, StorageStat
from filedrop.services.coordinator import ConsistencyCoordinator
from filedrop.services.metadata_store import CacheBackedMetadataStore


# =============================================================================
# Cache backend fake
# =============================================================================

class InMemoryCacheBackend:
    """Dict-backed cache with expiry and switchable failure mode."""

    def __init__(self):
        self.data: Dict[str, bytes] = {}
        self.ttls: Dict[str, int] = {}
        self._expires: Dict[str, float] = {}
        self.available = True
        self.calls: List[Tuple[str, str]] = []

    def _check(self, op: str, key: str = ""):
        self.calls.append((op, key))
        if not self.available:
            raise CacheFailure(f"{op} {key}: connection refused")

    async def get(self, key: str) -> Optional[bytes]:
        self._check("get", key)
        if key in self._expires and self._expires[key] <= time.monotonic():
            self.expire(key)
        return self.data.get(key)

    async def set_with_ttl(self, key: str, value: bytes, ttl_seconds: int) -> None:
        self._check("set", key)
        self.data[key] = value
        self.ttls[key] = ttl_seconds
        self._expires[key] = time.monotonic() + ttl_seconds

    async def delete(self, key: str) -> None:
        self._check("delete", key)
        self.expire(key)

    async def ping(self) -> bool:
        self._check("ping")
        return True

    async def close(self) -> None:
        pass

    def expire(self, key: str) -> None:
        """Drop a key as if its TTL ran out."""
        self.data.pop(key, None)
        self.ttls.pop(key, None)
        self._expires.pop(key, None)

    def clear(self) -> None:
        for key in list(self.data):
            self.expire(key)


# =============================================================================
# Byte storage fake
# =============================================================================

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


class InMemoryByteStorage:
    """Byte storage fake with controllable creation times and faults."""

    def __init__(self):
        self.objects: Dict[StorageKey, Tuple[bytes, datetime]] = {}
        self.next_created_at = BASE_TIME
        self.fail_writes = False
        self.vanish_on_stat: set = set()
        self.open_streams = 0

    def _tick(self) -> datetime:
        created = self.next_created_at
        self.next_created_at = created + timedelta(seconds=1)
        return created

    def put(self, file_id: str, display_name: str, content: bytes = b"x",
            created_at: Optional[datetime] = None) -> StorageKey:
        """Place an object directly (bypassing the coordinator)."""
        key = StorageKey(file_id=file_id, display_name=display_name)
        self.objects[key] = (content, created_at or self._tick())
        return key

    def remove_out_of_band(self, key: StorageKey) -> None:
        self.objects.pop(key, None)

    async def store(self, key: StorageKey, content: bytes) -> StorageKey:
        if self.fail_writes:
            raise StorageFailure("disk full")
        self.objects[key] = (content, self._tick())
        return key

    async def stat(self, key: StorageKey) -> StorageStat:
        if key.file_id in self.vanish_on_stat or key not in self.objects:
            raise NotFoundError(f"File not found: {key.file_id}")
        content, created_at = self.objects[key]
        return StorageStat(size_bytes=len(content), created_at=created_at)

    async def exists(self, key: StorageKey) -> bool:
        return key in self.objects

    async def list_keys(self) -> List[StorageKey]:
        return list(self.objects)

    async def open_read_stream(self, key: StorageKey, chunk_size: Optional[int] = None) -> AsyncIterator[bytes]:
        if key not in self.objects:
            raise NotFoundError(f"File not found: {key.file_id}")
        content = self.objects[key][0]
        size = chunk_size or 4
        self.open_streams += 1

        async def _chunks():
            try:
                for i in range(0, len(content), size):
                    yield content[i:i + size]
            finally:
                self.open_streams -= 1

        return _chunks()

    async def delete(self, key: StorageKey) -> bool:
        return self.objects.pop(key, None) is not None


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def cache_backend():
    return InMemoryCacheBackend()


@pytest.fixture
def metadata_store(cache_backend):
    return CacheBackedMetadataStore(cache_backend, record_ttl=3600, listing_ttl=300)


@pytest.fixture
def memory_storage():
    return InMemoryByteStorage()


@pytest.fixture
def coordinator(memory_storage, metadata_store):
    """Coordinator over in-memory fakes."""
    return ConsistencyCoordinator(storage=memory_storage, metadata_store=metadata_store)


@pytest.fixture
def disk_storage(tmp_path):
    """Disk storage rooted in a temp upload directory."""
    return DiskByteStorage(root=tmp_path / "uploads", chunk_size=4)


@pytest.fixture
def disk_coordinator(disk_storage, metadata_store):
    """Coordinator over real disk storage (upload dir created)."""
    disk_storage.root.mkdir(parents=True)
    return ConsistencyCoordinator(storage=disk_storage, metadata_store=metadata_store)
