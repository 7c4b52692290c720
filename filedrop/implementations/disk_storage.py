"""Local-disk byte storage.

Stored File Name Format:
    "{file_id}_{display_name}"
    Example: "9f2c...e1_report.pdf"

    The file id is hex and never contains the separator, so the first
    separator splits the name unambiguously. Names are encoded and decoded
    only here; callers work with StorageKey.
"""
import asyncio
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator, List, Optional

import aiofiles

from filedrop.config import settings
from filedrop.exceptions import NotFoundError, StorageFailure
from filedrop.models.records import StorageKey, StorageStat

logger = logging.getLogger(__name__)

# Separator between file id and display name in stored file names
STORAGE_NAME_SEPARATOR = "_"

# In-progress writes are hidden from listings by the leading dot
_PARTIAL_PREFIX = "."
_PARTIAL_SUFFIX = ".part"


def encode_storage_name(key: StorageKey) -> str:
    """Build the on-disk file name for a key."""
    return f"{key.file_id}{STORAGE_NAME_SEPARATOR}{key.display_name}"


def decode_storage_name(name: str) -> Optional[StorageKey]:
    """
    Parse an on-disk file name back into a key.

    Returns:
        StorageKey, or None for names this storage did not write
        (hidden files, partial writes, names without an id prefix)
    """
    if name.startswith(_PARTIAL_PREFIX):
        return None

    file_id, sep, display_name = name.partition(STORAGE_NAME_SEPARATOR)
    if not sep or not file_id or not display_name:
        return None

    return StorageKey(file_id=file_id, display_name=display_name)


class DiskByteStorage:
    """
    Durable storage of file content in a single directory.

    Blocking filesystem calls run in worker threads (aiofiles,
    asyncio.to_thread) so the event loop keeps serving other requests.
    """

    def __init__(self, root: Optional[Path] = None, chunk_size: Optional[int] = None):
        """
        Args:
            root: Upload directory (defaults to settings.UPLOAD_DIR)
            chunk_size: Default read chunk size for downloads
        """
        self.root = Path(root or settings.UPLOAD_DIR)
        self.chunk_size = chunk_size or settings.DOWNLOAD_CHUNK_SIZE

    async def initialize(self) -> None:
        """Create the upload directory if it doesn't exist."""
        if await asyncio.to_thread(self.root.is_dir):
            logger.info(f"✅ Upload directory exists: {self.root}")
            return

        try:
            await asyncio.to_thread(self.root.mkdir, parents=True, exist_ok=True)
        except OSError as e:
            raise StorageFailure(f"Cannot create upload directory: {e}") from e
        logger.info(f"✅ Created upload directory: {self.root}")

    def _path_for(self, key: StorageKey) -> Path:
        name = encode_storage_name(key)
        # Display names are reduced to a bare file name before they get here
        if Path(name).name != name:
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.root / name

    async def store(self, key: StorageKey, content: bytes) -> StorageKey:
        """Write content to a hidden partial file, then rename into place."""
        path = self._path_for(key)
        partial = self.root / f"{_PARTIAL_PREFIX}{path.name}{_PARTIAL_SUFFIX}"

        try:
            async with aiofiles.open(partial, mode='wb') as f:
                await f.write(content)
            await asyncio.to_thread(os.replace, partial, path)
        except (OSError, ValueError) as e:
            logger.error(f"❌ Failed to store {key.file_id}: {e}")
            try:
                await asyncio.to_thread(partial.unlink, missing_ok=True)
            except (OSError, ValueError) as cleanup_error:
                logger.warning(f"⚠️  Could not remove partial file for {key.file_id}: {cleanup_error}")
            raise StorageFailure(f"Failed to store file {key.file_id}") from e

        logger.debug(f"💾 Stored {key.file_id} ({len(content)} bytes)")
        return key

    async def stat(self, key: StorageKey) -> StorageStat:
        path = self._path_for(key)
        try:
            st = await asyncio.to_thread(path.stat)
        except FileNotFoundError as e:
            raise NotFoundError(f"File not found: {key.file_id}") from e
        except (OSError, ValueError) as e:
            raise StorageFailure(f"Failed to stat file {key.file_id}") from e

        # Birth time where the platform reports it; content is never
        # rewritten after the rename, so mtime is equivalent elsewhere
        created = getattr(st, 'st_birthtime', None) or st.st_mtime

        return StorageStat(
            size_bytes=st.st_size,
            created_at=datetime.fromtimestamp(created, tz=timezone.utc)
        )

    async def exists(self, key: StorageKey) -> bool:
        try:
            path = self._path_for(key)
        except ValueError:
            return False
        return await asyncio.to_thread(path.is_file)

    async def list_keys(self) -> List[StorageKey]:
        def _scan_sync():
            keys = []
            with os.scandir(self.root) as entries:
                for entry in entries:
                    if not entry.is_file():
                        continue
                    key = decode_storage_name(entry.name)
                    if key is None:
                        logger.debug(f"Skipping foreign file in upload dir: {entry.name}")
                        continue
                    keys.append(key)
            return keys

        try:
            return await asyncio.to_thread(_scan_sync)
        except OSError as e:
            raise StorageFailure("Failed to list upload directory") from e

    async def open_read_stream(
        self,
        key: StorageKey,
        chunk_size: Optional[int] = None
    ) -> AsyncIterator[bytes]:
        path = self._path_for(key)
        try:
            handle = await aiofiles.open(path, mode='rb')
        except FileNotFoundError as e:
            raise NotFoundError(f"File not found: {key.file_id}") from e
        except (OSError, ValueError) as e:
            raise StorageFailure(f"Failed to open file {key.file_id}") from e

        return self._iter_chunks(handle, chunk_size or self.chunk_size)

    @staticmethod
    async def _iter_chunks(handle, chunk_size: int) -> AsyncIterator[bytes]:
        # finally runs on exhaustion and on aclose() after a client disconnect
        try:
            while True:
                chunk = await handle.read(chunk_size)
                if not chunk:
                    break
                yield chunk
        finally:
            await handle.close()

    async def delete(self, key: StorageKey) -> bool:
        path = self._path_for(key)
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError:
            return False
        except (OSError, ValueError) as e:
            raise StorageFailure(f"Failed to delete file {key.file_id}") from e

        logger.info(f"🗑️  Deleted stored file: {key.file_id}")
        return True
