"""Unit tests for metadata derivation."""
import pytest

from filedrop.exceptions import NotFoundError
from filedrop.models.records import StorageKey
from filedrop.services.metadata import content_type_for, derive_record
from tests.conftest import BASE_TIME


@pytest.mark.parametrize("name,expected", [
    ("a.pdf", "application/pdf"),
    ("photo.JPG", "image/jpeg"),
    ("photo.jpeg", "image/jpeg"),
    ("img.png", "image/png"),
    ("anim.gif", "image/gif"),
    ("pic.webp", "image/webp"),
    ("clip.mp4", "video/mp4"),
    ("clip.mpeg", "video/mpeg"),
    ("clip.MOV", "video/quicktime"),
    ("archive.tar.gz", "application/octet-stream"),
    ("README", "application/octet-stream"),
    (".hidden", "application/octet-stream"),
])
def test_content_type_for(name, expected):
    assert content_type_for(name) == expected


@pytest.mark.asyncio
async def test_derive_record(memory_storage):
    key = memory_storage.put("abc123", "my_report.pdf", b"12345")

    record = await derive_record(memory_storage, key)

    assert record.id == "abc123"
    assert record.display_name == "my_report.pdf"
    assert record.storage_key == key
    assert record.size_bytes == 5
    assert record.created_at == BASE_TIME
    assert record.content_type == "application/pdf"


@pytest.mark.asyncio
async def test_derive_record_unknown_extension(memory_storage):
    key = memory_storage.put("abc123", "data.bin")
    record = await derive_record(memory_storage, key)
    assert record.content_type == "application/octet-stream"


@pytest.mark.asyncio
async def test_derive_record_missing(memory_storage):
    with pytest.raises(NotFoundError):
        await derive_record(memory_storage, StorageKey(file_id="nope", display_name="a.pdf"))
