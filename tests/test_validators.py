"""Unit tests for input validators."""
import pytest

from filedrop.exceptions import EmptyUploadError, InvalidTypeError, TooLargeError
from filedrop.utils.validators import (
    MAX_DISPLAY_NAME_BYTES,
    sanitize_display_name,
    validate_upload,
)

MB = 1024 * 1024


@pytest.mark.parametrize("content_type", [
    "application/pdf",
    "image/jpeg", "image/png", "image/gif", "image/webp",
    "video/mp4", "video/mpeg", "video/quicktime",
])
def test_allowed_types(content_type):
    validate_upload(10, content_type)


@pytest.mark.parametrize("content_type", ["application/zip", "text/plain", "image/svg+xml", ""])
def test_rejected_types(content_type):
    with pytest.raises(InvalidTypeError):
        validate_upload(10, content_type)


def test_size_limit():
    validate_upload(100 * MB, "video/mp4")
    with pytest.raises(TooLargeError):
        validate_upload(100 * MB + 1, "video/mp4")
    with pytest.raises(TooLargeError):
        validate_upload(101 * MB, "application/pdf")


def test_type_checked_before_size():
    with pytest.raises(InvalidTypeError):
        validate_upload(101 * MB, "application/zip")


def test_empty():
    with pytest.raises(EmptyUploadError):
        validate_upload(0, "application/pdf")


@pytest.mark.parametrize("raw,expected", [
    ("a.pdf", "a.pdf"),
    ("dir/sub/a.pdf", "a.pdf"),
    ("../../etc/passwd", "passwd"),
    ("C:\\Users\\me\\photo.png", "photo.png"),
    ("  spaced.pdf ", "spaced.pdf"),
    ("", "unnamed"),
    ("..", "unnamed"),
])
def test_sanitize_display_name(raw, expected):
    assert sanitize_display_name(raw) == expected


@pytest.mark.parametrize("raw,expected", [
    ("a\x00b.pdf", "ab.pdf"),
    ("re\tport\r\n.pdf", "report.pdf"),
    ("\x00\x01", "unnamed"),
    ("dir/\x00../a.pdf", "a.pdf"),
])
def test_sanitize_drops_control_characters(raw, expected):
    assert sanitize_display_name(raw) == expected


def test_sanitize_caps_length_keeping_extension():
    name = sanitize_display_name("x" * 300 + ".pdf")

    assert len(name.encode("utf-8")) == MAX_DISPLAY_NAME_BYTES
    assert name.endswith(".pdf")
    assert name.startswith("xxx")


def test_sanitize_truncates_on_character_boundary():
    name = sanitize_display_name("x" + "\u00e9" * 150 + ".png")

    assert len(name.encode("utf-8")) <= MAX_DISPLAY_NAME_BYTES
    assert name.endswith(".png")
    assert set(name[1:-4]) == {"\u00e9"}


def test_sanitize_drops_oversized_extension():
    name = sanitize_display_name("a." + "x" * 300)

    assert len(name.encode("utf-8")) == MAX_DISPLAY_NAME_BYTES
    assert name.startswith("a.xxx")


def test_sanitize_keeps_short_names_untouched():
    name = "x" * MAX_DISPLAY_NAME_BYTES
    assert sanitize_display_name(name) == name
