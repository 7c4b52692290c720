"""Input validation utilities."""
import unicodedata
from pathlib import PurePosixPath, PureWindowsPath

from filedrop.config import settings
from filedrop.exceptions import EmptyUploadError, InvalidTypeError, TooLargeError

DEFAULT_DISPLAY_NAME = "unnamed"

# Stored names are "{32-hex id}_{display name}", written via a hidden
# ".{name}.part" file; 200 bytes keeps that under the usual 255-byte limit
MAX_DISPLAY_NAME_BYTES = 200


def validate_upload(size: int, content_type: str) -> None:
    """
    Check an upload against the permitted types and size limit.

    Args:
        size: Content length in bytes
        content_type: Declared MIME type

    Raises:
        InvalidTypeError: If content type is not permitted
        TooLargeError: If size exceeds MAX_FILE_SIZE_MB
        EmptyUploadError: If there is no content
    """
    if content_type not in settings.ALLOWED_FILE_TYPES:
        raise InvalidTypeError(
            "Invalid file type. Only PDF, images, and videos are allowed."
        )

    if size > settings.max_file_size_bytes:
        raise TooLargeError(
            f"File size too large. Maximum size is {settings.MAX_FILE_SIZE_MB}MB."
        )

    if size == 0:
        raise EmptyUploadError("No file uploaded")


def sanitize_display_name(filename: str) -> str:
    """
    Reduce a client-supplied file name to something safe to store.

    Keeps only the final path component, handling both / and \\ separators
    (browsers on Windows may send full paths). Control characters,
    including NUL, are dropped, and the result is capped at
    MAX_DISPLAY_NAME_BYTES of UTF-8 with the extension kept. Returns
    "unnamed" when nothing usable is left.
    """
    cleaned = "".join(
        ch for ch in (filename or "")
        if unicodedata.category(ch) not in ("Cc", "Cs")
    )
    name = PureWindowsPath(cleaned).name.strip()
    if name in ("", ".", ".."):
        return DEFAULT_DISPLAY_NAME
    return _truncate_name(name, MAX_DISPLAY_NAME_BYTES)


def _truncate_name(name: str, limit: int) -> str:
    if len(name.encode('utf-8')) <= limit:
        return name

    suffix = PurePosixPath(name).suffix
    if len(suffix.encode('utf-8')) >= limit:
        suffix = ""
    stem = name[:len(name) - len(suffix)]

    budget = limit - len(suffix.encode('utf-8'))
    # Cut on a character boundary
    stem = stem.encode('utf-8')[:budget].decode('utf-8', 'ignore')
    return stem + suffix
