"""Custom exceptions for filedrop."""


class FileDropError(Exception):
    """Base exception for filedrop."""
    pass


class NotFoundError(FileDropError):
    """Raised when a file is absent from both cache and durable storage."""
    pass


class UploadRejectedError(FileDropError):
    """Raised when an upload fails validation. Nothing is written."""
    pass


class InvalidTypeError(UploadRejectedError):
    """Raised when the declared content type is not permitted."""
    pass


class TooLargeError(UploadRejectedError):
    """Raised when the upload exceeds the size limit."""
    pass


class EmptyUploadError(UploadRejectedError):
    """Raised when an upload carries no content."""
    pass


class StorageFailure(FileDropError):
    """Raised when a durable storage operation fails."""
    pass


class CacheFailure(FileDropError):
    """Raised by cache backends; always absorbed by the metadata store."""
    pass
