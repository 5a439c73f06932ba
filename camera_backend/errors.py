class UploadValidationError(Exception):
    """Raised when an upload is rejected before it reaches the photo store."""


class FileTooLargeError(UploadValidationError):
    """Raised when an upload exceeds the maximum file size."""


class PhotoNotFoundError(Exception):
    """Raised when no photo matches the requested id or filename."""


class StorageError(Exception):
    """Base class for blob storage failures."""


class StorageWriteError(StorageError):
    """Raised when a photo blob cannot be written to disk."""


class UnsafePathError(StorageError):
    """Raised when a storage path would resolve outside the storage directory."""
