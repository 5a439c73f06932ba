from pathlib import Path

from camera_backend.config import UPLOADS_DIR

from .filesystem_storage import FileSystemStorage
from .photo_storage import PhotoStorage

__all__ = ["FileSystemStorage", "PhotoStorage", "get_storage_backend"]


def get_storage_backend(base_path: str | Path | None = None) -> PhotoStorage:
    """
    Factory for the blob storage backend.
    Defaults to the fixed uploads directory next to the package.
    """
    return FileSystemStorage(base_path if base_path is not None else UPLOADS_DIR)
