import contextlib
import logging
from pathlib import Path

from camera_backend.errors import StorageError, StorageWriteError, UnsafePathError

from .photo_storage import PhotoStorage

logger = logging.getLogger(__name__)


class FileSystemStorage(PhotoStorage):
    """
    Photo storage using the local filesystem.

    Every filename is resolved against the storage directory and refused if it
    would land anywhere else, so callers never need to trust their input.
    """

    def __init__(self, base_path: str | Path = ".") -> None:
        self.base_path = Path(base_path).resolve()

    @property
    def location(self) -> str:
        return str(self.base_path)

    def _resolve(self, filename: str) -> Path:
        if (
            not filename
            or filename in (".", "..")
            or "/" in filename
            or "\\" in filename
            or "\x00" in filename
        ):
            error_message = f"Refusing unsafe filename: {filename!r}"
            raise UnsafePathError(error_message)
        file_path = (self.base_path / filename).resolve()
        if file_path.parent != self.base_path:
            error_message = f"Refusing path outside storage directory: {filename!r}"
            raise UnsafePathError(error_message)
        return file_path

    def save(self, filename: str, data: bytes) -> Path:
        file_path = self._resolve(filename)
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
            # "x" so an existing blob is never overwritten
            with file_path.open("xb") as fh:
                fh.write(data)
        except OSError as exc:
            if not isinstance(exc, FileExistsError):
                with contextlib.suppress(OSError):
                    file_path.unlink(missing_ok=True)
            error_message = f"Failed to write {filename}: {exc}"
            raise StorageWriteError(error_message) from exc
        return file_path

    def open_path(self, filename: str) -> Path | None:
        try:
            file_path = self._resolve(filename)
        except UnsafePathError:
            logger.warning("Rejected unsafe photo path %r", filename)
            return None
        return file_path if file_path.is_file() else None

    def delete(self, filename: str) -> None:
        file_path = self._resolve(filename)
        try:
            file_path.unlink(missing_ok=True)
        except OSError as exc:
            error_message = f"Failed to delete {filename}: {exc}"
            raise StorageError(error_message) from exc
