from abc import ABC, abstractmethod
from pathlib import Path


class PhotoStorage(ABC):
    """
    Interface for photo blob storage backends.
    """

    @property
    @abstractmethod
    def location(self) -> str:
        """
        Human-readable description of where blobs are kept.
        """
        error_message = "location not implemented"
        raise NotImplementedError(error_message)

    @abstractmethod
    def save(self, filename: str, data: bytes) -> Path:
        """
        Persist data under filename and return the path it was written to.
        Must not leave a partial blob behind when the write fails.
        """
        error_message = "save not implemented"
        raise NotImplementedError(error_message)

    @abstractmethod
    def open_path(self, filename: str) -> Path | None:
        """
        Resolve filename to an existing blob path, or None if it is absent.
        """
        error_message = "open_path not implemented"
        raise NotImplementedError(error_message)

    @abstractmethod
    def delete(self, filename: str) -> None:
        """
        Remove the blob stored under filename.
        """
        error_message = "delete not implemented"
        raise NotImplementedError(error_message)
