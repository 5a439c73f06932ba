from dataclasses import dataclass
from pathlib import Path

from camera_backend.config import API_PREFIX


@dataclass(frozen=True)
class PhotoRecord:
    id: int
    filename: str
    original_name: str
    storage_path: Path
    size: int
    mime_type: str
    created_at: str

    @property
    def url(self) -> str:
        return f"{API_PREFIX}/photos/{self.filename}"


@dataclass(frozen=True)
class DeleteResult:
    record: PhotoRecord
    file_removed: bool
