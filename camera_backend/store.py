import logging
import random
import threading
from collections.abc import Callable, Sequence
from datetime import datetime

from camera_backend.errors import StorageError, StorageWriteError
from camera_backend.models import DeleteResult, PhotoRecord
from camera_backend.storage import PhotoStorage
from camera_backend.utils.filenames import generate_filename, is_generated_filename
from camera_backend.utils.timestamps import iso_timestamp, utc_now

logger = logging.getLogger(__name__)

_MAX_NAME_ATTEMPTS = 5


class PhotoStore:
    """
    In-memory index of photo records backed by blobs in a PhotoStorage.

    The index lives only as long as this object. Records are appended on
    insert and removed on delete, never modified.
    """

    def __init__(
        self,
        storage: PhotoStorage,
        clock: Callable[[], datetime] = utc_now,
        rng: random.Random | None = None,
    ) -> None:
        self.storage = storage
        self._clock = clock
        self._rng = rng
        self._records: list[PhotoRecord] = []
        self._last_id = 0
        # Guards id assignment and every change to the index
        self._lock = threading.Lock()

    def count(self) -> int:
        return len(self._records)

    def _next_id(self, now: datetime) -> int:
        # Millisecond timestamp, bumped past the previous id on collision
        photo_id = max(int(now.timestamp() * 1000), self._last_id + 1)
        self._last_id = photo_id
        return photo_id

    def _new_filename(self, timestamp_ms: int) -> str:
        taken = {r.filename for r in self._records}
        for _ in range(_MAX_NAME_ATTEMPTS):
            filename = generate_filename(timestamp_ms, self._rng)
            if filename not in taken and self.storage.open_path(filename) is None:
                return filename
        error_message = "Could not allocate a unique photo filename"
        raise StorageWriteError(error_message)

    def insert(self, data: bytes, original_name: str, mime_type: str) -> PhotoRecord:
        with self._lock:
            now = self._clock()
            filename = self._new_filename(int(now.timestamp() * 1000))
            storage_path = self.storage.save(filename, data)
            record = PhotoRecord(
                id=self._next_id(now),
                filename=filename,
                original_name=original_name,
                storage_path=storage_path,
                size=len(data),
                mime_type=mime_type,
                created_at=iso_timestamp(now),
            )
            self._records.append(record)
        logger.info(
            "Stored photo %s (%d bytes) as %s", record.id, record.size, filename
        )
        return record

    def list(self) -> Sequence[PhotoRecord]:
        return tuple(self._records)

    def find_by_id(self, photo_id: int) -> PhotoRecord | None:
        for record in self._records:
            if record.id == photo_id:
                return record
        return None

    def find_by_filename(self, filename: str) -> PhotoRecord | None:
        if not is_generated_filename(filename):
            return None
        for record in self._records:
            if record.filename == filename:
                return record
        return None

    def delete_by_id(self, photo_id: int) -> DeleteResult | None:
        """
        Remove a record and its blob.

        Returns None if no record has this id. A blob that cannot be removed
        is logged and reported through ``file_removed``; the record is
        dropped from the index regardless.
        """
        with self._lock:
            record = self.find_by_id(photo_id)
            if record is None:
                return None
            self._records.remove(record)
        file_removed = True
        try:
            self.storage.delete(record.filename)
        except StorageError:
            logger.warning(
                "Error deleting file for photo %s (%s)",
                record.id,
                record.filename,
                exc_info=True,
            )
            file_removed = False
        logger.info("Deleted photo %s", record.id)
        return DeleteResult(record=record, file_removed=file_removed)
