import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse, JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR

from camera_backend.config import API_PREFIX, MAX_FILE_SIZE, MAX_FILE_SIZE_LABEL
from camera_backend.deps import get_photo_store
from camera_backend.errors import (
    FileTooLargeError,
    PhotoNotFoundError,
    UploadValidationError,
)
from camera_backend.models import PhotoRecord
from camera_backend.schemas import (
    DeleteResponse,
    ErrorResponse,
    PhotoListResponse,
    PhotoSummary,
    UploadedPhoto,
    UploadResponse,
)
from camera_backend.store import PhotoStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix=API_PREFIX)

PHOTO_NOT_FOUND = "Photo not found"


def _summary(record: PhotoRecord) -> PhotoSummary:
    return PhotoSummary(
        id=record.id,
        filename=record.filename,
        original_name=record.original_name,
        url=record.url,
        timestamp=record.created_at,
    )


async def _read_validated(photo: UploadFile) -> bytes:
    """
    Check the declared media type and size of an upload and read its bytes.
    The declared size is checked before anything is read; the read itself is
    capped one byte past the limit so an undeclared oversize body is caught too.
    """
    if not (photo.content_type or "").startswith("image/"):
        error_message = "Only image files are allowed!"
        raise UploadValidationError(error_message)
    too_large = f"File too large. Maximum size is {MAX_FILE_SIZE_LABEL}."
    if photo.size is not None and photo.size > MAX_FILE_SIZE:
        raise FileTooLargeError(too_large)
    data = await photo.read(MAX_FILE_SIZE + 1)
    if len(data) > MAX_FILE_SIZE:
        raise FileTooLargeError(too_large)
    return data


@router.get("/photos", response_model=PhotoListResponse)
def get_photos(
    store: Annotated[PhotoStore, Depends(get_photo_store)],
) -> PhotoListResponse:
    photos = [_summary(record) for record in store.list()]
    return PhotoListResponse(count=len(photos), photos=photos)


def _single_photo_part(parts: list[UploadFile | str]) -> UploadFile:
    """
    Pick the one file part named "photo". A text value or a file part
    without a filename counts as no file at all.
    """
    if len(parts) > 1:
        error_message = 'Unexpected field: only one "photo" file is allowed'
        raise UploadValidationError(error_message)
    photo = parts[0] if parts else None
    if not isinstance(photo, UploadFile) or not photo.filename:
        error_message = "No file uploaded"
        raise UploadValidationError(error_message)
    return photo


@router.post("/upload", response_model=UploadResponse)
async def upload_photo(
    request: Request,
    store: Annotated[PhotoStore, Depends(get_photo_store)],
) -> UploadResponse | JSONResponse:
    """
    Accept a single image in the multipart field "photo" and store it.
    """
    async with request.form() as form:
        photo = _single_photo_part(form.getlist("photo"))
        data = await _read_validated(photo)
    try:
        record = await run_in_threadpool(
            store.insert,
            data,
            photo.filename or "",
            photo.content_type or "",
        )
    except Exception as exc:  # noqa: BLE001
        logger.exception("Upload error")
        return JSONResponse(
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(message=f"Upload failed: {exc}").to_content(),
        )
    return UploadResponse(
        message="Photo uploaded successfully",
        photo=UploadedPhoto(
            id=record.id,
            filename=record.filename,
            url=record.url,
            timestamp=record.created_at,
        ),
    )


@router.get("/photos/{filename}", response_class=FileResponse)
def get_photo_file(
    filename: str,
    store: Annotated[PhotoStore, Depends(get_photo_store)],
) -> FileResponse:
    record = store.find_by_filename(filename)
    if record is None:
        raise PhotoNotFoundError(PHOTO_NOT_FOUND)
    file_path = store.storage.open_path(record.filename)
    if file_path is None:
        logger.warning("Blob missing on disk for photo %s", record.id)
        raise PhotoNotFoundError(PHOTO_NOT_FOUND)
    return FileResponse(file_path, media_type=record.mime_type)


@router.delete("/photos/{photo_id}", response_model=DeleteResponse)
def delete_photo(
    photo_id: str,
    store: Annotated[PhotoStore, Depends(get_photo_store)],
) -> DeleteResponse:
    try:
        parsed_id = int(photo_id)
    except ValueError as exc:
        raise PhotoNotFoundError(PHOTO_NOT_FOUND) from exc
    result = store.delete_by_id(parsed_id)
    if result is None:
        raise PhotoNotFoundError(PHOTO_NOT_FOUND)
    message = "Photo deleted successfully"
    if not result.file_removed:
        message = "Photo deleted, but its file could not be removed from disk"
    return DeleteResponse(message=message, file_removed=result.file_removed)
