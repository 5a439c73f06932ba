from typing import Annotated

from fastapi import APIRouter, Depends

from camera_backend.config import (
    API_PREFIX,
    MAX_FILE_SIZE_LABEL,
    SERVER_NAME,
    VERSION,
    Settings,
)
from camera_backend.deps import get_app_settings, get_photo_store
from camera_backend.schemas import HealthResponse, ServerInfo, ServerInfoResponse
from camera_backend.store import PhotoStore
from camera_backend.utils.timestamps import iso_timestamp

router = APIRouter(prefix=API_PREFIX)


@router.get("/health", response_model=HealthResponse)
def health(
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> HealthResponse:
    return HealthResponse(
        status="Server is running!",
        timestamp=iso_timestamp(),
        environment=settings.environment,
    )


@router.get("/info", response_model=ServerInfoResponse)
def info(
    settings: Annotated[Settings, Depends(get_app_settings)],
    store: Annotated[PhotoStore, Depends(get_photo_store)],
) -> ServerInfoResponse:
    """
    Static server metadata plus the current photo count.
    """
    return ServerInfoResponse(
        data=ServerInfo(
            server=SERVER_NAME,
            version=VERSION,
            environment=settings.environment,
            uploads_directory=store.storage.location,
            total_photos=store.count(),
            max_file_size=MAX_FILE_SIZE_LABEL,
        )
    )
