import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_405_METHOD_NOT_ALLOWED,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from camera_backend.config import (
    API_PREFIX,
    Settings,
    configure_logging,
    get_settings,
)
from camera_backend.errors import PhotoNotFoundError, UploadValidationError
from camera_backend.routers.photos import router as photos_router
from camera_backend.routers.system import router as system_router
from camera_backend.schemas import ErrorResponse
from camera_backend.storage import get_storage_backend
from camera_backend.store import PhotoStore

load_dotenv()

logger = logging.getLogger(__name__)


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """Convert any exception escaping a route into a JSON 500 response.
    The failure is logged with its traceback; the client only sees the message."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            logger.exception(
                "Unhandled error on %s %s", request.method, request.url.path
            )
            return JSONResponse(
                status_code=HTTP_500_INTERNAL_SERVER_ERROR,
                content=ErrorResponse(message=str(exc)).to_content(),
            )


async def upload_validation_handler(
    _request: Request, exc: Exception
) -> JSONResponse:
    logger.info("Rejected upload: %s", exc)
    return JSONResponse(
        status_code=HTTP_400_BAD_REQUEST,
        content=ErrorResponse(message=str(exc)).to_content(),
    )


async def photo_not_found_handler(_request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=HTTP_404_NOT_FOUND,
        content=ErrorResponse(message=str(exc)).to_content(),
    )


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Unknown paths and known paths hit with the wrong method are both
    reported as an unmatched route, echoing the path and method.
    """
    status_code = getattr(exc, "status_code", HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code in (HTTP_404_NOT_FOUND, HTTP_405_METHOD_NOT_ALLOWED):
        return JSONResponse(
            status_code=HTTP_404_NOT_FOUND,
            content=ErrorResponse(message="Route not found").to_content(
                path=request.url.path,
                method=request.method,
            ),
        )
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=str(getattr(exc, "detail", exc))).to_content(),
    )


def create_app(
    settings: Settings | None = None,
    uploads_dir: str | Path | None = None,
) -> FastAPI:
    """
    Composition root: build the photo store and wire it into a new app.
    The store's index is in memory, so it starts empty on every call.
    """
    settings = settings or get_settings()
    store = PhotoStore(get_storage_backend(uploads_dir))

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        logger.info("Server running on port %s", settings.port)
        logger.info("Uploads directory: %s", store.storage.location)
        logger.info("Environment: %s", settings.environment)
        logger.info(
            "Health check: http://localhost:%s%s/health", settings.port, API_PREFIX
        )
        yield

    app = FastAPI(title="Camera App Backend", lifespan=lifespan)
    app.state.settings = settings
    app.state.photo_store = store

    app.add_middleware(UnhandledErrorMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(UploadValidationError, upload_validation_handler)
    app.add_exception_handler(PhotoNotFoundError, photo_not_found_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    app.include_router(system_router)
    app.include_router(photos_router)
    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        "camera_backend.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
