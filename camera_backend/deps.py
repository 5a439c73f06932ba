from fastapi import Request

from camera_backend.config import Settings
from camera_backend.store import PhotoStore


def get_photo_store(request: Request) -> PhotoStore:
    """
    Dependency that provides the application's photo store.
    The store is created once in ``create_app`` and lives on ``app.state``
    for the lifetime of the process.
    """
    return request.app.state.photo_store


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
