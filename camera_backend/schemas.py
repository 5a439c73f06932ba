from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthResponse(CamelModel):
    status: str
    timestamp: str
    environment: str


class PhotoSummary(CamelModel):
    id: int
    filename: str
    original_name: str
    url: str
    timestamp: str


class PhotoListResponse(CamelModel):
    success: bool = True
    count: int
    photos: list[PhotoSummary]


class UploadedPhoto(CamelModel):
    id: int
    filename: str
    url: str
    timestamp: str


class UploadResponse(CamelModel):
    success: bool = True
    message: str
    photo: UploadedPhoto


class DeleteResponse(CamelModel):
    success: bool = True
    message: str
    file_removed: bool


class ServerInfo(CamelModel):
    server: str
    version: str
    environment: str
    uploads_directory: str
    total_photos: int
    max_file_size: str


class ServerInfoResponse(CamelModel):
    success: bool = True
    data: ServerInfo


class ErrorResponse(CamelModel):
    success: bool = False
    message: str

    def to_content(self, **extra: Any) -> dict[str, Any]:
        return {**self.model_dump(by_alias=True), **extra}
