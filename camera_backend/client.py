"""
HTTP client for the photo API, mirroring the calls the browser frontend makes.
"""

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3001/api"
DEFAULT_TIMEOUT = 10.0  # seconds


class ApiError(Exception):
    """Raised when the API answers with a non-success status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class PhotoApiClient:
    """
    Thin wrapper over an ``httpx.Client``.
    Pass ``http_client`` to reuse an existing client (e.g. a FastAPI TestClient);
    its base URL must already point at the API root.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(base_url=base_url, timeout=timeout)

    def __enter__(self) -> "PhotoApiClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = self._http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("API request %s %s failed: %s", method, path, exc)
            raise
        if resp.is_error:
            try:
                message = resp.json().get("message", resp.text)
            except ValueError:
                message = resp.text
            raise ApiError(resp.status_code, message)
        return resp

    def health_check(self) -> dict[str, Any]:
        return self._request("GET", "/health").json()

    def get_photos(self) -> dict[str, Any]:
        return self._request("GET", "/photos").json()

    def upload_photo(
        self,
        data: bytes,
        filename: str = "photo.jpg",
        content_type: str = "image/jpeg",
    ) -> dict[str, Any]:
        files = {"photo": (filename, data, content_type)}
        return self._request("POST", "/upload", files=files).json()

    def get_photo_bytes(self, url_or_filename: str) -> bytes:
        """
        Fetch a stored photo by the ``url`` returned from the API or by filename.
        """
        filename = url_or_filename.rsplit("/", 1)[-1]
        return self._request("GET", f"/photos/{filename}").content

    def delete_photo(self, photo_id: int) -> dict[str, Any]:
        return self._request("DELETE", f"/photos/{photo_id}").json()

    def get_server_info(self) -> dict[str, Any]:
        return self._request("GET", "/info").json()
