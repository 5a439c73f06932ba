# pyright: reportUnknownVariableType=false
# pyright: reportUnknownArgumentType=false
# pyright: reportUnknownMemberType=false
# pyright: reportAttributeAccessIssue=false
import logging
import random
import time
import uuid
from collections.abc import Generator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from python_on_whales import DockerClient
from python_on_whales.components.container.cli_wrapper import Container
from python_on_whales.exceptions import DockerException, NoSuchContainer

from camera_backend.config import Settings
from camera_backend.main import create_app
from camera_backend.storage import FileSystemStorage
from camera_backend.store import PhotoStore

# Configure basic logging for tests
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
logger = logging.getLogger(__name__)

# Smallest useful JPEG-looking payload; the server never decodes it
JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00" + bytes(range(256)) + b"\xff\xd9"

CONTAINER_PORT = 3001


class FakeClock:
    """Deterministic clock that advances a fixed step per call."""

    def __init__(self, start: datetime, step: timedelta) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + self.step
        return current


@pytest.fixture
def jpeg_bytes() -> bytes:
    return JPEG_BYTES


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        host="127.0.0.1",
        port=3001,
        environment="test",
        cors_origins=("*",),
        log_level="INFO",
    )


@pytest.fixture
def uploads_dir(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture
def storage(uploads_dir: Path) -> FileSystemStorage:
    return FileSystemStorage(base_path=uploads_dir)


@pytest.fixture
def store(storage: FileSystemStorage) -> PhotoStore:
    clock = FakeClock(datetime(2024, 5, 1, 12, 0, tzinfo=UTC), timedelta(0))
    return PhotoStore(storage, clock=clock, rng=random.Random(1234))


@pytest.fixture
def app(test_settings: Settings, uploads_dir: Path) -> FastAPI:
    return create_app(settings=test_settings, uploads_dir=uploads_dir)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def app_store(app: FastAPI) -> PhotoStore:
    return app.state.photo_store


# --- Helper Functions for Docker Fixture ---


def _get_container_host_port(docker: DockerClient, container_name: str) -> str | None:
    """Return the host port mapped to the container's API port, if any."""
    key = f"{CONTAINER_PORT}/tcp"
    try:
        ports = docker.container.inspect(container_name).network_settings.ports
        bindings = (ports or {}).get(key) or []
        host_port = bindings[0].get("HostPort") if bindings else None
    except (AttributeError, KeyError, IndexError, TypeError, DockerException) as e:
        logger.warning("Error extracting host port for %s: %s", container_name, e)
        return None
    if not host_port:
        logger.warning("Port %s not found/mapped in %s.", key, container_name)
    return host_port


def _wait_for_server_ready(base_url: str, max_wait: int = 30) -> None:
    """Poll the health endpoint until the server answers."""
    check_url = f"{base_url}/api/health"
    deadline = time.time() + max_wait
    logger.info("Checking server readiness at %s...", check_url)
    with httpx.Client(timeout=5.0) as client:
        while time.time() < deadline:
            try:
                client.get(check_url, timeout=2.0).raise_for_status()
            except httpx.HTTPError as http_err:
                logger.info(
                    "Server at %s not ready yet (%s), waiting...",
                    check_url,
                    http_err.__class__.__name__,
                )
            else:
                logger.info("Server at %s is ready.", base_url)
                return
            time.sleep(1)
    pytest.fail(f"Server at {base_url} did not become ready within {max_wait} seconds.")


def _cleanup_container(container: Container | None, container_name: str) -> None:
    """Dump logs, then stop and remove the container."""
    if container is None:
        return
    try:
        logger.info("Container logs for %s:\n%s", container_name, container.logs())
    except DockerException as log_err:
        logger.warning("Failed to retrieve logs for %s: %s", container_name, log_err)
    try:
        container.remove(force=True)
        logger.info("Container %s removed.", container_name)
    except NoSuchContainer:
        logger.warning("Container %s already removed.", container_name)
    except DockerException:
        logger.exception("Error removing container %s", container_name)


# --- Docker Fixtures ---


@pytest.fixture(scope="session")
def docker() -> DockerClient:
    """Provide a Docker client, checking if the daemon is running."""
    client = DockerClient()
    try:
        client.system.info()
    except DockerException as e:
        pytest.fail(
            f"Docker daemon not running or inaccessible: {e}. "
            "Please ensure Docker is installed and running."
        )
    return client


@pytest.fixture(scope="session")
def docker_image(docker: DockerClient) -> Generator[str, None, None]:
    """Build the backend image once per session."""
    image_tag = f"camera-backend-test:{uuid.uuid4()}"
    logger.info("Building Docker image: %s...", image_tag)
    try:
        docker.build(context_path=Path(__file__).parent.parent, tags=image_tag)
    except DockerException as e:
        pytest.fail(f"Docker build failed: {e}")
    yield image_tag
    try:
        docker.image.remove(image_tag, force=True)
    except DockerException as e:
        logger.warning("Failed to remove Docker image %s: %s", image_tag, e)


@pytest.fixture
def live_server_url(
    docker: DockerClient, docker_image: str
) -> Generator[str, None, None]:
    """Run the backend in a container for one test."""
    container_name = f"camera-backend-test-{uuid.uuid4()}"
    container: Container | None = None
    try:
        result = docker.run(
            image=docker_image,
            detach=True,
            publish=[(CONTAINER_PORT,)],
            name=container_name,
        )
        if not isinstance(result, Container):
            pytest.fail("Failed to start container properly.")
        container = result
        host_port = _get_container_host_port(docker, container_name)
        if not host_port:
            pytest.fail(f"Could not determine host port for {container_name}")
        base_url = f"http://localhost:{host_port}"
        _wait_for_server_ready(base_url)
        yield base_url
    except DockerException:
        logger.exception("Docker error during container setup for %s", container_name)
        pytest.fail(f"Docker error for container {container_name}")
    finally:
        _cleanup_container(container, container_name)
