"""
Shared fixtures.

External systems are replaced with in-memory fakes: the mock frame
extractor writes placeholder JPEGs, the mock media host keeps assets in a
dictionary, and the scripted vision client returns a canned reply.
"""

import pytest
from fastapi.testclient import TestClient

from frame_extractor.api.dependencies import (
    get_frame_extractor,
    get_media_host,
    get_vision_factory,
)
from frame_extractor.config.settings import Settings, get_settings
from frame_extractor.infrastructure.media.client import MockMediaHost
from frame_extractor.infrastructure.video.processor import MockFrameExtractor
from frame_extractor.main import create_app


class ScriptedVisionClient:
    """Vision client that returns a fixed reply (or raises) and records calls."""

    def __init__(self, reply: str = "", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls: list[tuple[list[str], str]] = []
        self.api_keys: list[str] = []
        self.closed = 0

    def factory(self, api_key: str) -> "ScriptedVisionClient":
        self.api_keys.append(api_key)
        return self

    async def analyze_image_urls(self, image_urls: list[str], prompt: str) -> str:
        self.calls.append((image_urls, prompt))
        if self.error is not None:
            raise self.error
        return self.reply

    async def close(self) -> None:
        self.closed += 1


@pytest.fixture
def frame_dir(tmp_path):
    """Temp directory the service writes frames into."""
    path = tmp_path / "frames"
    path.mkdir()
    return path


@pytest.fixture
def settings(frame_dir) -> Settings:
    return Settings(
        _env_file=None,
        cloudinary_cloud_name="demo",
        media_mock_mode=True,
        ffmpeg_mock_mode=True,
        anthropic_api_key="server-key",
        frame_temp_dir=str(frame_dir),
    )


@pytest.fixture
def extractor() -> MockFrameExtractor:
    return MockFrameExtractor()


@pytest.fixture
def media() -> MockMediaHost:
    return MockMediaHost(cloud_name="demo")


@pytest.fixture
def vision() -> ScriptedVisionClient:
    return ScriptedVisionClient(
        reply='{"best_frame_index": 2, "text_position": "bottom", "reasoning": "Eyes open, good light"}'
    )


@pytest.fixture
def client(settings, extractor, media, vision) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_frame_extractor] = lambda: extractor
    app.dependency_overrides[get_media_host] = lambda: media
    app.dependency_overrides[get_vision_factory] = lambda: vision.factory
    return TestClient(app)


@pytest.fixture
def scripted_vision():
    """Build a ScriptedVisionClient with a custom reply or error."""
    return ScriptedVisionClient
