"""
FastAPI dependency injection.

Dependencies provide the frame extractor, media host, vision client
factory and configuration to route handlers. Routes never build their
own collaborators, so tests swap any of them through
app.dependency_overrides.
"""

import logging
from typing import Annotated

from fastapi import Depends

from ..config.settings import Settings, get_settings
from ..core.frames.selector import (
    FrameExtractor,
    FrameSelector,
    MediaHost,
    VisionClientFactory,
    VisionModelClient,
)
from ..infrastructure.anthropic.client import create_anthropic_client
from ..infrastructure.media.client import MediaConfig, create_media_host
from ..infrastructure.video.processor import create_frame_extractor

logger = logging.getLogger(__name__)

# Global mock instance (shared across requests so uploads can be deleted later)
_mock_media_host = None


# ---------------------------------------------------------------------------
# Service Dependencies
# ---------------------------------------------------------------------------

def get_frame_extractor(
    settings: Annotated[Settings, Depends(get_settings)],
) -> FrameExtractor:
    """Provide ffmpeg-backed extractor, or the mock in ffmpeg mock mode."""
    return create_frame_extractor(
        mock_mode=settings.ffmpeg_mock_mode,
        ffmpeg_path=settings.ffmpeg_path,
        timeout_seconds=settings.ffmpeg_timeout_seconds,
    )


def get_media_host(
    settings: Annotated[Settings, Depends(get_settings)],
) -> MediaHost:
    """
    Provide media host for uploads and deletes.

    In mock mode, we reuse the same host across requests so that frames
    uploaded by one request can be blurred or deleted by the next.
    """
    global _mock_media_host

    if settings.media_mock_mode:
        if _mock_media_host is None:
            _mock_media_host = create_media_host(mock_mode=True)
            logger.info("Created shared mock media host")
        return _mock_media_host

    config = MediaConfig(
        cloud_name=settings.cloudinary_cloud_name,
        api_key=settings.cloudinary_api_key,
        api_secret=settings.cloudinary_api_secret,
    )
    return create_media_host(config=config)


def get_vision_factory(
    settings: Annotated[Settings, Depends(get_settings)],
) -> VisionClientFactory:
    """
    Provide a factory that builds a Claude client for a given key.

    A factory rather than a client because the key can come from the
    request body, which isn't known until the route runs.
    """
    def build(api_key: str) -> VisionModelClient:
        return create_anthropic_client(
            api_key=api_key,
            model=settings.anthropic_model,
            max_tokens=settings.anthropic_max_tokens,
            base_url=settings.anthropic_base_url,
        )

    return build


def get_frame_selector(
    settings: Annotated[Settings, Depends(get_settings)],
    extractor: Annotated[FrameExtractor, Depends(get_frame_extractor)],
    media: Annotated[MediaHost, Depends(get_media_host)],
    vision_factory: Annotated[VisionClientFactory, Depends(get_vision_factory)],
) -> FrameSelector:
    """
    Provide FrameSelector wired to the configured collaborators.

    The selector is stateless, so a new instance per request is cheap.
    """
    return FrameSelector(
        extractor=extractor,
        media=media,
        vision_factory=vision_factory,
        temp_dir=settings.frame_temp_dir,
    )


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

SettingsDep = Annotated[Settings, Depends(get_settings)]
FrameSelectorDep = Annotated[FrameSelector, Depends(get_frame_selector)]
