"""
Media host integration for extracted frames.

Uploads, blurs and deletes frames on Cloudinary.
Includes mock mode for local development without credentials.
"""

from .client import (
    CloudinaryMediaHost,
    MediaConfig,
    MockMediaHost,
    blur_transformation,
    create_media_host,
)

__all__ = [
    "CloudinaryMediaHost",
    "MediaConfig",
    "MockMediaHost",
    "blur_transformation",
    "create_media_host",
]
