"""
On-the-fly frame URLs for videos already hosted on Cloudinary.

Cloudinary can render a still from a hosted video when asked for the
video's public id with an image extension and a start offset. No upload
or network call is needed; we only rewrite the URL.
"""

import re
from dataclasses import dataclass
from typing import Union

from ..errors import InvalidUrlError


# public id follows /upload/, after an optional version segment, minus extension
_PUBLIC_ID_PATTERN = re.compile(r"/upload/(?:v\d+/)?(.+?)(?:\.[a-z0-9]+)?$", re.IGNORECASE)

DELIVERY_HOST = "https://res.cloudinary.com"


@dataclass(frozen=True)
class FrameUrl:
    """A synthesized frame URL and the public id it was derived from."""
    url: str
    public_id: str


def format_number(value: Union[int, float]) -> str:
    """
    Render a number the way it appears in JSON.

    Integral floats drop the trailing ".0" so that offsets read `so_2`
    rather than `so_2.0`.
    """
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def extract_public_id(video_url: str) -> str:
    """Recover the public id from a hosted video URL."""
    match = _PUBLIC_ID_PATTERN.search(video_url or "")
    if not match:
        raise InvalidUrlError(f"Not a Cloudinary upload URL: {video_url!r}")
    return match.group(1)


def synthesize_frame_url(
    video_url: str,
    timestamp: Union[int, float],
    blur: int,
    cloud_name: str,
) -> FrameUrl:
    """
    Build a transformation URL that samples the video at `timestamp`
    and blurs the result.
    """
    public_id = extract_public_id(video_url)
    transformation = f"so_{format_number(timestamp)},e_blur:{format_number(blur)}"
    url = f"{DELIVERY_HOST}/{cloud_name}/video/upload/{transformation}/{public_id}.jpg"
    return FrameUrl(url=url, public_id=public_id)
