"""
Video processing infrastructure.

Pulls single frames out of remote videos with FFmpeg, without
downloading the whole file.
"""

from .processor import (
    FFmpegFrameExtractor,
    MockFrameExtractor,
    create_frame_extractor,
)

__all__ = [
    "FFmpegFrameExtractor",
    "MockFrameExtractor",
    "create_frame_extractor",
]
