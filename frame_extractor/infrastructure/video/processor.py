"""
Frame extraction using FFmpeg.

The service never downloads whole videos. FFmpeg is pointed straight at
the remote URL with a seek offset and a one-second read window, so it
only pulls the bytes around the frame we want.

Why FFmpeg:
- Reads any container/codec the source might use
- Seeks over HTTP without a full download
- Available everywhere (including Docker)
"""

import asyncio
import logging
import os
import subprocess
from typing import Optional

from ...core.errors import ExtractionError
from ...core.frames.urls import format_number

logger = logging.getLogger(__name__)

# seconds of source data ffmpeg may read after seeking
READ_WINDOW_SECONDS = 1

# ffmpeg's -q:v scale, 2 is near-lossless jpeg
JPEG_QUALITY = 2


class FFmpegFrameExtractor:
    """
    Frame extractor backed by the ffmpeg binary.

    Each call runs one ffmpeg process in a worker thread so the event
    loop keeps serving other requests while it waits.
    """

    def __init__(self, ffmpeg_path: str = "ffmpeg", timeout_seconds: Optional[float] = None):
        """
        Args:
            ffmpeg_path: Path to ffmpeg binary (default assumes it's in PATH)
            timeout_seconds: Kill ffmpeg after this long. None waits forever.
        """
        self._ffmpeg = ffmpeg_path
        self._timeout = timeout_seconds

    def build_command(self, video_url: str, timestamp: float, output_path: str) -> list[str]:
        """
        Build the ffmpeg argument list.

        -ss and -t come before -i so they apply to the input: seek first,
        then stop reading after one second.
        """
        return [
            self._ffmpeg,
            "-ss", format_number(timestamp),
            "-t", str(READ_WINDOW_SECONDS),
            "-i", video_url,
            "-frames:v", "1",
            "-q:v", str(JPEG_QUALITY),
            "-y",  # overwrite
            output_path,
        ]

    async def extract_frame(self, video_url: str, timestamp: float, output_path: str) -> str:
        """
        Extract the frame at `timestamp` into `output_path`.

        A zero exit status is not trusted on its own: if the output file
        isn't there afterwards, the extraction failed.
        """
        cmd = self.build_command(video_url, timestamp, output_path)
        logger.info("FFmpeg command: %s", " ".join(cmd))

        try:
            result = await asyncio.to_thread(
                subprocess.run,
                cmd,
                capture_output=True,
                timeout=self._timeout,
            )
        except FileNotFoundError:
            raise ExtractionError(
                f"FFmpeg not found at {self._ffmpeg!r}. Install with: apt-get install ffmpeg"
            )
        except subprocess.TimeoutExpired:
            raise ExtractionError(f"FFmpeg timed out after {self._timeout}s at {timestamp}s")

        if result.returncode != 0:
            stderr = result.stderr.decode(errors="replace").strip()
            # ffmpeg prints its banner first; the cause is at the end
            tail = stderr.splitlines()[-1] if stderr else f"exit status {result.returncode}"
            logger.error(
                "FFmpeg error",
                extra={"timestamp": timestamp, "returncode": result.returncode, "error": tail},
            )
            raise ExtractionError(f"Frame extraction failed at {timestamp}s: {tail}")

        if not os.path.exists(output_path):
            raise ExtractionError(f"Frame extraction failed at {timestamp}s - no output file")

        logger.debug("Frame extracted successfully", extra={"timestamp": timestamp})
        return output_path


# smallest valid baseline jpeg (1x1, grey)
MINIMAL_JPEG = bytes([
    0xFF, 0xD8, 0xFF, 0xE0, 0x00, 0x10, 0x4A, 0x46,
    0x49, 0x46, 0x00, 0x01, 0x01, 0x00, 0x00, 0x01,
    0x00, 0x01, 0x00, 0x00, 0xFF, 0xDB, 0x00, 0x43,
    0x00, 0x08, 0x06, 0x06, 0x07, 0x06, 0x05, 0x08,
    0x07, 0x07, 0x07, 0x09, 0x09, 0x08, 0x0A, 0x0C,
    0x14, 0x0D, 0x0C, 0x0B, 0x0B, 0x0C, 0x19, 0x12,
    0x13, 0x0F, 0x14, 0x1D, 0x1A, 0x1F, 0x1E, 0x1D,
    0x1A, 0x1C, 0x1C, 0x20, 0x24, 0x2E, 0x27, 0x20,
    0x22, 0x2C, 0x23, 0x1C, 0x1C, 0x28, 0x37, 0x29,
    0x2C, 0x30, 0x31, 0x34, 0x34, 0x34, 0x1F, 0x27,
    0x39, 0x3D, 0x38, 0x32, 0x3C, 0x2E, 0x33, 0x34,
    0x32, 0xFF, 0xC0, 0x00, 0x0B, 0x08, 0x00, 0x01,
    0x00, 0x01, 0x01, 0x01, 0x11, 0x00, 0xFF, 0xC4,
    0x00, 0x14, 0x00, 0x01, 0x00, 0x00, 0x00, 0x00,
    0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00,
    0x00, 0x00, 0x00, 0x00, 0x00, 0x09, 0xFF, 0xC4,
    0x00, 0x14, 0x10, 0x01, 0x00, 0x00, 0x00, 0x00,
    0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00,
    0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0xFF, 0xDA,
    0x00, 0x08, 0x01, 0x01, 0x00, 0x00, 0x3F, 0x00,
    0xD2, 0xCF, 0x20, 0xFF, 0xD9,
])


class MockFrameExtractor:
    """
    Mock extractor for local development without FFmpeg.

    Writes a placeholder JPEG for every request and records what it was
    asked for, which tests use to check timestamps and ordering.
    """

    def __init__(self, fail_at: Optional[float] = None):
        self.calls: list[tuple[str, float, str]] = []
        self._fail_at = fail_at
        logger.info("Initialized mock frame extractor")

    async def extract_frame(self, video_url: str, timestamp: float, output_path: str) -> str:
        self.calls.append((video_url, timestamp, output_path))
        if self._fail_at is not None and timestamp == self._fail_at:
            raise ExtractionError(f"Frame extraction failed at {timestamp}s")

        with open(output_path, "wb") as f:
            f.write(MINIMAL_JPEG)
        return output_path


def create_frame_extractor(
    mock_mode: bool = False,
    ffmpeg_path: str = "ffmpeg",
    timeout_seconds: Optional[float] = None,
):
    """
    Factory function for frame extractors.

    Args:
        mock_mode: If True, return mock extractor (no FFmpeg required)
        ffmpeg_path: ffmpeg binary to invoke
        timeout_seconds: Per-frame process timeout
    """
    if mock_mode:
        return MockFrameExtractor()

    return FFmpegFrameExtractor(ffmpeg_path=ffmpeg_path, timeout_seconds=timeout_seconds)
