"""
Scoped temporary files for extracted frames.

Every local file a request creates is handed out by a FrameWorkspace and
removed when the workspace closes, whichever way the request ends.
"""

import logging
import os
import tempfile
import time
from typing import Optional

logger = logging.getLogger(__name__)


class FrameWorkspace:
    """
    Context manager that owns the temp files of one request.

    File names combine a nanosecond timestamp with the frame index, so
    concurrent requests sharing a temp directory don't collide.
    """

    def __init__(self, temp_dir: Optional[str] = None) -> None:
        self._temp_dir = temp_dir or tempfile.gettempdir()
        self._paths: list[str] = []

    def __enter__(self) -> "FrameWorkspace":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()

    @property
    def paths(self) -> list[str]:
        return list(self._paths)

    def new_path(self, index: Optional[int] = None) -> str:
        """Reserve a fresh .jpg path inside the workspace."""
        stamp = time.time_ns()
        name = f"frame_{stamp}.jpg" if index is None else f"frame_{stamp}_{index}.jpg"
        path = os.path.join(self._temp_dir, name)
        self._paths.append(path)
        return path

    def cleanup(self) -> None:
        """Remove every file handed out so far. Missing files are fine."""
        for path in self._paths:
            try:
                os.unlink(path)
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.warning(
                    "Failed to remove temp frame",
                    extra={"path": path, "error": str(e)},
                )
        self._paths.clear()
