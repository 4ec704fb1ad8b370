"""
Error types shared across the service.

Two errors are surfaced to clients:
- ValidationError: the request is missing something or can't be parsed (400)
- OperationError: an external system failed while serving it (500)

The remaining errors are raised at the integration seams (ffmpeg, media
host, URL parsing) and translated into one of the two by the routes.
"""

from typing import Optional


class ValidationError(Exception):
    """A required field is absent or a supplied value has the wrong shape."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class OperationError(Exception):
    """
    An external call failed while serving a request.

    Carries a generic, endpoint-level message plus the underlying cause's
    text, which is passed through to the client as `details`.
    """

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ExtractionError(Exception):
    """Raised when ffmpeg fails to produce a frame."""
    pass


class UploadError(Exception):
    """Raised when the media host rejects an upload or delete."""
    pass


class InvalidUrlError(ValueError):
    """Raised when a hosted video URL doesn't carry a recoverable public id."""
    pass
