"""
Frame extraction endpoints.

Single-frame extraction, on-the-fly frame URLs for hosted videos, and
the client-driven selection flow:
1. POST /extract-frames-only uploads unblurred candidates
2. The client picks one itself
3. POST /apply-blur produces the blurred final frame from it
4. POST /cleanup-candidates deletes the candidates

Missing fields are checked here rather than by pydantic so the client
gets a 400 naming the field, not a 422 validation dump.
"""

import logging
from typing import Any, Optional, Union

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from ...config.settings import Settings
from ...core.errors import (
    ExtractionError,
    InvalidUrlError,
    OperationError,
    UploadError,
    ValidationError,
)
from ...core.frames.models import ExtractionRequest
from ...core.frames.urls import extract_public_id, synthesize_frame_url
from ..dependencies import FrameSelectorDep, SettingsDep

logger = logging.getLogger(__name__)

router = APIRouter()

# ints stay ints so responses echo the caller's numbers unchanged
Seconds = Union[int, float]


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class ExtractFrameRequest(BaseModel):
    """Request to extract one blurred frame."""
    video_url: Optional[str] = Field(default=None, description="Any URL ffmpeg can read")
    timestamp: Seconds = Field(default=0, description="Seconds into the video")
    blur: Optional[int] = Field(default=None, description="Blur strength (Cloudinary e_blur)")
    public_id: Optional[str] = Field(default=None, description="Public id for the uploaded frame")
    folder: Optional[str] = Field(default=None, description="Destination folder")


class ExtractFrameResponse(BaseModel):
    success: bool = True
    frame_url: str
    public_id: str
    width: Optional[int] = None
    height: Optional[int] = None
    timestamp: Seconds
    blur: int


class FrameUrlRequest(BaseModel):
    """Request for an on-the-fly frame URL of a hosted video."""
    cloudinary_video_url: Optional[str] = Field(default=None, description="Hosted video URL")
    timestamp: Seconds = Field(default=0, description="Seconds into the video")
    blur: Optional[int] = Field(default=None, description="Blur strength (Cloudinary e_blur)")


class FrameUrlResponse(BaseModel):
    success: bool = True
    frame_url: str
    public_id: str
    timestamp: Seconds
    blur: int


class ExtractFramesRequest(BaseModel):
    """Request to upload unblurred candidates for client-side selection."""
    video_url: Optional[str] = None
    timestamps: Optional[list[Seconds]] = Field(default=None, description="Seconds to sample")
    public_id: Optional[str] = Field(default=None, description="Prefix for candidate ids")
    folder: Optional[str] = None


class CandidateFrame(BaseModel):
    index: int
    timestamp: Seconds
    url: str
    public_id: str


class ExtractFramesResponse(BaseModel):
    success: bool = True
    frames: list[CandidateFrame]
    count: int


class ApplyBlurRequest(BaseModel):
    """Request to blur an already-hosted frame into a new asset."""
    source_public_id: Optional[str] = None
    blur: Optional[int] = None
    public_id: Optional[str] = None
    folder: Optional[str] = None


class ApplyBlurResponse(BaseModel):
    success: bool = True
    frame_url: str
    public_id: str
    blur: int


class CleanupRequest(BaseModel):
    # validated by hand so a non-array gets a readable 400
    public_ids: Optional[Any] = None


class DeletionResult(BaseModel):
    public_id: str
    deleted: bool
    error: Optional[str] = None


class CleanupResponse(BaseModel):
    success: bool = True
    results: list[DeletionResult]


# ---------------------------------------------------------------------------
# Helper Functions
# ---------------------------------------------------------------------------

def require(value: Any, field: str) -> Any:
    """Raise a 400 naming `field` if the value is absent or empty."""
    if value is None or value == "":
        raise ValidationError(f"Missing {field}")
    return value


def require_timestamp(value: Seconds) -> Seconds:
    if value < 0:
        raise ValidationError("timestamp cannot be negative")
    return value


def build_extraction_request(
    video_url: str,
    timestamps: Optional[list[Seconds]],
    settings: Settings,
    **kwargs,
) -> ExtractionRequest:
    """Build an ExtractionRequest, turning its own checks into 400s."""
    options = {k: v for k, v in kwargs.items() if v is not None}
    if timestamps is not None:
        options["timestamps"] = timestamps
    options.setdefault("folder", settings.default_folder)
    options.setdefault("blur", settings.default_blur)

    try:
        return ExtractionRequest(video_url=video_url, **options)
    except ValueError as e:
        raise ValidationError(str(e))


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "/extract-frame",
    response_model=ExtractFrameResponse,
    status_code=status.HTTP_200_OK,
    summary="Extract a single blurred frame",
)
async def extract_frame(
    request: ExtractFrameRequest,
    selector: FrameSelectorDep,
    settings: SettingsDep,
) -> ExtractFrameResponse:
    """Extract one frame from any video URL and upload it with blur."""
    video_url = require(request.video_url, "video_url")
    require_timestamp(request.timestamp)
    blur = request.blur if request.blur is not None else settings.default_blur
    folder = request.folder or settings.default_folder

    logger.info(
        "Extracting frame",
        extra={"video_url": video_url, "timestamp": request.timestamp},
    )

    try:
        asset = await selector.extract_frame(
            video_url=video_url,
            timestamp=request.timestamp,
            blur=blur,
            folder=folder,
            public_id=request.public_id,
        )
    except (ExtractionError, UploadError) as e:
        logger.error("Frame extraction failed", extra={"error": str(e)})
        raise OperationError("Frame extraction failed", str(e))

    return ExtractFrameResponse(
        frame_url=asset.url,
        public_id=asset.public_id,
        width=asset.width,
        height=asset.height,
        timestamp=request.timestamp,
        blur=blur,
    )


@router.post(
    "/get-frame-url",
    response_model=FrameUrlResponse,
    status_code=status.HTTP_200_OK,
    summary="Frame URL for a hosted video",
    description="Builds a transformation URL. Only works for videos already on Cloudinary.",
)
async def get_frame_url(
    request: FrameUrlRequest,
    settings: SettingsDep,
) -> FrameUrlResponse:
    """Derive a blurred-frame URL from a hosted video URL. No network call."""
    video_url = require(request.cloudinary_video_url, "cloudinary_video_url")
    require_timestamp(request.timestamp)
    blur = request.blur if request.blur is not None else settings.default_blur

    try:
        public_id = extract_public_id(video_url)
    except InvalidUrlError:
        raise ValidationError("Invalid Cloudinary URL")

    if not settings.cloudinary_cloud_name:
        raise OperationError("Frame URL generation failed", "CLOUDINARY_CLOUD_NAME is not configured")

    frame = synthesize_frame_url(
        video_url,
        timestamp=request.timestamp,
        blur=blur,
        cloud_name=settings.cloudinary_cloud_name,
    )

    return FrameUrlResponse(
        frame_url=frame.url,
        public_id=public_id,
        timestamp=request.timestamp,
        blur=blur,
    )


@router.post(
    "/extract-frames-only",
    response_model=ExtractFramesResponse,
    status_code=status.HTTP_200_OK,
    summary="Upload unblurred candidate frames",
)
async def extract_frames_only(
    request: ExtractFramesRequest,
    selector: FrameSelectorDep,
    settings: SettingsDep,
) -> ExtractFramesResponse:
    """
    Extract and upload candidates without choosing one.

    Candidates stay hosted; the caller deletes them with
    /cleanup-candidates once it has picked.
    """
    video_url = require(request.video_url, "video_url")
    extraction = build_extraction_request(
        video_url,
        request.timestamps,
        settings,
        public_id=request.public_id,
        folder=request.folder,
    )

    try:
        candidates = await selector.extract_candidates(extraction)
    except (ExtractionError, UploadError) as e:
        logger.error("Candidate extraction failed", extra={"error": str(e)})
        raise OperationError("Frame extraction failed", str(e))

    frames = [
        CandidateFrame(index=c.index, timestamp=c.timestamp, url=c.url, public_id=c.public_id)
        for c in candidates
    ]
    return ExtractFramesResponse(frames=frames, count=len(frames))


@router.post(
    "/apply-blur",
    response_model=ApplyBlurResponse,
    status_code=status.HTTP_200_OK,
    summary="Blur a hosted frame",
)
async def apply_blur(
    request: ApplyBlurRequest,
    selector: FrameSelectorDep,
    settings: SettingsDep,
) -> ApplyBlurResponse:
    """Upload a blurred copy of an already-hosted frame."""
    source_public_id = require(request.source_public_id, "source_public_id")
    blur = request.blur if request.blur is not None else settings.default_blur

    try:
        asset = await selector.apply_blur(
            source_public_id=source_public_id,
            blur=blur,
            folder=request.folder or settings.default_folder,
            public_id=request.public_id,
        )
    except UploadError as e:
        logger.error("Blur application failed", extra={"error": str(e)})
        raise OperationError("Blur application failed", str(e))

    return ApplyBlurResponse(frame_url=asset.url, public_id=asset.public_id, blur=blur)


@router.post(
    "/cleanup-candidates",
    response_model=CleanupResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Delete hosted candidates",
)
async def cleanup_candidates(
    request: CleanupRequest,
    selector: FrameSelectorDep,
) -> CleanupResponse:
    """
    Delete each public id independently.

    Results come back in request order; one failed delete doesn't stop
    the others.
    """
    public_ids = request.public_ids
    if public_ids is None:
        raise ValidationError("Missing public_ids")
    if not isinstance(public_ids, list) or not all(isinstance(p, str) for p in public_ids):
        raise ValidationError("public_ids must be an array of strings")

    deletions = await selector.delete_candidates(public_ids)

    return CleanupResponse(results=[
        DeletionResult(public_id=d.public_id, deleted=d.deleted, error=d.error)
        for d in deletions
    ])
