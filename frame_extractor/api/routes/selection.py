"""
Best-frame selection endpoint.

Extracts several candidate frames, asks Claude which one makes the best
thumbnail, and uploads that one blurred:
1. Extract a frame at each timestamp (default: first two seconds)
2. Upload each one unblurred so the model can see it
3. Model picks an index and where overlay text should go
4. Upload the chosen frame with blur
5. Delete local files and hosted candidates

If the model call fails or its reply can't be parsed, the first frame
is used. That is a deliberate degrade, not an error.
"""

import logging
from typing import Optional

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from ...core.errors import ExtractionError, OperationError, UploadError, ValidationError
from ..dependencies import FrameSelectorDep, SettingsDep
from .frames import Seconds, build_extraction_request, require

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class BestFrameRequest(BaseModel):
    """Request to extract candidates and let the model pick one."""
    video_url: Optional[str] = Field(default=None, description="Any URL ffmpeg can read")
    timestamps: Optional[list[Seconds]] = Field(
        default=None,
        description="Seconds to sample (default: [0, 0.5, 1, 1.5, 2])"
    )
    blur: Optional[int] = Field(default=None, description="Blur strength for the final frame")
    public_id: Optional[str] = Field(default=None, description="Public id for the final frame")
    folder: Optional[str] = Field(default=None, description="Destination folder")
    anthropic_api_key: Optional[str] = Field(
        default=None,
        description="Claude API key. Falls back to the server's ANTHROPIC_API_KEY."
    )
    ai_prompt: Optional[str] = Field(
        default=None,
        description="Custom selection criteria, replacing the built-in ones"
    )


class BestFrameResponse(BaseModel):
    success: bool = True
    frame_url: str
    public_id: str
    width: Optional[int] = None
    height: Optional[int] = None
    selected_index: int
    selected_timestamp: Seconds
    reasoning: str
    text_position: str = Field(description="Where overlay text should go: top or bottom")
    blur: int
    candidates_analyzed: int


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "/extract-best-frame",
    response_model=BestFrameResponse,
    status_code=status.HTTP_200_OK,
    summary="Extract several frames and let AI pick the best",
)
async def extract_best_frame(
    request: BestFrameRequest,
    selector: FrameSelectorDep,
    settings: SettingsDep,
) -> BestFrameResponse:
    """Run the best-frame pipeline for one video."""
    video_url = require(request.video_url, "video_url")

    api_key = request.anthropic_api_key or settings.anthropic_api_key
    if not api_key:
        raise ValidationError("Missing Anthropic API key")

    extraction = build_extraction_request(
        video_url,
        request.timestamps,
        settings,
        blur=request.blur,
        public_id=request.public_id,
        folder=request.folder,
        ai_api_key=api_key,
        ai_prompt=request.ai_prompt,
    )

    logger.info(
        "Best frame extraction started",
        extra={"video_url": video_url, "candidates": len(extraction.timestamps)},
    )

    try:
        result = await selector.select_best(extraction)
    except (ExtractionError, UploadError) as e:
        logger.error("Best frame extraction failed", extra={"error": str(e)})
        raise OperationError("Best frame extraction failed", str(e))

    return BestFrameResponse(
        frame_url=result.asset.url,
        public_id=result.asset.public_id,
        width=result.asset.width,
        height=result.asset.height,
        selected_index=result.selected_index,
        selected_timestamp=result.selected_timestamp,
        reasoning=result.reasoning,
        text_position=result.text_position.value,
        blur=result.blur,
        candidates_analyzed=result.candidates_analyzed,
    )
