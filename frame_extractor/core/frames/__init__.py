"""
Frame extraction and best-frame selection logic.

Contains the selector service, domain models, verdict parsing and the
on-the-fly frame URL synthesizer.
"""

from .models import (
    CandidateDeletion,
    ExtractionRequest,
    ExtractionResult,
    FallbackVerdict,
    FrameCandidate,
    ParsedVerdict,
    SelectionVerdict,
    TextPosition,
    UploadedAsset,
)
from .selector import FrameSelector, parse_verdict
from .urls import FrameUrl, synthesize_frame_url
from .workspace import FrameWorkspace

__all__ = [
    "CandidateDeletion",
    "ExtractionRequest",
    "ExtractionResult",
    "FallbackVerdict",
    "FrameCandidate",
    "ParsedVerdict",
    "SelectionVerdict",
    "TextPosition",
    "UploadedAsset",
    "FrameSelector",
    "parse_verdict",
    "FrameUrl",
    "synthesize_frame_url",
    "FrameWorkspace",
]
