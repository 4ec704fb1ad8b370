"""
Domain models for frame extraction and selection.

Nothing here is persisted. These values live for the duration of one
request: candidates are created while sampling, judged, and then thrown
away (locally and on the media host).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


DEFAULT_TIMESTAMPS: tuple[float, ...] = (0, 0.5, 1, 1.5, 2)
DEFAULT_BLUR = 400
DEFAULT_FOLDER = "frames"

FALLBACK_REASONING = "Default selection"
PARSED_WITHOUT_REASONING = "AI selected"


class TextPosition(Enum):
    """
    Where overlay text should go on the final frame.

    Only two values exist. Anything the model says that isn't one of
    these is normalized to TOP.
    """
    TOP = "top"
    BOTTOM = "bottom"

    @classmethod
    def parse(cls, value: object) -> "TextPosition":
        """Clamp an arbitrary value to a valid position, defaulting to TOP."""
        if isinstance(value, str):
            normalized = value.strip().lower()
            for position in cls:
                if position.value == normalized:
                    return position
        return cls.TOP

    @classmethod
    def opposite_of_face(cls, face_position: object) -> "TextPosition":
        """
        Invert a legacy `face_position` answer.

        Text goes where the face isn't: a face at the bottom puts the
        text on top and vice versa. Unknown values fall back to TOP.
        """
        if isinstance(face_position, str):
            normalized = face_position.strip().lower()
            if normalized == "bottom":
                return cls.TOP
            if normalized == "top":
                return cls.BOTTOM
        return cls.TOP


@dataclass
class ExtractionRequest:
    """Everything the best-frame pipeline needs for one video."""
    video_url: str
    timestamps: list[float] = field(default_factory=lambda: list(DEFAULT_TIMESTAMPS))
    blur: int = DEFAULT_BLUR
    public_id: Optional[str] = None
    folder: str = DEFAULT_FOLDER
    ai_api_key: Optional[str] = None
    ai_prompt: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.video_url:
            raise ValueError("video_url is required")
        if not self.timestamps:
            raise ValueError("At least one timestamp is required")
        if any(ts < 0 for ts in self.timestamps):
            raise ValueError("Timestamps cannot be negative")

    @property
    def candidates_folder(self) -> str:
        return f"{self.folder}/candidates"

    def candidate_public_id(self, index: int) -> str:
        return f"{self.public_id or 'frame'}_candidate_{index}"


@dataclass(frozen=True)
class UploadedAsset:
    """What the media host tells us about an asset after upload."""
    url: str
    public_id: str
    width: Optional[int] = None
    height: Optional[int] = None


@dataclass(frozen=True)
class FrameCandidate:
    """
    One sampled frame, uploaded without blur so the model can see it.

    The local file is kept around until the request ends because the
    chosen candidate is re-uploaded from it with blur applied.
    """
    index: int
    timestamp: float
    url: str
    public_id: str
    local_path: str


@dataclass(frozen=True)
class SelectionVerdict:
    """The model's pick, normalized."""
    index: int = 0
    text_position: TextPosition = TextPosition.TOP
    reasoning: str = FALLBACK_REASONING


@dataclass(frozen=True)
class ParsedVerdict:
    """The model replied with usable JSON."""
    verdict: SelectionVerdict
    raw_text: str = ""

    @property
    def is_fallback(self) -> bool:
        return False


@dataclass(frozen=True)
class FallbackVerdict:
    """
    The model call failed or replied with something we couldn't parse.

    Degrading to the first frame is the intended policy; the raw reply is
    kept for logging.
    """
    verdict: SelectionVerdict = field(default_factory=SelectionVerdict)
    raw_text: str = ""

    @property
    def is_fallback(self) -> bool:
        return True


VerdictOutcome = Union[ParsedVerdict, FallbackVerdict]


@dataclass(frozen=True)
class ExtractionResult:
    """The finalized, blurred frame and how it was chosen."""
    asset: UploadedAsset
    selected_index: int
    selected_timestamp: float
    text_position: TextPosition
    reasoning: str
    blur: int
    candidates_analyzed: int


@dataclass(frozen=True)
class CandidateDeletion:
    """Outcome of deleting one hosted candidate."""
    public_id: str
    deleted: bool
    error: Optional[str] = None
