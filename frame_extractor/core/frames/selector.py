"""
Frame extraction and best-frame selection.

This is the orchestration layer: it knows the order of operations
(sample → judge → finalize → clean up) but delegates every real piece of
work to an external collaborator behind a protocol:

- FrameExtractor pulls a still out of a remote video (ffmpeg)
- MediaHost stores, transforms and deletes images (Cloudinary)
- VisionModelClient looks at candidate images and picks one (Claude)

The prompt lives here, not in config, because changing it changes what
the product picks.
"""

import json
import logging
from typing import Callable, Optional, Protocol, Union

from ..errors import UploadError
from .models import (
    PARSED_WITHOUT_REASONING,
    CandidateDeletion,
    ExtractionRequest,
    ExtractionResult,
    FallbackVerdict,
    FrameCandidate,
    ParsedVerdict,
    SelectionVerdict,
    TextPosition,
    UploadedAsset,
    VerdictOutcome,
)
from .workspace import FrameWorkspace

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class FrameExtractor(Protocol):
    """Pulls a single still out of a video into a local file."""

    async def extract_frame(
        self,
        video_url: str,
        timestamp: float,
        output_path: str,
    ) -> str:
        """Write the frame at `timestamp` to `output_path` and return the path."""
        ...


class MediaHost(Protocol):
    """Remote image storage with upload-time transformations."""

    async def upload(
        self,
        source: str,
        folder: str,
        public_id: Optional[str] = None,
        blur: Optional[int] = None,
    ) -> UploadedAsset:
        """Upload a local file or remote URL, optionally blurred."""
        ...

    async def delete(self, public_id: str) -> None:
        """Delete a hosted image. Raises UploadError on failure."""
        ...

    def image_url(self, public_id: str) -> str:
        """Delivery URL of an already-hosted image."""
        ...


class VisionModelClient(Protocol):
    """
    Interface for vision-capable LLM clients.

    The selector doesn't care which model answers, only that it can look
    at a list of image URLs and reply with text.
    """

    async def analyze_image_urls(
        self,
        image_urls: list[str],
        prompt: str,
    ) -> str:
        """Send the prompt and images, return the reply text."""
        ...

    async def close(self) -> None:
        """Release connections held by the client."""
        ...


VisionClientFactory = Callable[[str], VisionModelClient]


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

SELECTION_PROMPT = """You are analyzing video frames to select the best one for a reel thumbnail.

Pick the BEST frame based on:
1. Facial Expression: Engaged, confident, eyes open, not mid-blink or weird expression
2. Composition: Good framing, person well-positioned
3. Clarity: Not blurry, good lighting
4. No Captions: Prefer frames without burned-in text/captions
5. Text Placement: Look at where the person's face sits vertically in the chosen frame. \
Title text will be placed on the opposite side so it never covers the face. \
If the face is in the lower half, answer "top"; if it is in the upper half, answer "bottom"."""

RESPONSE_FORMAT = """RESPOND WITH ONLY THIS JSON (no other text):
{"best_frame_index": 0, "text_position": "top", "reasoning": "Brief explanation"}"""


def build_selection_prompt(custom_prompt: Optional[str], candidate_count: int) -> str:
    """
    Assemble the instruction block sent ahead of the candidate images.

    A caller-supplied prompt replaces the selection criteria; the response
    format is always appended so the reply stays machine-readable.
    """
    criteria = custom_prompt.strip() if custom_prompt and custom_prompt.strip() else SELECTION_PROMPT
    return (
        f"{criteria}\n\n"
        f"There are {candidate_count} frames, indexed 0 to {candidate_count - 1} "
        f"in the order shown.\n\n"
        f"{RESPONSE_FORMAT}"
    )


# ---------------------------------------------------------------------------
# Verdict parsing
# ---------------------------------------------------------------------------

def _strip_code_fence(text: str) -> str:
    """Models like to wrap JSON in markdown fences even when told not to."""
    if "```json" in text:
        return text.split("```json")[1].split("```")[0]
    if "```" in text:
        return text.split("```")[1].split("```")[0]
    return text


def _coerce_index(value: object, candidate_count: int) -> int:
    # bool is an int subclass; `true` is not an index
    if isinstance(value, bool):
        return 0
    if isinstance(value, str) and value.strip().isdecimal():
        value = int(value.strip())
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int) and 0 <= value < candidate_count:
        return value
    return 0


def parse_verdict(text: Optional[str], candidate_count: int) -> VerdictOutcome:
    """
    Turn the model's reply into a verdict.

    Never raises. Anything that isn't a JSON object degrades to a
    FallbackVerdict pointing at the first candidate.
    """
    raw = text or ""
    if not raw.strip():
        return FallbackVerdict(raw_text=raw)

    try:
        data = json.loads(_strip_code_fence(raw).strip())
    except json.JSONDecodeError:
        return FallbackVerdict(raw_text=raw)

    if not isinstance(data, dict):
        return FallbackVerdict(raw_text=raw)

    if data.get("text_position"):
        position = TextPosition.parse(data["text_position"])
    elif "face_position" in data:
        position = TextPosition.opposite_of_face(data["face_position"])
    else:
        position = TextPosition.TOP

    reasoning = data.get("reasoning") or PARSED_WITHOUT_REASONING

    verdict = SelectionVerdict(
        index=_coerce_index(data.get("best_frame_index"), candidate_count),
        text_position=position,
        reasoning=str(reasoning),
    )
    return ParsedVerdict(verdict=verdict, raw_text=raw)


# ---------------------------------------------------------------------------
# Selector Service
# ---------------------------------------------------------------------------

class FrameSelector:
    """
    Orchestrates extraction, upload and selection for one request at a time.

    Stateless beyond its collaborators: every method owns its own temp
    files through a FrameWorkspace, so one instance can serve concurrent
    requests.
    """

    def __init__(
        self,
        extractor: FrameExtractor,
        media: MediaHost,
        vision_factory: Optional[VisionClientFactory] = None,
        temp_dir: Optional[str] = None,
    ) -> None:
        self._extractor = extractor
        self._media = media
        self._vision_factory = vision_factory
        self._temp_dir = temp_dir

    def workspace(self) -> FrameWorkspace:
        return FrameWorkspace(self._temp_dir)

    async def extract_frame(
        self,
        video_url: str,
        timestamp: float,
        blur: int,
        folder: str,
        public_id: Optional[str] = None,
    ) -> UploadedAsset:
        """Extract one frame and upload it blurred."""
        with self.workspace() as workspace:
            path = workspace.new_path()
            await self._extractor.extract_frame(video_url, timestamp, path)

            logger.info("Uploading frame", extra={"folder": folder, "blur": blur})
            asset = await self._media.upload(path, folder=folder, public_id=public_id, blur=blur)

        logger.info("Upload complete", extra={"url": asset.url})
        return asset

    async def sample_candidates(
        self,
        request: ExtractionRequest,
        workspace: FrameWorkspace,
    ) -> list[FrameCandidate]:
        """
        Extract and upload (unblurred) one candidate per timestamp.

        Runs strictly in order; the first failure propagates and nothing
        after it is attempted.
        """
        logger.info(
            "Extracting candidate frames",
            extra={"count": len(request.timestamps), "video_url": request.video_url},
        )

        candidates: list[FrameCandidate] = []
        try:
            for i, ts in enumerate(request.timestamps):
                path = workspace.new_path(i)
                await self._extractor.extract_frame(request.video_url, ts, path)

                asset = await self._media.upload(
                    path,
                    folder=request.candidates_folder,
                    public_id=request.candidate_public_id(i),
                )
                candidates.append(FrameCandidate(
                    index=i,
                    timestamp=ts,
                    url=asset.url,
                    public_id=asset.public_id,
                    local_path=path,
                ))
        except Exception:
            # candidates already uploaded would otherwise be orphaned
            await self.delete_candidates(candidates)
            raise

        return candidates

    async def judge(
        self,
        candidates: list[FrameCandidate],
        vision_client: VisionModelClient,
        custom_prompt: Optional[str] = None,
    ) -> VerdictOutcome:
        """
        Ask the model which candidate is best.

        Failures here never fail the request: a broken call or an
        unreadable reply falls back to the first candidate.
        """
        prompt = build_selection_prompt(custom_prompt, len(candidates))

        try:
            reply = await vision_client.analyze_image_urls(
                image_urls=[c.url for c in candidates],
                prompt=prompt,
            )
        except Exception as e:
            logger.warning("Frame selection call failed, using first frame", extra={"error": str(e)})
            return FallbackVerdict()

        outcome = parse_verdict(reply, len(candidates))
        if outcome.is_fallback:
            logger.info(
                "Could not parse AI response, using first frame",
                extra={"reply": outcome.raw_text[:200]},
            )
        return outcome

    async def select_best(self, request: ExtractionRequest) -> ExtractionResult:
        """
        Run the full best-frame pipeline.

        Local temp files are removed on every exit path. Hosted candidates
        are deleted once the pipeline ends, whether or not it succeeded.
        """
        if not request.ai_api_key:
            raise ValueError("An AI API key is required for frame selection")
        if self._vision_factory is None:
            raise RuntimeError("FrameSelector was created without a vision client factory")

        with self.workspace() as workspace:
            candidates = await self.sample_candidates(request, workspace)
            try:
                logger.info("All frames extracted. Asking AI to pick the best one...")
                # one client per request key, closed as soon as the verdict is in
                vision_client = self._vision_factory(request.ai_api_key)
                try:
                    outcome = await self.judge(candidates, vision_client, request.ai_prompt)
                finally:
                    await vision_client.close()
                verdict = outcome.verdict
                chosen = candidates[verdict.index]

                logger.info(
                    "AI selected frame",
                    extra={
                        "index": chosen.index,
                        "reasoning": verdict.reasoning,
                        "text_position": verdict.text_position.value,
                        "fallback": outcome.is_fallback,
                    },
                )

                final = await self._media.upload(
                    chosen.local_path,
                    folder=request.folder,
                    public_id=request.public_id,
                    blur=request.blur,
                )
            finally:
                await self.delete_candidates(candidates)

        return ExtractionResult(
            asset=final,
            selected_index=chosen.index,
            selected_timestamp=chosen.timestamp,
            text_position=verdict.text_position,
            reasoning=verdict.reasoning,
            blur=request.blur,
            candidates_analyzed=len(candidates),
        )

    async def extract_candidates(self, request: ExtractionRequest) -> list[FrameCandidate]:
        """
        Sample candidates and leave them hosted for the caller to judge.

        Only local files are cleaned up; the caller is expected to delete
        the hosted candidates when done with them.
        """
        with self.workspace() as workspace:
            return await self.sample_candidates(request, workspace)

    async def apply_blur(
        self,
        source_public_id: str,
        blur: int,
        folder: str,
        public_id: Optional[str] = None,
    ) -> UploadedAsset:
        """Re-upload an already-hosted image with blur applied."""
        source_url = self._media.image_url(source_public_id)
        logger.info(
            "Applying blur to hosted frame",
            extra={"source_public_id": source_public_id, "blur": blur},
        )
        return await self._media.upload(source_url, folder=folder, public_id=public_id, blur=blur)

    async def delete_candidates(
        self,
        candidates: list[Union[FrameCandidate, str]],
    ) -> list[CandidateDeletion]:
        """
        Delete hosted candidates one by one.

        Each deletion is independent: a failure is recorded and logged,
        and the remaining deletions still run. Nothing is retried.
        """
        results: list[CandidateDeletion] = []
        for candidate in candidates:
            public_id = candidate if isinstance(candidate, str) else candidate.public_id
            try:
                await self._media.delete(public_id)
                results.append(CandidateDeletion(public_id=public_id, deleted=True))
            except UploadError as e:
                logger.warning(
                    "Failed to delete candidate",
                    extra={"public_id": public_id, "error": str(e)},
                )
                results.append(CandidateDeletion(public_id=public_id, deleted=False, error=str(e)))
        return results
