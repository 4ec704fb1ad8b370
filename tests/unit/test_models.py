"""
Unit tests for the frame domain models.

Pure value objects: no ffmpeg, no media host, no model calls.
"""

import pytest

from frame_extractor.core.frames.models import (
    DEFAULT_TIMESTAMPS,
    ExtractionRequest,
    FallbackVerdict,
    ParsedVerdict,
    SelectionVerdict,
    TextPosition,
)


# ---------------------------------------------------------------------------
# TextPosition Tests
# ---------------------------------------------------------------------------

class TestTextPosition:

    @pytest.mark.parametrize("value, expected", [
        ("top", TextPosition.TOP),
        ("bottom", TextPosition.BOTTOM),
        (" Bottom ", TextPosition.BOTTOM),
        ("middle", TextPosition.TOP),
        ("", TextPosition.TOP),
        (None, TextPosition.TOP),
        (1, TextPosition.TOP),
    ])
    def test_parse_clamps_to_two_values(self, value, expected):
        """Anything that isn't top or bottom becomes top."""
        assert TextPosition.parse(value) is expected

    @pytest.mark.parametrize("face, expected", [
        ("bottom", TextPosition.TOP),
        ("top", TextPosition.BOTTOM),
        ("TOP", TextPosition.BOTTOM),
        ("center", TextPosition.TOP),
        (None, TextPosition.TOP),
    ])
    def test_text_goes_opposite_the_face(self, face, expected):
        assert TextPosition.opposite_of_face(face) is expected


# ---------------------------------------------------------------------------
# ExtractionRequest Tests
# ---------------------------------------------------------------------------

class TestExtractionRequest:

    def test_defaults(self):
        """Five samples over the first two seconds, blur 400, 'frames' folder."""
        request = ExtractionRequest(video_url="https://cdn.test/v.mp4")

        assert request.timestamps == list(DEFAULT_TIMESTAMPS) == [0, 0.5, 1, 1.5, 2]
        assert request.blur == 400
        assert request.folder == "frames"
        assert request.public_id is None

    def test_default_timestamps_are_not_shared(self):
        first = ExtractionRequest(video_url="a")
        first.timestamps.append(9)

        assert ExtractionRequest(video_url="b").timestamps == [0, 0.5, 1, 1.5, 2]

    def test_requires_video_url(self):
        with pytest.raises(ValueError, match="video_url"):
            ExtractionRequest(video_url="")

    def test_rejects_empty_timestamps(self):
        with pytest.raises(ValueError, match="At least one timestamp"):
            ExtractionRequest(video_url="a", timestamps=[])

    def test_rejects_negative_timestamps(self):
        with pytest.raises(ValueError, match="cannot be negative"):
            ExtractionRequest(video_url="a", timestamps=[0, -0.5])

    def test_candidate_ids_follow_public_id(self):
        request = ExtractionRequest(video_url="a", public_id="reel42", folder="thumbs")

        assert request.candidates_folder == "thumbs/candidates"
        assert request.candidate_public_id(3) == "reel42_candidate_3"

    def test_candidate_ids_without_public_id(self):
        request = ExtractionRequest(video_url="a")

        assert request.candidate_public_id(0) == "frame_candidate_0"


# ---------------------------------------------------------------------------
# Verdict Tests
# ---------------------------------------------------------------------------

class TestVerdicts:

    def test_fallback_points_at_first_frame(self):
        """The fallback is a fixed, documented answer."""
        outcome = FallbackVerdict()

        assert outcome.is_fallback
        assert outcome.verdict == SelectionVerdict(
            index=0, text_position=TextPosition.TOP, reasoning="Default selection"
        )

    def test_parsed_verdict_is_not_fallback(self):
        outcome = ParsedVerdict(verdict=SelectionVerdict(index=2), raw_text="{}")

        assert not outcome.is_fallback
        assert outcome.verdict.index == 2
