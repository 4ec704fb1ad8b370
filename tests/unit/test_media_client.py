"""
Unit tests for the Cloudinary media host.

The SDK's uploader is swapped for a MagicMock so we can check exactly
what would have been sent, without credentials or network.
"""

from unittest.mock import MagicMock

import pytest

from frame_extractor.core.errors import UploadError
from frame_extractor.infrastructure.media.client import (
    CloudinaryMediaHost,
    MediaConfig,
    MockMediaHost,
    blur_transformation,
    create_media_host,
)


CONFIG = MediaConfig(cloud_name="demo", api_key="key", api_secret="secret")

UPLOAD_RESULT = {
    "secure_url": "https://res.cloudinary.com/demo/image/upload/v1/frames/cover.jpg",
    "public_id": "frames/cover",
    "width": 1280,
    "height": 720,
    "bytes": 48213,
}


@pytest.fixture
def uploader():
    fake = MagicMock()
    fake.upload.return_value = UPLOAD_RESULT
    fake.destroy.return_value = {"result": "ok"}
    return fake


@pytest.fixture
def host(uploader):
    media = CloudinaryMediaHost(CONFIG)
    media._uploader = uploader
    return media


class TestMediaConfig:

    def test_reports_missing_credentials(self):
        config = MediaConfig(cloud_name="", api_key="k", api_secret="")

        assert config.missing_fields() == ["CLOUDINARY_CLOUD_NAME", "CLOUDINARY_API_SECRET"]

    def test_complete_config(self):
        assert CONFIG.missing_fields() == []

    def test_blur_transformation(self):
        assert blur_transformation(400) == [{"effect": "blur:400"}]


class TestUpload:

    @pytest.mark.asyncio
    async def test_blurred_upload_sends_transformation_and_credentials(self, host, uploader):
        asset = await host.upload("/tmp/f.jpg", folder="frames", public_id="cover", blur=400)

        uploader.upload.assert_called_once_with(
            "/tmp/f.jpg",
            folder="frames",
            cloud_name="demo",
            api_key="key",
            api_secret="secret",
            public_id="cover",
            transformation=[{"effect": "blur:400"}],
        )
        assert asset.url == UPLOAD_RESULT["secure_url"]
        assert asset.public_id == "frames/cover"
        assert (asset.width, asset.height) == (1280, 720)

    @pytest.mark.asyncio
    async def test_unblurred_upload_has_no_transformation(self, host, uploader):
        await host.upload("/tmp/f.jpg", folder="frames/candidates")

        kwargs = uploader.upload.call_args.kwargs
        assert "transformation" not in kwargs
        assert "public_id" not in kwargs

    @pytest.mark.asyncio
    async def test_host_error_message_is_kept(self, host, uploader):
        uploader.upload.side_effect = Exception("Invalid image file")

        with pytest.raises(UploadError, match="Invalid image file"):
            await host.upload("/tmp/f.jpg", folder="frames")

    @pytest.mark.asyncio
    async def test_malformed_response_is_an_upload_error(self, host, uploader):
        uploader.upload.return_value = {"public_id": "frames/cover"}

        with pytest.raises(UploadError, match="secure_url"):
            await host.upload("/tmp/f.jpg", folder="frames")


class TestUnconfiguredHost:
    """A host without credentials can be built; it fails when used."""

    @pytest.fixture
    def unconfigured(self, uploader):
        media = CloudinaryMediaHost(MediaConfig(cloud_name="", api_key="", api_secret=""))
        media._uploader = uploader
        return media

    @pytest.mark.asyncio
    async def test_upload_names_missing_settings(self, unconfigured, uploader):
        with pytest.raises(UploadError, match="CLOUDINARY_CLOUD_NAME"):
            await unconfigured.upload("/tmp/f.jpg", folder="frames")

        uploader.upload.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_names_missing_settings(self, unconfigured, uploader):
        with pytest.raises(UploadError, match="not configured"):
            await unconfigured.delete("frames/x")

        uploader.destroy.assert_not_called()

    def test_image_url_needs_cloud_name(self, unconfigured):
        with pytest.raises(UploadError, match="CLOUDINARY_CLOUD_NAME"):
            unconfigured.image_url("frames/x")


class TestDelete:

    @pytest.mark.asyncio
    async def test_delete_ok(self, host, uploader):
        await host.delete("frames/candidates/frame_candidate_0")

        uploader.destroy.assert_called_once_with(
            "frames/candidates/frame_candidate_0",
            cloud_name="demo",
            api_key="key",
            api_secret="secret",
        )

    @pytest.mark.asyncio
    async def test_not_found_counts_as_deleted(self, host, uploader):
        """An asset that is already gone doesn't fail the cleanup."""
        uploader.destroy.return_value = {"result": "not found"}

        await host.delete("frames/gone")

        uploader.destroy.assert_called_once()

    @pytest.mark.asyncio
    async def test_other_result_is_a_failure(self, host, uploader):
        uploader.destroy.return_value = {"result": "error"}

        with pytest.raises(UploadError, match="'error'"):
            await host.delete("frames/x")

    @pytest.mark.asyncio
    async def test_transport_error(self, host, uploader):
        uploader.destroy.side_effect = Exception("timed out")

        with pytest.raises(UploadError, match="timed out"):
            await host.delete("frames/x")


class TestImageUrl:

    def test_secure_delivery_url(self, host):
        url = host.image_url("frames/candidates/frame_candidate_2")

        assert url.startswith("https://res.cloudinary.com/demo/image/upload/")
        assert url.endswith("frames/candidates/frame_candidate_2")


class TestFactory:

    def test_mock_mode(self):
        assert isinstance(create_media_host(mock_mode=True), MockMediaHost)

    def test_real_mode_requires_config(self):
        with pytest.raises(ValueError):
            create_media_host()
