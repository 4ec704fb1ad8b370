"""
Media host client for extracted frames.

Frames are stored on Cloudinary. Using Cloudinary instead of plain object
storage because:
- Blur is applied by the host at upload time (no image code here)
- Hosted videos can be sampled on the fly by URL alone
- Assets get public delivery URLs the vision model can fetch directly

Mock mode keeps assets in memory, enabling API testing without a
Cloudinary account.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from ...core.errors import UploadError
from ...core.frames.models import UploadedAsset

logger = logging.getLogger(__name__)


@dataclass
class MediaConfig:
    """
    Cloudinary account credentials.

    Not validated on construction: a host built from an incomplete config
    still lets routes reject bad requests first, and only fails once it
    is asked to talk to Cloudinary.
    """
    cloud_name: str
    api_key: str
    api_secret: str

    def missing_fields(self) -> list[str]:
        missing = []
        if not self.cloud_name:
            missing.append("CLOUDINARY_CLOUD_NAME")
        if not self.api_key:
            missing.append("CLOUDINARY_API_KEY")
        if not self.api_secret:
            missing.append("CLOUDINARY_API_SECRET")
        return missing

    def as_options(self) -> dict[str, str]:
        return {
            "cloud_name": self.cloud_name,
            "api_key": self.api_key,
            "api_secret": self.api_secret,
        }


def blur_transformation(blur: int) -> list[dict[str, str]]:
    """Incoming transformation that blurs an image as it is stored."""
    return [{"effect": f"blur:{blur}"}]


# destroy() results that leave the asset gone
_DELETED_RESULTS = ("ok", "not found")


class CloudinaryMediaHost:
    """
    Cloudinary media host.

    The SDK is synchronous, so every network call runs in a worker thread.
    Credentials are passed per call rather than through cloudinary.config()
    so nothing process-global is mutated.
    """

    def __init__(self, config: MediaConfig) -> None:
        import cloudinary.uploader
        import cloudinary.utils

        self._config = config
        self._uploader = cloudinary.uploader
        self._utils = cloudinary.utils

        logger.info("Initialized Cloudinary media host", extra={"cloud_name": config.cloud_name})

    def _require_config(self, *fields: str) -> None:
        missing = [name for name in self._config.missing_fields() if not fields or name in fields]
        if missing:
            raise UploadError(f"Cloudinary is not configured: missing {', '.join(missing)}")

    async def upload(
        self,
        source: str,
        folder: str,
        public_id: Optional[str] = None,
        blur: Optional[int] = None,
    ) -> UploadedAsset:
        """
        Upload a local file or remote URL.

        When `public_id` is omitted Cloudinary assigns one. The host's
        own error message is kept in the raised UploadError.
        """
        self._require_config()

        options: dict[str, Any] = {"folder": folder, **self._config.as_options()}
        if public_id:
            options["public_id"] = public_id
        if blur is not None:
            options["transformation"] = blur_transformation(blur)

        try:
            result = await asyncio.to_thread(self._uploader.upload, source, **options)
            asset = UploadedAsset(
                url=result["secure_url"],
                public_id=result["public_id"],
                width=result.get("width"),
                height=result.get("height"),
            )
        except KeyError as e:
            logger.error("Malformed upload response", extra={"folder": folder, "missing": str(e)})
            raise UploadError(f"Upload response is missing {e}")
        except Exception as e:
            logger.error(
                "Failed to upload frame",
                extra={"folder": folder, "public_id": public_id, "error": str(e)},
            )
            raise UploadError(str(e))

        logger.debug(
            "Uploaded frame",
            extra={"public_id": asset.public_id, "bytes": result.get("bytes")},
        )
        return asset

    async def delete(self, public_id: str) -> None:
        """
        Delete an image by public id.

        "not found" counts as deleted: the asset is gone either way, so
        repeated cleanups stay idempotent.
        """
        self._require_config()

        try:
            result = await asyncio.to_thread(
                self._uploader.destroy,
                public_id,
                **self._config.as_options(),
            )
        except Exception as e:
            raise UploadError(str(e))

        outcome = (result or {}).get("result")
        if outcome not in _DELETED_RESULTS:
            raise UploadError(f"Delete of {public_id} returned {outcome!r}")

        logger.debug("Deleted frame", extra={"public_id": public_id, "result": outcome})

    def image_url(self, public_id: str) -> str:
        """Secure delivery URL of a hosted image. No network call."""
        self._require_config("CLOUDINARY_CLOUD_NAME")

        url, _ = self._utils.cloudinary_url(
            public_id,
            secure=True,
            cloud_name=self._config.cloud_name,
        )
        return url


# ---------------------------------------------------------------------------
# Mock Media Host for Local Development
# ---------------------------------------------------------------------------

class MockMediaHost:
    """
    In-memory media host for local development.

    Assets are recorded in a dictionary keyed by public id and "URLs"
    are mock URIs. Public ids follow Cloudinary's folder/name shape so
    callers see the same values they would in production.

    Ids listed in `reject_deletes` fail to delete, the way a revoked or
    rate-limited Cloudinary account would.
    """

    def __init__(self, cloud_name: str = "mock", reject_deletes: Iterable[str] = ()) -> None:
        self._cloud_name = cloud_name
        self._reject_deletes = set(reject_deletes)
        self.assets: dict[str, dict[str, Any]] = {}
        self.deleted: list[str] = []
        self._counter = 0
        logger.info("Initialized mock media host (in-memory)")

    async def upload(
        self,
        source: str,
        folder: str,
        public_id: Optional[str] = None,
        blur: Optional[int] = None,
    ) -> UploadedAsset:
        if public_id is None:
            self._counter += 1
            public_id = f"auto_{self._counter}"
        full_id = f"{folder}/{public_id}" if folder else public_id

        self.assets[full_id] = {"source": source, "folder": folder, "blur": blur}
        return UploadedAsset(
            url=f"mock://{self._cloud_name}/image/upload/{full_id}.jpg",
            public_id=full_id,
            width=1,
            height=1,
        )

    async def delete(self, public_id: str) -> None:
        if public_id in self._reject_deletes:
            raise UploadError(f"Delete of {public_id} returned 'error'")
        # unknown ids count as deleted, like Cloudinary's "not found"
        self.assets.pop(public_id, None)
        self.deleted.append(public_id)

    def image_url(self, public_id: str) -> str:
        return f"mock://{self._cloud_name}/image/upload/{public_id}"


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_media_host(
    config: Optional[MediaConfig] = None,
    mock_mode: bool = False,
):
    """
    Create media host based on configuration.

    Args:
        config: Cloudinary credentials (required if not mock_mode)
        mock_mode: If True, return in-memory host for testing
    """
    if mock_mode:
        return MockMediaHost()

    if config is None:
        raise ValueError("config is required when not in mock mode")

    return CloudinaryMediaHost(config)
