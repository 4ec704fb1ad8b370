"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables once at startup.
There are no credential fallbacks baked in: a missing Cloudinary secret
shows up in validate_required_fields(), not as someone else's account.

Mock modes enable local development without ffmpeg or Cloudinary.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    """

    # API Configuration
    service_name: str = "video-frame-extractor"
    api_title: str = "Video Frame Extractor"
    api_version: str = "0.1.0"
    port: int = Field(
        default=3000,
        description="Port the server listens on when started with `python -m frame_extractor.main`."
    )

    # Cloudinary Configuration
    cloudinary_cloud_name: str = Field(
        default="",
        description="Cloudinary cloud name. Also used to build on-the-fly frame URLs."
    )
    cloudinary_api_key: str = Field(
        default="",
        description="Cloudinary API key"
    )
    cloudinary_api_secret: str = Field(
        default="",
        description="Cloudinary API secret"
    )
    media_mock_mode: bool = Field(
        default=False,
        description="Use in-memory media host instead of Cloudinary. Enables local dev without an account."
    )

    # Anthropic Configuration
    anthropic_api_key: str = Field(
        default="",
        description="Default Claude API key. Requests may supply their own."
    )
    anthropic_model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Claude model used to pick the best frame."
    )
    anthropic_max_tokens: int = Field(
        default=300,
        description="Max tokens for the selection reply. The verdict is a short JSON object."
    )
    anthropic_base_url: Optional[str] = Field(
        default=None,
        description="Override the Anthropic API base URL (proxies, gateways)."
    )

    # FFmpeg Configuration
    ffmpeg_path: str = Field(
        default="ffmpeg",
        description="ffmpeg binary to invoke"
    )
    ffmpeg_timeout_seconds: Optional[float] = Field(
        default=None,
        description="Per-frame ffmpeg timeout. Unset means no timeout."
    )
    ffmpeg_mock_mode: bool = Field(
        default=False,
        description="Write placeholder frames instead of running ffmpeg."
    )
    frame_temp_dir: Optional[str] = Field(
        default=None,
        description="Directory for temporary frame files. Defaults to the system temp dir."
    )

    # Request Defaults
    default_blur: int = Field(
        default=400,
        description="Blur strength applied when a request doesn't specify one."
    )
    default_folder: str = Field(
        default="frames",
        description="Cloudinary folder for frames when a request doesn't specify one."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # CORS
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def validate_required_fields(self) -> list[str]:
        """
        Validate that required fields are set based on mock mode settings.

        Returns list of missing required fields. The Anthropic key is not
        listed: requests can bring their own.
        """
        missing = []

        if not self.media_mock_mode:
            if not self.cloudinary_cloud_name:
                missing.append("CLOUDINARY_CLOUD_NAME")
            if not self.cloudinary_api_key:
                missing.append("CLOUDINARY_API_KEY")
            if not self.cloudinary_api_secret:
                missing.append("CLOUDINARY_API_SECRET")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are read once per process and never change afterwards.
    For tests, call get_settings.cache_clear() to reset.
    """
    return Settings()
