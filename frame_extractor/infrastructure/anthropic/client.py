"""
Anthropic Claude API client wrapper.

This module provides a thin wrapper around the Anthropic SDK that:
1. Implements our VisionModelClient protocol
2. Handles API-specific details (URL image blocks, message format)
3. Provides consistent error handling
4. Enables easy mocking for tests

Candidate frames are already hosted, so images are sent by URL rather
than base64; the API fetches them itself.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import anthropic
from anthropic import APIError, RateLimitError

from ...core.frames.selector import VisionModelClient


logger = logging.getLogger(__name__)


class VisionClientError(Exception):
    """Raised when API calls fail."""
    pass


class RateLimitExceeded(VisionClientError):
    """Raised when we hit rate limits."""
    pass


@dataclass
class AnthropicConfig:
    """Configuration for the Anthropic client."""
    api_key: str
    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = 300  # the verdict is a one-line JSON object
    base_url: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ValueError("API key is required")
        if self.max_tokens < 1:
            raise ValueError("max_tokens must be positive")


class AnthropicVisionClient(VisionModelClient):
    """
    Implementation of VisionModelClient using Claude.

    Knows about Anthropic's message format but nothing about thumbnails
    or frame selection. It sends images and text and returns text.
    """

    def __init__(self, config: AnthropicConfig) -> None:
        self._config = config
        self._client = anthropic.AsyncAnthropic(
            api_key=config.api_key,
            base_url=config.base_url,
        )

    async def analyze_image_urls(
        self,
        image_urls: list[str],
        prompt: str,
    ) -> str:
        """
        Send the prompt followed by every image, in order.

        The prompt goes first so the model reads the criteria before
        seeing the frames; image order is what the returned index refers to.
        """
        if not image_urls:
            raise ValueError("At least one image is required")

        content = self._build_content(image_urls, prompt)

        try:
            response = await self._client.messages.create(
                model=self._config.model,
                max_tokens=self._config.max_tokens,
                messages=[
                    {"role": "user", "content": content}
                ],
            )

            return self._extract_text_response(response)

        except RateLimitError as e:
            logger.warning("Rate limit hit", extra={"error": str(e)})
            raise RateLimitExceeded("API rate limit exceeded. Please try again later.")
        except APIError as e:
            logger.error("API error", extra={"error": str(e)})
            raise VisionClientError(f"API error: {e.message}")

    async def close(self) -> None:
        """Close the SDK's HTTP connection pool."""
        await self._client.close()

    def _build_content(self, image_urls: list[str], text_prompt: str) -> list[dict]:
        """
        Build the content array for a multi-image request.

        [
            {"type": "text", "text": "..."},
            {"type": "image", "source": {"type": "url", "url": "..."}},
            ...
        ]
        """
        content: list[dict] = [{"type": "text", "text": text_prompt}]

        for url in image_urls:
            content.append({
                "type": "image",
                "source": {"type": "url", "url": url},
            })

        return content

    def _extract_text_response(self, response) -> str:
        """Extract text content from API response."""
        if not response.content:
            return ""

        text_blocks = [
            block.text
            for block in response.content
            if hasattr(block, 'text')
        ]

        return "\n".join(text_blocks)


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_anthropic_client(
    api_key: str,
    model: str = "claude-sonnet-4-20250514",
    max_tokens: int = 300,
    base_url: Optional[str] = None,
) -> AnthropicVisionClient:
    """
    Create a configured client.

    The key is per call rather than read from the environment because a
    request may bring its own credential.
    """
    config = AnthropicConfig(api_key=api_key, model=model, max_tokens=max_tokens, base_url=base_url)
    return AnthropicVisionClient(config)
