"""
Anthropic Claude API client wrapper.

Implements the VisionModelClient protocol from core.frames.selector.
"""

from .client import (
    AnthropicConfig,
    AnthropicVisionClient,
    VisionClientError,
    create_anthropic_client,
)

__all__ = ["AnthropicVisionClient", "AnthropicConfig", "VisionClientError", "create_anthropic_client"]
