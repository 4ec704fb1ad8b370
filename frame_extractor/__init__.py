"""
Video Frame Extractor - pulls still frames out of remote videos.

This package contains the complete application:
- core: Framework-agnostic selection logic
- infrastructure: External service integrations
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
