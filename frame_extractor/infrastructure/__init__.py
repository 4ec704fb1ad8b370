"""
Infrastructure layer - external service integrations.

Each subdirectory wraps an external dependency:
- video: FFmpeg frame extraction
- media: Cloudinary uploads, blur and deletes
- anthropic: Claude API client

These wrappers translate between external formats and our domain models.
"""
