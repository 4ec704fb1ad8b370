"""
Core frame selection logic.

This module is framework-agnostic - it doesn't import FastAPI, Cloudinary,
or ffmpeg. It talks to the outside world only through the protocols
defined in core.frames.selector, so it can be tested with in-memory fakes.
"""
