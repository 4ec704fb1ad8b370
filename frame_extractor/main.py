"""
FastAPI application entry point.

This module creates and configures the FastAPI application through an
application factory (create_app), so tests can build fresh instances.

For local development:
    uvicorn frame_extractor.main:app --reload --port 3000

For production:
    gunicorn frame_extractor.main:app -w 4 -k uvicorn.workers.UvicornWorker
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.routes import frames, health, selection
from .config.settings import get_settings
from .core.errors import OperationError, ValidationError

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)

logger = logging.getLogger(__name__)

ENDPOINTS = (
    "POST /extract-frame - Extract single frame from any video URL",
    "POST /extract-best-frame - Extract several frames, AI picks the best one",
    "POST /extract-frames-only - Upload unblurred candidates for client-side selection",
    "POST /apply-blur - Blur an already-hosted frame",
    "POST /cleanup-candidates - Delete hosted candidates",
    "POST /get-frame-url - Get frame URL for Cloudinary videos",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log configuration problems and the endpoint list on startup."""
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())

    logger.info(
        "Video Frame Extractor starting",
        extra={
            "version": settings.api_version,
            "port": settings.port,
            "mock_mode": {
                "ffmpeg": settings.ffmpeg_mock_mode,
                "media": settings.media_mock_mode,
            }
        }
    )
    for endpoint in ENDPOINTS:
        logger.info("Endpoint: %s", endpoint)

    missing_fields = settings.validate_required_fields()
    if missing_fields:
        logger.error(
            "Missing required configuration",
            extra={"missing_fields": missing_fields}
        )

    yield

    logger.info("Video Frame Extractor shutting down")


def create_app() -> FastAPI:
    """
    Application factory.

    Creates and configures the FastAPI application.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="""
        Extract still frames from remote videos.

        ## Workflows

        - **Single frame**: `POST /extract-frame` extracts one frame and uploads it blurred.
        - **AI pick**: `POST /extract-best-frame` extracts several frames and lets
          Claude choose the best thumbnail, plus where overlay text should go.
        - **Client pick**: `POST /extract-frames-only`, then `POST /apply-blur` on the
          chosen one, then `POST /cleanup-candidates`.
        - **Hosted video**: `POST /get-frame-url` builds a frame URL without any upload.
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(
        health.router,
        prefix="/health",
        tags=["Health"],
    )

    app.include_router(frames.router, tags=["Frames"])
    app.include_router(selection.router, tags=["Selection"])

    @app.get("/", include_in_schema=False)
    async def root():
        """Root endpoint - service identity."""
        return {"status": "ok", "service": settings.service_name}

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        logger.info(
            "Rejected request",
            extra={"path": request.url.path, "error": exc.message},
        )
        return JSONResponse(status_code=400, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        """Malformed JSON or wrong field types: 400 like any other bad input."""
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request body")
        return JSONResponse(
            status_code=400,
            content={"error": f"Invalid {location}: {message}" if location else message},
        )

    @app.exception_handler(OperationError)
    async def operation_error_handler(request: Request, exc: OperationError):
        return JSONResponse(
            status_code=500,
            content={"error": exc.message, "details": exc.details},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Catch-all exception handler.

        Logs the full error server-side and returns a generic message.
        """
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )

        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"}
        )

    logger.info(
        "FastAPI application created",
        extra={
            "title": settings.api_title,
            "version": settings.api_version,
        }
    )

    return app


# Create the application instance
# This is what uvicorn/gunicorn will import
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "frame_extractor.main:app",
        host="0.0.0.0",
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
