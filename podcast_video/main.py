"""
FastAPI entrypoint for the Podcast Video Generator API.

* POST /generate-podcast renders a podcast and returns its download URL
* GET /downloads/<file> serves finished podcasts until their retention window ends
"""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from podcast_video.api.routes_podcast import get_pipeline, router as podcast_router
from podcast_video.core.config import ensure_directories, settings
from podcast_video.core.errors import PodcastError
from podcast_video.core.logging_config import get_logger, setup_logging

# Setup logging
setup_logging(log_level=settings.log_level, log_file=Path(settings.log_file) if settings.log_file else None)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    ensure_directories(settings)
    logger.info("=" * 60)
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Work dir: {settings.work_dir} | Output dir: {settings.output_dir}")
    logger.info("=" * 60)
    yield
    # Shutdown
    logger.info("Shutting down application")
    get_pipeline().shutdown()


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Podcast Video Generator - turns a topic into a two-speaker podcast video",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify allowed origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PodcastError)
async def podcast_error_handler(request: Request, exc: PodcastError) -> JSONResponse:
    """Map pipeline errors to {"error": ...} bodies with their status code."""
    if exc.status_code >= 500:
        logger.error(f"Failed to generate podcast: {exc}")
    else:
        logger.warning(f"Rejected request: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc) or "Failed to generate podcast."})


# Include routers
app.include_router(podcast_router)
app.mount(
    settings.download_url_prefix,
    StaticFiles(directory=settings.output_dir, check_dir=False),
    name="downloads",
)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "running",
        "endpoints": {
            "generate_podcast": "/generate-podcast",
            "video_library": "/video-library",
            "downloads": f"{settings.download_url_prefix}/{{file}}",
            "docs": "/docs",
        },
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


def run() -> None:
    """Console entry point."""
    import uvicorn

    uvicorn.run(
        "podcast_video.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
