import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from ghactivity import __version__
from ghactivity.api.deps import reset_client_context
from ghactivity.api.router import api_router
from ghactivity.config import settings
from ghactivity.services.github import close_github_client


def setup_logging() -> None:
    """Configure application logging."""
    # Format: timestamp - level - logger name - message
    log_format = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"
    date_format = "%H:%M:%S"

    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format=log_format,
        datefmt=date_format,
        stream=sys.stdout,
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("hpack").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Application lifespan: startup and shutdown events."""
    setup_logging()
    logger.info("ghactivity API starting up")
    if not settings.github_token_configured:
        logger.info("No GitHub token configured; serving REST-only aggregations")
    yield
    reset_client_context()
    await close_github_client()
    logger.info("ghactivity API shutting down")


app = FastAPI(
    title="ghactivity API",
    description="Adaptive GitHub activity aggregation",
    version=__version__,
    lifespan=lifespan,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log failed requests; health checks are skipped."""
    if request.url.path == "/health":
        return await call_next(request)

    response = await call_next(request)
    if response.status_code >= 400:
        logger.info(f"{request.method} {request.url.path} → {response.status_code}")
    return response


app.include_router(api_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
