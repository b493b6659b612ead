from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from botpublish.api.router import api_router
from botpublish.config import get_settings
from botpublish.core.logging import get_logger, setup_logging
from botpublish.services.publisher import get_publisher

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    # Startup: hydrate history before serving requests
    setup_logging()
    get_publisher()
    yield
    # Shutdown: deploys cannot be cancelled, only reported
    pending = get_publisher().pending_jobs
    if pending:
        logger.bind(pending=pending).warning("shutdown_with_running_deploys")


app = FastAPI(
    title="botpublish",
    description="Bot publishing service with deploy job tracking",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/api/docs" if settings.debug else None,
    redoc_url="/api/redoc" if settings.debug else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.base_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint for load balancers."""
    return {"status": "healthy"}
