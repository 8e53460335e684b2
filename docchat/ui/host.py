"""FastAPI host application the NiceGUI interface is mounted on.

Only serves the UI and a health endpoint; all document and chat traffic
goes from the client to the backend configured by API_BASE_URL.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from docchat import __version__
from docchat.client.config import get_client_config

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Log host startup and shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    logger.info(f"Starting DocChat client (backend: {get_client_config().api_base_url})")
    yield
    logger.info("Shutting down DocChat client...")


def create_app() -> FastAPI:
    """Create and configure the host application.

    Returns:
        Configured FastAPI application instance.
    """
    application = FastAPI(
        title="DocChat Client",
        description="Browser client for chatting with uploaded documents.",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check client host status."""
        return {
            "status": "healthy",
            "service": "docchat-client",
            "backend": get_client_config().api_base_url,
        }

    return application
