"""
Main FastAPI application instance.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from geoconvert import __version__
from geoconvert.api.convert import router as convert_router
from geoconvert.api.error_handlers import register_error_handlers
from geoconvert.api.middleware import (
    LoggingContextMiddleware,
    RequestCorrelationMiddleware,
)
from geoconvert.api.validation import router as validation_router
from geoconvert.core.config import settings
from geoconvert.core.logging_config import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Configure logging on startup."""
    setup_logging(json_logs=(settings.environment == "production"))
    logger.info(f"Starting geoconvert API v{__version__} in {settings.environment} mode")

    yield

    logger.info("Shutting down geoconvert API")


app = FastAPI(
    title="geoconvert API",
    description="GeoJSON/KML conversion, KMZ packaging and area validation",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Added in reverse order of execution
app.add_middleware(LoggingContextMiddleware)
app.add_middleware(RequestCorrelationMiddleware)

register_error_handlers(app)

app.include_router(convert_router, prefix=settings.api_prefix)
app.include_router(validation_router, prefix=settings.api_prefix)


@app.get("/")
async def root() -> dict[str, str]:
    """
    Root endpoint returning API information.

    Returns:
        dict[str, str]: API name, version and description.
    """
    return {
        "name": "geoconvert API",
        "version": __version__,
        "description": "GeoJSON/KML conversion and area validation",
    }


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


def run() -> None:
    """Run the API with uvicorn (``geoconvert-api`` console script)."""
    import uvicorn

    uvicorn.run("geoconvert.api.main:app", host="0.0.0.0", port=settings.port)
