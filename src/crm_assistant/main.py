"""Main FastAPI application for the CRM assistant gateway."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from crm_assistant.api import api_router, health_router
from crm_assistant.core.config import get_settings
from crm_assistant.core.redis_client import close_redis_client
from crm_assistant.observability import (
    CorrelationIDMiddleware,
    RequestLoggingMiddleware,
    configure_logging,
    get_logger,
)
from crm_assistant.observability.handlers import register_exception_handlers

_settings = get_settings()

configure_logging(
    log_level=_settings.log_level,
    log_format=_settings.log_format if not _settings.debug else "console",
    development_mode=_settings.debug,
)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(f"Starting {settings.service_name}")
    logger.info(f"Business API URL: {settings.business_api_url}")
    logger.info(f"Gemini model: {settings.gemini_model}")
    if not settings.gemini_api_key:
        logger.warning("Gemini API key is not set; chat requests will fail")

    yield

    await close_redis_client()
    logger.info(f"Shutting down {settings.service_name}")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="CRM Assistant Gateway",
        description="""
Sales assistant chat for the Sankhya CRM, backed by Gemini.

## Workflow

1. Frontend sends the new message plus the prior turns
2. The first turn is enriched with a live snapshot of leads, partners,
   products and orders (queried in parallel, each with its own timeout)
3. The message is sent to Gemini after a fixed priming exchange
4. The answer is streamed back as Server-Sent Events
        """,
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Middleware executes in reverse order of addition, so add RequestLogging first
    app.add_middleware(
        RequestLoggingMiddleware,
        exclude_paths={"/health", "/ready", "/docs", "/openapi.json", "/redoc"},
        log_request_headers=settings.log_request_headers,
        log_request_body=settings.log_request_body,
    )
    app.add_middleware(CorrelationIDMiddleware)

    register_exception_handlers(app)

    app.include_router(health_router)  # /health, /ready
    app.include_router(api_router)  # /api/gemini/chat

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "crm_assistant.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
