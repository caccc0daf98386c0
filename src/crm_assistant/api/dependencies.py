"""FastAPI dependencies for the gateway API."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request

from crm_assistant.auth import resolve_caller_identity
from crm_assistant.clients import (
    BusinessDataSource,
    CachedListingSource,
    GeminiProvider,
    ModelConfig,
    ModelProvider,
)
from crm_assistant.core.config import get_settings
from crm_assistant.core.redis_client import get_redis_client
from crm_assistant.schemas import CallerIdentity
from crm_assistant.services import (
    AggregationService,
    ChatOrchestrator,
    ContextComposer,
    HistoryBuilder,
    StreamMultiplexer,
)


@lru_cache
def get_model_provider() -> ModelProvider:
    """Get the Gemini provider singleton."""
    settings = get_settings()
    return GeminiProvider(
        ModelConfig(
            api_key=settings.gemini_api_key,
            model_name=settings.gemini_model,
            temperature=settings.gemini_temperature,
            max_output_tokens=settings.gemini_max_output_tokens,
        )
    )


@lru_cache
def get_aggregation_service() -> AggregationService:
    """Get the aggregation service singleton with its four sources."""
    settings = get_settings()
    redis = get_redis_client()
    return AggregationService(
        leads=BusinessDataSource(
            name="leads",
            base_url=settings.business_api_url,
            path=settings.leads_path,
            timeout=settings.source_timeout,
            caller_param=settings.caller_query_param,
            session_cookie_name=settings.session_cookie_name,
        ),
        partners=CachedListingSource(
            name="partners",
            redis=redis,
            key=settings.partners_cache_key,
            list_field="parceiros",
            timeout=settings.cache_timeout,
        ),
        products=CachedListingSource(
            name="products",
            redis=redis,
            key=settings.products_cache_key,
            list_field="produtos",
            timeout=settings.cache_timeout,
        ),
        orders=BusinessDataSource(
            name="orders",
            base_url=settings.business_api_url,
            path=settings.orders_path,
            timeout=settings.source_timeout,
            caller_param=settings.caller_query_param,
            session_cookie_name=settings.session_cookie_name,
        ),
        caps={
            "leads": settings.leads_cap,
            "partners": settings.partners_cap,
            "products": settings.products_cap,
            "orders": settings.orders_cap,
        },
    )


def get_context_composer() -> ContextComposer:
    """Get a context composer instance."""
    return ContextComposer()


def get_history_builder() -> HistoryBuilder:
    """Get a history builder instance."""
    return HistoryBuilder()


def get_stream_multiplexer(
    provider: Annotated[ModelProvider, Depends(get_model_provider)],
) -> StreamMultiplexer:
    """Get the stream multiplexer."""
    return StreamMultiplexer(provider, chunk_timeout=get_settings().generation_chunk_timeout)


def get_orchestrator(
    aggregation_service: Annotated[AggregationService, Depends(get_aggregation_service)],
    context_composer: Annotated[ContextComposer, Depends(get_context_composer)],
    history_builder: Annotated[HistoryBuilder, Depends(get_history_builder)],
    multiplexer: Annotated[StreamMultiplexer, Depends(get_stream_multiplexer)],
) -> ChatOrchestrator:
    """Get the chat orchestrator."""
    return ChatOrchestrator(
        aggregation_service=aggregation_service,
        context_composer=context_composer,
        history_builder=history_builder,
        multiplexer=multiplexer,
    )


def get_caller_identity(request: Request) -> CallerIdentity:
    """Resolve the caller from the session cookie (anonymous if absent or malformed)."""
    return resolve_caller_identity(request.cookies, get_settings().session_cookie_name)
