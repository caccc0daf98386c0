"""Clients package - business data sources and the model provider."""

from crm_assistant.clients.base import DataSource
from crm_assistant.clients.business_data import BusinessDataSource
from crm_assistant.clients.cache import CachedListingSource
from crm_assistant.clients.gemini import (
    Conversation,
    GeminiConversation,
    GeminiProvider,
    ModelConfig,
    ModelProvider,
)

__all__ = [
    "DataSource",
    "BusinessDataSource",
    "CachedListingSource",
    "ModelConfig",
    "ModelProvider",
    "Conversation",
    "GeminiProvider",
    "GeminiConversation",
]
