"""Schemas package - request/response models for the gateway."""

from crm_assistant.schemas.internal import (
    CallerIdentity,
    ChunkEvent,
    ContextSnapshot,
    DoneEvent,
    ErrorEvent,
    ProviderTurn,
    SourceResult,
    StreamEvent,
)
from crm_assistant.schemas.requests import ChatRequest, HistoryMessage
from crm_assistant.schemas.responses import ErrorResponse

__all__ = [
    # Requests
    "ChatRequest",
    "HistoryMessage",
    # Responses
    "ErrorResponse",
    # Internal
    "CallerIdentity",
    "SourceResult",
    "ContextSnapshot",
    "ProviderTurn",
    "ChunkEvent",
    "DoneEvent",
    "ErrorEvent",
    "StreamEvent",
]
