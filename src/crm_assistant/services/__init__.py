"""Services package - business logic layer."""

from crm_assistant.services.aggregation import AggregationService
from crm_assistant.services.context_composer import ContextComposer
from crm_assistant.services.history import HistoryBuilder
from crm_assistant.services.orchestrator import ChatOrchestrator
from crm_assistant.services.streaming import StreamMultiplexer, StreamState, TurnStream

__all__ = [
    "AggregationService",
    "ContextComposer",
    "HistoryBuilder",
    "StreamMultiplexer",
    "StreamState",
    "TurnStream",
    "ChatOrchestrator",
]
