"""Orchestrator service - coordinates a chat turn from request to SSE stream."""

from collections.abc import AsyncGenerator

from crm_assistant.domain.exceptions import OrchestratorError, ProviderFailure
from crm_assistant.observability import get_logger
from crm_assistant.observability.constants import LogEvents
from crm_assistant.schemas import CallerIdentity, ChatRequest
from crm_assistant.services.aggregation import AggregationService
from crm_assistant.services.context_composer import ContextComposer
from crm_assistant.services.history import HistoryBuilder
from crm_assistant.services.streaming import StreamMultiplexer, TurnStream, to_sse

logger = get_logger(__name__)


class ChatOrchestrator:
    """
    Main orchestrator for a sales assistant chat turn.

    Stateless: the conversation lives on the client, which sends the prior
    turns with every request.

    Coordinates:
    1. Building the provider history (priming exchange + prior turns)
    2. On the first turn only, aggregating business data and composing it
       into the message
    3. Opening the model stream and encoding its events as SSE
    """

    def __init__(
        self,
        aggregation_service: AggregationService,
        context_composer: ContextComposer,
        history_builder: HistoryBuilder,
        multiplexer: StreamMultiplexer,
    ):
        self.aggregation_service = aggregation_service
        self.context_composer = context_composer
        self.history_builder = history_builder
        self.multiplexer = multiplexer

    async def prepare_message(self, request: ChatRequest, caller: CallerIdentity) -> str:
        """Return the message to send: augmented on the first turn, raw afterwards."""
        if not request.is_first_turn:
            logger.info(LogEvents.CHAT_FOLLOW_UP_TURN, history_turns=len(request.history))
            return request.message

        logger.info(LogEvents.CHAT_FIRST_TURN, caller_id=caller.id)
        snapshot = await self.aggregation_service.aggregate(caller)
        return self.context_composer.compose(snapshot, caller, request.message)

    async def open_turn(self, request: ChatRequest, caller: CallerIdentity) -> TurnStream:
        """
        Prepare the turn and start the model call.

        Raises:
            OrchestratorError: If anything fails before the stream is open
        """
        history = self.history_builder.build(request.history)
        message = await self.prepare_message(request, caller)
        try:
            return await self.multiplexer.open(history, message)
        except ProviderFailure as e:
            raise OrchestratorError(f"Generation failed: {e.message}") from e

    async def stream_turn(self, turn: TurnStream) -> AsyncGenerator[str, None]:
        """Yield SSE frames for an open turn as the model produces them."""
        async for event in turn.events():
            yield to_sse(event)
