"""Turns the model's chunk stream into terminated ``StreamEvent`` sequences."""

import asyncio
import json
from collections.abc import AsyncIterator, Sequence
from enum import Enum

from crm_assistant.clients.gemini import ModelProvider
from crm_assistant.domain.exceptions import ProviderFailure
from crm_assistant.observability import get_logger
from crm_assistant.observability.constants import LogEvents
from crm_assistant.schemas.internal import (
    ChunkEvent,
    DoneEvent,
    ErrorEvent,
    ProviderTurn,
    StreamEvent,
)

logger = get_logger(__name__)

SSE_DONE_MARKER = "[DONE]"


class StreamState(str, Enum):
    """Lifecycle of a single streamed turn."""

    IDLE = "idle"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (StreamState.COMPLETED, StreamState.FAILED)


class TurnStream:
    """One open provider reply, consumable once through ``events()``.

    Emits a ``ChunkEvent`` per provider chunk in arrival order, then exactly
    one ``DoneEvent`` or ``ErrorEvent``. Nothing is emitted once a terminal
    state is reached.
    """

    def __init__(self, chunks: AsyncIterator[str], chunk_timeout: float | None = None):
        self._chunks = chunks
        self.chunk_timeout = chunk_timeout
        self.state = StreamState.IDLE
        self.chunks_emitted = 0

    async def events(self) -> AsyncIterator[StreamEvent]:
        if self.state is not StreamState.IDLE:
            raise RuntimeError(f"Turn stream already consumed (state={self.state.value})")
        self.state = StreamState.STREAMING

        try:
            while True:
                try:
                    text = await self._next_chunk()
                except StopAsyncIteration:
                    break
                except Exception as e:
                    yield self._fail(e)
                    return
                self.chunks_emitted += 1
                yield ChunkEvent(text=text)

            self.state = StreamState.COMPLETED
            logger.info(LogEvents.SSE_STREAM_COMPLETED, chunks=self.chunks_emitted)
            yield DoneEvent()
        except (GeneratorExit, asyncio.CancelledError):
            # Consumer went away (client disconnect); close silently
            if not self.state.is_terminal:
                self.state = StreamState.FAILED
                logger.info(LogEvents.SSE_STREAM_CLOSED, chunks=self.chunks_emitted)
            raise
        finally:
            await self._close_chunks()

    async def _next_chunk(self) -> str:
        if self.chunk_timeout is None:
            return await anext(self._chunks)
        try:
            return await asyncio.wait_for(anext(self._chunks), timeout=self.chunk_timeout)
        except asyncio.TimeoutError as e:
            raise ProviderFailure(
                f"Model stream stalled for more than {self.chunk_timeout:g}s"
            ) from e

    def _fail(self, error: Exception) -> ErrorEvent:
        self.state = StreamState.FAILED
        logger.error(
            LogEvents.SSE_STREAM_FAILED,
            chunks=self.chunks_emitted,
            error_type=type(error).__name__,
            error_message=str(error),
        )
        return ErrorEvent(message=str(error) or type(error).__name__)

    async def _close_chunks(self) -> None:
        aclose = getattr(self._chunks, "aclose", None)
        if aclose is None:
            return
        try:
            await aclose()
        except Exception:
            logger.debug(LogEvents.GENERATION_CLOSE_FAILED, exc_info=True)


class StreamMultiplexer:
    """Drives the model provider and exposes its reply as stream events."""

    def __init__(self, provider: ModelProvider, chunk_timeout: float | None = None):
        self.provider = provider
        self.chunk_timeout = chunk_timeout

    async def open(self, history: Sequence[ProviderTurn], message: str) -> TurnStream:
        """
        Start the provider call and return the not-yet-consumed turn stream.

        Raises:
            ProviderFailure: If the provider fails before producing any chunk
        """
        logger.info(LogEvents.GENERATION_STARTED, history_turns=len(history), message_chars=len(message))
        try:
            conversation = self.provider.start_conversation(history)
            chunks = await conversation.send_and_stream(message)
        except ProviderFailure as e:
            logger.error(LogEvents.GENERATION_FAILED, error_message=e.message)
            raise
        except Exception as e:
            logger.exception(LogEvents.GENERATION_FAILED)
            raise ProviderFailure(f"Model call failed: {e}") from e
        return TurnStream(chunks, chunk_timeout=self.chunk_timeout)

    async def stream(self, history: Sequence[ProviderTurn], message: str) -> AsyncIterator[StreamEvent]:
        """
        Open the provider call and yield its events; never raises.

        A failure before the first chunk yields a lone ``ErrorEvent``.
        """
        try:
            turn = await self.open(history, message)
        except ProviderFailure as e:
            yield ErrorEvent(message=e.message)
            return

        async for event in turn.events():
            yield event


def to_sse(event: StreamEvent) -> str:
    """Format a stream event as an SSE frame."""
    if isinstance(event, ChunkEvent):
        return f"data: {json.dumps({'text': event.text}, ensure_ascii=False)}\n\n"
    if isinstance(event, DoneEvent):
        return f"data: {SSE_DONE_MARKER}\n\n"
    return f"event: error\ndata: {json.dumps({'message': event.message}, ensure_ascii=False)}\n\n"
