"""Client for the Gemini generative model."""

from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

import google.generativeai as genai

from crm_assistant.domain.exceptions import ProviderFailure
from crm_assistant.observability import get_logger
from crm_assistant.observability.constants import LogEvents
from crm_assistant.schemas.internal import ProviderTurn

logger = get_logger(__name__)


@dataclass(frozen=True)
class ModelConfig:
    """Immutable provider configuration, built once from settings."""

    api_key: str
    model_name: str = "gemini-2.0-flash-exp"
    temperature: float = 0.7
    max_output_tokens: int = 1500


class Conversation(Protocol):
    """A chat session primed with prior turns."""

    async def send_and_stream(self, message: str) -> AsyncIterator[str]:
        """Send ``message`` and return the reply as an async iterator of text chunks.

        Raises:
            ProviderFailure: If the request cannot be started.
        """
        ...


class ModelProvider(Protocol):
    """Starts conversations with a generative model."""

    def start_conversation(self, history: Sequence[ProviderTurn]) -> Conversation: ...


class GeminiConversation:
    """Wraps a ``genai.ChatSession``."""

    def __init__(self, chat: Any):
        self._chat = chat

    async def send_and_stream(self, message: str) -> AsyncIterator[str]:
        try:
            response = await self._chat.send_message_async(message, stream=True)
        except Exception as e:
            raise ProviderFailure(f"Gemini request failed: {e}") from e
        return self._iter_text(response)

    @staticmethod
    async def _iter_text(response: Any) -> AsyncIterator[str]:
        """Yield the text of every chunk, empty ones included, in arrival order."""
        try:
            async for chunk in response:
                # .text raises ValueError when a chunk was blocked (no parts)
                yield chunk.text
        except ProviderFailure:
            raise
        except Exception as e:
            raise ProviderFailure(f"Gemini stream failed: {e}") from e


class GeminiProvider:
    """Gemini provider configured from an injected ``ModelConfig``."""

    def __init__(self, config: ModelConfig):
        self.config = config
        if config.api_key:
            genai.configure(api_key=config.api_key)
        self._model = genai.GenerativeModel(
            model_name=config.model_name,
            generation_config=genai.GenerationConfig(
                temperature=config.temperature,
                max_output_tokens=config.max_output_tokens,
            ),
        )

    def start_conversation(self, history: Sequence[ProviderTurn]) -> GeminiConversation:
        if not self.config.api_key:
            raise ProviderFailure("Gemini API key is not configured")
        logger.debug(LogEvents.GENERATION_CONVERSATION_STARTED, model=self.config.model_name, turns=len(history))
        chat = self._model.start_chat(history=[turn.to_content() for turn in history])
        return GeminiConversation(chat)
