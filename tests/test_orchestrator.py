"""Tests for the chat orchestrator."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from conftest import FakeProvider

from crm_assistant.domain.exceptions import OrchestratorError
from crm_assistant.schemas import CallerIdentity, ChatRequest, HistoryMessage
from crm_assistant.services import (
    AggregationService,
    ChatOrchestrator,
    ContextComposer,
    HistoryBuilder,
    StreamMultiplexer,
)
from crm_assistant.services.context_composer import DEGRADED_WARNING
from crm_assistant.services.history import SYSTEM_PROMPT


async def _frames(orchestrator: ChatOrchestrator, request: ChatRequest, caller: CallerIdentity) -> list[str]:
    turn = await orchestrator.open_turn(request, caller)
    return [frame async for frame in orchestrator.stream_turn(turn)]


class TestChatOrchestrator:
    """Tests for ChatOrchestrator."""

    @pytest.mark.asyncio
    async def test_first_turn_sends_composed_context(self, make_orchestrator, healthy_sources, fake_provider, caller):
        """The first message carries the business data and the question last."""
        orchestrator = make_orchestrator(healthy_sources, fake_provider)

        frames = await _frames(orchestrator, ChatRequest(message="Quais leads devo priorizar?"), caller)

        assert len(fake_provider.sent_messages) == 1
        sent = fake_provider.sent_messages[0]
        assert sent.startswith("DADOS DO SISTEMA")
        assert "👤 USUÁRIO LOGADO: Ana" in sent
        assert "- Total de Leads Ativos: 3" in sent
        assert sent.endswith("PERGUNTA DO USUÁRIO:\nQuais leads devo priorizar?")
        assert frames[-1] == "data: [DONE]\n\n"

    @pytest.mark.asyncio
    async def test_first_turn_history_is_priming_only(self, make_orchestrator, healthy_sources, fake_provider, caller):
        orchestrator = make_orchestrator(healthy_sources, fake_provider)

        await _frames(orchestrator, ChatRequest(message="Oi"), caller)

        history = fake_provider.histories[0]
        assert len(history) == 2
        assert history[0].text == SYSTEM_PROMPT

    @pytest.mark.asyncio
    async def test_follow_up_skips_aggregation(self, fake_provider, caller):
        """Later turns forward the raw message and never touch the sources."""
        aggregation = MagicMock(spec=AggregationService)
        aggregation.aggregate = AsyncMock()
        composer = MagicMock(spec=ContextComposer)
        orchestrator = ChatOrchestrator(
            aggregation_service=aggregation,
            context_composer=composer,
            history_builder=HistoryBuilder(),
            multiplexer=StreamMultiplexer(fake_provider),
        )
        request = ChatRequest(
            message="E os pedidos?",
            history=[
                HistoryMessage(role="user", content="Oi"),
                HistoryMessage(role="assistant", content="Olá!"),
            ],
        )

        await _frames(orchestrator, request, caller)

        aggregation.aggregate.assert_not_called()
        composer.compose.assert_not_called()
        assert fake_provider.sent_messages == ["E os pedidos?"]
        history = fake_provider.histories[0]
        assert len(history) == 4
        assert [(t.role, t.text) for t in history[2:]] == [("user", "Oi"), ("model", "Olá!")]

    @pytest.mark.asyncio
    async def test_degraded_context_still_calls_model(self, make_orchestrator, failing_sources, fake_provider, caller):
        """With every source down the model is still asked, with a warning."""
        orchestrator = make_orchestrator(failing_sources, fake_provider)

        frames = await _frames(orchestrator, ChatRequest(message="Resumo?"), caller)

        assert DEGRADED_WARNING in fake_provider.sent_messages[0]
        assert frames == [
            'data: {"text": "Olá"}\n\n',
            'data: {"text": ", tudo bem?"}\n\n',
            "data: [DONE]\n\n",
        ]

    @pytest.mark.asyncio
    async def test_provider_failure_before_stream(self, make_orchestrator, healthy_sources, caller):
        orchestrator = make_orchestrator(healthy_sources, FakeProvider(fail_on_send=True))

        with pytest.raises(OrchestratorError, match="quota exceeded"):
            await orchestrator.open_turn(ChatRequest(message="Oi"), caller)

    @pytest.mark.asyncio
    async def test_mid_stream_failure_ends_with_error_frame(self, make_orchestrator, healthy_sources, caller):
        orchestrator = make_orchestrator(healthy_sources, FakeProvider(["a", "b", "c"], fail_after=2))

        frames = await _frames(orchestrator, ChatRequest(message="Oi"), caller)

        assert frames[:2] == ['data: {"text": "a"}\n\n', 'data: {"text": "b"}\n\n']
        assert frames[2].startswith("event: error\n")
        assert len(frames) == 3
        assert "data: [DONE]\n\n" not in frames

    @pytest.mark.asyncio
    async def test_prepare_message_passes_caller_to_sources(self, make_orchestrator, healthy_sources, fake_provider):
        orchestrator = make_orchestrator(healthy_sources, fake_provider)
        caller = CallerIdentity(id=77, display_name="Bruno")

        message = await orchestrator.prepare_message(ChatRequest(message="Oi"), caller)

        assert "👤 USUÁRIO LOGADO: Bruno" in message
        assert healthy_sources["orders"].callers == [caller]
