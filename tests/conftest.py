"""Shared fixtures: in-memory data sources and a scripted model provider."""

import asyncio
from typing import Any

import pytest
from fastapi.testclient import TestClient

from crm_assistant.clients.base import DataSource
from crm_assistant.domain.exceptions import ProviderFailure, SourceUnavailableError
from crm_assistant.schemas import CallerIdentity
from crm_assistant.services import (
    AggregationService,
    ChatOrchestrator,
    ContextComposer,
    HistoryBuilder,
    StreamMultiplexer,
)


class FakeSource(DataSource):
    """Data source serving canned records, optionally slow or broken."""

    def __init__(
        self,
        name: str,
        items: list[dict[str, Any]] | None = None,
        total: int | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
        timeout: float = 1.0,
    ):
        super().__init__(name, timeout)
        self.items = items or []
        self.total = total
        self.error = error
        self.delay = delay
        self.callers: list[CallerIdentity] = []

    async def _load(self, caller: CallerIdentity) -> tuple[list[dict[str, Any]], int]:
        self.callers.append(caller)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        total = self.total if self.total is not None else len(self.items)
        return list(self.items), total


class FakeConversation:
    """Conversation replaying scripted chunks.

    ``fail_after=n`` raises after ``n`` chunks were produced.
    """

    def __init__(
        self,
        chunks: list[str],
        fail_after: int | None = None,
        fail_on_send: bool = False,
        stall: float = 0.0,
    ):
        self.chunks = chunks
        self.fail_after = fail_after
        self.fail_on_send = fail_on_send
        self.stall = stall
        self.sent: list[str] = []

    async def send_and_stream(self, message: str):
        self.sent.append(message)
        if self.fail_on_send:
            raise ProviderFailure("quota exceeded")
        return self._chunks()

    async def _chunks(self):
        for index, chunk in enumerate(self.chunks):
            if self.fail_after == index:
                raise ProviderFailure("connection reset by model")
            if self.stall:
                await asyncio.sleep(self.stall)
            yield chunk
        if self.fail_after == len(self.chunks):
            raise ProviderFailure("connection reset by model")


class FakeProvider:
    """ModelProvider handing out ``FakeConversation`` objects."""

    def __init__(self, chunks: list[str] | None = None, **conversation_options: Any):
        self.chunks = ["Olá", ", tudo bem?"] if chunks is None else chunks
        self.conversation_options = conversation_options
        self.histories: list[list[Any]] = []
        self.conversations: list[FakeConversation] = []

    def start_conversation(self, history):
        self.histories.append(list(history))
        conversation = FakeConversation(self.chunks, **self.conversation_options)
        self.conversations.append(conversation)
        return conversation

    @property
    def sent_messages(self) -> list[str]:
        return [message for conversation in self.conversations for message in conversation.sent]


@pytest.fixture
def sample_leads() -> list[dict[str, Any]]:
    return [
        {"NOME": "Reforma Loja Centro", "VALOR": 15000.5, "CODESTAGIO": "Proposta"},
        {"NOME": "Frota Transportes", "VALOR": "2300", "CODESTAGIO": "Negociação"},
        {"NOME": "Clínica Vida", "VALOR": None, "CODESTAGIO": None},
    ]


@pytest.fixture
def sample_partners() -> list[dict[str, Any]]:
    return [
        {"NOMEPARC": f"Parceiro {i}", "NOMECID": "Campinas"} for i in range(1, 6)
    ]


@pytest.fixture
def sample_orders() -> list[dict[str, Any]]:
    return [
        {"NUNOTA": 1001, "NOMEPARC": "Parceiro 1", "VLRNOTA": 1234.5},
        {"NUNOTA": 1002, "NOMEPARC": "Parceiro 2", "VLRNOTA": 99.9},
    ]


@pytest.fixture
def caller() -> CallerIdentity:
    return CallerIdentity(id=42, display_name="Ana")


@pytest.fixture
def healthy_sources(sample_leads, sample_partners, sample_orders) -> dict[str, FakeSource]:
    """Sources for a caller with 3 leads, 5 partners, 0 products and 2 orders."""
    return {
        "leads": FakeSource("leads", sample_leads),
        "partners": FakeSource("partners", sample_partners),
        "products": FakeSource("products", []),
        "orders": FakeSource("orders", sample_orders),
    }


@pytest.fixture
def failing_sources() -> dict[str, FakeSource]:
    """Every source fails."""
    return {
        name: FakeSource(name, error=SourceUnavailableError(name, "HTTP 502: bad gateway"))
        for name in ("leads", "partners", "products", "orders")
    }


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def make_orchestrator():
    """Build a ChatOrchestrator wired to fakes."""

    def _make(sources: dict[str, DataSource], provider: FakeProvider, chunk_timeout: float | None = None):
        return ChatOrchestrator(
            aggregation_service=AggregationService(**sources),
            context_composer=ContextComposer(),
            history_builder=HistoryBuilder(),
            multiplexer=StreamMultiplexer(provider, chunk_timeout=chunk_timeout),
        )

    return _make


@pytest.fixture
def make_client(make_orchestrator):
    """Build a TestClient whose orchestrator uses the given fakes."""
    from crm_assistant.api.dependencies import get_orchestrator
    from crm_assistant.main import create_app

    created: list[Any] = []

    def _make(sources: dict[str, DataSource], provider: FakeProvider) -> TestClient:
        app = create_app()
        orchestrator = make_orchestrator(sources, provider)
        app.dependency_overrides[get_orchestrator] = lambda: orchestrator
        created.append(app)
        return TestClient(app)

    yield _make

    for app in created:
        app.dependency_overrides.clear()
