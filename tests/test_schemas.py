"""Tests for request and internal schemas."""

import pytest
from pydantic import TypeAdapter, ValidationError

from crm_assistant.schemas import (
    CallerIdentity,
    ChatRequest,
    ContextSnapshot,
    ErrorResponse,
    HistoryMessage,
    ProviderTurn,
    SourceResult,
)
from crm_assistant.schemas.internal import ChunkEvent, DoneEvent, ErrorEvent, StreamEvent


def _snapshot(**totals: int) -> ContextSnapshot:
    return ContextSnapshot(
        **{
            name: SourceResult(name=name, total=totals.get(name, 0), ok=True)
            for name in ("leads", "partners", "products", "orders")
        }
    )


def test_chat_request_minimal() -> None:
    """A request needs only a message; history defaults to empty."""
    request = ChatRequest(message="Quais leads devo priorizar?")
    assert request.history == []
    assert request.is_first_turn is True


def test_chat_request_with_history() -> None:
    request = ChatRequest(
        message="E os pedidos?",
        history=[
            HistoryMessage(role="user", content="Oi"),
            HistoryMessage(role="assistant", content="Olá!"),
        ],
    )
    assert request.is_first_turn is False
    assert request.history[1].role == "assistant"


def test_chat_request_rejects_empty_message() -> None:
    with pytest.raises(ValidationError):
        ChatRequest(message="")


def test_history_message_accepts_any_role() -> None:
    """Unknown roles are kept; the history builder maps them to user."""
    message = HistoryMessage(role="system", content="x")
    assert message.role == "system"


def test_caller_identity_defaults_to_anonymous() -> None:
    anonymous = CallerIdentity.anonymous()
    assert anonymous.id == 0
    assert anonymous.display_name == "Usuário"
    assert anonymous == CallerIdentity()


def test_caller_identity_is_frozen() -> None:
    caller = CallerIdentity(id=1, display_name="Ana")
    with pytest.raises(ValidationError):
        caller.id = 2


def test_source_result_failed() -> None:
    result = SourceResult.failed("leads", "timed out", latency_ms=15000)
    assert result.ok is False
    assert result.items == []
    assert result.total == 0
    assert result.error_message == "timed out"


def test_source_result_rejects_negative_total() -> None:
    with pytest.raises(ValidationError):
        SourceResult(name="leads", total=-1, ok=True)


class TestSourceResultTruncation:
    """Tests for capping the displayed records."""

    def test_truncates_items_but_keeps_total(self) -> None:
        """Only the displayed items are capped; the total still counts everything."""
        result = SourceResult(name="products", items=[{"i": i} for i in range(30)], total=1234, ok=True)
        capped = result.truncated(20)
        assert len(capped.items) == 20
        assert capped.items[0] == {"i": 0}
        assert capped.items[-1] == {"i": 19}
        assert capped.total == 1234
        assert len(result.items) == 30

    def test_within_cap_returns_same_result(self) -> None:
        result = SourceResult(name="orders", items=[{"i": 1}], total=1, ok=True)
        assert result.truncated(10) is result


class TestContextSnapshot:
    """Tests for the has_any_data flag."""

    def test_has_any_data_when_one_total_positive(self) -> None:
        assert _snapshot(orders=2).has_any_data is True

    def test_no_data_when_all_totals_zero(self) -> None:
        assert _snapshot().has_any_data is False

    def test_has_any_data_is_serialized(self) -> None:
        assert _snapshot(leads=1).model_dump()["has_any_data"] is True

    def test_results_in_fixed_order(self) -> None:
        names = [result.name for result in _snapshot().results()]
        assert names == ["leads", "partners", "products", "orders"]


def test_provider_turn_content() -> None:
    turn = ProviderTurn(role="model", text="Entendido!")
    assert turn.to_content() == {"role": "model", "parts": [{"text": "Entendido!"}]}


def test_provider_turn_rejects_unknown_role() -> None:
    with pytest.raises(ValidationError):
        ProviderTurn(role="assistant", text="x")


def test_stream_event_discriminator() -> None:
    adapter = TypeAdapter(StreamEvent)
    assert isinstance(adapter.validate_python({"type": "chunk", "text": "a"}), ChunkEvent)
    assert isinstance(adapter.validate_python({"type": "done"}), DoneEvent)
    assert isinstance(adapter.validate_python({"type": "error", "message": "x"}), ErrorEvent)


def test_error_response_omits_empty_details() -> None:
    body = ErrorResponse(error="Erro ao processar mensagem").model_dump(exclude_none=True)
    assert body == {"error": "Erro ao processar mensagem"}
