"""Chat endpoint for the gateway API."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse, Response, StreamingResponse

from crm_assistant.api.dependencies import get_caller_identity, get_orchestrator
from crm_assistant.domain.exceptions import OrchestratorError
from crm_assistant.observability import get_logger
from crm_assistant.observability.constants import LogEvents
from crm_assistant.schemas import CallerIdentity, ChatRequest, ErrorResponse
from crm_assistant.services import ChatOrchestrator

logger = get_logger(__name__)

router = APIRouter(tags=["chat"])

CHAT_ERROR_MESSAGE = "Erro ao processar mensagem"


def _error_response() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(error=CHAT_ERROR_MESSAGE).model_dump(exclude_none=True),
    )


@router.post(
    "/chat",
    responses={
        200: {"content": {"text/event-stream": {}}, "description": "Streamed answer"},
        500: {"model": ErrorResponse, "description": "The turn could not be started"},
    },
)
async def chat(
    request: ChatRequest,
    orchestrator: Annotated[ChatOrchestrator, Depends(get_orchestrator)],
    caller: Annotated[CallerIdentity, Depends(get_caller_identity)],
) -> Response:
    """
    Answer a chat message with a streamed Gemini response.

    On the first turn (empty `history`) the message is augmented with the
    caller's leads, partners, products and orders. Later turns are sent as-is.

    Returns a Server-Sent Events stream:
    - `data: {"text": "..."}` - a chunk of the answer
    - `data: [DONE]` - the answer is complete
    - `event: error` / `data: {"message": "..."}` - the answer was cut short

    Failures before streaming starts return HTTP 500 with `{"error": "..."}`.
    """
    logger.info(LogEvents.CHAT_REQUEST_STARTED, caller_id=caller.id, history_turns=len(request.history))
    try:
        turn = await orchestrator.open_turn(request, caller)
    except OrchestratorError as e:
        logger.error(LogEvents.CHAT_REQUEST_FAILED, error_message=e.message)
        return _error_response()
    except Exception:
        logger.exception(LogEvents.CHAT_REQUEST_FAILED)
        return _error_response()

    return StreamingResponse(
        orchestrator.stream_turn(turn),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        },
    )
