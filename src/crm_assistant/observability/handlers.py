"""Exception handlers that keep error bodies in the gateway's error shape."""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from crm_assistant.observability.constants import CORRELATION_ID_HEADER, LogEvents
from crm_assistant.observability.context import get_correlation_id
from crm_assistant.observability.logger import get_logger
from crm_assistant.schemas.responses import ErrorResponse

logger = get_logger(__name__)

INVALID_REQUEST_MESSAGE = "Requisição inválida"


def register_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers on the FastAPI app.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle validation errors with logging.

        Args:
            request: The incoming request.
            exc: The validation error.

        Returns:
            JSON response with ``{"error": ..., "details": {"errors": [...]}}``.
        """
        # 'ctx' may hold non-serializable objects, so only loc and msg are kept
        error_messages = [
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in exc.errors()
        ]

        logger.warning(
            LogEvents.REQUEST_VALIDATION_FAILED,
            path=str(request.url.path),
            method=request.method,
            errors=error_messages,
        )

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=ErrorResponse(
                error=INVALID_REQUEST_MESSAGE,
                details={"errors": error_messages},
            ).model_dump(),
            headers={CORRELATION_ID_HEADER: get_correlation_id()},
        )
