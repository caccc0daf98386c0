"""Response schemas for the gateway API."""

from typing import Any

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Error body for rejected requests and turns that fail before streaming starts."""

    error: str = Field(..., description="User-facing error message")
    details: dict[str, Any] | None = Field(default=None, description="Additional error details")
