"""Request schemas for the gateway API."""

from pydantic import BaseModel, Field


class HistoryMessage(BaseModel):
    """A prior turn of the conversation as the frontend stores it.

    The role is kept as free text: "assistant" maps to the model, any
    other value is treated as the user.
    """

    role: str = Field(..., description="Turn author, usually 'user' or 'assistant'")
    content: str = Field(..., description="Turn text")


class ChatRequest(BaseModel):
    """Request to the chat endpoint."""

    message: str = Field(..., min_length=1, description="The user's new message")
    history: list[HistoryMessage] = Field(
        default_factory=list,
        description="Prior turns of this conversation, oldest first",
    )

    @property
    def is_first_turn(self) -> bool:
        """True when no prior turn was sent, so business data must be attached."""
        return not self.history
