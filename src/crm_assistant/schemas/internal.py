"""Internal DTOs used within the gateway."""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

ANONYMOUS_ID = 0
ANONYMOUS_NAME = "Usuário"


class CallerIdentity(BaseModel):
    """Who is asking, as resolved from the session cookie."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(default=ANONYMOUS_ID, description="Caller id forwarded to the business APIs")
    display_name: str = Field(default=ANONYMOUS_NAME, description="Name shown in the context")

    @classmethod
    def anonymous(cls) -> "CallerIdentity":
        return cls()


class SourceResult(BaseModel):
    """Result of fetching a single business data source."""

    name: str = Field(..., description="Source name (leads, partners, products, orders)")
    items: list[dict[str, Any]] = Field(default_factory=list, description="Records, in source order")
    total: int = Field(default=0, ge=0, description="Untruncated record count")
    ok: bool = Field(..., description="False when the source failed or timed out")
    error_message: str | None = Field(default=None, description="Failure cause if not ok")
    latency_ms: int = Field(default=0, description="Fetch latency in milliseconds")

    @classmethod
    def failed(cls, name: str, error_message: str, latency_ms: int = 0) -> "SourceResult":
        """Build the empty result reported for a failed or timed-out source."""
        return cls(name=name, items=[], total=0, ok=False, error_message=error_message, latency_ms=latency_ms)

    def truncated(self, cap: int) -> "SourceResult":
        """Return a copy holding at most ``cap`` items; ``total`` is unchanged."""
        if len(self.items) <= cap:
            return self
        return self.model_copy(update={"items": self.items[:cap]})


class ContextSnapshot(BaseModel):
    """Business data aggregated for the first turn of a conversation."""

    leads: SourceResult
    partners: SourceResult
    products: SourceResult
    orders: SourceResult

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_any_data(self) -> bool:
        """True if at least one source reported a non-zero total."""
        return any(result.total > 0 for result in self.results())

    def results(self) -> list[SourceResult]:
        return [self.leads, self.partners, self.products, self.orders]


class ProviderTurn(BaseModel):
    """A turn in the model provider's vocabulary."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "model"]
    text: str

    def to_content(self) -> dict[str, Any]:
        """Render as the provider's content dict."""
        return {"role": self.role, "parts": [{"text": self.text}]}


class ChunkEvent(BaseModel):
    """An incremental piece of the model's answer."""

    type: Literal["chunk"] = "chunk"
    text: str


class DoneEvent(BaseModel):
    """Sentinel closing a successful stream."""

    type: Literal["done"] = "done"


class ErrorEvent(BaseModel):
    """Terminal event for a stream that failed."""

    type: Literal["error"] = "error"
    message: str


StreamEvent = Annotated[ChunkEvent | DoneEvent | ErrorEvent, Field(discriminator="type")]
