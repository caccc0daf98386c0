"""Constants for observability layer."""

# HTTP header for correlation ID propagation
CORRELATION_ID_HEADER = "X-Correlation-ID"

# Service identifier for logs
SERVICE_NAME = "crm-assistant"


# Log event names following the pattern: {domain}.{action}.{result}
class LogEvents:
    """Standardized log event names."""

    # Chat events
    CHAT_REQUEST_STARTED = "chat.request.started"
    CHAT_REQUEST_FAILED = "chat.request.failed"
    CHAT_FIRST_TURN = "chat.turn.first"
    CHAT_FOLLOW_UP_TURN = "chat.turn.follow_up"

    # Context aggregation events
    CONTEXT_AGGREGATION_STARTED = "context.aggregation.started"
    CONTEXT_AGGREGATION_COMPLETED = "context.aggregation.completed"
    CONTEXT_DEGRADED = "context.aggregation.degraded"

    # Source events
    SOURCE_FETCH_COMPLETED = "source.fetch.completed"
    SOURCE_FETCH_FAILED = "source.fetch.failed"
    SOURCE_FETCH_TIMEOUT = "source.fetch.timeout"
    SOURCE_CACHE_MISS = "source.cache.miss"

    # Generation events
    GENERATION_STARTED = "generation.stream.started"
    GENERATION_FAILED = "generation.stream.failed"
    GENERATION_CONVERSATION_STARTED = "generation.conversation.started"
    GENERATION_CLOSE_FAILED = "generation.stream.close_failed"

    # SSE streaming events
    SSE_STREAM_COMPLETED = "sse.stream.completed"
    SSE_STREAM_FAILED = "sse.stream.failed"
    SSE_STREAM_CLOSED = "sse.stream.closed"

    # Session events
    SESSION_MALFORMED = "session.identity.malformed"

    # Request lifecycle events
    REQUEST_STARTED = "request.started"
    REQUEST_COMPLETED = "request.completed"
    REQUEST_FAILED = "request.failed"
    REQUEST_VALIDATION_FAILED = "request.validation.failed"


# Fields that should be redacted in logs
SENSITIVE_FIELDS = frozenset({
    "password",
    "secret",
    "token",
    "api_key",
    "apikey",
    "authorization",
    "cookie",
    "gemini_api_key",
})

# Fields to redact (case-insensitive patterns)
SENSITIVE_FIELD_PATTERNS = frozenset({
    "password",
    "secret",
    "token",
    "key",
    "credential",
    "auth",
})

# Headers redacted from request logs
SENSITIVE_HEADERS = frozenset({"authorization", "cookie", "x-api-key", "x-auth-token"})

# Redaction placeholder
REDACTED_VALUE = "[REDACTED]"
