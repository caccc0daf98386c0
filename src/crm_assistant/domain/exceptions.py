"""Domain-specific exceptions."""

from __future__ import annotations


class GatewayError(Exception):
    """Base exception for gateway errors."""

    def __init__(self, message: str, error_code: str = "GATEWAY_ERROR"):
        """Initialize gateway error."""
        self.message = message
        self.error_code = error_code
        super().__init__(message)


# ===========================================
# DATA SOURCE EXCEPTIONS
# ===========================================


class SourceError(GatewayError):
    """Base exception for a business data source that could not be read."""

    def __init__(self, source: str, message: str, error_code: str = "SOURCE_ERROR"):
        """Initialize source error."""
        self.source = source
        super().__init__(message, error_code)


class SourceTimeoutError(SourceError):
    """Raised when a source does not answer within its deadline."""

    def __init__(self, source: str, timeout: float):
        """Initialize source timeout error."""
        self.timeout = timeout
        super().__init__(
            source,
            f"Source '{source}' timed out after {timeout:g}s",
            "SOURCE_TIMEOUT",
        )


class SourceUnavailableError(SourceError):
    """Raised on a non-success response or an unreadable payload."""

    def __init__(self, source: str, reason: str):
        """Initialize source unavailable error."""
        self.reason = reason
        super().__init__(
            source,
            f"Source '{source}' unavailable: {reason}",
            "SOURCE_UNAVAILABLE",
        )


# ===========================================
# GENERATION EXCEPTIONS
# ===========================================


class ProviderFailure(GatewayError):
    """Raised when the generative model call fails."""

    def __init__(self, message: str):
        """Initialize provider failure."""
        super().__init__(message, "PROVIDER_FAILURE")


# ===========================================
# SESSION / REQUEST EXCEPTIONS
# ===========================================


class MalformedSessionError(GatewayError):
    """Raised when the session cookie cannot be parsed into an identity."""

    def __init__(self, reason: str):
        """Initialize malformed session error."""
        self.reason = reason
        super().__init__(f"Malformed session: {reason}", "MALFORMED_SESSION")


class OrchestratorError(GatewayError):
    """Raised when a chat turn fails before its stream is open."""

    def __init__(self, message: str):
        """Initialize orchestrator error."""
        super().__init__(message, "ORCHESTRATION_ERROR")
