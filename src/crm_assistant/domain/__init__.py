"""Domain package - exceptions shared across the gateway."""

from crm_assistant.domain.exceptions import (
    GatewayError,
    MalformedSessionError,
    OrchestratorError,
    ProviderFailure,
    SourceError,
    SourceTimeoutError,
    SourceUnavailableError,
)

__all__ = [
    "GatewayError",
    "SourceError",
    "SourceTimeoutError",
    "SourceUnavailableError",
    "ProviderFailure",
    "MalformedSessionError",
    "OrchestratorError",
]
