"""Sensitive data sanitization for logging.

Recursively redacts sensitive fields from data structures before logging.
"""

from typing import Any

from crm_assistant.observability.constants import (
    REDACTED_VALUE,
    SENSITIVE_FIELD_PATTERNS,
    SENSITIVE_FIELDS,
    SENSITIVE_HEADERS,
)


def _is_sensitive_field(field_name: str) -> bool:
    """Check if a field name indicates sensitive data."""
    field_lower = field_name.lower()

    # Check exact matches first (faster)
    if field_lower in SENSITIVE_FIELDS:
        return True

    return any(pattern in field_lower for pattern in SENSITIVE_FIELD_PATTERNS)


def sanitize(data: Any, max_depth: int = 10) -> Any:
    """Recursively sanitize sensitive data from a structure.

    Args:
        data: The data to sanitize (dict, list, or scalar).
        max_depth: Maximum recursion depth to prevent infinite loops.

    Returns:
        Sanitized copy of the data with sensitive fields redacted.
    """
    if max_depth <= 0:
        return REDACTED_VALUE

    if isinstance(data, dict):
        return {
            k: REDACTED_VALUE if _is_sensitive_field(k) else sanitize(v, max_depth - 1)
            for k, v in data.items()
        }

    if isinstance(data, list):
        return [sanitize(item, max_depth - 1) for item in data]

    if isinstance(data, tuple):
        return tuple(sanitize(item, max_depth - 1) for item in data)

    return data


def sanitize_headers(headers: dict[str, str]) -> dict[str, str]:
    """Sanitize HTTP headers, redacting sensitive ones.

    The session cookie carries the caller identity, so it is never logged.
    """
    return {k: REDACTED_VALUE if k.lower() in SENSITIVE_HEADERS else v for k, v in headers.items()}


def truncate_body(body: Any, max_length: int = 1000) -> Any:
    """Truncate a request body for logging."""
    if isinstance(body, str) and len(body) > max_length:
        return body[:max_length] + f"... [truncated, {len(body)} total bytes]"

    if isinstance(body, bytes):
        if len(body) > max_length:
            return f"[binary data, {len(body)} bytes]"
        return body.decode("utf-8", errors="replace")

    return body
