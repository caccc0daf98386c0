"""Auth package - caller identity resolution from the session cookie."""

from crm_assistant.auth.session import parse_session_cookie, resolve_caller_identity

__all__ = ["parse_session_cookie", "resolve_caller_identity"]
