"""Caller identity resolution.

The frontend stores the logged-in user as a JSON cookie, e.g.
``user={"id": 42, "name": "Ana"}``. This module only reads it; no
authentication decision is made here.
"""

import json
from collections.abc import Mapping
from typing import Any
from urllib.parse import unquote

from crm_assistant.domain.exceptions import MalformedSessionError
from crm_assistant.observability import get_logger
from crm_assistant.observability.constants import LogEvents
from crm_assistant.schemas.internal import ANONYMOUS_ID, ANONYMOUS_NAME, CallerIdentity

logger = get_logger(__name__)


def _load_json(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError:
        pass
    try:
        return json.loads(unquote(raw))
    except ValueError as e:
        raise MalformedSessionError("cookie is not valid JSON") from e


def _parse_id(value: Any) -> int:
    if value is None:
        return ANONYMOUS_ID
    if isinstance(value, bool):
        raise MalformedSessionError("user id must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as e:
            raise MalformedSessionError(f"user id {value!r} is not an integer") from e
    raise MalformedSessionError("user id must be an integer")


def parse_session_cookie(raw: str) -> CallerIdentity:
    """Parse the session cookie value.

    Raises:
        MalformedSessionError: If the value is not a JSON object with an integer id.
    """
    data = _load_json(raw)
    if not isinstance(data, dict):
        raise MalformedSessionError("cookie is not a JSON object")

    name = data.get("name")
    display_name = name.strip() if isinstance(name, str) and name.strip() else ANONYMOUS_NAME
    return CallerIdentity(id=_parse_id(data.get("id")), display_name=display_name)


def resolve_caller_identity(cookies: Mapping[str, str], cookie_name: str = "user") -> CallerIdentity:
    """Resolve the caller from request cookies, defaulting to the anonymous identity."""
    raw = cookies.get(cookie_name)
    if not raw:
        return CallerIdentity.anonymous()

    try:
        return parse_session_cookie(raw)
    except MalformedSessionError as e:
        logger.warning(LogEvents.SESSION_MALFORMED, reason=e.reason)
        return CallerIdentity.anonymous()
