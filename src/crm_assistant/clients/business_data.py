"""Client for the CRM business data APIs (leads, orders)."""

import json
from typing import Any

import httpx

from crm_assistant.clients.base import DataSource
from crm_assistant.domain.exceptions import SourceTimeoutError, SourceUnavailableError
from crm_assistant.schemas.internal import CallerIdentity


class BusinessDataSource(DataSource):
    """Network-backed source reading a JSON array from a business API.

    Issues ``GET {base_url}{path}?{caller_param}=<caller id>`` and forwards
    the caller's session cookie, so the downstream API applies its own
    per-user filtering.
    """

    def __init__(
        self,
        name: str,
        base_url: str,
        path: str,
        timeout: float = 15.0,
        caller_param: str = "userId",
        session_cookie_name: str = "user",
    ):
        super().__init__(name, timeout)
        self.url = f"{base_url.rstrip('/')}{path}"
        self.caller_param = caller_param
        self.session_cookie_name = session_cookie_name

    async def _load(self, caller: CallerIdentity) -> tuple[list[dict[str, Any]], int]:
        headers = {
            "Accept": "application/json",
            "Cookie": f"{self.session_cookie_name}={json.dumps({'id': caller.id})}",
        }
        params = {self.caller_param: str(caller.id)}

        async with httpx.AsyncClient(timeout=httpx.Timeout(self.timeout)) as client:
            try:
                response = await client.get(self.url, params=params, headers=headers)
            except httpx.TimeoutException as e:
                raise SourceTimeoutError(self.name, self.timeout) from e
            except httpx.RequestError as e:
                raise SourceUnavailableError(self.name, f"request error: {e}") from e

        if not response.is_success:
            raise SourceUnavailableError(
                self.name,
                f"HTTP {response.status_code}: {self._extract_error_detail(response)}",
            )

        try:
            data = response.json()
        except ValueError as e:
            raise SourceUnavailableError(self.name, "response is not valid JSON") from e

        if not isinstance(data, list):
            raise SourceUnavailableError(
                self.name, f"expected a JSON array, got {type(data).__name__}"
            )

        items = [record for record in data if isinstance(record, dict)]
        return items, len(items)

    def _extract_error_detail(self, response: httpx.Response) -> str:
        """Extract error detail from response."""
        try:
            data = response.json()
            if isinstance(data, dict):
                return str(data.get("detail") or data.get("error") or response.text[:200])
        except ValueError:
            pass
        return response.text[:200]
