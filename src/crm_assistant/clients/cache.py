"""Cache-backed source for pre-computed partner and product listings."""

import json
from typing import Any

from redis.asyncio import Redis
from redis.exceptions import RedisError

from crm_assistant.clients.base import DataSource
from crm_assistant.domain.exceptions import SourceUnavailableError
from crm_assistant.observability import get_logger
from crm_assistant.observability.constants import LogEvents
from crm_assistant.schemas.internal import CallerIdentity

logger = get_logger(__name__)


class CachedListingSource(DataSource):
    """Reads a listing another service keeps warm in Redis.

    The cached value is a JSON object such as
    ``{"parceiros": [...], "total": 1234}``. The listing is shared by all
    callers, so the caller identity is not part of the key. This source
    only reads; refreshing the cache is someone else's job.
    """

    def __init__(
        self,
        name: str,
        redis: Redis,
        key: str,
        list_field: str,
        timeout: float = 2.0,
    ):
        super().__init__(name, timeout)
        self.redis = redis
        self.key = key
        self.list_field = list_field

    async def _load(self, caller: CallerIdentity) -> tuple[list[dict[str, Any]], int]:
        try:
            raw = await self.redis.get(self.key)
        except RedisError as e:
            raise SourceUnavailableError(self.name, f"cache error: {e}") from e

        if raw is None:
            logger.info(LogEvents.SOURCE_CACHE_MISS, source=self.name, key=self.key)
            return [], 0

        try:
            value = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise SourceUnavailableError(self.name, "cached value is not valid JSON") from e

        if not isinstance(value, dict):
            raise SourceUnavailableError(self.name, "cached value is not an object")

        listing = value.get(self.list_field) or []
        if not isinstance(listing, list):
            raise SourceUnavailableError(self.name, f"'{self.list_field}' is not a list")

        items = [record for record in listing if isinstance(record, dict)]
        return items, self._total(value.get("total"), len(items))

    @staticmethod
    def _total(declared: Any, fallback: int) -> int:
        """Prefer the total stored with the listing, else the listing length."""
        if isinstance(declared, bool):
            return fallback
        try:
            total = int(declared)
        except (TypeError, ValueError):
            return fallback
        return total if total > 0 else fallback
