"""Common fetch behaviour shared by every business data source."""

import asyncio
import time
from abc import ABC, abstractmethod
from typing import Any

from crm_assistant.domain.exceptions import SourceError, SourceTimeoutError
from crm_assistant.observability import get_logger
from crm_assistant.observability.constants import LogEvents
from crm_assistant.schemas.internal import CallerIdentity, SourceResult

logger = get_logger(__name__)


class DataSource(ABC):
    """A single bounded-time retrieval of business records.

    Subclasses implement ``_load``; ``fetch`` enforces the deadline by
    cancelling the in-flight load and turns every failure into a
    ``SourceResult`` with ``ok=False``.
    """

    def __init__(self, name: str, timeout: float):
        self.name = name
        self.timeout = timeout

    @abstractmethod
    async def _load(self, caller: CallerIdentity) -> tuple[list[dict[str, Any]], int]:
        """Load the records and their untruncated total.

        Raises:
            SourceError: If the source cannot be read.
        """

    async def fetch(self, caller: CallerIdentity) -> SourceResult:
        """Fetch this source for the caller. Never raises."""
        start_time = time.perf_counter()
        try:
            try:
                items, total = await asyncio.wait_for(self._load(caller), timeout=self.timeout)
            except asyncio.TimeoutError as e:
                raise SourceTimeoutError(self.name, self.timeout) from e
        except SourceTimeoutError as e:
            latency_ms = self._elapsed_ms(start_time)
            logger.warning(LogEvents.SOURCE_FETCH_TIMEOUT, source=self.name, latency_ms=latency_ms)
            return SourceResult.failed(self.name, e.message, latency_ms)
        except SourceError as e:
            latency_ms = self._elapsed_ms(start_time)
            logger.warning(
                LogEvents.SOURCE_FETCH_FAILED,
                source=self.name,
                error_code=e.error_code,
                error_message=e.message,
                latency_ms=latency_ms,
            )
            return SourceResult.failed(self.name, e.message, latency_ms)
        except Exception as e:
            latency_ms = self._elapsed_ms(start_time)
            logger.exception(LogEvents.SOURCE_FETCH_FAILED, source=self.name, latency_ms=latency_ms)
            return SourceResult.failed(self.name, f"Unexpected error: {e}", latency_ms)

        latency_ms = self._elapsed_ms(start_time)
        logger.info(
            LogEvents.SOURCE_FETCH_COMPLETED,
            source=self.name,
            items=len(items),
            total=total,
            latency_ms=latency_ms,
        )
        return SourceResult(name=self.name, items=items, total=total, ok=True, latency_ms=latency_ms)

    @staticmethod
    def _elapsed_ms(start_time: float) -> int:
        return int((time.perf_counter() - start_time) * 1000)
