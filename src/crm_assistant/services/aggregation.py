"""Aggregation service for collecting business data sources in parallel."""

import asyncio
import time
from collections.abc import Mapping

from crm_assistant.clients.base import DataSource
from crm_assistant.observability import get_logger
from crm_assistant.observability.constants import LogEvents
from crm_assistant.schemas.internal import CallerIdentity, ContextSnapshot, SourceResult

logger = get_logger(__name__)

DEFAULT_CAPS: dict[str, int] = {
    "leads": 15,
    "partners": 15,
    "products": 20,
    "orders": 10,
}


class AggregationService:
    """Builds a ``ContextSnapshot`` from the four business data sources."""

    def __init__(
        self,
        leads: DataSource,
        partners: DataSource,
        products: DataSource,
        orders: DataSource,
        caps: Mapping[str, int] | None = None,
    ):
        self.sources: dict[str, DataSource] = {
            "leads": leads,
            "partners": partners,
            "products": products,
            "orders": orders,
        }
        self.caps = {**DEFAULT_CAPS, **(caps or {})}

    @property
    def max_deadline(self) -> float:
        """Longest time ``aggregate`` can wait for a source."""
        return max(source.timeout for source in self.sources.values())

    async def aggregate(self, caller: CallerIdentity) -> ContextSnapshot:
        """
        Fetch every source concurrently and merge what succeeded.

        Each source runs under its own deadline and settles independently;
        a slow or broken source only blanks itself. The join waits for all
        of them, so it is bounded by the largest deadline. Never raises.

        Args:
            caller: Identity forwarded to the per-user business APIs

        Returns:
            ContextSnapshot with each list truncated to its display cap
        """
        start_time = time.perf_counter()
        logger.info(LogEvents.CONTEXT_AGGREGATION_STARTED, caller_id=caller.id, sources=len(self.sources))

        names = list(self.sources)
        outcomes = await asyncio.gather(
            *(self._fetch(name, caller) for name in names),
            return_exceptions=True,
        )

        results: dict[str, SourceResult] = {}
        for name, outcome in zip(names, outcomes):
            if isinstance(outcome, BaseException):
                # fetch() already converts failures; this covers a misbehaving source
                logger.error(
                    LogEvents.SOURCE_FETCH_FAILED,
                    source=name,
                    error_type=type(outcome).__name__,
                    error_message=str(outcome),
                )
                outcome = SourceResult.failed(name, f"Unexpected error: {outcome!r}")
            results[name] = outcome.truncated(self.caps[name])

        snapshot = ContextSnapshot(**results)

        total_latency_ms = int((time.perf_counter() - start_time) * 1000)
        logger.info(
            LogEvents.CONTEXT_AGGREGATION_COMPLETED,
            **{f"{name}_total": result.total for name, result in results.items()},
            failed=[name for name, result in results.items() if not result.ok],
            latency_ms=total_latency_ms,
        )
        if not snapshot.has_any_data:
            logger.warning(LogEvents.CONTEXT_DEGRADED, caller_id=caller.id)

        return snapshot

    async def _fetch(self, name: str, caller: CallerIdentity) -> SourceResult:
        return await self.sources[name].fetch(caller)
