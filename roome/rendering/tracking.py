"""Fire-and-forget usage tracking."""

import asyncio
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

import structlog

from roome.metrics import record_tracking_failure

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class UsageRecord:
    """One usage event as handed to the tracker."""

    component_id: uuid.UUID
    page: str = "unknown"
    context: dict[str, Any] = field(default_factory=dict)
    load_time: float | None = None
    user_agent: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """Body for ``POST /api/ui-components/track-usage``."""
        payload: dict[str, Any] = {
            "componentId": str(self.component_id),
            "page": self.page,
            "context": self.context,
        }
        if self.load_time is not None:
            payload["performanceMetrics"] = {"loadTime": self.load_time}
        if self.user_agent:
            payload["userAgent"] = self.user_agent
        return payload


Sender = Callable[[UsageRecord], Awaitable[Any]]


class UsageTracker:
    """Schedule usage sends without ever blocking or failing the caller.

    Each send runs as its own task. The tracker keeps a reference until the
    task finishes so it is not garbage collected mid-flight; failures are
    logged and counted, never raised.
    """

    def __init__(self, send: Sender):
        self.send = send
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def track(self, record: UsageRecord) -> asyncio.Task[None]:
        task = asyncio.get_running_loop().create_task(self._send(record))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _send(self, record: UsageRecord) -> None:
        try:
            await self.send(record)
        except Exception as e:
            record_tracking_failure()
            logger.warning(
                "usage_tracking_failed",
                component_id=str(record.component_id),
                page=record.page,
                error=str(e),
            )

    async def drain(self) -> None:
        """Wait for every outstanding send to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
