"""
Post-write event emission shared by every mutating service.

The write and the notification are two independent effects: the row is
committed first, then the event is published and awaited. There is no
atomicity between them. A publish that fails or exceeds the timeout is
logged and counted for out-of-band reconciliation, and the call still
succeeds because the mutation already happened.
"""
import asyncio
import logging
from typing import Protocol

from pydantic import BaseModel

from photofeed.errors import NotifyError
from photofeed.telemetry import EVENTS_PUBLISHED_TOTAL, NOTIFY_FAILURES_TOTAL

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    async def publish(self, topic: str, payload: bytes) -> None: ...


async def emit(
    notifier: Notifier,
    topic: str,
    event: BaseModel,
    *,
    op: str,
    timeout: float,
) -> bool:
    """Publish ``event`` on ``topic``. Returns False when the publish failed."""
    payload = event.model_dump_json().encode("utf-8")
    try:
        await asyncio.wait_for(notifier.publish(topic, payload), timeout=timeout)
    except Exception as exc:  # any broker/transport failure, including the timeout
        error = NotifyError(topic, exc)
        NOTIFY_FAILURES_TOTAL.labels(topic=topic).inc()
        logger.warning("%s: %s (write kept, payload=%s)", op, error, payload.decode())
        return False

    EVENTS_PUBLISHED_TOTAL.labels(topic=topic).inc()
    return True
