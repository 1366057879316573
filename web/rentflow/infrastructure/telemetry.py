"""
Server-side product analytics for the settlement engine.

Events are posted as PostHog-style ``capture`` payloads to ``TELEMETRY_URL``.
Delivery is best-effort: a slow or unreachable sink is logged and dropped.
"""
import asyncio
import logging
from typing import Any, Dict, Set

import httpx

from rentflow.core.config import get_settings

logger = logging.getLogger(__name__)

# Strong references so pending sends are not garbage collected mid-flight
_background_tasks: Set[asyncio.Task] = set()


async def send_event(distinct_id: str, event: str, **properties: Any) -> None:
    """
    Send one event to the telemetry sink.

    Args:
        distinct_id: Identity the event is attributed to
        event: Event name
        **properties: Event properties
    """
    settings = get_settings()

    # Skip if no sink is configured
    if not settings.TELEMETRY_URL:
        return

    payload: Dict[str, Any] = {
        "api_key": settings.TELEMETRY_API_KEY,
        "event": event,
        "distinct_id": distinct_id,
        "properties": properties,
    }

    try:
        async with httpx.AsyncClient() as client:
            response = await client.post(
                settings.TELEMETRY_URL,
                json=payload,
                timeout=settings.TELEMETRY_TIMEOUT,
            )
            response.raise_for_status()
    except httpx.HTTPError as e:
        # Analytics must never break the request that produced the event
        logger.warning("Telemetry event %s dropped: %s", event, e)


def track_async_event(distinct_id: str, event: str, **properties: Any) -> None:
    """
    Fire-and-forget wrapper for send_event.
    Creates a background task without waiting for completion.

    Use this in services to avoid adding latency.
    """
    task = asyncio.create_task(send_event(distinct_id, event, **properties))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
