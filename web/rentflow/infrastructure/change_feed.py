"""
Entity-changed notifications for the read-cache collaborator.

The engine does not own any cache; it announces which entities it mutated
("Application #12", "Lease #7") and lets subscribers decide what to evict.
Subscribers are in-process callables; when ``CACHE_INVALIDATION_URL`` is set
the notification is also posted there in the background.
"""
import asyncio
import logging
from dataclasses import dataclass, asdict
from typing import Callable, List, Set

import httpx

from rentflow.core.config import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntityChanged:
    entity: str
    id: int

    def __str__(self) -> str:
        return f"{self.entity} #{self.id}"


Listener = Callable[[EntityChanged], None]

_listeners: List[Listener] = []
_background_tasks: Set[asyncio.Task] = set()


def subscribe(listener: Listener) -> Callable[[], None]:
    """Register *listener*; returns a callable that unregisters it."""
    _listeners.append(listener)

    def _unsubscribe() -> None:
        if listener in _listeners:
            _listeners.remove(listener)

    return _unsubscribe


async def _post(change: EntityChanged, url: str) -> None:
    try:
        async with httpx.AsyncClient() as client:
            response = await client.post(url, json=asdict(change), timeout=2.0)
            response.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning("Cache invalidation for %s not delivered: %s", change, e)


def publish(change: EntityChanged) -> None:
    """Notify every subscriber that *change* happened. Never raises."""
    logger.debug("Entity changed: %s", change)
    for listener in list(_listeners):
        try:
            listener(change)
        except Exception:
            logger.exception("Change listener failed for %s", change)

    url = get_settings().CACHE_INVALIDATION_URL
    if url:
        task = asyncio.create_task(_post(change, url))
        _background_tasks.add(task)
        task.add_done_callback(_background_tasks.discard)
