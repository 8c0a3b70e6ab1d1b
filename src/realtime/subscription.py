import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

from src.config.settings import settings
from src.realtime.change_bus import ChangeBus, change_bus

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNSET = object()


class Subscription(Generic[T]):
    """A live, cancellable sequence of query results.

    The first iteration yields the current result set. Later iterations
    block until the result set differs from the last one yielded, waking on
    change-bus notifications and re-polling every ``poll_interval`` seconds
    to catch writes made by other processes.

    The subscription holds a change-bus registration until ``aclose()`` is
    called; use it as an async context manager to guarantee that::

        async with read_model.observe_event_invitations(event_id) as invitations:
            async for snapshot in invitations:
                ...
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[T]],
        topic: str,
        bus: ChangeBus = change_bus,
        poll_interval: float | None = None,
    ) -> None:
        self._fetch = fetch
        self._topic = topic
        self._bus = bus
        self._poll_interval = poll_interval or settings.SUBSCRIPTION_POLL_INTERVAL
        self._waiter: asyncio.Event | None = None
        self._last = _UNSET
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> "Subscription[T]":
        return self

    async def __anext__(self) -> T:
        if self._closed:
            raise StopAsyncIteration
        if self._waiter is None:
            self._waiter = self._bus.register(self._topic)

        while True:
            if self._last is not _UNSET:
                try:
                    await asyncio.wait_for(self._waiter.wait(), timeout=self._poll_interval)
                except TimeoutError:
                    pass
                if self._closed:
                    raise StopAsyncIteration
            # cleared before reading so a change during the fetch is not lost
            self._waiter.clear()
            snapshot = await self._fetch()
            if self._last is _UNSET or snapshot != self._last:
                self._last = snapshot
                return snapshot

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._waiter is not None:
            self._bus.unregister(self._topic, self._waiter)
            # release an iteration blocked on the waiter
            self._waiter.set()
        logger.debug("Closed subscription on %s", self._topic)

    async def __aenter__(self) -> "Subscription[T]":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
