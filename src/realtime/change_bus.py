import asyncio
from collections import defaultdict


class ChangeBus:
    """Process-local wake-ups for live subscriptions.

    Writers publish a topic after committing; subscribers waiting on that
    topic re-read immediately instead of waiting for their next poll.
    """

    def __init__(self) -> None:
        self._waiters: dict[str, set[asyncio.Event]] = defaultdict(set)

    def register(self, topic: str) -> asyncio.Event:
        waiter = asyncio.Event()
        self._waiters[topic].add(waiter)
        return waiter

    def unregister(self, topic: str, waiter: asyncio.Event) -> None:
        waiters = self._waiters.get(topic)
        if not waiters:
            return
        waiters.discard(waiter)
        if not waiters:
            del self._waiters[topic]

    def publish(self, *topics: str) -> None:
        for topic in topics:
            for waiter in self._waiters.get(topic, ()):
                waiter.set()

    def subscriber_count(self, topic: str) -> int:
        return len(self._waiters.get(topic, ()))


def event_invitations_topic(event_id) -> str:
    return f"event-invitations:{event_id}"


def user_feed_topic(user_id: str) -> str:
    return f"user-feed:{user_id}"


change_bus = ChangeBus()
