import logging
from collections.abc import AsyncIterator, Callable
from typing import TypeVar

from fastapi import Request
from fastapi.responses import StreamingResponse

from src.realtime.subscription import Subscription

logger = logging.getLogger(__name__)

T = TypeVar("T")


def format_sse(event: str, data: str) -> str:
    lines = "".join(f"data: {line}\n" for line in data.splitlines() or [""])
    return f"event: {event}\n{lines}\n"


async def sse_stream(
    request: Request,
    subscription: Subscription[T],
    event: str,
    render: Callable[[T], str],
) -> AsyncIterator[str]:
    """Server-Sent Events for every snapshot of ``subscription``.

    The subscription is closed on every exit path, including the client
    going away mid-stream.
    """
    async with subscription:
        async for snapshot in subscription:
            if await request.is_disconnected():
                logger.debug("Client left %s stream", event)
                break
            yield format_sse(event, render(snapshot))


def sse_response(
    request: Request,
    subscription: Subscription[T],
    event: str,
    render: Callable[[T], str],
) -> StreamingResponse:
    return StreamingResponse(
        sse_stream(request, subscription, event, render),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
