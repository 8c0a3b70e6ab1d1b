import logging

from src.push_service.base import PushServiceBase

logger = logging.getLogger(__name__)


class LogPushService(PushServiceBase):
    """Used when no push provider is configured: messages only reach the log."""

    async def send(
        self,
        user_id: str,
        title: str,
        body: str,
        data: dict[str, str] | None = None,
    ) -> None:
        logger.info("Push to %s: %s - %s %s", user_id, title, body, data or "")
