import logging
import re
from typing import Protocol

import httpx

from src.push_service.base import PushServiceBase

logger = logging.getLogger(__name__)

FCM_SEND_URL = "https://fcm.googleapis.com/v1/projects/{project_id}/messages:send"

_TOPIC_UNSAFE = re.compile(r"[^a-zA-Z0-9\-_.~%]")


class FcmPushConfig(Protocol):
    FCM_PROJECT_ID: str
    FCM_ACCESS_TOKEN: str


def user_topic(user_id: str) -> str:
    """Devices of a user subscribe to this topic when the app starts."""
    return f"user_{_TOPIC_UNSAFE.sub('_', user_id)}"


class FcmPushService(PushServiceBase):
    """Firebase Cloud Messaging HTTP v1, fanned out through a per-user topic."""

    def __init__(self, config: FcmPushConfig, client: httpx.AsyncClient | None = None):
        self._config = config
        self._client = client

    async def send(
        self,
        user_id: str,
        title: str,
        body: str,
        data: dict[str, str] | None = None,
    ) -> None:
        payload = {
            "message": {
                "topic": user_topic(user_id),
                "notification": {"title": title, "body": body},
                "data": data or {},
            }
        }
        url = FCM_SEND_URL.format(project_id=self._config.FCM_PROJECT_ID)
        headers = {
            "Authorization": f"Bearer {self._config.FCM_ACCESS_TOKEN}",
            "Content-Type": "application/json",
        }

        if self._client is not None:
            response = await self._client.post(url, headers=headers, json=payload)
        else:
            async with httpx.AsyncClient() as client:
                response = await client.post(url, headers=headers, json=payload)
        response.raise_for_status()
        logger.debug("Push sent to %s: %s", user_id, response.json().get("name"))
