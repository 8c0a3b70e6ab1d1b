from src.config.settings import settings
from src.push_service.base import PushServiceBase
from src.push_service.fcm_service import FcmPushService
from src.push_service.log_service import LogPushService


def get_push_service() -> PushServiceBase:
    if settings.FCM_PROJECT_ID and settings.FCM_ACCESS_TOKEN:
        return FcmPushService(config=settings)
    return LogPushService()


__all__ = [
    "PushServiceBase",
    "FcmPushService",
    "LogPushService",
    "get_push_service",
]
