import abc

from sqlalchemy import select

from src.config.database import async_session_manager
from src.notifications.dtos import NotificationDTO
from src.notifications.repository.orm_models import Notification, UserNotification
from src.realtime.change_bus import ChangeBus, change_bus, user_feed_topic
from src.realtime.subscription import Subscription


class NotificationReadModel(abc.ABC):
    @abc.abstractmethod
    async def get_feed(self, user_id: str) -> list[NotificationDTO]:
        """A user's notifications, newest first. Deleted ones are left out."""
        raise NotImplementedError

    @abc.abstractmethod
    def observe_feed(self, user_id: str) -> Subscription[list[NotificationDTO]]:
        raise NotImplementedError


class SqlNotificationReadModel(NotificationReadModel):
    def __init__(self, bus: ChangeBus = change_bus, poll_interval: float | None = None) -> None:
        self._bus = bus
        self._poll_interval = poll_interval

    async def get_feed(self, user_id: str) -> list[NotificationDTO]:
        stmt = (
            select(Notification)
            .join(UserNotification, UserNotification.notification_id == Notification.uuid)
            .where(UserNotification.user_id == user_id)
            .where(Notification.deleted.is_(False))
            .order_by(Notification.created_at.desc(), Notification.uuid)
        )
        async with async_session_manager() as session:
            result = await session.execute(stmt)
            return [NotificationDTO.from_notification(row) for row in result.scalars()]

    def observe_feed(self, user_id: str) -> Subscription[list[NotificationDTO]]:
        return Subscription(
            fetch=lambda: self.get_feed(user_id),
            topic=user_feed_topic(user_id),
            bus=self._bus,
            poll_interval=self._poll_interval,
        )
