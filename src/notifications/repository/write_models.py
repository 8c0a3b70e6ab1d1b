"""Notification fanout. Returns DTOs, never ORM models.

A notification is one body row plus one UserNotification join row per
recipient, written in the same transaction so a feed never points at a
missing body. Push delivery happens after the commit and is fire-and-forget.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import async_session_manager
from src.errors import ForbiddenError, InvalidArgumentError, LotteryServiceError, NotFoundError
from src.events.dtos import EventDTO
from src.events.repository.read_models import load_event
from src.invitations.dtos import InvitationState
from src.invitations.repository.read_models import fetch_event_invitations
from src.notifications.dtos import NotificationDTO, NotificationKind, RecipientGroup
from src.notifications.repository.orm_models import Notification, UserNotification
from src.notifications.templates import NotificationTemplates
from src.push_service.base import PushServiceBase
from src.realtime.change_bus import ChangeBus, change_bus, user_feed_topic
from src.users.dtos import UserDTO
from src.users.repository.read_models import SqlUserReadModel, UserReadModel

logger = logging.getLogger(__name__)


def wants_push(user: UserDTO | None, kind: NotificationKind) -> bool:
    if user is None:
        return True
    if kind.is_organizer_message:
        return user.organizer_notifications
    return user.system_notifications


class NotificationWriteModel(ABC):
    @abstractmethod
    async def notify_event_transition(
        self,
        event: EventDTO,
        recipients: Iterable[str],
        kind: NotificationKind,
        **context: str,
    ) -> NotificationDTO | None:
        """Store and push a notification about ``event``. ``None`` if nobody is addressed."""
        raise NotImplementedError

    @abstractmethod
    async def post_organizer_notification(
        self,
        event_id: UUID,
        organizer_id: str,
        group: RecipientGroup,
        title: str,
        message: str,
    ) -> NotificationDTO | None:
        raise NotImplementedError

    @abstractmethod
    async def delete_notification(self, notification_id: UUID) -> None:
        raise NotImplementedError


class SqlNotificationWriteModel(NotificationWriteModel):
    def __init__(
        self,
        session_overwrite: AsyncSession | None = None,
        push_service: PushServiceBase | None = None,
        user_read_model: UserReadModel | None = None,
        bus: ChangeBus = change_bus,
    ) -> None:
        self._session_overwrite = session_overwrite
        self._push_service = push_service
        self._user_read_model = user_read_model or SqlUserReadModel()
        self._bus = bus

    async def notify_event_transition(
        self,
        event: EventDTO,
        recipients: Iterable[str],
        kind: NotificationKind,
        **context: str,
    ) -> NotificationDTO | None:
        title, message = NotificationTemplates.render(kind, event_name=event.name, **context)
        return await self._store_and_push(
            recipients=recipients,
            kind=kind,
            title=title,
            message=message,
            event_id=event.event_id,
            organizer_id=event.organizer_id,
        )

    async def post_organizer_notification(
        self,
        event_id: UUID,
        organizer_id: str,
        group: RecipientGroup,
        title: str,
        message: str,
    ) -> NotificationDTO | None:
        if not title or not title.strip() or not message or not message.strip():
            raise InvalidArgumentError("A notification needs a title and a message")

        async with async_session_manager(session_overwrite=self._session_overwrite) as session:
            event = await load_event(session, event_id)
            if event.organizer_id != organizer_id:
                raise ForbiddenError("Only the event organizer can message its entrants")
            recipients = await self._resolve_group(session, event.uuid, event.waiting_list, group)

        title, message = NotificationTemplates.render(
            NotificationKind.ORGANIZER_MESSAGE, title=title.strip(), message=message.strip()
        )
        return await self._store_and_push(
            recipients=recipients,
            kind=NotificationKind.ORGANIZER_MESSAGE,
            title=title,
            message=message,
            event_id=event_id,
            organizer_id=organizer_id,
        )

    async def delete_notification(self, notification_id: UUID) -> None:
        async with async_session_manager(session_overwrite=self._session_overwrite) as session:
            notification = await session.get(Notification, notification_id)
            if notification is None:
                raise NotFoundError("This notification no longer exists")
            notification.deleted = True
            result = await session.execute(
                select(UserNotification.user_id).where(
                    UserNotification.notification_id == notification_id
                )
            )
            recipients = list(result.scalars())

        logger.info("Notification %s deleted", notification_id)
        self._bus.publish(*(user_feed_topic(user_id) for user_id in recipients))

    async def _resolve_group(
        self,
        session: AsyncSession,
        event_id: UUID,
        waiting_list: list[str],
        group: RecipientGroup,
    ) -> list[str]:
        invitations = await fetch_event_invitations(session, event_id)
        if group == RecipientGroup.WAITLIST:
            invited = {invitation.recipient_id for invitation in invitations}
            return [user_id for user_id in waiting_list if user_id not in invited]
        if group == RecipientGroup.SELECTED:
            states = {InvitationState.PENDING, InvitationState.ACCEPTED}
        else:
            states = {InvitationState.CANCELLED}
        return [
            invitation.recipient_id for invitation in invitations if invitation.state in states
        ]

    async def _store_and_push(
        self,
        recipients: Iterable[str],
        kind: NotificationKind,
        title: str,
        message: str,
        event_id: UUID | None,
        organizer_id: str | None,
    ) -> NotificationDTO | None:
        unique_recipients = tuple(dict.fromkeys(user_id for user_id in recipients if user_id))
        if not unique_recipients:
            logger.debug("No recipients for %s notification, skipping", kind.value)
            return None

        async with async_session_manager(session_overwrite=self._session_overwrite) as session:
            notification = Notification(
                title=title,
                message=message,
                kind=kind,
                event_id=event_id,
                organizer_id=organizer_id,
                deleted=False,
            )
            session.add(notification)
            await session.flush()
            session.add_all(
                UserNotification(user_id=user_id, notification_id=notification.uuid)
                for user_id in unique_recipients
            )
            await session.flush()
            sent = NotificationDTO.from_notification(notification, recipients=unique_recipients)

        logger.info(
            "Notification %s (%s) sent to %s users", sent.notification_id, kind.value, len(unique_recipients)
        )
        self._bus.publish(*(user_feed_topic(user_id) for user_id in unique_recipients))
        await self._push(sent)
        return sent

    async def _push(self, notification: NotificationDTO) -> None:
        if self._push_service is None:
            return
        try:
            users = await self._user_read_model.get_users(notification.recipients)
        except LotteryServiceError as e:
            logger.warning("Could not load notification preferences, pushing to all: %s", e)
            users = {}

        targets = [
            user_id
            for user_id in notification.recipients
            if wants_push(users.get(user_id), notification.kind)
        ]
        data = {
            "notification_id": str(notification.notification_id),
            "kind": notification.kind.value,
        }
        if notification.event_id:
            data["event_id"] = str(notification.event_id)

        results = await asyncio.gather(
            *(
                self._push_service.send(user_id, notification.title, notification.message, data)
                for user_id in targets
            ),
            return_exceptions=True,
        )
        for user_id, result in zip(targets, results):
            if isinstance(result, Exception):
                logger.warning("Push delivery to %s failed: %s", user_id, result)
