"""Direct invitations, sent by the organizer outside a lottery draw.

The invitees hear about it the same way lottery winners do.
"""

import logging
from abc import ABC, abstractmethod
from uuid import UUID

from src.errors import LotteryServiceError
from src.events.repository.read_models import EventReadModel, SqlEventReadModel
from src.invitations.repository.write_models import InvitationWriteModel, SqlInvitationWriteModel
from src.notifications.dtos import NotificationKind
from src.notifications.repository.write_models import (
    NotificationWriteModel,
    SqlNotificationWriteModel,
)

logger = logging.getLogger(__name__)


class CreateInvitesWriteModel(ABC):
    @abstractmethod
    async def create_invites(
        self, event_id: UUID, organizer_id: str, recipient_ids: list[str]
    ) -> list[UUID]:
        raise NotImplementedError


class SqlCreateInvitesWriteModel(CreateInvitesWriteModel):
    def __init__(
        self,
        invitation_write_model: InvitationWriteModel | None = None,
        notification_write_model: NotificationWriteModel | None = None,
        event_read_model: EventReadModel | None = None,
    ) -> None:
        self.invitations = invitation_write_model or SqlInvitationWriteModel()
        self.notifications = notification_write_model or SqlNotificationWriteModel()
        self.events = event_read_model or SqlEventReadModel()

    async def create_invites(
        self, event_id: UUID, organizer_id: str, recipient_ids: list[str]
    ) -> list[UUID]:
        invitation_ids = await self.invitations.create_invites(
            event_id, organizer_id, recipient_ids
        )
        try:
            event = await self.events.get_event(event_id)
            if event is not None:
                await self.notifications.notify_event_transition(
                    event, recipient_ids, NotificationKind.LOTTERY_WON
                )
        except LotteryServiceError as e:
            logger.warning("Could not tell the invitees of event %s: %s", event_id, e)
        return invitation_ids
