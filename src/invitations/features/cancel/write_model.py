import logging
from abc import ABC, abstractmethod
from uuid import UUID

from src.errors import LotteryServiceError
from src.events.repository.read_models import EventReadModel, SqlEventReadModel
from src.invitations.dtos import InvitationDTO
from src.invitations.repository.write_models import InvitationWriteModel, SqlInvitationWriteModel
from src.notifications.dtos import NotificationKind
from src.notifications.repository.write_models import (
    NotificationWriteModel,
    SqlNotificationWriteModel,
)

logger = logging.getLogger(__name__)


class CancelInvitationWriteModel(ABC):
    @abstractmethod
    async def cancel(self, invitation_id: UUID, organizer_id: str) -> InvitationDTO:
        raise NotImplementedError


class SqlCancelInvitationWriteModel(CancelInvitationWriteModel):
    def __init__(
        self,
        invitation_write_model: InvitationWriteModel | None = None,
        notification_write_model: NotificationWriteModel | None = None,
        event_read_model: EventReadModel | None = None,
    ) -> None:
        self.invitations = invitation_write_model or SqlInvitationWriteModel()
        self.notifications = notification_write_model or SqlNotificationWriteModel()
        self.events = event_read_model or SqlEventReadModel()

    async def cancel(self, invitation_id: UUID, organizer_id: str) -> InvitationDTO:
        invitation = await self.invitations.cancel(invitation_id, organizer_id)
        try:
            event = await self.events.get_event(invitation.event_id)
            if event is not None:
                await self.notifications.notify_event_transition(
                    event, [invitation.recipient_id], NotificationKind.INVITATION_CANCELLED
                )
        except LotteryServiceError as e:
            logger.warning("Could not tell %s about the cancellation: %s", invitation.recipient_id, e)
        return invitation
