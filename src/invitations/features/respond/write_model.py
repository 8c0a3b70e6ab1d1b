"""Accepting and declining invitations.

The state transition itself lives in the invitation repository. This layer
adds what follows a committed response: the organizer is told, and a decline
frees a slot that is refilled from the waiting list.
"""

import logging
from abc import ABC, abstractmethod
from uuid import UUID

from src.errors import LotteryServiceError
from src.events.features.lottery.write_model import LotteryWriteModel, SqlLotteryWriteModel
from src.events.repository.read_models import EventReadModel, SqlEventReadModel
from src.invitations.dtos import InvitationDTO
from src.invitations.repository.write_models import InvitationWriteModel, SqlInvitationWriteModel
from src.notifications.dtos import NotificationKind
from src.notifications.repository.write_models import (
    NotificationWriteModel,
    SqlNotificationWriteModel,
)
from src.users.repository.read_models import SqlUserReadModel, UserReadModel

logger = logging.getLogger(__name__)


class RespondWriteModel(ABC):
    @abstractmethod
    async def accept(self, invitation_id: UUID, user_id: str) -> InvitationDTO:
        raise NotImplementedError

    @abstractmethod
    async def reject(self, invitation_id: UUID, user_id: str) -> InvitationDTO:
        raise NotImplementedError


class SqlRespondWriteModel(RespondWriteModel):
    def __init__(
        self,
        invitation_write_model: InvitationWriteModel | None = None,
        lottery_write_model: LotteryWriteModel | None = None,
        notification_write_model: NotificationWriteModel | None = None,
        event_read_model: EventReadModel | None = None,
        user_read_model: UserReadModel | None = None,
    ) -> None:
        self.invitations = invitation_write_model or SqlInvitationWriteModel()
        self.notifications = notification_write_model or SqlNotificationWriteModel()
        self.lottery = lottery_write_model or SqlLotteryWriteModel(
            notification_write_model=self.notifications
        )
        self.events = event_read_model or SqlEventReadModel()
        self.users = user_read_model or SqlUserReadModel()

    async def accept(self, invitation_id: UUID, user_id: str) -> InvitationDTO:
        invitation = await self.invitations.accept(invitation_id, user_id)
        await self._notify_organizer(invitation, NotificationKind.INVITATION_ACCEPTED)
        return invitation

    async def reject(self, invitation_id: UUID, user_id: str) -> InvitationDTO:
        invitation = await self.invitations.reject(invitation_id, user_id)
        await self._notify_organizer(invitation, NotificationKind.INVITATION_REJECTED)
        try:
            draw = await self.lottery.draw_replacements(invitation.event_id, declined_count=1)
        except LotteryServiceError as e:
            # the scheduled poll refills the slot later
            logger.warning("Replacement draw after %s failed: %s", invitation_id, e)
            return invitation
        if draw.winners:
            logger.info(
                "Decline of invitation %s refilled by %s", invitation_id, ", ".join(draw.winners)
            )
        return invitation

    async def _notify_organizer(self, invitation: InvitationDTO, kind: NotificationKind) -> None:
        try:
            event = await self.events.get_event(invitation.event_id)
            if event is None:
                return
            user = await self.users.get_user(invitation.recipient_id)
            await self.notifications.notify_event_transition(
                event,
                [invitation.organizer_id],
                kind,
                entrant_name=user.name if user and user.name else invitation.recipient_id,
            )
        except LotteryServiceError as e:
            logger.warning(
                "Could not tell organizer about invitation %s: %s", invitation.invitation_id, e
            )
