import abc
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import async_session_manager
from src.invitations.dtos import InvitationDTO
from src.invitations.repository.orm_models import Invitation
from src.realtime.change_bus import ChangeBus, change_bus, event_invitations_topic
from src.realtime.subscription import Subscription


async def fetch_event_invitations(session: AsyncSession, event_id: UUID) -> list[InvitationDTO]:
    """All invitations of an event, oldest first, read through ``session``."""
    result = await session.execute(
        select(Invitation)
        .where(Invitation.event_id == event_id)
        .order_by(Invitation.send_time, Invitation.uuid)
        .execution_options(populate_existing=True)
    )
    return [InvitationDTO.from_invitation(invitation) for invitation in result.scalars()]


def choose_user_invitation(invitations: list[InvitationDTO]) -> InvitationDTO | None:
    """Pick the invitation that describes a user's standing for one event.

    Cancelled invitations are ignored. The newest pending invitation wins,
    otherwise the newest answered one.
    """
    live = [invitation for invitation in invitations if not invitation.cancelled]
    pending = [invitation for invitation in live if invitation.is_pending]
    candidates = pending or live
    if not candidates:
        return None
    return max(candidates, key=lambda invitation: invitation.send_time)


class InvitationReadModel(abc.ABC):
    @abc.abstractmethod
    async def get_invitation(self, invitation_id: UUID) -> InvitationDTO | None:
        raise NotImplementedError

    @abc.abstractmethod
    async def list_event_invitations(self, event_id: UUID) -> list[InvitationDTO]:
        raise NotImplementedError

    @abc.abstractmethod
    async def list_user_invitations(self, user_id: str) -> list[InvitationDTO]:
        raise NotImplementedError

    @abc.abstractmethod
    async def find_user_event_invitation(
        self, event_id: UUID, user_id: str
    ) -> InvitationDTO | None:
        raise NotImplementedError

    @abc.abstractmethod
    def observe_event_invitations(self, event_id: UUID) -> Subscription[list[InvitationDTO]]:
        """Live view of an event's invitations. The caller must close it."""
        raise NotImplementedError


class SqlInvitationReadModel(InvitationReadModel):
    def __init__(self, bus: ChangeBus = change_bus, poll_interval: float | None = None) -> None:
        self._bus = bus
        self._poll_interval = poll_interval

    async def get_invitation(self, invitation_id: UUID) -> InvitationDTO | None:
        async with async_session_manager() as session:
            invitation = await session.get(Invitation, invitation_id)
            return InvitationDTO.from_invitation(invitation) if invitation else None

    async def list_event_invitations(self, event_id: UUID) -> list[InvitationDTO]:
        async with async_session_manager() as session:
            return await fetch_event_invitations(session, event_id)

    async def list_user_invitations(self, user_id: str) -> list[InvitationDTO]:
        async with async_session_manager() as session:
            result = await session.execute(
                select(Invitation)
                .where(Invitation.recipient_id == user_id)
                .order_by(Invitation.send_time.desc())
            )
            return [InvitationDTO.from_invitation(invitation) for invitation in result.scalars()]

    async def find_user_event_invitation(
        self, event_id: UUID, user_id: str
    ) -> InvitationDTO | None:
        async with async_session_manager() as session:
            result = await session.execute(
                select(Invitation).where(
                    Invitation.event_id == event_id,
                    Invitation.recipient_id == user_id,
                )
            )
            invitations = [InvitationDTO.from_invitation(row) for row in result.scalars()]
        return choose_user_invitation(invitations)

    def observe_event_invitations(self, event_id: UUID) -> Subscription[list[InvitationDTO]]:
        return Subscription(
            fetch=lambda: self.list_event_invitations(event_id),
            topic=event_invitations_topic(event_id),
            bus=self._bus,
            poll_interval=self._poll_interval,
        )
