"""Invitation state machine. Returns DTOs, never ORM models.

An invitation starts PENDING and moves once, to ACCEPTED or REJECTED (by its
recipient) or to CANCELLED (by the organizer, while still pending). Every
transition is a version-guarded read-modify-write of the invitation row, so
of two racing responses exactly one is applied.
"""

import logging
from abc import ABC, abstractmethod
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import run_transaction
from src.errors import (
    AlreadyInvitedError,
    AlreadyRespondedError,
    EventFullError,
    ForbiddenError,
    InvalidArgumentError,
    InvitationCancelledError,
    NotFoundError,
)
from src.events.repository.read_models import load_event
from src.invitations.dtos import InvitationDTO, InvitationState
from src.invitations.repository.orm_models import Invitation
from src.invitations.repository.read_models import fetch_event_invitations
from src.models.base import utcnow
from src.realtime.change_bus import ChangeBus, change_bus, event_invitations_topic

logger = logging.getLogger(__name__)


class InvitationWriteModel(ABC):
    @abstractmethod
    async def create_invites(
        self, event_id: UUID, organizer_id: str, recipient_ids: list[str]
    ) -> list[UUID]:
        """Create one pending invitation per recipient, all or nothing.

        Nobody may already hold a pending or accepted invitation, and the
        event must have a place for every recipient. Returns the new
        invitation ids in the order of ``recipient_ids``.
        """
        raise NotImplementedError

    @abstractmethod
    async def accept(self, invitation_id: UUID, user_id: str) -> InvitationDTO:
        raise NotImplementedError

    @abstractmethod
    async def reject(self, invitation_id: UUID, user_id: str) -> InvitationDTO:
        raise NotImplementedError

    @abstractmethod
    async def cancel(self, invitation_id: UUID, organizer_id: str) -> InvitationDTO:
        raise NotImplementedError


class SqlInvitationWriteModel(InvitationWriteModel):
    def __init__(
        self,
        session_overwrite: AsyncSession | None = None,
        bus: ChangeBus = change_bus,
    ) -> None:
        self._session_overwrite = session_overwrite
        self._bus = bus

    async def create_invites(
        self, event_id: UUID, organizer_id: str, recipient_ids: list[str]
    ) -> list[UUID]:
        if not event_id or not organizer_id or not recipient_ids:
            raise InvalidArgumentError("event, organizer and recipients are required")
        if any(not recipient_id for recipient_id in recipient_ids):
            raise InvalidArgumentError("Recipient ids must not be empty")
        if len(set(recipient_ids)) != len(recipient_ids):
            raise InvalidArgumentError("Recipient ids must be unique")

        async def work(session: AsyncSession) -> list[UUID]:
            event = await load_event(session, event_id)
            if event.organizer_id != organizer_id:
                raise ForbiddenError("Only the event organizer can send invitations")

            live = await self._live_invitations(session, event_id)
            holders = sorted(set(recipient_ids) & live.keys())
            if holders:
                raise AlreadyInvitedError(
                    f"Already invited to this event: {', '.join(holders)}"
                )
            if event.max_attendees and event.max_attendees > 0:
                open_places = event.max_attendees - len(live)
                if len(recipient_ids) > open_places:
                    raise EventFullError(
                        f"Only {max(open_places, 0)} places left, "
                        f"cannot invite {len(recipient_ids)} entrants"
                    )

            now = utcnow()
            invitations = [
                Invitation(
                    event_id=event_id,
                    organizer_id=organizer_id,
                    recipient_id=recipient_id,
                    accepted=None,
                    cancelled=False,
                    send_time=now,
                )
                for recipient_id in recipient_ids
            ]
            session.add_all(invitations)
            # bump the event's version so a concurrent draw or invite replays
            event.updated_at = now
            await session.flush()
            return [invitation.uuid for invitation in invitations]

        invitation_ids = await run_transaction(work, session_overwrite=self._session_overwrite)
        logger.info("Created %s invitations for event %s", len(invitation_ids), event_id)
        if self._session_overwrite is None:
            self._bus.publish(event_invitations_topic(event_id))
        return invitation_ids

    async def accept(self, invitation_id: UUID, user_id: str) -> InvitationDTO:
        return await self._respond(invitation_id, user_id, accepted=True)

    async def reject(self, invitation_id: UUID, user_id: str) -> InvitationDTO:
        return await self._respond(invitation_id, user_id, accepted=False)

    async def cancel(self, invitation_id: UUID, organizer_id: str) -> InvitationDTO:
        async def work(session: AsyncSession) -> InvitationDTO:
            invitation = await self._get_invitation(session, invitation_id)
            if invitation.organizer_id != organizer_id:
                raise ForbiddenError("Only the event organizer can cancel this invitation")
            if invitation.cancelled:
                raise InvitationCancelledError("This invitation was already cancelled")
            if invitation.accepted is not None:
                raise AlreadyRespondedError(
                    "The entrant already responded, the invitation can no longer be cancelled"
                )
            invitation.cancelled = True
            invitation.cancel_time = utcnow()
            return InvitationDTO.from_invitation(invitation)

        cancelled = await run_transaction(work, session_overwrite=self._session_overwrite)
        logger.info("Invitation %s cancelled by %s", invitation_id, organizer_id)
        self._bus.publish(event_invitations_topic(cancelled.event_id))
        return cancelled

    async def _respond(self, invitation_id: UUID, user_id: str, accepted: bool) -> InvitationDTO:
        async def work(session: AsyncSession) -> InvitationDTO:
            invitation = await self._get_invitation(session, invitation_id)
            if invitation.recipient_id != user_id:
                raise ForbiddenError("This invitation was sent to someone else")
            # cancellation is checked first: a cancelled invitation cannot be answered
            if invitation.cancelled:
                raise InvitationCancelledError()
            if invitation.accepted is not None:
                raise AlreadyRespondedError()
            invitation.accepted = accepted
            invitation.response_time = utcnow()
            return InvitationDTO.from_invitation(invitation)

        responded = await run_transaction(work, session_overwrite=self._session_overwrite)
        logger.info(
            "Invitation %s %s by %s",
            invitation_id,
            "accepted" if accepted else "rejected",
            user_id,
        )
        self._bus.publish(event_invitations_topic(responded.event_id))
        return responded

    async def _live_invitations(
        self, session: AsyncSession, event_id: UUID
    ) -> dict[str, InvitationDTO]:
        """Pending and accepted invitations of an event, by recipient."""
        invitations = await fetch_event_invitations(session, event_id)
        return {
            invitation.recipient_id: invitation
            for invitation in invitations
            if invitation.state in (InvitationState.PENDING, InvitationState.ACCEPTED)
        }

    async def _get_invitation(self, session: AsyncSession, invitation_id: UUID) -> Invitation:
        result = await session.execute(
            select(Invitation)
            .where(Invitation.uuid == invitation_id)
            .execution_options(populate_existing=True)
        )
        invitation = result.scalar_one_or_none()
        if invitation is None:
            raise NotFoundError("This invitation no longer exists")
        return invitation
