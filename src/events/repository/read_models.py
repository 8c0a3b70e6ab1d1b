import abc
from datetime import datetime
from uuid import UUID

from sqlalchemy import String, cast, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import async_session_manager
from src.errors import NotFoundError
from src.events.dtos import (
    EntrantLocationDTO,
    EntrantStatus,
    EventDTO,
    EventListView,
    EventPhase,
    EventSummaryDTO,
)
from src.events.repository.orm_models import EntrantLocation, Event
from src.invitations.dtos import InvitationCountsDTO, InvitationDTO, InvitationState
from src.invitations.repository.orm_models import Invitation
from src.invitations.repository.read_models import (
    choose_user_invitation,
    fetch_event_invitations,
)
from src.models.base import utcnow


async def load_event(session: AsyncSession, event_id: UUID) -> Event:
    """Read the current row of an event, bypassing the identity map."""
    result = await session.execute(
        select(Event).where(Event.uuid == event_id).execution_options(populate_existing=True)
    )
    event = result.scalar_one_or_none()
    if event is None:
        raise NotFoundError()
    return event


def registration_is_open(event: EventDTO, now: datetime) -> bool:
    if event.lottery_complete:
        return False
    if event.registration_start is not None and now < event.registration_start:
        return False
    if event.registration_end is not None and now >= event.registration_end:
        return False
    return True


def event_phase(event: EventDTO, now: datetime | None = None) -> EventPhase:
    now = now or utcnow()
    if event.lottery_complete:
        return EventPhase.FINISHED
    if event.registration_end is not None and now >= event.registration_end:
        return EventPhase.LOTTERY_DONE
    if event.registration_start is not None and now < event.registration_start:
        return EventPhase.UPCOMING
    return EventPhase.OPEN


_STATUS_BY_STATE = {
    InvitationState.PENDING: EntrantStatus.PENDING,
    InvitationState.ACCEPTED: EntrantStatus.ACCEPTED,
    InvitationState.REJECTED: EntrantStatus.REJECTED,
}


def entrant_status(
    event: EventDTO, user_invitations: list[InvitationDTO], user_id: str
) -> EntrantStatus | None:
    """Where a user stands for an event.

    An invitation outranks bare waiting-list membership. ``None`` means the
    user has nothing to do with the event.
    """
    invitation = choose_user_invitation(user_invitations)
    if invitation is not None:
        return _STATUS_BY_STATE[invitation.state]
    if user_invitations:
        # every invitation this user got was cancelled
        return EntrantStatus.NOT_SELECTED
    if user_id in event.waiting_list:
        return EntrantStatus.NOT_SELECTED if event.lottery_complete else EntrantStatus.WAITLIST
    return None


def summarize(
    event: EventDTO, invitations: list[InvitationDTO], now: datetime | None = None
) -> EventSummaryDTO:
    counts = InvitationCountsDTO.from_invitations(invitations)
    invited = {invitation.recipient_id for invitation in invitations}
    return EventSummaryDTO(
        event_id=event.event_id,
        phase=event_phase(event, now),
        waiting_list_size=event.waiting_list_size,
        waitlisted=len([user_id for user_id in event.waiting_list if user_id not in invited]),
        pending=counts.pending,
        accepted=counts.accepted,
        rejected=counts.rejected,
        cancelled=counts.cancelled,
        max_attendees=event.max_attendees,
    )


class EventReadModel(abc.ABC):
    @abc.abstractmethod
    async def get_event(self, event_id: UUID) -> EventDTO | None:
        raise NotImplementedError

    @abc.abstractmethod
    async def list_events(self, view: EventListView | None = None) -> list[EventDTO]:
        raise NotImplementedError

    @abc.abstractmethod
    async def list_joined_events(self, user_id: str) -> list[EventDTO]:
        """Events a user is waiting for or has been invited to."""
        raise NotImplementedError

    @abc.abstractmethod
    async def get_summary(self, event_id: UUID) -> EventSummaryDTO | None:
        raise NotImplementedError

    @abc.abstractmethod
    async def get_entrant_status(self, event_id: UUID, user_id: str) -> EntrantStatus | None:
        raise NotImplementedError

    @abc.abstractmethod
    async def list_entrant_locations(self, event_id: UUID) -> list[EntrantLocationDTO]:
        """Where the entrants still on the waiting list were when they joined."""
        raise NotImplementedError


class SqlEventReadModel(EventReadModel):
    async def get_event(self, event_id: UUID) -> EventDTO | None:
        async with async_session_manager() as session:
            event = await session.get(Event, event_id)
            return EventDTO.from_event(event) if event else None

    async def list_events(self, view: EventListView | None = None) -> list[EventDTO]:
        stmt = select(Event).order_by(Event.registration_end, Event.created_at)
        if view == EventListView.UPCOMING:
            stmt = stmt.where(Event.lottery_complete.is_(False))
        elif view == EventListView.PAST:
            stmt = stmt.where(Event.lottery_complete.is_(True))

        async with async_session_manager() as session:
            result = await session.execute(stmt)
            return [EventDTO.from_event(event) for event in result.scalars()]

    async def list_joined_events(self, user_id: str) -> list[EventDTO]:
        invited = select(Invitation.event_id).where(Invitation.recipient_id == user_id)
        # the JSON text match may over-select (e.g. LIKE wildcards), membership is re-checked below
        waiting = cast(Event.waiting_list, String).like(f'%"{user_id}"%')
        stmt = (
            select(Event)
            .where(Event.uuid.in_(invited) | waiting)
            .order_by(Event.registration_end, Event.created_at)
        )

        async with async_session_manager() as session:
            result = await session.execute(stmt)
            events = [EventDTO.from_event(event) for event in result.scalars()]
            invited_ids = set((await session.execute(invited)).scalars())

        return [
            event
            for event in events
            if event.event_id in invited_ids or user_id in event.waiting_list
        ]

    async def get_summary(self, event_id: UUID) -> EventSummaryDTO | None:
        async with async_session_manager() as session:
            event = await session.get(Event, event_id)
            if event is None:
                return None
            invitations = await fetch_event_invitations(session, event_id)
            return summarize(EventDTO.from_event(event), invitations)

    async def get_entrant_status(self, event_id: UUID, user_id: str) -> EntrantStatus | None:
        async with async_session_manager() as session:
            event = await load_event(session, event_id)
            invitations = await fetch_event_invitations(session, event_id)
            user_invitations = [
                invitation for invitation in invitations if invitation.recipient_id == user_id
            ]
            return entrant_status(EventDTO.from_event(event), user_invitations, user_id)

    async def list_entrant_locations(self, event_id: UUID) -> list[EntrantLocationDTO]:
        async with async_session_manager() as session:
            event = await load_event(session, event_id)
            result = await session.execute(
                select(EntrantLocation)
                .where(EntrantLocation.event_id == event_id)
                .order_by(EntrantLocation.created_at)
            )
            waiting = set(event.waiting_list or [])
            return [
                EntrantLocationDTO(
                    user_id=stamp.user_id, latitude=stamp.latitude, longitude=stamp.longitude
                )
                for stamp in result.scalars()
                if stamp.user_id in waiting
            ]
