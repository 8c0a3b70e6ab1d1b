"""Lottery draws.

A draw reads the event and its invitations, picks winners among entrants that
were never invited, and creates their invitations in the same transaction
that bumps the event's version counter. Two concurrent draws therefore cannot
fill the same slot: the loser is replayed and finds no open slots.
"""

import logging
import random
from abc import ABC, abstractmethod
from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import async_session_manager, run_transaction
from src.errors import ForbiddenError, LotteryServiceError
from src.events.dtos import EventDTO
from src.events.features.lottery import engine
from src.events.features.lottery.dtos import LotteryDrawDTO
from src.events.repository.orm_models import Event
from src.events.repository.read_models import load_event
from src.invitations.dtos import InvitationCountsDTO
from src.invitations.repository.read_models import fetch_event_invitations
from src.invitations.repository.write_models import SqlInvitationWriteModel
from src.models.base import utcnow
from src.notifications.dtos import NotificationKind
from src.notifications.repository.write_models import (
    NotificationWriteModel,
    SqlNotificationWriteModel,
)
from src.realtime.change_bus import ChangeBus, change_bus, event_invitations_topic

logger = logging.getLogger(__name__)


class LotteryWriteModel(ABC):
    @abstractmethod
    async def run_lottery(self, event_id: UUID, now: datetime | None = None) -> LotteryDrawDTO:
        """Draw winners for an event whose registration has closed.

        Not being eligible is not an error: the result has ``drawn=False``.
        """
        raise NotImplementedError

    @abstractmethod
    async def draw_early(
        self, event_id: UUID, organizer_id: str, now: datetime | None = None
    ) -> LotteryDrawDTO:
        """Close registration and draw right away, on the organizer's request."""
        raise NotImplementedError

    @abstractmethod
    async def draw_replacements(
        self, event_id: UUID, declined_count: int | None = None
    ) -> LotteryDrawDTO:
        raise NotImplementedError

    @abstractmethod
    async def complete_lottery(self, event_id: UUID) -> EventDTO:
        raise NotImplementedError

    @abstractmethod
    async def process_due_lotteries(self, now: datetime | None = None) -> list[LotteryDrawDTO]:
        raise NotImplementedError


class SqlLotteryWriteModel(LotteryWriteModel):
    def __init__(
        self,
        session_overwrite: AsyncSession | None = None,
        notification_write_model: NotificationWriteModel | None = None,
        rng: random.Random | None = None,
        bus: ChangeBus = change_bus,
    ) -> None:
        self._session_overwrite = session_overwrite
        self._notifications = notification_write_model or SqlNotificationWriteModel(
            session_overwrite=session_overwrite
        )
        self._rng = rng
        self._bus = bus

    async def run_lottery(self, event_id: UUID, now: datetime | None = None) -> LotteryDrawDTO:
        return await self._run(event_id, now=now)

    async def draw_early(
        self, event_id: UUID, organizer_id: str, now: datetime | None = None
    ) -> LotteryDrawDTO:
        return await self._run(event_id, now=now, early_by=organizer_id)

    async def draw_replacements(
        self, event_id: UUID, declined_count: int | None = None
    ) -> LotteryDrawDTO:
        return await self._run(event_id, declined_count=declined_count)

    async def complete_lottery(self, event_id: UUID) -> EventDTO:
        async def work(session: AsyncSession) -> EventDTO:
            event = await load_event(session, event_id)
            if not event.lottery_complete:
                event.lottery_complete = True
                event.updated_at = utcnow()
                logger.info("Lottery for event %s completed", event_id)
            return EventDTO.from_event(event)

        return await run_transaction(work, session_overwrite=self._session_overwrite)

    async def process_due_lotteries(self, now: datetime | None = None) -> list[LotteryDrawDTO]:
        now = now or utcnow()
        async with async_session_manager(session_overwrite=self._session_overwrite) as session:
            result = await session.execute(
                select(Event.uuid)
                .where(Event.lottery_complete.is_(False))
                .where(Event.registration_end.is_not(None))
                .where(Event.registration_end <= now)
                .order_by(Event.registration_end)
            )
            due = list(result.scalars())

        draws = []
        for event_id in due:
            try:
                draws.append(await self.run_lottery(event_id, now=now))
            except Exception:
                # one broken event must not starve the others
                logger.exception("Lottery for event %s failed", event_id)
        logger.info(
            "Processed %s due lotteries, %s drew winners",
            len(due),
            len([draw for draw in draws if draw.winners]),
        )
        return draws

    async def _run(
        self,
        event_id: UUID,
        now: datetime | None = None,
        declined_count: int | None = None,
        early_by: str | None = None,
    ) -> LotteryDrawDTO:
        now = now or utcnow()

        async def work(session: AsyncSession) -> LotteryDrawDTO:
            event = await load_event(session, event_id)
            if early_by is not None and event.organizer_id != early_by:
                raise ForbiddenError("Only the event organizer can draw the lottery early")
            snapshot = EventDTO.from_event(event)
            if not engine.is_eligible(snapshot, now, early=early_by is not None):
                logger.debug("Event %s is not eligible for a draw, skipping", event_id)
                return LotteryDrawDTO.skipped(event_id, lottery_complete=event.lottery_complete)
            if early_by is not None and (
                event.registration_end is None or event.registration_end > now
            ):
                # nobody joins after an early draw
                event.registration_end = now
                event.updated_at = now
                logger.info("Registration for event %s closed early by %s", event_id, early_by)
            return await self._draw(session, event, declined_count)

        draw = await run_transaction(work, session_overwrite=self._session_overwrite)
        if draw.drawn:
            self._bus.publish(event_invitations_topic(event_id))
            await self._announce(draw)
        return draw

    async def _draw(
        self, session: AsyncSession, event: Event, declined_count: int | None
    ) -> LotteryDrawDTO:
        invitations = await fetch_event_invitations(session, event.uuid)
        counts = InvitationCountsDTO.from_invitations(invitations)
        pool = engine.replacement_pool(
            event.waiting_list, (invitation.recipient_id for invitation in invitations)
        )
        slots = engine.open_slots(event.max_attendees, counts.accepted, counts.pending)
        if declined_count is not None:
            slots = min(slots, max(declined_count, 0))

        winners = engine.select_winners(pool, slots, rng=self._rng)
        invitation_ids = []
        if winners:
            invitation_ids = await SqlInvitationWriteModel(
                session_overwrite=session, bus=self._bus
            ).create_invites(event.uuid, event.organizer_id, winners)

        remaining = [user_id for user_id in pool if user_id not in set(winners)]
        pending = counts.pending + len(winners)
        full = counts.accepted >= event.max_attendees
        exhausted = not remaining and pending == 0
        if full or exhausted:
            event.lottery_complete = True
        if winners or event.lottery_complete:
            event.updated_at = utcnow()

        logger.info(
            "Draw for event %s: %s open slots, %s winners, %s left in pool%s",
            event.uuid,
            slots,
            len(winners),
            len(remaining),
            ", lottery complete" if event.lottery_complete else "",
        )
        return LotteryDrawDTO(
            event_id=event.uuid,
            drawn=True,
            event=EventDTO.from_event(event),
            winners=tuple(winners),
            invitation_ids=tuple(invitation_ids),
            not_selected=tuple(remaining) if not invitations and winners else (),
            lottery_complete=event.lottery_complete,
        )

    async def _announce(self, draw: LotteryDrawDTO) -> None:
        # the draw is committed at this point, a failed notification never undoes it
        try:
            if draw.winners:
                await self._notifications.notify_event_transition(
                    draw.event, draw.winners, NotificationKind.LOTTERY_WON
                )
            if draw.not_selected:
                await self._notifications.notify_event_transition(
                    draw.event, draw.not_selected, NotificationKind.LOTTERY_NOT_SELECTED
                )
        except LotteryServiceError as e:
            logger.warning("Could not notify entrants of event %s: %s", draw.event_id, e)
