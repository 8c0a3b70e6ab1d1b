"""Waiting-list admission.

The capacity check and the append share one version-guarded transaction on
the event row, so concurrent joins can neither overfill a bounded list nor
add the same entrant twice.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import async_session_manager, run_transaction
from src.errors import (
    AlreadyOnListError,
    InvalidArgumentError,
    ListFullError,
    LotteryServiceError,
    NotOnListError,
    RegistrationClosedError,
)
from src.events.dtos import EventDTO, LocationDTO
from src.events.repository.orm_models import EntrantLocation
from src.events.repository.read_models import load_event, registration_is_open
from src.models.base import utcnow

logger = logging.getLogger(__name__)


class WaitlistWriteModel(ABC):
    @abstractmethod
    async def join(
        self,
        event_id: UUID,
        user_id: str,
        location: LocationDTO | None = None,
        now: datetime | None = None,
    ) -> EventDTO:
        raise NotImplementedError

    @abstractmethod
    async def leave(self, event_id: UUID, user_id: str) -> EventDTO:
        raise NotImplementedError

    @abstractmethod
    async def size(self, event_id: UUID) -> int:
        raise NotImplementedError


class SqlWaitlistWriteModel(WaitlistWriteModel):
    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self.session_overwrite = session_overwrite

    async def join(
        self,
        event_id: UUID,
        user_id: str,
        location: LocationDTO | None = None,
        now: datetime | None = None,
    ) -> EventDTO:
        if not user_id:
            raise InvalidArgumentError("A user id is required to join a waiting list")

        async def work(session: AsyncSession) -> EventDTO:
            event = await load_event(session, event_id)
            if not registration_is_open(EventDTO.from_event(event), now or utcnow()):
                raise RegistrationClosedError()
            waiting_list = list(event.waiting_list or [])
            if user_id in waiting_list:
                raise AlreadyOnListError()
            # 0 means unbounded
            if event.max_waiting_list and len(waiting_list) >= event.max_waiting_list:
                raise ListFullError()
            event.waiting_list = [*waiting_list, user_id]
            event.updated_at = utcnow()
            return EventDTO.from_event(event)

        joined = await run_transaction(work, session_overwrite=self.session_overwrite)
        logger.info(
            "User %s joined the waiting list of event %s (%s waiting)",
            user_id,
            event_id,
            joined.waiting_list_size,
        )
        if location is not None:
            await self._stamp_location(event_id, user_id, location)
        return joined

    async def leave(self, event_id: UUID, user_id: str) -> EventDTO:
        async def work(session: AsyncSession) -> EventDTO:
            event = await load_event(session, event_id)
            waiting_list = list(event.waiting_list or [])
            if user_id not in waiting_list:
                raise NotOnListError()
            event.waiting_list = [entry for entry in waiting_list if entry != user_id]
            event.updated_at = utcnow()
            return EventDTO.from_event(event)

        left = await run_transaction(work, session_overwrite=self.session_overwrite)
        logger.info("User %s left the waiting list of event %s", user_id, event_id)
        await self._drop_location(event_id, user_id)
        return left

    async def size(self, event_id: UUID) -> int:
        async with async_session_manager(session_overwrite=self.session_overwrite) as session:
            event = await load_event(session, event_id)
            return len(event.waiting_list or [])

    async def _stamp_location(self, event_id: UUID, user_id: str, location: LocationDTO) -> None:
        try:
            async with async_session_manager(session_overwrite=self.session_overwrite) as session:
                result = await session.execute(
                    select(EntrantLocation).where(
                        EntrantLocation.event_id == event_id,
                        EntrantLocation.user_id == user_id,
                    )
                )
                stamp = result.scalar_one_or_none()
                if stamp is None:
                    stamp = EntrantLocation(event_id=event_id, user_id=user_id)
                    session.add(stamp)
                stamp.latitude = location.latitude
                stamp.longitude = location.longitude
                await session.flush()
        except LotteryServiceError as e:
            logger.warning("Could not store location of %s for event %s: %s", user_id, event_id, e)

    async def _drop_location(self, event_id: UUID, user_id: str) -> None:
        try:
            async with async_session_manager(session_overwrite=self.session_overwrite) as session:
                await session.execute(
                    delete(EntrantLocation).where(
                        EntrantLocation.event_id == event_id,
                        EntrantLocation.user_id == user_id,
                    )
                )
        except LotteryServiceError as e:
            logger.warning("Could not drop location of %s for event %s: %s", user_id, event_id, e)
