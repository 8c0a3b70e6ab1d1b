import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import async_session_manager
from src.errors import ForbiddenError, InvalidArgumentError
from src.events.dtos import EventDTO
from src.events.repository.orm_models import Event
from src.models.user import User
from src.users.roles import Role, has_abilities_of_role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NewEventDTO:
    name: str
    description: str
    location_name: str | None = None
    geolocation_required: bool = False
    max_attendees: int | None = None
    max_waiting_list: int | None = None
    registration_start: datetime | None = None
    registration_end: datetime | None = None


def validate_new_event(new_event: NewEventDTO) -> None:
    if not new_event.name or not new_event.name.strip():
        raise InvalidArgumentError("Event name cannot be empty.")
    if not new_event.description or not new_event.description.strip():
        raise InvalidArgumentError("Event description cannot be empty.")
    start, end = new_event.registration_start, new_event.registration_end
    if start is not None and end is not None and end < start:
        raise InvalidArgumentError("Registration end must be after start.")
    if new_event.max_waiting_list is not None and new_event.max_waiting_list < 0:
        raise InvalidArgumentError("Max waiting list size cannot be negative.")
    if new_event.max_attendees is not None and new_event.max_attendees < 0:
        raise InvalidArgumentError("Max attendees cannot be negative.")
    if new_event.geolocation_required and not (
        new_event.location_name and new_event.location_name.strip()
    ):
        raise InvalidArgumentError("Location is required for this event.")


class CreateEventWriteModel(ABC):
    @abstractmethod
    async def create_event(self, organizer_id: str, new_event: NewEventDTO) -> EventDTO:
        raise NotImplementedError


class SqlCreateEventWriteModel(CreateEventWriteModel):
    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self.session_overwrite = session_overwrite

    async def create_event(self, organizer_id: str, new_event: NewEventDTO) -> EventDTO:
        validate_new_event(new_event)

        async with async_session_manager(session_overwrite=self.session_overwrite) as session:
            organizer = await session.get(User, organizer_id)
            if organizer is None or not has_abilities_of_role(organizer.role, Role.ORGANIZER):
                raise ForbiddenError("Only organizers can create events")

            event = Event(
                organizer_id=organizer_id,
                name=new_event.name.strip(),
                description=new_event.description.strip(),
                location_name=new_event.location_name,
                geolocation_required=new_event.geolocation_required,
                max_attendees=new_event.max_attendees,
                max_waiting_list=new_event.max_waiting_list,
                waiting_list=[],
                registration_start=new_event.registration_start,
                registration_end=new_event.registration_end,
                lottery_complete=False,
            )
            session.add(event)
            await session.flush()
            created = EventDTO.from_event(event)

        logger.info("Organizer %s created event %s (%s)", organizer_id, created.event_id, created.name)
        return created
