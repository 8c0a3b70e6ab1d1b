from uuid import UUID

from src.errors import ForbiddenError, NotFoundError
from src.events.dtos import EventDTO
from src.events.repository.read_models import EventReadModel


async def require_owned_event(
    read_model: EventReadModel, event_id: UUID, user_id: str
) -> EventDTO:
    """The event, if ``user_id`` organizes it."""
    event = await read_model.get_event(event_id)
    if event is None:
        raise NotFoundError()
    if event.organizer_id != user_id:
        raise ForbiddenError("Only the event organizer can do this")
    return event
