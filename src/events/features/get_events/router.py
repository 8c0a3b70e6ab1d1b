from uuid import UUID

from fastapi import APIRouter, Depends

from src.errors import NotFoundError
from src.events.dtos import EventListView
from src.events.repository.read_models import EventReadModel, SqlEventReadModel
from src.events.schemas import (
    EntrantStatusResponse,
    EventListResponse,
    EventResponse,
    EventSummaryResponse,
)
from src.events.urls import (
    ENTRANT_STATUS_URL,
    EVENT_SUMMARY_URL,
    EVENT_URL,
    EVENTS_URL,
    JOINED_EVENTS_URL,
)
from src.users.dependencies import get_current_user_id

router = APIRouter()


def get_event_read_model() -> EventReadModel:
    return SqlEventReadModel()


@router.get(EVENTS_URL, response_model=EventListResponse)
async def list_events(
    view: EventListView | None = None,
    read_model: EventReadModel = Depends(get_event_read_model),
) -> EventListResponse:
    events = await read_model.list_events(view)
    return EventListResponse(
        events=[EventResponse.model_validate(event) for event in events],
        total=len(events),
    )


# registered before EVENT_URL so "joined" is not taken for an event id
@router.get(JOINED_EVENTS_URL, response_model=EventListResponse)
async def list_joined_events(
    user_id: str = Depends(get_current_user_id),
    read_model: EventReadModel = Depends(get_event_read_model),
) -> EventListResponse:
    """Events the caller is waiting for or has been invited to."""
    events = await read_model.list_joined_events(user_id)
    return EventListResponse(
        events=[EventResponse.model_validate(event) for event in events],
        total=len(events),
    )


@router.get(EVENT_URL, response_model=EventResponse)
async def get_event(
    event_id: UUID,
    read_model: EventReadModel = Depends(get_event_read_model),
) -> EventResponse:
    event = await read_model.get_event(event_id)
    if event is None:
        raise NotFoundError()
    return EventResponse.model_validate(event)


@router.get(EVENT_SUMMARY_URL, response_model=EventSummaryResponse)
async def get_event_summary(
    event_id: UUID,
    read_model: EventReadModel = Depends(get_event_read_model),
) -> EventSummaryResponse:
    summary = await read_model.get_summary(event_id)
    if summary is None:
        raise NotFoundError()
    return EventSummaryResponse.model_validate(summary)


@router.get(ENTRANT_STATUS_URL, response_model=EntrantStatusResponse)
async def get_entrant_status(
    event_id: UUID,
    user_id: str = Depends(get_current_user_id),
    read_model: EventReadModel = Depends(get_event_read_model),
) -> EntrantStatusResponse:
    status = await read_model.get_entrant_status(event_id, user_id)
    return EntrantStatusResponse(event_id=event_id, user_id=user_id, status=status)
