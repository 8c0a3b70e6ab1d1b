from datetime import datetime

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from src.events.features.create_event.write_model import (
    CreateEventWriteModel,
    NewEventDTO,
    SqlCreateEventWriteModel,
)
from src.events.schemas import EventResponse
from src.events.urls import EVENTS_URL
from src.users.dependencies import get_current_user_id

router = APIRouter()


class CreateEventRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    location_name: str | None = None
    geolocation_required: bool = False
    max_attendees: int | None = None
    max_waiting_list: int | None = None
    registration_start: datetime | None = None
    registration_end: datetime | None = None


def get_create_event_write_model() -> CreateEventWriteModel:
    return SqlCreateEventWriteModel()


@router.post(EVENTS_URL, response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    request: CreateEventRequest,
    user_id: str = Depends(get_current_user_id),
    write_model: CreateEventWriteModel = Depends(get_create_event_write_model),
) -> EventResponse:
    """Create an event owned by the caller. Only organizers and admins may do this."""
    event = await write_model.create_event(
        organizer_id=user_id,
        new_event=NewEventDTO(**request.model_dump()),
    )
    return EventResponse.model_validate(event)
