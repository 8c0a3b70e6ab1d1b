from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from src.events.dtos import EntrantStatus, EventPhase


class EventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    event_id: UUID
    organizer_id: str
    name: str
    description: str | None = None
    location_name: str | None = None
    geolocation_required: bool
    max_attendees: int | None = None
    max_waiting_list: int | None = None
    waiting_list_size: int
    registration_start: datetime | None = None
    registration_end: datetime | None = None
    lottery_complete: bool


class EventListResponse(BaseModel):
    events: list[EventResponse]
    total: int


class EventSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    event_id: UUID
    phase: EventPhase
    waiting_list_size: int
    waitlisted: int
    pending: int
    accepted: int
    rejected: int
    cancelled: int
    max_attendees: int | None = None


class EntrantStatusResponse(BaseModel):
    event_id: UUID
    user_id: str
    status: EntrantStatus | None = None
