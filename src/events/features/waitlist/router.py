from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from src.events.dtos import LocationDTO
from src.events.features.get_events.router import get_event_read_model
from src.events.features.waitlist.write_model import SqlWaitlistWriteModel, WaitlistWriteModel
from src.events.permissions import require_owned_event
from src.events.repository.read_models import EventReadModel
from src.events.urls import WAITLIST_LOCATIONS_URL, WAITLIST_SIZE_URL, WAITLIST_URL
from src.users.dependencies import get_current_user_id

router = APIRouter()


class LocationSubmit(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class JoinWaitlistRequest(BaseModel):
    location: LocationSubmit | None = None


class WaitlistResponse(BaseModel):
    event_id: UUID
    waiting_list_size: int
    message: str


class WaitlistSizeResponse(BaseModel):
    event_id: UUID
    size: int


class EntrantLocationResponse(BaseModel):
    user_id: str
    latitude: float
    longitude: float


class WaitlistLocationsResponse(BaseModel):
    event_id: UUID
    locations: list[EntrantLocationResponse]


def get_waitlist_write_model() -> WaitlistWriteModel:
    return SqlWaitlistWriteModel()


@router.post(WAITLIST_URL, response_model=WaitlistResponse)
async def join_waitlist(
    event_id: UUID,
    request: JoinWaitlistRequest | None = None,
    user_id: str = Depends(get_current_user_id),
    write_model: WaitlistWriteModel = Depends(get_waitlist_write_model),
) -> WaitlistResponse:
    location = None
    if request is not None and request.location is not None:
        location = LocationDTO(
            latitude=request.location.latitude,
            longitude=request.location.longitude,
        )
    event = await write_model.join(event_id, user_id, location=location)
    return WaitlistResponse(
        event_id=event.event_id,
        waiting_list_size=event.waiting_list_size,
        message="You joined the waiting list",
    )


@router.delete(WAITLIST_URL, response_model=WaitlistResponse)
async def leave_waitlist(
    event_id: UUID,
    user_id: str = Depends(get_current_user_id),
    write_model: WaitlistWriteModel = Depends(get_waitlist_write_model),
) -> WaitlistResponse:
    event = await write_model.leave(event_id, user_id)
    return WaitlistResponse(
        event_id=event.event_id,
        waiting_list_size=event.waiting_list_size,
        message="You left the waiting list",
    )


@router.get(WAITLIST_SIZE_URL, response_model=WaitlistSizeResponse)
async def waitlist_size(
    event_id: UUID,
    write_model: WaitlistWriteModel = Depends(get_waitlist_write_model),
) -> WaitlistSizeResponse:
    return WaitlistSizeResponse(event_id=event_id, size=await write_model.size(event_id))


@router.get(WAITLIST_LOCATIONS_URL, response_model=WaitlistLocationsResponse)
async def waitlist_locations(
    event_id: UUID,
    user_id: str = Depends(get_current_user_id),
    read_model: EventReadModel = Depends(get_event_read_model),
) -> WaitlistLocationsResponse:
    """Where the waiting entrants joined from. Only the organizer sees this."""
    await require_owned_event(read_model, event_id, user_id)
    locations = await read_model.list_entrant_locations(event_id)
    return WaitlistLocationsResponse(
        event_id=event_id,
        locations=[
            EntrantLocationResponse(
                user_id=location.user_id,
                latitude=location.latitude,
                longitude=location.longitude,
            )
            for location in locations
        ],
    )
