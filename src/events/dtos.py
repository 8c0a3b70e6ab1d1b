from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from src.events.repository.orm_models import Event


class EventPhase(str, Enum):
    UPCOMING = "upcoming"  # registration has not started yet
    OPEN = "open"
    LOTTERY_DONE = "lottery_done"  # registration closed, draws may still happen
    FINISHED = "finished"


class EntrantStatus(str, Enum):
    WAITLIST = "waitlist"
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    NOT_SELECTED = "not_selected"


class EventListView(str, Enum):
    UPCOMING = "upcoming"
    PAST = "past"


@dataclass(frozen=True)
class LocationDTO:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class EntrantLocationDTO:
    user_id: str
    latitude: float
    longitude: float


@dataclass(frozen=True)
class EventDTO:
    """Snapshot of an event, as read inside one transaction."""

    event_id: UUID
    organizer_id: str
    name: str
    waiting_list: list[str] = field(default_factory=list)
    description: str | None = None
    location_name: str | None = None
    geolocation_required: bool = False
    max_attendees: int | None = None
    max_waiting_list: int | None = None
    registration_start: datetime | None = None
    registration_end: datetime | None = None
    lottery_complete: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def waiting_list_size(self) -> int:
        return len(self.waiting_list)

    @property
    def waiting_list_limit(self) -> int | None:
        # 0 means "no limit", same as unset
        return self.max_waiting_list or None

    @classmethod
    def from_event(cls, event: "Event") -> "EventDTO":
        return cls(
            event_id=event.uuid,
            organizer_id=event.organizer_id,
            name=event.name,
            waiting_list=list(event.waiting_list or []),
            description=event.description,
            location_name=event.location_name,
            geolocation_required=event.geolocation_required,
            max_attendees=event.max_attendees,
            max_waiting_list=event.max_waiting_list,
            registration_start=event.registration_start,
            registration_end=event.registration_end,
            lottery_complete=event.lottery_complete,
            created_at=event.created_at,
            updated_at=event.updated_at,
        )


@dataclass(frozen=True)
class EventSummaryDTO:
    """Organizer-facing counts for one event."""

    event_id: UUID
    phase: EventPhase
    waiting_list_size: int
    waitlisted: int  # on the list and never invited
    pending: int
    accepted: int
    rejected: int
    cancelled: int
    max_attendees: int | None = None
