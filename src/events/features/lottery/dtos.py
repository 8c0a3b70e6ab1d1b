from dataclasses import dataclass
from uuid import UUID

from pydantic import BaseModel

from src.events.dtos import EventDTO


@dataclass(frozen=True)
class LotteryDrawDTO:
    """Outcome of one draw. ``drawn`` is False when the event was not eligible."""

    event_id: UUID
    drawn: bool = False
    event: EventDTO | None = None
    winners: tuple[str, ...] = ()
    invitation_ids: tuple[UUID, ...] = ()
    # only filled in for the first draw of an event
    not_selected: tuple[str, ...] = ()
    lottery_complete: bool = False

    @classmethod
    def skipped(cls, event_id: UUID, lottery_complete: bool = False) -> "LotteryDrawDTO":
        return cls(event_id=event_id, lottery_complete=lottery_complete)


class DrawRequest(BaseModel):
    event_id: UUID
    # close registration now instead of waiting for its end
    early: bool = False


class DrawResponse(BaseModel):
    event_id: UUID
    drawn: bool
    winners: list[str]
    invitation_ids: list[UUID]
    lottery_complete: bool

    @classmethod
    def from_draw(cls, draw: LotteryDrawDTO) -> "DrawResponse":
        return cls(
            event_id=draw.event_id,
            drawn=draw.drawn,
            winners=list(draw.winners),
            invitation_ids=list(draw.invitation_ids),
            lottery_complete=draw.lottery_complete,
        )
