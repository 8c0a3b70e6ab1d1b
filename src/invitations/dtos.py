from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from src.invitations.repository.orm_models import Invitation


class InvitationState(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class InvitationDTO:
    invitation_id: UUID
    event_id: UUID
    organizer_id: str
    recipient_id: str
    send_time: datetime
    # None = no response yet
    accepted: bool | None = None
    cancelled: bool = False
    response_time: datetime | None = None
    cancel_time: datetime | None = None

    @property
    def state(self) -> InvitationState:
        if self.cancelled:
            return InvitationState.CANCELLED
        if self.accepted is None:
            return InvitationState.PENDING
        return InvitationState.ACCEPTED if self.accepted else InvitationState.REJECTED

    @property
    def is_pending(self) -> bool:
        return self.state == InvitationState.PENDING

    @classmethod
    def from_invitation(cls, invitation: "Invitation") -> "InvitationDTO":
        return cls(
            invitation_id=invitation.uuid,
            event_id=invitation.event_id,
            organizer_id=invitation.organizer_id,
            recipient_id=invitation.recipient_id,
            send_time=invitation.send_time,
            accepted=invitation.accepted,
            cancelled=invitation.cancelled,
            response_time=invitation.response_time,
            cancel_time=invitation.cancel_time,
        )


@dataclass(frozen=True)
class InvitationCountsDTO:
    pending: int = 0
    accepted: int = 0
    rejected: int = 0
    cancelled: int = 0

    @classmethod
    def from_invitations(cls, invitations: list[InvitationDTO]) -> "InvitationCountsDTO":
        states = [invitation.state for invitation in invitations]
        return cls(
            pending=states.count(InvitationState.PENDING),
            accepted=states.count(InvitationState.ACCEPTED),
            rejected=states.count(InvitationState.REJECTED),
            cancelled=states.count(InvitationState.CANCELLED),
        )
