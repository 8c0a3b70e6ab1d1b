from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from src.invitations.dtos import InvitationDTO, InvitationState


class InvitationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    invitation_id: UUID
    event_id: UUID
    organizer_id: str
    recipient_id: str
    state: InvitationState
    accepted: bool | None = None
    cancelled: bool
    send_time: datetime
    response_time: datetime | None = None
    cancel_time: datetime | None = None


class InvitationListResponse(BaseModel):
    invitations: list[InvitationResponse]
    total: int

    @classmethod
    def from_invitations(cls, invitations: list[InvitationDTO]) -> "InvitationListResponse":
        return cls(
            invitations=[InvitationResponse.model_validate(i) for i in invitations],
            total=len(invitations),
        )
