from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from src.invitations.features.create_invites.write_model import (
    CreateInvitesWriteModel,
    SqlCreateInvitesWriteModel,
)
from src.invitations.urls import EVENT_INVITATIONS_URL
from src.notifications.repository.write_models import SqlNotificationWriteModel
from src.push_service import get_push_service
from src.users.dependencies import get_current_user_id

router = APIRouter()


class CreateInvitesRequest(BaseModel):
    recipient_ids: list[str] = Field(min_length=1)


class CreateInvitesResponse(BaseModel):
    invitation_ids: list[UUID]


def get_create_invites_write_model() -> CreateInvitesWriteModel:
    return SqlCreateInvitesWriteModel(
        notification_write_model=SqlNotificationWriteModel(push_service=get_push_service()),
    )


@router.post(
    EVENT_INVITATIONS_URL,
    response_model=CreateInvitesResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_invites(
    event_id: UUID,
    request: CreateInvitesRequest,
    user_id: str = Depends(get_current_user_id),
    write_model: CreateInvitesWriteModel = Depends(get_create_invites_write_model),
) -> CreateInvitesResponse:
    """Invite entrants directly, outside the lottery. All invitations are created or none."""
    invitation_ids = await write_model.create_invites(
        event_id=event_id,
        organizer_id=user_id,
        recipient_ids=request.recipient_ids,
    )
    return CreateInvitesResponse(invitation_ids=invitation_ids)
