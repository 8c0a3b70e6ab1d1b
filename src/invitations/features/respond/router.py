from uuid import UUID

from fastapi import APIRouter, Depends

from src.invitations.features.respond.write_model import RespondWriteModel, SqlRespondWriteModel
from src.invitations.schemas import InvitationResponse
from src.invitations.urls import ACCEPT_INVITATION_URL, REJECT_INVITATION_URL
from src.notifications.repository.write_models import SqlNotificationWriteModel
from src.push_service import get_push_service
from src.users.dependencies import get_current_user_id

router = APIRouter()


def get_respond_write_model() -> RespondWriteModel:
    return SqlRespondWriteModel(
        notification_write_model=SqlNotificationWriteModel(push_service=get_push_service()),
    )


@router.post(ACCEPT_INVITATION_URL, response_model=InvitationResponse)
async def accept_invitation(
    invitation_id: UUID,
    user_id: str = Depends(get_current_user_id),
    write_model: RespondWriteModel = Depends(get_respond_write_model),
) -> InvitationResponse:
    invitation = await write_model.accept(invitation_id, user_id)
    return InvitationResponse.model_validate(invitation)


@router.post(REJECT_INVITATION_URL, response_model=InvitationResponse)
async def reject_invitation(
    invitation_id: UUID,
    user_id: str = Depends(get_current_user_id),
    write_model: RespondWriteModel = Depends(get_respond_write_model),
) -> InvitationResponse:
    """Decline an invitation. The freed spot is offered to someone on the waiting list."""
    invitation = await write_model.reject(invitation_id, user_id)
    return InvitationResponse.model_validate(invitation)
