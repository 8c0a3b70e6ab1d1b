from uuid import UUID

from fastapi import APIRouter, Depends

from src.invitations.features.cancel.write_model import (
    CancelInvitationWriteModel,
    SqlCancelInvitationWriteModel,
)
from src.invitations.schemas import InvitationResponse
from src.invitations.urls import CANCEL_INVITATION_URL
from src.notifications.repository.write_models import SqlNotificationWriteModel
from src.push_service import get_push_service
from src.users.dependencies import get_current_user_id

router = APIRouter()


def get_cancel_invitation_write_model() -> CancelInvitationWriteModel:
    return SqlCancelInvitationWriteModel(
        notification_write_model=SqlNotificationWriteModel(push_service=get_push_service()),
    )


@router.post(CANCEL_INVITATION_URL, response_model=InvitationResponse)
async def cancel_invitation(
    invitation_id: UUID,
    user_id: str = Depends(get_current_user_id),
    write_model: CancelInvitationWriteModel = Depends(get_cancel_invitation_write_model),
) -> InvitationResponse:
    """Withdraw a pending invitation. Only the organizer who sent it can do this."""
    invitation = await write_model.cancel(invitation_id, organizer_id=user_id)
    return InvitationResponse.model_validate(invitation)
