from uuid import UUID

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from src.errors import ForbiddenError, NotFoundError
from src.events.features.get_events.router import get_event_read_model
from src.events.permissions import require_owned_event
from src.events.repository.read_models import EventReadModel
from src.invitations.dtos import InvitationDTO
from src.invitations.repository.read_models import InvitationReadModel, SqlInvitationReadModel
from src.invitations.schemas import InvitationListResponse, InvitationResponse
from src.invitations.urls import (
    EVENT_INVITATIONS_STREAM_URL,
    EVENT_INVITATIONS_URL,
    INVITATION_URL,
    MY_INVITATIONS_URL,
)
from src.realtime.sse import sse_response
from src.users.dependencies import get_current_user_id

router = APIRouter()


def get_invitation_read_model() -> InvitationReadModel:
    return SqlInvitationReadModel()


def render_invitations(invitations: list[InvitationDTO]) -> str:
    return InvitationListResponse.from_invitations(invitations).model_dump_json()


@router.get(MY_INVITATIONS_URL, response_model=InvitationListResponse)
async def list_my_invitations(
    user_id: str = Depends(get_current_user_id),
    read_model: InvitationReadModel = Depends(get_invitation_read_model),
) -> InvitationListResponse:
    invitations = await read_model.list_user_invitations(user_id)
    return InvitationListResponse.from_invitations(invitations)


@router.get(INVITATION_URL, response_model=InvitationResponse)
async def get_invitation(
    invitation_id: UUID,
    user_id: str = Depends(get_current_user_id),
    read_model: InvitationReadModel = Depends(get_invitation_read_model),
) -> InvitationResponse:
    invitation = await read_model.get_invitation(invitation_id)
    if invitation is None:
        raise NotFoundError("This invitation no longer exists")
    if user_id not in (invitation.recipient_id, invitation.organizer_id):
        raise ForbiddenError("This invitation was sent to someone else")
    return InvitationResponse.model_validate(invitation)


@router.get(EVENT_INVITATIONS_URL, response_model=InvitationListResponse)
async def list_event_invitations(
    event_id: UUID,
    user_id: str = Depends(get_current_user_id),
    event_read_model: EventReadModel = Depends(get_event_read_model),
    read_model: InvitationReadModel = Depends(get_invitation_read_model),
) -> InvitationListResponse:
    await require_owned_event(event_read_model, event_id, user_id)
    invitations = await read_model.list_event_invitations(event_id)
    return InvitationListResponse.from_invitations(invitations)


@router.get(EVENT_INVITATIONS_STREAM_URL)
async def stream_event_invitations(
    event_id: UUID,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    event_read_model: EventReadModel = Depends(get_event_read_model),
    read_model: InvitationReadModel = Depends(get_invitation_read_model),
) -> StreamingResponse:
    """
    Live invitation list of an event as Server-Sent Events.

    The current list is sent right away, then again after every change.
    """
    await require_owned_event(event_read_model, event_id, user_id)
    return sse_response(
        request,
        read_model.observe_event_invitations(event_id),
        event="invitations",
        render=render_invitations,
    )
