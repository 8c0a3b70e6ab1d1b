from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, ConfigDict, Field

from src.errors import ForbiddenError
from src.notifications.dtos import NotificationDTO, NotificationKind, RecipientGroup
from src.notifications.repository.read_models import (
    NotificationReadModel,
    SqlNotificationReadModel,
)
from src.notifications.repository.write_models import (
    NotificationWriteModel,
    SqlNotificationWriteModel,
)
from src.notifications.urls import (
    EVENT_NOTIFICATIONS_URL,
    FEED_STREAM_URL,
    FEED_URL,
    NOTIFICATION_URL,
)
from src.push_service import get_push_service
from src.realtime.sse import sse_response
from src.users.dependencies import get_current_user_id
from src.users.repository.read_models import SqlUserReadModel, UserReadModel
from src.users.roles import Role, has_abilities_of_role

router = APIRouter()


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    notification_id: UUID
    title: str
    message: str
    kind: NotificationKind
    created_at: datetime
    event_id: UUID | None = None
    organizer_id: str | None = None


class FeedResponse(BaseModel):
    notifications: list[NotificationResponse]
    total: int

    @classmethod
    def from_notifications(cls, notifications: list[NotificationDTO]) -> "FeedResponse":
        return cls(
            notifications=[NotificationResponse.model_validate(n) for n in notifications],
            total=len(notifications),
        )


class OrganizerMessageRequest(BaseModel):
    group: RecipientGroup
    title: str = Field(min_length=1, max_length=255)
    message: str = Field(min_length=1)


class OrganizerMessageResponse(BaseModel):
    notification_id: UUID | None = None
    recipients: int


def get_notification_read_model() -> NotificationReadModel:
    return SqlNotificationReadModel()


def get_notification_write_model() -> NotificationWriteModel:
    return SqlNotificationWriteModel(push_service=get_push_service())


def get_user_read_model() -> UserReadModel:
    return SqlUserReadModel()


def render_feed(notifications: list[NotificationDTO]) -> str:
    return FeedResponse.from_notifications(notifications).model_dump_json()


@router.get(FEED_URL, response_model=FeedResponse)
async def get_feed(
    user_id: str = Depends(get_current_user_id),
    read_model: NotificationReadModel = Depends(get_notification_read_model),
) -> FeedResponse:
    return FeedResponse.from_notifications(await read_model.get_feed(user_id))


@router.get(FEED_STREAM_URL)
async def stream_feed(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    read_model: NotificationReadModel = Depends(get_notification_read_model),
) -> StreamingResponse:
    return sse_response(
        request, read_model.observe_feed(user_id), event="notifications", render=render_feed
    )


@router.post(EVENT_NOTIFICATIONS_URL, response_model=OrganizerMessageResponse)
async def post_organizer_message(
    event_id: UUID,
    request: OrganizerMessageRequest,
    user_id: str = Depends(get_current_user_id),
    write_model: NotificationWriteModel = Depends(get_notification_write_model),
) -> OrganizerMessageResponse:
    """Message the waiting list, the selected entrants or the cancelled ones of an event."""
    sent = await write_model.post_organizer_notification(
        event_id=event_id,
        organizer_id=user_id,
        group=request.group,
        title=request.title,
        message=request.message,
    )
    if sent is None:
        return OrganizerMessageResponse(recipients=0)
    return OrganizerMessageResponse(
        notification_id=sent.notification_id, recipients=len(sent.recipients)
    )


@router.delete(NOTIFICATION_URL, status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: UUID,
    user_id: str = Depends(get_current_user_id),
    user_read_model: UserReadModel = Depends(get_user_read_model),
    write_model: NotificationWriteModel = Depends(get_notification_write_model),
) -> Response:
    user = await user_read_model.get_user(user_id)
    if user is None or not has_abilities_of_role(user.role, Role.ADMIN):
        raise ForbiddenError("Only admins can delete notifications")
    await write_model.delete_notification(notification_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
