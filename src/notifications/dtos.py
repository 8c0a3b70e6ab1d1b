from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from src.notifications.repository.orm_models import Notification


class NotificationKind(str, Enum):
    LOTTERY_WON = "lottery_won"
    LOTTERY_NOT_SELECTED = "lottery_not_selected"
    INVITATION_CANCELLED = "invitation_cancelled"
    INVITATION_ACCEPTED = "invitation_accepted"
    INVITATION_REJECTED = "invitation_rejected"
    ORGANIZER_MESSAGE = "organizer_message"

    @property
    def is_organizer_message(self) -> bool:
        return self == NotificationKind.ORGANIZER_MESSAGE


class RecipientGroup(str, Enum):
    """Who an organizer message goes to."""

    WAITLIST = "waitlist"  # on the waiting list and never invited
    SELECTED = "selected"  # pending or accepted invitation
    CANCELLED = "cancelled"  # invitation cancelled by the organizer


@dataclass(frozen=True)
class NotificationDTO:
    notification_id: UUID
    title: str
    message: str
    kind: NotificationKind
    created_at: datetime
    event_id: UUID | None = None
    organizer_id: str | None = None
    deleted: bool = False
    # only filled in when the notification was just sent
    recipients: tuple[str, ...] = ()

    @classmethod
    def from_notification(
        cls, notification: "Notification", recipients: tuple[str, ...] = ()
    ) -> "NotificationDTO":
        return cls(
            notification_id=notification.uuid,
            title=notification.title,
            message=notification.message,
            kind=notification.kind,
            created_at=notification.created_at,
            event_id=notification.event_id,
            organizer_id=notification.organizer_id,
            deleted=notification.deleted,
            recipients=recipients,
        )
