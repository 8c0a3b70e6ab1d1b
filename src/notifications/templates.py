from dataclasses import dataclass

from src.notifications.dtos import NotificationKind


@dataclass
class NotificationTemplates:
    LOTTERY_WON_TITLE = "You've been selected!"
    LOTTERY_WON_MESSAGE = (
        "You won the lottery for {event_name}. "
        "Open the app to accept or decline your invitation."
    )

    LOTTERY_NOT_SELECTED_TITLE = "Lottery results for {event_name}"
    LOTTERY_NOT_SELECTED_MESSAGE = (
        "You were not selected this time. "
        "You stay on the waiting list in case a spot opens up."
    )

    INVITATION_CANCELLED_TITLE = "Invitation cancelled"
    INVITATION_CANCELLED_MESSAGE = "The organizer cancelled your invitation to {event_name}."

    INVITATION_ACCEPTED_TITLE = "Invitation accepted"
    INVITATION_ACCEPTED_MESSAGE = "{entrant_name} accepted the invitation to {event_name}."

    INVITATION_REJECTED_TITLE = "Invitation declined"
    INVITATION_REJECTED_MESSAGE = (
        "{entrant_name} declined the invitation to {event_name}. "
        "A replacement is drawn from the waiting list."
    )

    ORGANIZER_MESSAGE_TITLE = "{title}"
    ORGANIZER_MESSAGE_MESSAGE = "{message}"

    @classmethod
    def get_templates(cls, kind: NotificationKind) -> tuple[str, str]:
        prefix = kind.name
        return getattr(cls, f"{prefix}_TITLE"), getattr(cls, f"{prefix}_MESSAGE")

    @classmethod
    def render(cls, kind: NotificationKind, **context: str) -> tuple[str, str]:
        context.setdefault("event_name", "your event")
        context.setdefault("entrant_name", "An entrant")
        title_template, message_template = cls.get_templates(kind)
        return title_template.format(**context), message_template.format(**context)
