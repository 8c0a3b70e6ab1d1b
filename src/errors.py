"""
Error taxonomy for the event lottery service.

Every failure a caller can act on has its own class so that presentation
layers can tell "someone already took this slot" apart from "you already
responded" or "this event no longer exists". The HTTP layer renders them as
``{"detail": <message>, "kind": <kind>}`` with ``status_code``.
"""


class LotteryServiceError(Exception):
    """Base class for all domain errors."""

    kind: str = "Error"
    status_code: int = 400
    default_message: str = "The request could not be completed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidArgumentError(LotteryServiceError):
    kind = "InvalidArgument"
    status_code = 422
    default_message = "A required field is missing or invalid"


class NotFoundError(LotteryServiceError):
    kind = "NotFound"
    status_code = 404
    default_message = "This event no longer exists"


class AlreadyOnListError(LotteryServiceError):
    kind = "AlreadyOnList"
    status_code = 409
    default_message = "You are already on the waiting list for this event"


class ListFullError(LotteryServiceError):
    kind = "ListFull"
    status_code = 409
    default_message = "The waiting list is full, someone already took the last spot"


class NotOnListError(LotteryServiceError):
    kind = "NotOnList"
    status_code = 409
    default_message = "You are not on the waiting list for this event"


class RegistrationClosedError(LotteryServiceError):
    kind = "RegistrationClosed"
    status_code = 409
    default_message = "Registration for this event is not open"


class ForbiddenError(LotteryServiceError):
    kind = "Forbidden"
    status_code = 403
    default_message = "You are not allowed to perform this action"


class AlreadyRespondedError(LotteryServiceError):
    kind = "AlreadyResponded"
    status_code = 409
    default_message = "You already responded to this invitation"


class InvitationCancelledError(LotteryServiceError):
    kind = "Cancelled"
    status_code = 409
    default_message = "This invitation was cancelled by the organizer"


class StoreTimeoutError(LotteryServiceError):
    kind = "Timeout"
    status_code = 504
    default_message = "The data store did not answer in time, please try again"


class StoreUnavailableError(LotteryServiceError):
    kind = "Unavailable"
    status_code = 503
    default_message = "The data store is unavailable, please try again"


class AlreadyInvitedError(LotteryServiceError):
    kind = "AlreadyInvited"
    status_code = 409
    default_message = "This entrant already holds an invitation to this event"


class EventFullError(LotteryServiceError):
    kind = "EventFull"
    status_code = 409
    default_message = "There are not enough open places left at this event"
