from enum import Enum


class TableNames(str, Enum):
    USERS = "users"
    EVENTS = "events"
    ENTRANT_LOCATIONS = "entrant_locations"
    INVITATIONS = "invitations"
    NOTIFICATIONS = "notifications"
    USER_NOTIFICATIONS = "user_notifications"
