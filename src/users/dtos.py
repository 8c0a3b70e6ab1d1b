from dataclasses import dataclass
from typing import TYPE_CHECKING

from src.users.roles import Role

if TYPE_CHECKING:
    from src.models.user import User


@dataclass(frozen=True)
class UserDTO:
    user_id: str
    name: str
    role: Role
    demoted: bool = False
    email: str | None = None
    phone: str | None = None
    system_notifications: bool = True
    organizer_notifications: bool = True

    @classmethod
    def from_user(cls, user: "User") -> "UserDTO":
        return cls(
            user_id=user.user_id,
            name=user.name,
            role=user.role,
            demoted=user.demoted,
            email=user.email,
            phone=user.phone,
            system_notifications=user.system_notifications,
            organizer_notifications=user.organizer_notifications,
        )
