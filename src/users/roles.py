"""
Authorization roles.

A user holds exactly one role. Roles are ordered by authority, and a user
can do everything a role at or below their own can do.
"""

from enum import Enum


class Role(str, Enum):
    ENTRANT = "entrant"
    ORGANIZER = "organizer"
    ADMIN = "admin"

    @property
    def authority(self) -> int:
        return _AUTHORITY[self]

    def has_higher_authority(self, other: "Role") -> bool:
        return self.authority > other.authority


_AUTHORITY = {
    Role.ENTRANT: 0,
    Role.ORGANIZER: 1,
    Role.ADMIN: 2,
}


def has_abilities_of_role(user_role: Role, role: Role) -> bool:
    """True if a user with ``user_role`` can act as ``role``."""
    return not role.has_higher_authority(user_role)


def promote(role: Role) -> Role:
    if role == Role.ENTRANT:
        return Role.ORGANIZER
    return Role.ADMIN


def demote(role: Role, demoted: bool) -> tuple[Role, bool]:
    """Return the lowered role and the updated demoted flag.

    Demoting an entrant is a no-op and leaves the flag alone.
    """
    if role == Role.ADMIN:
        return Role.ORGANIZER, True
    if role == Role.ORGANIZER:
        return Role.ENTRANT, True
    return role, demoted
