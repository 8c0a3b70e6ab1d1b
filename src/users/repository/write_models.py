import logging
from abc import ABC, abstractmethod

from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import async_session_manager
from src.errors import InvalidArgumentError, NotFoundError
from src.models.user import User
from src.users import roles
from src.users.dtos import UserDTO

logger = logging.getLogger(__name__)

PROFILE_FIELDS = {"name", "email", "phone", "system_notifications", "organizer_notifications"}


class UserWriteModel(ABC):
    @abstractmethod
    async def ensure_user(
        self, user_id: str, name: str = "", email: str | None = None
    ) -> UserDTO:
        """Return the user for an installation id, creating a profile if missing."""
        raise NotImplementedError

    @abstractmethod
    async def update_profile(self, user_id: str, **fields) -> UserDTO:
        """Set profile fields and notification preferences. ``None`` values are left alone."""
        raise NotImplementedError

    @abstractmethod
    async def promote_user(self, user_id: str) -> UserDTO:
        raise NotImplementedError

    @abstractmethod
    async def demote_user(self, user_id: str) -> UserDTO:
        raise NotImplementedError


class SqlUserWriteModel(UserWriteModel):
    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self.session_overwrite = session_overwrite

    async def ensure_user(
        self, user_id: str, name: str = "", email: str | None = None
    ) -> UserDTO:
        if not user_id:
            raise InvalidArgumentError("An installation id is required")

        async with async_session_manager(session_overwrite=self.session_overwrite) as session:
            user = await session.get(User, user_id)
            if user is None:
                user = User(user_id=user_id, name=name, email=email)
                session.add(user)
                await session.flush()
                logger.info("Created profile for user %s", user_id)
            return UserDTO.from_user(user)

    async def update_profile(self, user_id: str, **fields) -> UserDTO:
        unknown = set(fields) - PROFILE_FIELDS
        if unknown:
            raise InvalidArgumentError(f"Unknown profile fields: {', '.join(sorted(unknown))}")

        async with async_session_manager(session_overwrite=self.session_overwrite) as session:
            user = await self._get_user(session, user_id)
            for name, value in fields.items():
                if value is not None:
                    setattr(user, name, value)
            await session.flush()
            return UserDTO.from_user(user)

    async def promote_user(self, user_id: str) -> UserDTO:
        async with async_session_manager(session_overwrite=self.session_overwrite) as session:
            user = await self._get_user(session, user_id)
            user.role = roles.promote(user.role)
            await session.flush()
            return UserDTO.from_user(user)

    async def demote_user(self, user_id: str) -> UserDTO:
        async with async_session_manager(session_overwrite=self.session_overwrite) as session:
            user = await self._get_user(session, user_id)
            user.role, user.demoted = roles.demote(user.role, user.demoted)
            await session.flush()
            return UserDTO.from_user(user)

    async def _get_user(self, session: AsyncSession, user_id: str) -> User:
        user = await session.get(User, user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user
