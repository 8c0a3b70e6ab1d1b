import abc
from collections.abc import Iterable

from sqlalchemy import select

from src.config.database import async_session_manager
from src.models.user import User
from src.users.dtos import UserDTO


class UserReadModel(abc.ABC):
    @abc.abstractmethod
    async def get_user(self, user_id: str) -> UserDTO | None:
        raise NotImplementedError

    @abc.abstractmethod
    async def get_users(self, user_ids: Iterable[str]) -> dict[str, UserDTO]:
        """Known users among ``user_ids``, keyed by id. Unknown ids are left out."""
        raise NotImplementedError


class SqlUserReadModel(UserReadModel):
    async def get_user(self, user_id: str) -> UserDTO | None:
        async with async_session_manager() as session:
            user = await session.get(User, user_id)
            return UserDTO.from_user(user) if user else None

    async def get_users(self, user_ids: Iterable[str]) -> dict[str, UserDTO]:
        ids = list(set(user_ids))
        if not ids:
            return {}
        async with async_session_manager() as session:
            result = await session.execute(select(User).where(User.user_id.in_(ids)))
            return {user.user_id: UserDTO.from_user(user) for user in result.scalars()}
