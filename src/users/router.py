from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, EmailStr

from src.errors import ForbiddenError, NotFoundError
from src.users.dependencies import get_current_user_id
from src.users.repository.read_models import SqlUserReadModel, UserReadModel
from src.users.repository.write_models import SqlUserWriteModel, UserWriteModel
from src.users.roles import Role, has_abilities_of_role

router = APIRouter()

ME_URL = "/api/v1/users/me"
PROMOTE_USER_URL = "/api/v1/users/{user_id}/promote"
DEMOTE_USER_URL = "/api/v1/users/{user_id}/demote"


class ProfileSubmit(BaseModel):
    name: str | None = None
    email: EmailStr | None = None
    phone: str | None = None
    system_notifications: bool | None = None
    organizer_notifications: bool | None = None


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    name: str
    role: Role
    demoted: bool
    email: str | None = None
    phone: str | None = None
    system_notifications: bool
    organizer_notifications: bool


def get_user_read_model() -> UserReadModel:
    return SqlUserReadModel()


def get_user_write_model() -> UserWriteModel:
    return SqlUserWriteModel()


@router.get(ME_URL, response_model=UserResponse)
async def get_me(
    user_id: str = Depends(get_current_user_id),
    read_model: UserReadModel = Depends(get_user_read_model),
) -> UserResponse:
    user = await read_model.get_user(user_id)
    if user is None:
        raise NotFoundError("No profile exists for this installation yet")
    return UserResponse.model_validate(user)


@router.put(ME_URL, response_model=UserResponse)
async def update_me(
    profile: ProfileSubmit,
    user_id: str = Depends(get_current_user_id),
    write_model: UserWriteModel = Depends(get_user_write_model),
) -> UserResponse:
    """Create the caller's profile on first use, then apply the submitted fields."""
    await write_model.ensure_user(user_id, name=profile.name or "", email=profile.email)
    user = await write_model.update_profile(user_id, **profile.model_dump())
    return UserResponse.model_validate(user)


async def _require_admin(read_model: UserReadModel, user_id: str) -> None:
    user = await read_model.get_user(user_id)
    if user is None or not has_abilities_of_role(user.role, Role.ADMIN):
        raise ForbiddenError("Only admins can change roles")


@router.post(PROMOTE_USER_URL, response_model=UserResponse)
async def promote_user(
    user_id: str,
    caller_id: str = Depends(get_current_user_id),
    read_model: UserReadModel = Depends(get_user_read_model),
    write_model: UserWriteModel = Depends(get_user_write_model),
) -> UserResponse:
    await _require_admin(read_model, caller_id)
    return UserResponse.model_validate(await write_model.promote_user(user_id))


@router.post(DEMOTE_USER_URL, response_model=UserResponse)
async def demote_user(
    user_id: str,
    caller_id: str = Depends(get_current_user_id),
    read_model: UserReadModel = Depends(get_user_read_model),
    write_model: UserWriteModel = Depends(get_user_write_model),
) -> UserResponse:
    await _require_admin(read_model, caller_id)
    return UserResponse.model_validate(await write_model.demote_user(user_id))
