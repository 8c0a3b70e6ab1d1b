from fastapi import Header

from src.errors import InvalidArgumentError


async def get_current_user_id(
    x_installation_id: str = Header(..., description="Stable per-installation identifier"),
) -> str:
    """The caller's identity is the opaque installation id sent by the app."""
    user_id = x_installation_id.strip()
    if not user_id:
        raise InvalidArgumentError("X-Installation-Id must not be empty")
    return user_id
