"""Shared route dependencies: the current user from cookie or bearer token."""
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from zabaan.core.config import get_settings
from zabaan.core.errors import AuthenticationError
from zabaan.core.security import user_id_from_access_token, verify_session_token
from zabaan.db.session import get_db
from zabaan.models.user import User

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user_optional(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> User | None:
    """Return the user for a valid bearer token or auth cookie; else None."""
    user_id = None
    if credentials is not None:
        user_id = user_id_from_access_token(credentials.credentials)
    if user_id is None:
        user_id = verify_session_token(request.cookies.get(get_settings().auth_cookie_name))
    if user_id is None:
        return None

    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_current_user(
    user: Annotated[User | None, Depends(get_current_user_optional)],
) -> User:
    if user is None:
        raise AuthenticationError()
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
