"""FastAPI dependencies for authentication and database sessions."""

from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from degreeplan.core.db import get_db
from degreeplan.core.security import decode_access_token
from degreeplan.database.user_repo import UserRepository
from degreeplan.models.base import MAX_ROW_ID
from degreeplan.models.models import User
from degreeplan.utils.exceptions import UnauthorizedException

# Missing credentials are reported by get_current_user in the error envelope
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Get current authenticated user from JWT token."""
    if credentials is None:
        raise UnauthorizedException("Not authenticated")

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise UnauthorizedException("Could not validate credentials")

    user_id_str: Optional[str] = payload.get("sub")
    if user_id_str is None:
        raise UnauthorizedException("Could not validate credentials")

    try:
        user_id = int(user_id_str)
    except ValueError:
        raise UnauthorizedException("Could not validate credentials")
    if not 0 < user_id <= MAX_ROW_ID:
        raise UnauthorizedException("Could not validate credentials")

    user = await UserRepository.find_user(db, user_id)
    if user is None:
        raise UnauthorizedException("Could not validate credentials")

    return user


# Convenience type aliases
CurrentUser = Annotated[User, Depends(get_current_user)]
DB = Annotated[AsyncSession, Depends(get_db)]
