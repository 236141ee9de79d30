"""Authentication: bearer tokens issued for users signed in through the email link provider."""

from datetime import datetime, timedelta, timezone
from typing import Annotated
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from lunapm.config import get_settings
from lunapm.db.session import get_db_session
from lunapm.models.user import User

router = APIRouter()
logger = structlog.get_logger()
settings = get_settings()
security = HTTPBearer(auto_error=False)


class UserResponse(BaseModel):
    """User information response."""

    id: UUID
    email: str
    name: str | None
    display_name: str
    role: str
    workspace_id: UUID | None

    model_config = {"from_attributes": True}


def create_access_token(user_id: UUID, expires_delta: timedelta | None = None) -> str:
    """Create a JWT access token."""
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.jwt_access_token_expire_minutes
        )

    to_encode = {
        "sub": str(user_id),
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(
        to_encode,
        settings.jwt_secret_key.get_secret_value(),
        algorithm=settings.jwt_algorithm,
    )


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def _resolve_user(token: str, db: AsyncSession) -> User:
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key.get_secret_value(),
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        raise _unauthorized("Invalid token")

    user_id = payload.get("sub")
    if user_id is None or payload.get("type") != "access":
        raise _unauthorized("Invalid token")

    try:
        user = await db.get(User, UUID(user_id))
    except ValueError:
        raise _unauthorized("Invalid token")
    if user is None:
        raise _unauthorized("User not found")
    return user


async def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: AsyncSession = Depends(get_db_session),
) -> User | None:
    """Resolve the request to a signed-in user, or None when no token is sent."""
    if not credentials:
        return None
    return await _resolve_user(credentials.credentials, db)


async def get_current_user(
    user: Annotated[User | None, Depends(get_optional_user)],
) -> User:
    """Require a signed-in user."""
    if user is None:
        raise _unauthorized("Not authenticated")
    return user


async def get_admin_user(
    user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Require a signed-in agency admin."""
    if not user.is_admin:
        logger.warning("admin_access_denied", user_id=str(user.id))
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
AdminUser = Annotated[User, Depends(get_admin_user)]


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: CurrentUser) -> User:
    """Get current user information."""
    return current_user
