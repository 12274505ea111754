"""FastAPI dependencies: get_current_user and permission guards.

Usage in any protected router:
    from src.cm_gateway.auth.dependencies import get_current_user

    @router.get("/protected")
    async def protected(user: UserModel = Depends(get_current_user)):
        ...
"""

import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.cm_common.database import get_db_session
from src.cm_common.errors import (
    AccountDisabledError,
    AdminRequiredError,
    InvalidCredentialsError,
    TradingNotPermittedError,
)
from src.cm_gateway.auth.jwt_handler import ACCESS, decode_token
from src.cm_gateway.user.db_models import UserModel

# tokenUrl tells Swagger UI where to get a token (used for the "Authorize" button)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> UserModel:
    """Extract and validate the JWT Bearer token, return the UserModel.

    Raises HTTP 401 if the token is missing, invalid, or expired.
    Raises HTTP 403 (AccountDisabledError) if the user account is disabled.
    """
    try:
        payload = decode_token(token, expected_type=ACCESS)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    user_id: str | None = payload.get("sub")
    if not user_id:
        raise _CREDENTIALS_EXCEPTION

    try:
        user_uuid = uuid.UUID(user_id)
    except ValueError:
        raise _CREDENTIALS_EXCEPTION from None

    result = await db.execute(select(UserModel).where(UserModel.id == user_uuid))
    user = result.scalar_one_or_none()
    if user is None:
        raise _CREDENTIALS_EXCEPTION

    if not user.is_active:
        raise AccountDisabledError()

    return user


def check_trading_permission(user: UserModel) -> None:
    if not user.is_verified:
        raise TradingNotPermittedError(
            "Email verification required for trading. "
            "Please verify your email address first."
        )
    if not user.can_trade:
        raise TradingNotPermittedError(
            "Trading permission required. Please contact an administrator "
            "to enable trading for your account."
        )


async def require_trading_permission(
    current_user: UserModel = Depends(get_current_user),
) -> UserModel:
    """Verify the caller has a verified email and the canTrade flag."""
    check_trading_permission(current_user)
    return current_user


async def require_admin(
    current_user: UserModel = Depends(get_current_user),
) -> UserModel:
    """Verify the caller is an administrator."""
    if not current_user.is_admin:
        raise AdminRequiredError()
    return current_user
