"""Pydantic request/response schemas for cm_gateway.

All responses are wrapped in ApiResponse at the router layer.
"""

import re

from pydantic import EmailStr, Field, field_validator

from src.cm_common.schemas import CamelModel
from src.cm_gateway.user.db_models import UserModel


class RegisterRequest(CamelModel):
    username: str = Field(..., min_length=3, max_length=20, pattern=r"^[a-zA-Z0-9_]+$")
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: str | None = Field(None, max_length=32)

    @field_validator("password")
    @classmethod
    def password_complexity(cls, v: str) -> str:
        """Enforce: at least one uppercase, one lowercase, one digit."""
        if not re.search(r"[A-Z]", v):
            raise ValueError("Password must contain at least one uppercase letter")
        if not re.search(r"[a-z]", v):
            raise ValueError("Password must contain at least one lowercase letter")
        if not re.search(r"\d", v):
            raise ValueError("Password must contain at least one digit")
        return v

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class LoginRequest(CamelModel):
    username: str
    password: str


class RefreshRequest(CamelModel):
    refresh_token: str


class VerifyEmailRequest(CamelModel):
    token: str


class ResendVerificationRequest(CamelModel):
    email: EmailStr


class UserInfo(CamelModel):
    """User identity as exposed to clients — never includes credentials."""

    user_id: str
    username: str
    email: str
    first_name: str
    last_name: str
    is_verified: bool
    can_trade: bool
    is_admin: bool

    @classmethod
    def from_model(cls, user: UserModel) -> "UserInfo":
        return cls(
            user_id=str(user.id),
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            is_verified=bool(user.is_verified),
            can_trade=bool(user.can_trade),
            is_admin=bool(user.is_admin),
        )


class RegisterResponse(CamelModel):
    token: str
    user: UserInfo


class LoginResponse(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int = 1800  # 30 minutes in seconds
    user: UserInfo


class RefreshResponse(CamelModel):
    access_token: str
    expires_in: int = 1800
