"""User domain service: register, login, refresh, email verification.

All DB operations use the injected AsyncSession. Transactions are managed
by the caller (router layer) via `async with db.begin()`.
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.cm_common.errors import (
    AccountDisabledError,
    EmailAlreadyVerifiedError,
    EmailExistsError,
    InternalError,
    InvalidCredentialsError,
    InvalidVerificationTokenError,
    UserNotFoundError,
    UsernameExistsError,
)
from src.cm_gateway.auth.jwt_handler import (
    REFRESH,
    VERIFY_EMAIL,
    create_access_token,
    create_refresh_token,
    create_verification_token,
    decode_token,
)
from src.cm_gateway.auth.password import hash_password, verify_password
from src.cm_gateway.user.db_models import UserModel
from src.cm_gateway.user.schemas import RegisterRequest
from src.cm_notification.application.templates import (
    VERIFY_EMAIL_SUBJECT,
    verification_template_data,
)
from src.cm_notification.domain.sender import EmailSenderProtocol, NotificationError

logger = logging.getLogger(__name__)


def _verification_url(token: str) -> str:
    return f"{settings.FRONTEND_URL}/verify-email?token={token}"


class UserService:
    """Stateless service — instantiate once, reuse across requests."""

    async def register(self, req: RegisterRequest, db: AsyncSession) -> UserModel:
        """Create a new user. New users can neither trade nor administer.

        The caller must wrap this in `async with db.begin()`.
        """
        # Check username uniqueness (DB UNIQUE constraint is the final guard)
        result = await db.execute(
            select(UserModel).where(UserModel.username == req.username)
        )
        if result.scalar_one_or_none() is not None:
            raise UsernameExistsError()

        email = str(req.email).lower()
        result = await db.execute(select(UserModel).where(UserModel.email == email))
        if result.scalar_one_or_none() is not None:
            raise EmailExistsError()

        user = UserModel(
            username=req.username,
            email=email,
            password_hash=hash_password(req.password),
            first_name=req.first_name,
            last_name=req.last_name,
            phone=req.phone,
            is_active=True,
            is_verified=False,
            can_trade=False,
            is_admin=False,
        )
        db.add(user)
        await db.flush()  # Get user.id without committing
        logger.info("User registered: user=%s", user.id)
        return user

    async def send_verification_best_effort(
        self, user: UserModel, sender: EmailSenderProtocol
    ) -> bool:
        """Send the verification email; a failure never fails registration."""
        token = create_verification_token(str(user.id), user.email)
        try:
            await sender.send(
                user.email,
                VERIFY_EMAIL_SUBJECT,
                verification_template_data(user.first_name, _verification_url(token)),
            )
        except NotificationError as exc:
            logger.warning("Verification email not sent: user=%s error=%s", user.id, exc)
            return False
        return True

    async def login(
        self,
        username: str,
        password: str,
        db: AsyncSession,
    ) -> tuple[UserModel, str, str]:
        """Authenticate user and return (user, access_token, refresh_token).

        Note: "User not found" and "Wrong password" both raise InvalidCredentialsError
        intentionally — prevents username enumeration attacks.
        """
        result = await db.execute(
            select(UserModel).where(UserModel.username == username)
        )
        user = result.scalar_one_or_none()

        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        if not user.is_active:
            raise AccountDisabledError()

        return (
            user,
            create_access_token(str(user.id)),
            create_refresh_token(str(user.id)),
        )

    async def refresh(self, refresh_token: str) -> str:
        """Validate refresh token and return a new access token."""
        payload = decode_token(refresh_token, expected_type=REFRESH)
        user_id: str = str(payload["sub"])
        return create_access_token(user_id)

    async def verify_email(self, token: str, db: AsyncSession) -> UserModel:
        """Mark the token's user as verified. Re-verifying is a no-op."""
        payload = decode_token(token, expected_type=VERIFY_EMAIL)
        try:
            user_id = uuid.UUID(str(payload.get("sub")))
        except ValueError:
            raise InvalidVerificationTokenError() from None

        result = await db.execute(select(UserModel).where(UserModel.id == user_id))
        user = result.scalar_one_or_none()
        if user is None or user.email != payload.get("email"):
            raise InvalidVerificationTokenError()

        if not user.is_verified:
            user.is_verified = True
            await db.flush()
            logger.info("Email verified: user=%s", user.id)
        return user

    async def resend_verification(
        self, email: str, db: AsyncSession, sender: EmailSenderProtocol
    ) -> None:
        result = await db.execute(
            select(UserModel).where(UserModel.email == email.lower())
        )
        user = result.scalar_one_or_none()
        if user is None:
            raise UserNotFoundError(email)
        if user.is_verified:
            raise EmailAlreadyVerifiedError()

        token = create_verification_token(str(user.id), user.email)
        try:
            await sender.send(
                user.email,
                VERIFY_EMAIL_SUBJECT,
                verification_template_data(user.first_name, _verification_url(token)),
            )
        except NotificationError as exc:
            logger.error("Verification email resend failed: user=%s error=%s", user.id, exc)
            raise InternalError("Error sending verification email") from exc
