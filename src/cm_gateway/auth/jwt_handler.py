"""JWT token creation and verification.

Three token types share one HS256 secret and are told apart by the
``type`` claim: ``access`` (API calls), ``refresh`` (new access tokens)
and ``verify_email`` (one-shot email verification link).

No token revocation: once issued, tokens are valid until expiry.
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from config.settings import settings
from src.cm_common.errors import (
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    InvalidVerificationTokenError,
)

_ALGORITHM = settings.JWT_ALGORITHM
_ACCESS_EXPIRE = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
_REFRESH_EXPIRE = timedelta(days=settings.JWT_REFRESH_EXPIRE_DAYS)
_VERIFY_EXPIRE = timedelta(hours=settings.EMAIL_VERIFY_EXPIRE_HOURS)

ACCESS = "access"
REFRESH = "refresh"
VERIFY_EMAIL = "verify_email"


def _encode(claims: dict[str, object], token_type: str, ttl: timedelta) -> str:
    now = datetime.now(UTC)
    payload = {**claims, "type": token_type, "iat": now, "exp": now + ttl}
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM))


def create_access_token(user_id: str) -> str:
    """Issue a short-lived access token (default: 30 min)."""
    return _encode({"sub": user_id}, ACCESS, _ACCESS_EXPIRE)


def create_refresh_token(user_id: str) -> str:
    """Issue a long-lived refresh token (default: 7 days)."""
    return _encode({"sub": user_id}, REFRESH, _REFRESH_EXPIRE)


def create_verification_token(user_id: str, email: str) -> str:
    """Issue an email verification token bound to the address it was sent to."""
    return _encode({"sub": user_id, "email": email}, VERIFY_EMAIL, _VERIFY_EXPIRE)


def decode_token(token: str, expected_type: str) -> dict[str, str]:
    """Decode and validate a JWT token.

    Args:
        token: Raw JWT string.
        expected_type: "access", "refresh" or "verify_email". Strictly
                       enforced to prevent token type confusion attacks.

    Returns:
        Decoded payload dict with at minimum {"sub": ..., "type": ...}.

    Raises:
        InvalidCredentialsError: invalid access token.
        InvalidRefreshTokenError: invalid refresh token.
        InvalidVerificationTokenError: invalid verification token.
    """
    payload: dict[str, str] = {}
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        _raise_auth_error(expected_type)

    if payload.get("type") != expected_type:
        _raise_auth_error(expected_type)

    return payload


def _raise_auth_error(expected_type: str) -> None:
    """Raise the appropriate error based on which token type was expected."""
    if expected_type == ACCESS:
        raise InvalidCredentialsError()
    if expected_type == VERIFY_EMAIL:
        raise InvalidVerificationTokenError()
    raise InvalidRefreshTokenError()
