"""Auth API router: register, login, refresh, email verification.

All endpoints return ApiResponse. request_id is read from
request.state (injected by RequestLogMiddleware).
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.cm_common.database import get_db_session
from src.cm_common.response import ApiResponse, success_response
from src.cm_gateway.auth.jwt_handler import create_access_token
from src.cm_gateway.user.schemas import (
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    RefreshResponse,
    RegisterRequest,
    RegisterResponse,
    ResendVerificationRequest,
    UserInfo,
    VerifyEmailRequest,
)
from src.cm_gateway.user.service import UserService
from src.cm_notification.api.dependencies import get_email_sender
from src.cm_notification.domain.sender import EmailSenderProtocol

router = APIRouter(prefix="/auth", tags=["auth"])
_service = UserService()


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse,
    summary="User registration",
)
async def register(
    request: Request,
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
    sender: EmailSenderProtocol = Depends(get_email_sender),
) -> ApiResponse:
    async with db.begin():
        user = await _service.register(body, db)

    # Outside the transaction: the account exists whether or not the mail goes out
    await _service.send_verification_best_effort(user, sender)

    data = RegisterResponse(
        token=create_access_token(str(user.id)),
        user=UserInfo.from_model(user),
    )
    return success_response(
        data.to_wire(),
        message="User created successfully. Please check your email to verify "
        "your account for trading.",
        request=request,
    )


@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="User login",
)
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    user, access_token, refresh_token = await _service.login(body.username, body.password, db)

    data = LoginResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        token_type="Bearer",
        expires_in=settings.JWT_EXPIRE_MINUTES * 60,
        user=UserInfo.from_model(user),
    )
    return success_response(data.to_wire(), message="Login successful", request=request)


@router.post(
    "/refresh",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="Refresh access token",
)
async def refresh_token(
    request: Request,
    body: RefreshRequest,
) -> ApiResponse:
    new_access_token = await _service.refresh(body.refresh_token)

    data = RefreshResponse(
        access_token=new_access_token,
        expires_in=settings.JWT_EXPIRE_MINUTES * 60,
    )
    return success_response(data.to_wire(), message="Token refreshed", request=request)


@router.post("/verify-email", response_model=ApiResponse, summary="Verify email address")
async def verify_email(
    request: Request,
    body: VerifyEmailRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    async with db.begin():
        user = await _service.verify_email(body.token, db)
    return success_response(
        {"user": UserInfo.from_model(user).to_wire()},
        message="Email verified successfully",
        request=request,
    )


@router.post(
    "/resend-verification",
    response_model=ApiResponse,
    summary="Resend verification email",
)
async def resend_verification(
    request: Request,
    body: ResendVerificationRequest,
    db: AsyncSession = Depends(get_db_session),
    sender: EmailSenderProtocol = Depends(get_email_sender),
) -> ApiResponse:
    await _service.resend_verification(str(body.email), db, sender)
    return success_response(None, message="Verification email sent", request=request)
