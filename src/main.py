"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from config.settings import settings
from src.cm_admin.api.router import router as admin_router
from src.cm_common.database import Database
from src.cm_common.errors import AppError, InternalError, RequestValidationFailedError
from src.cm_common.redis_client import close_redis, create_redis
from src.cm_common.response import error_response
from src.cm_gateway.api.router import router as auth_router
from src.cm_gateway.middleware.rate_limit import RateLimitMiddleware
from src.cm_gateway.middleware.request_log import RequestLogMiddleware
from src.cm_listing.api.router import router as listing_router
from src.cm_notification.infrastructure.resend_sender import ResendEmailSender
from src.cm_offer.api.router import router as offer_router
from src.cm_payment.api.router import router as payment_router
from src.cm_payment.infrastructure.stripe_gateway import StripePaymentGateway
from src.cm_vendor.api.router import router as vendor_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: build collaborators, verify DB + Redis. Shutdown: dispose."""
    app.state.db = Database(settings.DATABASE_URL, echo=settings.DEBUG)
    app.state.redis = create_redis(settings.REDIS_URL)
    app.state.email_sender = ResendEmailSender(
        api_key=settings.RESEND_API_KEY,
        from_address=settings.EMAIL_FROM,
        base_url=settings.RESEND_API_BASE,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )
    app.state.payment_gateway = StripePaymentGateway(
        secret_key=settings.STRIPE_SECRET_KEY,
        base_url=settings.STRIPE_API_BASE,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )

    await app.state.db.ping()
    await app.state.redis.ping()
    logger.info("%s started", settings.APP_NAME)
    yield
    await app.state.db.dispose()
    await close_redis(app.state.redis)


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)

# Last added runs first: request ids exist before rate limiting answers
app.add_middleware(RateLimitMiddleware)
app.add_middleware(RequestLogMiddleware)


def _with_request_id(request: Request, code: int, message: str, data: object = None) -> dict:
    resp = error_response(code, message, data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp.model_dump()


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content=_with_request_id(request, exc.code, exc.message, exc.details),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    err = RequestValidationFailedError(errors)
    return JSONResponse(
        status_code=err.http_status,
        content=_with_request_id(request, err.code, err.message, err.details),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    err = InternalError()
    return JSONResponse(
        status_code=err.http_status,
        content=_with_request_id(request, err.code, err.message),
    )


app.include_router(auth_router, prefix="/api/v1")
app.include_router(listing_router, prefix="/api/v1")
app.include_router(offer_router, prefix="/api/v1")
app.include_router(payment_router, prefix="/api/v1")
app.include_router(vendor_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
