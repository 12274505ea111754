"""cm_vendor REST endpoints.

POST /vendors/register   — create the caller's vendor profile
GET  /vendors/profile    — caller's profile
PUT  /vendors/profile    — update caller's profile
GET  /vendors/stats      — leads and commission totals
GET  /vendors            — all vendors (admin)
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.cm_common.database import get_db_session
from src.cm_common.response import ApiResponse, success_response
from src.cm_gateway.auth.dependencies import get_current_user, require_admin
from src.cm_gateway.user.db_models import UserModel
from src.cm_vendor.application.schemas import RegisterVendorRequest, UpdateVendorRequest
from src.cm_vendor.application.service import VendorService

router = APIRouter(prefix="/vendors", tags=["vendors"])

_service = VendorService()


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=ApiResponse)
async def register_vendor(
    body: RegisterVendorRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    vendor = await _service.register(db, str(current_user.id), body)
    return success_response(
        {"vendor": vendor.to_wire()}, message="Vendor registration successful", request=request
    )


@router.get("/profile", response_model=ApiResponse)
async def get_profile(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    vendor = await _service.get_profile(db, str(current_user.id))
    return success_response(vendor.to_wire(), request=request)


@router.put("/profile", response_model=ApiResponse)
async def update_profile(
    body: UpdateVendorRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    vendor = await _service.update_profile(db, str(current_user.id), body)
    return success_response(vendor.to_wire(), request=request)


@router.get("/stats", response_model=ApiResponse)
async def get_stats(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    stats = await _service.get_stats(db, str(current_user.id))
    return success_response(stats.to_wire(), request=request)


@router.get("", response_model=ApiResponse)
async def list_vendors(
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    result = await _service.list_vendors(db, page, limit)
    return success_response(result.to_wire(), request=request)
