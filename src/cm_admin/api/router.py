# src/cm_admin/api/router.py
"""Admin REST API. Every route requires an administrator."""
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.cm_admin.application.schemas import UpdatePermissionsRequest
from src.cm_admin.application.service import AdminService
from src.cm_common.database import get_db_session
from src.cm_common.response import ApiResponse, success_response
from src.cm_gateway.auth.dependencies import require_admin
from src.cm_gateway.user.db_models import UserModel

router = APIRouter(prefix="/admin", tags=["admin"])
_service = AdminService()


@router.get("/users", response_model=ApiResponse)
async def list_users(
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    result = await _service.list_users(db, page, limit)
    return success_response(result.to_wire(), request=request)


@router.put("/users/{user_id}/permissions", response_model=ApiResponse)
async def update_permissions(
    user_id: str,
    body: UpdatePermissionsRequest,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    user = await _service.update_permissions(db, str(admin.id), user_id, body)
    return success_response(
        {"user": user.to_wire()},
        message="User permissions updated successfully",
        request=request,
    )
