"""cm_listing REST endpoints.

POST   /cards                     — create a listing (auth)
GET    /cards                     — browse, newest first (public)
GET    /cards/seller/{seller_id}  — one seller's listings, any status (auth)
GET    /cards/{listing_id}        — detail with highest-bid snapshot (public)
PATCH  /cards/{listing_id}        — status / price / end time (seller)
DELETE /cards/{listing_id}        — soft cancel (seller)
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.cm_common.database import get_db_session
from src.cm_common.response import ApiResponse, success_response
from src.cm_gateway.auth.dependencies import get_current_user
from src.cm_gateway.user.db_models import UserModel
from src.cm_listing.application.schemas import CreateListingRequest, UpdateListingRequest
from src.cm_listing.application.service import ListingApplicationService

router = APIRouter(prefix="/cards", tags=["cards"])

_service = ListingApplicationService()


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ApiResponse)
async def create_listing(
    body: CreateListingRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    card = await _service.create_listing(db, str(current_user.id), body)
    return success_response(
        {"card": card.to_wire()}, message="Card listed successfully", request=request
    )


@router.get("", response_model=ApiResponse)
async def list_listings(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    status: str | None = Query(
        None, description="Filter by status. Default: active. Use all for no filter."
    ),
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
) -> ApiResponse:
    result = await _service.list_listings(db, status, page, limit)
    return success_response(result.to_wire(), request=request)


@router.get("/seller/{seller_id}", response_model=ApiResponse)
async def list_seller_listings(
    seller_id: str,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
) -> ApiResponse:
    result = await _service.list_seller_listings(db, seller_id, page, limit)
    return success_response(result.to_wire(), request=request)


@router.get("/{listing_id}", response_model=ApiResponse)
async def get_listing(
    listing_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    card = await _service.get_listing(db, listing_id)
    return success_response(card.to_wire(), request=request)


@router.patch("/{listing_id}", response_model=ApiResponse)
async def update_listing(
    listing_id: str,
    body: UpdateListingRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    card = await _service.update_listing(db, listing_id, str(current_user.id), body)
    return success_response(
        {"card": card.to_wire()}, message="Card updated successfully", request=request
    )


@router.delete("/{listing_id}", response_model=ApiResponse)
async def cancel_listing(
    listing_id: str,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    card = await _service.cancel_listing(db, listing_id, str(current_user.id))
    return success_response(
        {"card": card.to_wire()}, message="Card listing cancelled", request=request
    )
