"""cm_offer REST endpoints.

POST  /offers                  — submit an offer or bid (trading permission)
GET   /offers                  — filter by cardId / bidderId (own id unless admin); default: caller's own
GET   /offers/card/{card_id}   — offers on one listing
GET   /offers/mine             — caller's offers
GET   /offers/{offer_id}       — one offer (bidder or seller)
PATCH /offers/{offer_id}/accept
PATCH /offers/{offer_id}/reject
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.cm_common.database import get_db_session
from src.cm_common.response import ApiResponse, success_response
from src.cm_gateway.auth.dependencies import get_current_user, require_trading_permission
from src.cm_gateway.user.db_models import UserModel
from src.cm_offer.application.schemas import SubmitOfferRequest
from src.cm_offer.application.service import OfferApplicationService

router = APIRouter(prefix="/offers", tags=["offers"])

_service = OfferApplicationService()


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ApiResponse)
async def submit_offer(
    body: SubmitOfferRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(require_trading_permission)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    offer = await _service.submit_offer(db, str(current_user.id), body)
    return success_response(
        {"offer": offer.to_wire()}, message="Offer submitted successfully", request=request
    )


@router.get("", response_model=ApiResponse)
async def list_offers(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    card_id: str | None = Query(None, alias="cardId"),
    bidder_id: str | None = Query(None, alias="bidderId"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    if card_id is None and bidder_id is None:
        bidder_id = str(current_user.id)
    result = await _service.list_offers(
        db, card_id, bidder_id, page, limit,
        requester_id=str(current_user.id), requester_is_admin=current_user.is_admin,
    )
    return success_response(result.to_wire(), request=request)


@router.get("/card/{card_id}", response_model=ApiResponse)
async def list_card_offers(
    card_id: str,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    result = await _service.list_offers(
        db, card_id, None, page, limit, requester_id=str(current_user.id)
    )
    return success_response(result.to_wire(), request=request)


@router.get("/mine", response_model=ApiResponse)
async def list_my_offers(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    user_id = str(current_user.id)
    result = await _service.list_offers(db, None, user_id, page, limit, requester_id=user_id)
    return success_response(result.to_wire(), request=request)


@router.get("/{offer_id}", response_model=ApiResponse)
async def get_offer(
    offer_id: str,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    offer = await _service.get_offer(db, offer_id, str(current_user.id))
    return success_response(offer.to_wire(), request=request)


@router.patch("/{offer_id}/accept", response_model=ApiResponse)
async def accept_offer(
    offer_id: str,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    offer = await _service.accept_offer(db, offer_id, str(current_user.id))
    return success_response(
        {"offer": offer.to_wire()}, message="Offer accepted successfully", request=request
    )


@router.patch("/{offer_id}/reject", response_model=ApiResponse)
async def reject_offer(
    offer_id: str,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    offer = await _service.reject_offer(db, offer_id, str(current_user.id))
    return success_response(
        {"offer": offer.to_wire()}, message="Offer rejected successfully", request=request
    )
