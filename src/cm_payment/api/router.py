"""cm_payment REST endpoints.

POST /payments/commission — pay the commission on an accepted offer
GET  /payments/history    — caller's paid commissions
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.cm_common.database import get_db_session
from src.cm_common.response import ApiResponse, success_response
from src.cm_gateway.auth.dependencies import get_current_user
from src.cm_gateway.user.db_models import UserModel
from src.cm_payment.api.dependencies import get_payment_gateway
from src.cm_payment.application.schemas import PayCommissionRequest
from src.cm_payment.application.service import CommissionService
from src.cm_payment.domain.gateway import PaymentGatewayProtocol

router = APIRouter(prefix="/payments", tags=["payments"])

_service = CommissionService()


@router.post("/commission", response_model=ApiResponse)
async def pay_commission(
    body: PayCommissionRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    gateway: Annotated[PaymentGatewayProtocol, Depends(get_payment_gateway)],
) -> ApiResponse:
    result = await _service.pay_commission(db, str(current_user.id), body, gateway)
    return success_response(
        result.to_wire(), message="Commission payment successful", request=request
    )


@router.get("/history", response_model=ApiResponse)
async def payment_history(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.payment_history(db, str(current_user.id))
    return success_response(result.to_wire(), request=request)
