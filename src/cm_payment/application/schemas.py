"""Pydantic schemas for commission settlement."""

from pydantic import Field

from src.cm_common.schemas import CamelModel
from src.cm_offer.application.schemas import OfferOut
from src.cm_payment.domain.gateway import PaymentResult


class PayCommissionRequest(CamelModel):
    offer_id: str = Field(..., min_length=1, max_length=64)
    payment_method_id: str = Field(..., min_length=1, max_length=255)


class PaymentIntentOut(CamelModel):
    id: str
    status: str
    amount: int
    currency: str

    @classmethod
    def from_result(cls, result: PaymentResult) -> "PaymentIntentOut":
        return cls(
            id=result.intent_id,
            status=result.status,
            amount=result.amount_minor_units,
            currency=result.currency,
        )


class CommissionPaymentOut(CamelModel):
    offer: OfferOut
    payment_intent: PaymentIntentOut


class PaymentHistoryOut(CamelModel):
    payments: list[OfferOut]
    total_commission_paid: int
