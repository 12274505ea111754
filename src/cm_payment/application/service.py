"""CommissionService — charge the commission on an accepted offer.

The offer row stays locked from the status check to the flag flip, so two
concurrent pay requests for one offer cannot both reach the gateway. The
gateway call happens before any write; if it fails nothing is persisted.
The idempotency key `commission-<offerId>` lets the provider deduplicate a
retry that follows a charge whose database write was lost.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.cm_common.enums import OfferStatus
from src.cm_common.errors import (
    CommissionAlreadyPaidError,
    NotOfferBidderError,
    OfferNotAcceptedError,
    OfferNotFoundError,
    PaymentFailedError,
)
from src.cm_offer.application.schemas import OfferOut
from src.cm_offer.domain.models import Offer
from src.cm_offer.domain.repository import OfferRepositoryProtocol
from src.cm_offer.infrastructure.persistence import OfferRepository
from src.cm_payment.application.schemas import (
    CommissionPaymentOut,
    PayCommissionRequest,
    PaymentHistoryOut,
    PaymentIntentOut,
)
from src.cm_payment.domain.gateway import (
    PaymentGatewayError,
    PaymentGatewayProtocol,
    PaymentRequest,
)
from src.cm_vendor.domain.repository import VendorRepositoryProtocol
from src.cm_vendor.infrastructure.persistence import VendorRepository

logger = logging.getLogger(__name__)


def idempotency_key_for(offer_id: str) -> str:
    return f"commission-{offer_id}"


def build_payment_request(offer: Offer, payment_method: str) -> PaymentRequest:
    metadata = {"offerId": offer.id, "cardId": offer.listing_id}
    if offer.vendor_id:
        metadata["vendorId"] = offer.vendor_id
    return PaymentRequest(
        amount_minor_units=offer.commission_amount,
        currency=settings.PAYMENT_CURRENCY,
        payment_method=payment_method,
        idempotency_key=idempotency_key_for(offer.id),
        description=f"Commission for {offer.card_name or offer.listing_id}",
        metadata=metadata,
    )


class CommissionService:
    def __init__(
        self,
        offer_repo: OfferRepositoryProtocol | None = None,
        vendor_repo: VendorRepositoryProtocol | None = None,
    ) -> None:
        self._offers: OfferRepositoryProtocol = offer_repo or OfferRepository()
        self._vendors: VendorRepositoryProtocol = vendor_repo or VendorRepository()

    async def pay_commission(
        self,
        db: AsyncSession,
        requester_id: str,
        req: PayCommissionRequest,
        gateway: PaymentGatewayProtocol,
    ) -> CommissionPaymentOut:
        try:
            offer = await self._offers.get_by_id(db, req.offer_id, for_update=True)
            if offer is None:
                raise OfferNotFoundError(req.offer_id)
            if offer.bidder_id != requester_id:
                raise NotOfferBidderError()
            if offer.status != OfferStatus.ACCEPTED.value:
                raise OfferNotAcceptedError()
            if offer.commission_paid:
                raise CommissionAlreadyPaidError()

            try:
                result = await gateway.charge(build_payment_request(offer, req.payment_method_id))
            except PaymentGatewayError as exc:
                logger.warning("Commission payment failed: offer=%s error=%s", offer.id, exc)
                raise PaymentFailedError(f"Payment failed: {exc}") from exc
            if not result.succeeded:
                logger.warning(
                    "Commission payment not completed: offer=%s intent=%s status=%s",
                    offer.id, result.intent_id, result.status,
                )
                raise PaymentFailedError(f"Payment failed (status={result.status})")

            if not await self._offers.mark_commission_paid(db, offer.id):
                raise CommissionAlreadyPaidError()
            if offer.vendor_id:
                await self._vendors.record_commission(db, offer.vendor_id, offer.commission_amount)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        offer.commission_paid = True
        logger.info(
            "Commission paid: offer=%s amount=%d intent=%s vendor=%s",
            offer.id, offer.commission_amount, result.intent_id, offer.vendor_id,
        )
        return CommissionPaymentOut(
            offer=OfferOut.from_domain(offer),
            payment_intent=PaymentIntentOut.from_result(result),
        )

    async def payment_history(self, db: AsyncSession, bidder_id: str) -> PaymentHistoryOut:
        offers = await self._offers.list_paid_by_bidder(db, bidder_id)
        return PaymentHistoryOut(
            payments=[OfferOut.from_domain(o) for o in offers],
            total_commission_paid=sum(o.commission_amount for o in offers),
        )
