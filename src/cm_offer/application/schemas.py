"""Pydantic schemas for the offer API. Amounts are integer cents."""

from pydantic import Field

from src.cm_common.datetime_utils import isoformat_or_none
from src.cm_common.schemas import CamelModel
from src.cm_offer.domain.models import Offer


class SubmitOfferRequest(CamelModel):
    card_id: str = Field(..., min_length=1, max_length=64)
    amount: int = Field(..., gt=0)
    message: str | None = Field(None, max_length=1000)


class OfferCardOut(CamelModel):
    id: str
    card_name: str | None
    set_name: str | None = Field(alias="set")


class OfferBidderOut(CamelModel):
    id: str
    first_name: str | None
    last_name: str | None


class OfferOut(CamelModel):
    id: str
    card_id: str
    bidder_id: str
    amount: int
    message: str | None
    status: str
    commission_amount: int
    commission_rate: int
    commission_paid: bool
    card: OfferCardOut
    bidder: OfferBidderOut
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, offer: Offer) -> "OfferOut":
        return cls(
            id=offer.id,
            card_id=offer.listing_id,
            bidder_id=offer.bidder_id,
            amount=offer.amount,
            message=offer.message,
            status=offer.status,
            commission_amount=offer.commission_amount,
            commission_rate=offer.commission_rate_bps,
            commission_paid=offer.commission_paid,
            card=OfferCardOut(id=offer.listing_id, card_name=offer.card_name, set_name=offer.card_set),
            bidder=OfferBidderOut(
                id=offer.bidder_id,
                first_name=offer.bidder_first_name,
                last_name=offer.bidder_last_name,
            ),
            created_at=isoformat_or_none(offer.created_at),
            updated_at=isoformat_or_none(offer.updated_at),
        )


class OfferPage(CamelModel):
    offers: list[OfferOut]
    total_pages: int
    current_page: int
    total: int
