"""Pydantic schemas for the card listing API.

Wire names follow the public contract (`cardName`, `set`, `isRFQ`,
`auctionEndTime`, ...). Every money field is an integer amount of cents.

Create-request fields are optional at the schema level so that absent
fields can be reported together as `required: [...]` by the service.
"""

from datetime import datetime

from pydantic import Field

from src.cm_common.datetime_utils import isoformat_or_none
from src.cm_common.enums import CardCondition, CardRarity, GradingCompany, ListingStatus
from src.cm_common.schemas import CamelModel
from src.cm_listing.domain.models import AuctionMode, Listing, RfqMode

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class CreateListingRequest(CamelModel):
    card_name: str | None = Field(None, max_length=200)
    set_name: str | None = Field(None, alias="set", max_length=200)
    year: int | None = None
    condition: CardCondition | None = None
    rarity: CardRarity | None = None
    is_graded: bool = False
    grade: int | None = None
    grading_company: GradingCompany | None = None
    starting_price: int | None = None
    asking_price: int | None = None  # alias of startingPrice used by older clients
    is_rfq: bool = Field(False, alias="isRFQ")
    min_price: int | None = None
    auction_duration: int | None = None
    auction_end_time: datetime | None = None
    description: str | None = Field(None, max_length=5000)
    front_image: str | None = None
    back_image: str | None = None

    @property
    def effective_starting_price(self) -> int | None:
        return self.starting_price if self.starting_price is not None else self.asking_price

    def wire_values(self) -> dict[str, object]:
        values = self.model_dump(by_alias=True)
        values["startingPrice"] = self.effective_starting_price
        return values


class UpdateListingRequest(CamelModel):
    status: ListingStatus | None = None
    price: int | None = None
    auction_end_time: datetime | None = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class SellerOut(CamelModel):
    id: str
    first_name: str | None
    last_name: str | None


class HighestBidOut(CamelModel):
    amount: int
    bidder_id: str
    offer_id: str
    bid_time: str | None


class ListingOut(CamelModel):
    id: str
    seller_id: str
    seller: SellerOut | None
    card_name: str
    set_name: str = Field(alias="set")
    year: int
    condition: str
    rarity: str
    is_graded: bool
    grade: int | None
    grading_company: str | None
    description: str | None
    front_image: str
    back_image: str | None
    sale_mode: str
    is_rfq: bool = Field(alias="isRFQ")
    starting_price: int | None
    min_price: int | None
    auction_end_time: str | None
    auction_duration: int | None
    status: str
    highest_bid: HighestBidOut | None
    total_offers: int
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, listing: Listing) -> "ListingOut":
        card = listing.card
        mode = listing.mode
        bid = listing.highest_bid
        seller = listing.seller
        return cls(
            id=listing.id,
            seller_id=listing.seller_id,
            seller=(
                SellerOut(id=seller.id, first_name=seller.first_name, last_name=seller.last_name)
                if seller else None
            ),
            card_name=card.card_name,
            set_name=card.set_name,
            year=card.year,
            condition=card.condition,
            rarity=card.rarity,
            is_graded=card.is_graded,
            grade=card.grade,
            grading_company=card.grading_company,
            description=card.description,
            front_image=card.front_image,
            back_image=card.back_image,
            sale_mode=mode.sale_mode.value,
            is_rfq=isinstance(mode, RfqMode),
            starting_price=listing.starting_price,
            min_price=mode.min_price if isinstance(mode, RfqMode) else None,
            auction_end_time=(
                isoformat_or_none(mode.end_time) if isinstance(mode, AuctionMode) else None
            ),
            auction_duration=mode.duration_hours if isinstance(mode, AuctionMode) else None,
            status=listing.status,
            highest_bid=(
                HighestBidOut(
                    amount=bid.amount,
                    bidder_id=bid.bidder_id,
                    offer_id=bid.offer_id,
                    bid_time=isoformat_or_none(bid.bid_at),
                )
                if bid else None
            ),
            total_offers=listing.total_offers,
            created_at=isoformat_or_none(listing.created_at),
            updated_at=isoformat_or_none(listing.updated_at),
        )


class ListingPage(CamelModel):
    cards: list[ListingOut]
    total_pages: int
    current_page: int
    total: int
