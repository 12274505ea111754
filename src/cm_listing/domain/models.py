"""Domain models for cm_listing — pure dataclasses, no SQLAlchemy dependency.

A listing's sale mode is a tagged variant: an AuctionMode carries the
closing time, an RfqMode carries the minimum acceptable price. Fields
belonging to the other mode simply do not exist on the object.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar

from src.cm_common.enums import ListingStatus, SaleMode

_TRANSITIONS: dict[str, frozenset[str]] = {
    ListingStatus.DRAFT.value: frozenset({ListingStatus.ACTIVE.value, ListingStatus.CANCELLED.value}),
    ListingStatus.PENDING.value: frozenset({ListingStatus.ACTIVE.value, ListingStatus.CANCELLED.value}),
    ListingStatus.ACTIVE.value: frozenset(
        {ListingStatus.SOLD.value, ListingStatus.EXPIRED.value, ListingStatus.CANCELLED.value}
    ),
    # sold / expired / cancelled are terminal
}


@dataclass(frozen=True)
class AuctionMode:
    end_time: datetime
    duration_hours: int | None = None

    sale_mode: ClassVar[SaleMode] = SaleMode.AUCTION

    def is_open(self, now: datetime) -> bool:
        return now <= self.end_time


@dataclass(frozen=True)
class RfqMode:
    min_price: int  # cents

    sale_mode: ClassVar[SaleMode] = SaleMode.REQUEST_FOR_QUOTE


ListingMode = AuctionMode | RfqMode


@dataclass
class CardDetails:
    card_name: str
    set_name: str
    year: int
    condition: str
    rarity: str
    front_image: str
    back_image: str | None = None
    description: str | None = None
    is_graded: bool = False
    grade: int | None = None
    grading_company: str | None = None


@dataclass
class HighestBid:
    """Denormalized snapshot of the leading offer on an auction."""

    amount: int  # cents
    bidder_id: str
    offer_id: str
    bid_at: datetime


@dataclass
class SellerRef:
    id: str
    first_name: str | None
    last_name: str | None


@dataclass
class Listing:
    id: str
    seller_id: str
    card: CardDetails
    mode: ListingMode
    starting_price: int | None  # cents; required for auctions, optional asking price for RFQ
    status: str = ListingStatus.ACTIVE.value
    highest_bid: HighestBid | None = None
    total_offers: int = 0
    version: int = 0
    seller: SellerRef | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_auction(self) -> bool:
        return isinstance(self.mode, AuctionMode)

    @property
    def is_active(self) -> bool:
        return self.status == ListingStatus.ACTIVE.value

    def bid_floor(self) -> int:
        """Auction bids must be strictly greater than this amount."""
        leading = self.highest_bid.amount if self.highest_bid else 0
        return max(self.starting_price or 0, leading)

    def can_transition_to(self, target: str) -> bool:
        return ListingStatus(target).value in _TRANSITIONS.get(self.status, frozenset())

    def record_offer(self, offer_id: str, bidder_id: str, amount: int, at: datetime) -> None:
        """Count a validated offer; auctions also move the highest-bid snapshot."""
        self.total_offers += 1
        if self.is_auction:
            self.highest_bid = HighestBid(
                amount=amount, bidder_id=bidder_id, offer_id=offer_id, bid_at=at
            )

    def mark_sold(self, offer_id: str, bidder_id: str, amount: int, at: datetime) -> None:
        self.status = ListingStatus.SOLD.value
        self.highest_bid = HighestBid(
            amount=amount, bidder_id=bidder_id, offer_id=offer_id, bid_at=at
        )
