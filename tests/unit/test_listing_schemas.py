# tests/unit/test_listing_schemas.py
"""Unit tests for listing request/response schemas."""
from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from src.cm_listing.application.schemas import (
    CreateListingRequest,
    ListingOut,
    UpdateListingRequest,
)
from src.cm_listing.domain.models import AuctionMode, CardDetails, Listing, RfqMode

END = datetime(2026, 6, 1, 18, 30, tzinfo=UTC)


def _card() -> CardDetails:
    return CardDetails(
        card_name="Blastoise", set_name="Base Set", year=1999,
        condition="good", rarity="holo-rare", front_image="https://img.example/b.jpg",
    )


class TestCreateListingRequest:
    def test_accepts_wire_names(self) -> None:
        req = CreateListingRequest.model_validate(
            {"cardName": "Mew", "set": "Promo", "isRFQ": True, "minPrice": 100}
        )
        assert req.card_name == "Mew"
        assert req.set_name == "Promo"
        assert req.is_rfq is True

    def test_asking_price_fills_starting_price(self) -> None:
        req = CreateListingRequest.model_validate({"askingPrice": 700})
        assert req.effective_starting_price == 700
        assert req.wire_values()["startingPrice"] == 700

    def test_starting_price_wins_over_asking_price(self) -> None:
        req = CreateListingRequest.model_validate({"startingPrice": 800, "askingPrice": 700})
        assert req.effective_starting_price == 800

    def test_unknown_condition_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CreateListingRequest.model_validate({"condition": "pristine"})

    def test_unknown_grading_company_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CreateListingRequest.model_validate({"gradingCompany": "ACME"})


def test_update_request_rejects_unknown_status() -> None:
    with pytest.raises(ValidationError):
        UpdateListingRequest.model_validate({"status": "archived"})


class TestListingOut:
    def test_auction_wire_shape(self) -> None:
        listing = Listing(
            id="lst-1", seller_id="s-1", card=_card(),
            mode=AuctionMode(end_time=END, duration_hours=24), starting_price=5000,
        )
        wire = ListingOut.from_domain(listing).to_wire()
        assert wire["set"] == "Base Set"
        assert wire["isRFQ"] is False
        assert wire["saleMode"] == "auction"
        assert wire["auctionEndTime"] == END.isoformat()
        assert wire["auctionDuration"] == 24
        assert wire["minPrice"] is None
        assert wire["highestBid"] is None

    def test_rfq_wire_shape(self) -> None:
        listing = Listing(
            id="lst-2", seller_id="s-1", card=_card(),
            mode=RfqMode(min_price=1500), starting_price=None,
        )
        wire = ListingOut.from_domain(listing).to_wire()
        assert wire["isRFQ"] is True
        assert wire["saleMode"] == "request-for-quote"
        assert wire["minPrice"] == 1500
        assert wire["auctionEndTime"] is None
        assert wire["startingPrice"] is None
