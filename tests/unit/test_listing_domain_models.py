"""Unit tests for the Listing aggregate."""

from datetime import UTC, datetime, timedelta

import pytest

from src.cm_listing.domain.models import AuctionMode, CardDetails, HighestBid, Listing, RfqMode

NOW = datetime(2026, 5, 1, 12, 0, tzinfo=UTC)


def _card() -> CardDetails:
    return CardDetails(
        card_name="Pikachu",
        set_name="Jungle",
        year=1999,
        condition="mint",
        rarity="rare",
        front_image="https://img.example/p.jpg",
    )


def _auction(starting_price: int = 10000, status: str = "active") -> Listing:
    return Listing(
        id="card-1",
        seller_id="seller-1",
        card=_card(),
        mode=AuctionMode(end_time=NOW + timedelta(hours=1)),
        starting_price=starting_price,
        status=status,
    )


def _rfq() -> Listing:
    return Listing(
        id="card-2",
        seller_id="seller-1",
        card=_card(),
        mode=RfqMode(min_price=5000),
        starting_price=None,
    )


class TestAuctionMode:
    def test_open_until_end_time_inclusive(self) -> None:
        mode = AuctionMode(end_time=NOW)
        assert mode.is_open(NOW) is True
        assert mode.is_open(NOW + timedelta(microseconds=1)) is False

    def test_mode_is_immutable(self) -> None:
        mode = AuctionMode(end_time=NOW)
        with pytest.raises(AttributeError):
            mode.end_time = NOW + timedelta(hours=1)  # type: ignore[misc]


class TestBidFloor:
    def test_floor_is_starting_price_without_bids(self) -> None:
        assert _auction(starting_price=10000).bid_floor() == 10000

    def test_floor_is_highest_bid_when_above_start(self) -> None:
        listing = _auction(starting_price=10000)
        listing.highest_bid = HighestBid(15000, "b1", "o1", NOW)
        assert listing.bid_floor() == 15000


class TestRecordOffer:
    def test_auction_moves_snapshot_and_counter(self) -> None:
        listing = _auction()
        listing.record_offer("o1", "b1", 15000, NOW)
        assert listing.total_offers == 1
        assert listing.highest_bid == HighestBid(15000, "b1", "o1", NOW)

    def test_rfq_only_counts(self) -> None:
        listing = _rfq()
        listing.record_offer("o1", "b1", 6000, NOW)
        assert listing.total_offers == 1
        assert listing.highest_bid is None


class TestTransitions:
    @pytest.mark.parametrize("target", ["sold", "expired", "cancelled"])
    def test_active_can_close(self, target: str) -> None:
        assert _auction().can_transition_to(target) is True

    @pytest.mark.parametrize("status", ["sold", "expired", "cancelled"])
    def test_terminal_states_are_final(self, status: str) -> None:
        listing = _auction(status=status)
        assert listing.can_transition_to("active") is False
        assert listing.can_transition_to("cancelled") is False

    def test_draft_can_be_activated(self) -> None:
        assert _auction(status="draft").can_transition_to("active") is True

    def test_mark_sold_sets_snapshot(self) -> None:
        listing = _rfq()
        listing.mark_sold("o9", "b9", 7000, NOW)
        assert listing.status == "sold"
        assert listing.highest_bid is not None
        assert listing.highest_bid.offer_id == "o9"
