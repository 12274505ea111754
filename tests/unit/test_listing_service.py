"""Unit tests for ListingApplicationService over in-memory repositories."""

from datetime import datetime, timedelta

import pytest

from src.cm_common.datetime_utils import utc_now
from src.cm_common.errors import (
    InvalidListingError,
    InvalidListingTransitionError,
    ListingNotFoundError,
    MissingFieldsError,
    NotListingSellerError,
    UserNotFoundError,
)
from src.cm_listing.application.schemas import CreateListingRequest, UpdateListingRequest
from src.cm_listing.application.service import ListingApplicationService, resolve_status_filter
from src.cm_offer.domain.models import Offer
from tests.unit.fakes import FakeListingRepository, FakeSession, InMemoryStore

SELLER = "11111111-1111-1111-1111-111111111111"
OTHER = "22222222-2222-2222-2222-222222222222"


def auction_body(**overrides) -> dict:
    body = {
        "cardName": "Charizard",
        "set": "Base Set",
        "year": 1999,
        "condition": "near-mint",
        "rarity": "holo-rare",
        "isGraded": True,
        "grade": 9,
        "gradingCompany": "PSA",
        "startingPrice": 10000,
        "auctionEndTime": (utc_now() + timedelta(hours=1)).isoformat(),
        "frontImage": "https://img.example/front.jpg",
    }
    body.update(overrides)
    return body


def rfq_body(**overrides) -> dict:
    body = auction_body(isRFQ=True, minPrice=5000, isGraded=False)
    for key in ("startingPrice", "auctionEndTime", "grade", "gradingCompany"):
        body.pop(key)
    body.update(overrides)
    return body


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def service(store: InMemoryStore) -> ListingApplicationService:
    return ListingApplicationService(repo=FakeListingRepository(store))


@pytest.fixture
def db() -> FakeSession:
    return FakeSession()


async def _create(service, db, body=None, seller=SELLER):
    req = CreateListingRequest.model_validate(body or auction_body())
    return await service.create_listing(db, seller, req)


class TestCreateListing:
    async def test_auction_listing_is_active(self, service, db, store) -> None:
        card = await _create(service, db)
        assert card.status == "active"
        assert card.sale_mode == "auction"
        assert card.is_rfq is False
        assert card.starting_price == 10000
        assert card.min_price is None
        assert card.total_offers == 0
        assert card.highest_bid is None
        assert db.commits == 1
        assert card.id in store.listings

    async def test_wire_names(self, service, db) -> None:
        wire = (await _create(service, db)).to_wire()
        assert wire["set"] == "Base Set"
        assert wire["isRFQ"] is False
        assert wire["cardName"] == "Charizard"
        assert "auctionEndTime" in wire

    async def test_asking_price_alias(self, service, db) -> None:
        body = auction_body(askingPrice=12000)
        body.pop("startingPrice")
        card = await _create(service, db, body)
        assert card.starting_price == 12000

    async def test_duration_sets_end_time(self, service, db) -> None:
        body = auction_body(auctionDuration=6)
        body.pop("auctionEndTime")
        card = await _create(service, db, body)
        assert card.auction_duration == 6
        assert card.auction_end_time is not None

    async def test_rfq_listing(self, service, db) -> None:
        card = await _create(service, db, rfq_body())
        assert card.sale_mode == "request-for-quote"
        assert card.is_rfq is True
        assert card.min_price == 5000
        assert card.auction_end_time is None

    async def test_missing_fields_reported_together(self, service, db, store) -> None:
        with pytest.raises(MissingFieldsError) as exc_info:
            await _create(service, db, {"cardName": "Mew"})
        assert "set" in exc_info.value.details["required"]
        assert "startingPrice" in exc_info.value.details["required"]
        assert store.listings == {}

    async def test_absent_card_attributes_reported(self, service, db, store) -> None:
        with pytest.raises(MissingFieldsError) as exc_info:
            await _create(service, db, auction_body(year=None, condition=None, rarity=None))
        assert exc_info.value.details["required"] == ["year", "condition", "rarity"]
        assert store.listings == {}

    async def test_whitespace_card_name_is_missing(self, service, db, store) -> None:
        with pytest.raises(MissingFieldsError) as exc_info:
            await _create(service, db, auction_body(cardName="  "))
        assert exc_info.value.details["required"] == ["cardName"]
        assert store.listings == {}

    async def test_both_modes_rejected(self, service, db) -> None:
        with pytest.raises(InvalidListingError):
            await _create(service, db, auction_body(minPrice=100))

    async def test_inconsistent_grading_rejected(self, service, db) -> None:
        with pytest.raises(InvalidListingError):
            await _create(service, db, auction_body(grade=None))

    async def test_end_time_in_past_rejected(self, service, db) -> None:
        past = (utc_now() - timedelta(minutes=5)).isoformat()
        with pytest.raises(InvalidListingError):
            await _create(service, db, auction_body(auctionEndTime=past))


class TestListListings:
    async def test_newest_first_with_pagination(self, service, db) -> None:
        ids = [(await _create(service, db)).id for _ in range(3)]
        page = await service.list_listings(db, None, page=1, limit=2)
        assert [c.id for c in page.cards] == [ids[2], ids[1]]
        assert page.total == 3
        assert page.total_pages == 2
        assert page.current_page == 1

    async def test_default_filter_hides_cancelled(self, service, db) -> None:
        keep = await _create(service, db)
        gone = await _create(service, db)
        await service.cancel_listing(db, gone.id, SELLER)

        active = await service.list_listings(db, None, 1, 10)
        assert [c.id for c in active.cards] == [keep.id]
        everything = await service.list_listings(db, "all", 1, 10)
        assert everything.total == 2

    async def test_seller_listings_any_status(self, service, db) -> None:
        mine = await _create(service, db)
        await _create(service, db, seller=OTHER)
        await service.cancel_listing(db, mine.id, SELLER)

        page = await service.list_seller_listings(db, SELLER, 1, 10)
        assert [c.id for c in page.cards] == [mine.id]
        assert page.cards[0].status == "cancelled"

    async def test_malformed_seller_id_not_found(self, service, db) -> None:
        with pytest.raises(UserNotFoundError):
            await service.list_seller_listings(db, "abc", 1, 10)

    def test_unknown_status_filter(self) -> None:
        with pytest.raises(InvalidListingError):
            resolve_status_filter("bogus")

    def test_status_filter_values(self) -> None:
        assert resolve_status_filter(None) == "active"
        assert resolve_status_filter("ALL") is None
        assert resolve_status_filter("sold") == "sold"


class TestGetListing:
    async def test_not_found(self, service, db) -> None:
        with pytest.raises(ListingNotFoundError):
            await service.get_listing(db, "missing")


class TestUpdateListing:
    async def test_seller_can_change_price_and_end_time(self, service, db) -> None:
        card = await _create(service, db)
        new_end = utc_now() + timedelta(hours=5)
        req = UpdateListingRequest.model_validate(
            {"price": 20000, "auctionEndTime": new_end.isoformat()}
        )
        updated = await service.update_listing(db, card.id, SELLER, req)
        assert updated.starting_price == 20000
        assert datetime.fromisoformat(updated.auction_end_time) == new_end

    async def test_price_on_rfq_sets_min_price(self, service, db) -> None:
        card = await _create(service, db, rfq_body())
        updated = await service.update_listing(
            db, card.id, SELLER, UpdateListingRequest(price=7000)
        )
        assert updated.min_price == 7000

    async def test_non_seller_forbidden(self, service, db) -> None:
        card = await _create(service, db)
        with pytest.raises(NotListingSellerError):
            await service.update_listing(db, card.id, OTHER, UpdateListingRequest(price=1))
        assert db.rollbacks == 1

    async def test_missing_listing(self, service, db) -> None:
        with pytest.raises(ListingNotFoundError):
            await service.update_listing(db, "nope", SELLER, UpdateListingRequest(price=1))

    async def test_end_time_must_be_future(self, service, db) -> None:
        card = await _create(service, db)
        past = (utc_now() - timedelta(hours=1)).isoformat()
        with pytest.raises(InvalidListingError):
            await service.update_listing(
                db, card.id, SELLER, UpdateListingRequest.model_validate({"auctionEndTime": past})
            )

    async def test_end_time_on_rfq_rejected(self, service, db) -> None:
        card = await _create(service, db, rfq_body())
        future = (utc_now() + timedelta(hours=1)).isoformat()
        with pytest.raises(InvalidListingError):
            await service.update_listing(
                db, card.id, SELLER, UpdateListingRequest.model_validate({"auctionEndTime": future})
            )

    async def test_cannot_mark_sold_directly(self, service, db) -> None:
        card = await _create(service, db)
        with pytest.raises(InvalidListingTransitionError):
            await service.update_listing(
                db, card.id, SELLER, UpdateListingRequest.model_validate({"status": "sold"})
            )

    async def test_expiring_listing_expires_pending_offers(self, service, db, store) -> None:
        card = await _create(service, db)
        store.offers["o1"] = Offer(
            id="o1", listing_id=card.id, bidder_id=OTHER, amount=15000,
            commission_amount=450, commission_rate_bps=300,
        )
        updated = await service.update_listing(
            db, card.id, SELLER, UpdateListingRequest.model_validate({"status": "expired"})
        )
        assert updated.status == "expired"
        assert store.offers["o1"].status == "expired"

    async def test_terminal_listing_cannot_reopen(self, service, db) -> None:
        card = await _create(service, db)
        await service.cancel_listing(db, card.id, SELLER)
        with pytest.raises(InvalidListingTransitionError):
            await service.update_listing(
                db, card.id, SELLER, UpdateListingRequest.model_validate({"status": "active"})
            )


class TestCancelListing:
    async def test_seller_cancels(self, service, db, store) -> None:
        card = await _create(service, db)
        cancelled = await service.cancel_listing(db, card.id, SELLER)
        assert cancelled.status == "cancelled"
        # soft delete: the row is still there
        assert store.listings[card.id].status == "cancelled"

    async def test_non_seller_forbidden(self, service, db) -> None:
        card = await _create(service, db)
        with pytest.raises(NotListingSellerError):
            await service.cancel_listing(db, card.id, OTHER)

    async def test_already_cancelled(self, service, db) -> None:
        card = await _create(service, db)
        await service.cancel_listing(db, card.id, SELLER)
        with pytest.raises(InvalidListingTransitionError):
            await service.cancel_listing(db, card.id, SELLER)
