"""Unit tests for CommissionService: paying the commission on accepted offers."""

import pytest

from src.cm_common.errors import (
    CommissionAlreadyPaidError,
    NotOfferBidderError,
    OfferNotAcceptedError,
    OfferNotFoundError,
    PaymentFailedError,
)
from src.cm_offer.domain.models import Offer
from src.cm_payment.application.schemas import PayCommissionRequest
from src.cm_payment.application.service import (
    CommissionService,
    build_payment_request,
    idempotency_key_for,
)
from src.cm_vendor.domain.models import Vendor
from tests.unit.fakes import (
    FakeOfferRepository,
    FakePaymentGateway,
    FakeSession,
    FakeVendorRepository,
    InMemoryStore,
)

BIDDER = "bidder-1"
VENDOR_ID = "ven-1"


def _offer(status: str = "accepted", vendor_id: str | None = VENDOR_ID, **kwargs) -> Offer:
    values = dict(
        id="off-1", listing_id="lst-1", bidder_id=BIDDER, amount=15000,
        commission_amount=450, commission_rate_bps=300, status=status,
        vendor_id=vendor_id, card_name="Charizard",
    )
    values.update(kwargs)
    return Offer(**values)


@pytest.fixture
def store() -> InMemoryStore:
    store = InMemoryStore()
    store.vendors[BIDDER] = Vendor(
        id=VENDOR_ID, user_id=BIDDER, business_name="Kanto Cards", commission_rate_bps=300,
    )
    return store


@pytest.fixture
def service(store: InMemoryStore) -> CommissionService:
    return CommissionService(
        offer_repo=FakeOfferRepository(store), vendor_repo=FakeVendorRepository(store)
    )


@pytest.fixture
def db() -> FakeSession:
    return FakeSession()


def _pay(offer_id: str = "off-1") -> PayCommissionRequest:
    return PayCommissionRequest.model_validate(
        {"offerId": offer_id, "paymentMethodId": "pm_card_visa"}
    )


class TestPayCommission:
    async def test_success_marks_paid_and_credits_vendor(self, service, db, store) -> None:
        store.offers["off-1"] = _offer()
        gateway = FakePaymentGateway()

        out = await service.pay_commission(db, BIDDER, _pay(), gateway)

        assert out.offer.commission_paid is True
        assert out.payment_intent.id == "pi_1"
        assert out.payment_intent.amount == 450
        assert store.offers["off-1"].commission_paid is True
        vendor = store.vendors[BIDDER]
        assert vendor.total_leads == 1
        assert vendor.total_commission_paid == 450
        assert db.commits == 1

    async def test_request_carries_idempotency_key_and_metadata(self, service, db, store) -> None:
        store.offers["off-1"] = _offer()
        gateway = FakePaymentGateway()
        await service.pay_commission(db, BIDDER, _pay(), gateway)

        [charged] = gateway.requests
        assert charged.idempotency_key == "commission-off-1"
        assert charged.amount_minor_units == 450
        assert charged.currency == "usd"
        assert charged.metadata == {"offerId": "off-1", "cardId": "lst-1", "vendorId": VENDOR_ID}

    async def test_second_payment_rejected_without_charging(self, service, db, store) -> None:
        store.offers["off-1"] = _offer()
        gateway = FakePaymentGateway()
        await service.pay_commission(db, BIDDER, _pay(), gateway)

        with pytest.raises(CommissionAlreadyPaidError):
            await service.pay_commission(db, BIDDER, _pay(), gateway)
        assert len(gateway.requests) == 1
        assert store.vendors[BIDDER].total_commission_paid == 450

    async def test_without_vendor_no_totals_move(self, service, db, store) -> None:
        store.offers["off-1"] = _offer(vendor_id=None)
        await service.pay_commission(db, BIDDER, _pay(), FakePaymentGateway())
        assert store.offers["off-1"].commission_paid is True
        assert store.vendors[BIDDER].total_leads == 0

    @pytest.mark.parametrize("status", ["pending", "rejected", "expired"])
    async def test_offer_must_be_accepted(self, service, db, store, status) -> None:
        store.offers["off-1"] = _offer(status=status)
        gateway = FakePaymentGateway()
        with pytest.raises(OfferNotAcceptedError):
            await service.pay_commission(db, BIDDER, _pay(), gateway)
        assert gateway.requests == []

    async def test_only_bidder_pays(self, service, db, store) -> None:
        store.offers["off-1"] = _offer()
        with pytest.raises(NotOfferBidderError):
            await service.pay_commission(db, "someone-else", _pay(), FakePaymentGateway())

    async def test_unknown_offer(self, service, db) -> None:
        with pytest.raises(OfferNotFoundError):
            await service.pay_commission(db, BIDDER, _pay("missing"), FakePaymentGateway())

    async def test_gateway_failure_leaves_state_untouched(self, service, db, store) -> None:
        store.offers["off-1"] = _offer()
        with pytest.raises(PaymentFailedError, match="card declined"):
            await service.pay_commission(
                db, BIDDER, _pay(), FakePaymentGateway(fail_with="card declined")
            )
        assert store.offers["off-1"].commission_paid is False
        assert store.vendors[BIDDER].total_leads == 0
        assert db.rollbacks == 1
        assert db.commits == 0

    async def test_incomplete_payment_fails(self, service, db, store) -> None:
        store.offers["off-1"] = _offer()
        with pytest.raises(PaymentFailedError):
            await service.pay_commission(
                db, BIDDER, _pay(), FakePaymentGateway(status="requires_action")
            )
        assert store.offers["off-1"].commission_paid is False

    async def test_retry_after_failure_succeeds(self, service, db, store) -> None:
        store.offers["off-1"] = _offer()
        with pytest.raises(PaymentFailedError):
            await service.pay_commission(db, BIDDER, _pay(), FakePaymentGateway(fail_with="timeout"))
        out = await service.pay_commission(db, BIDDER, _pay(), FakePaymentGateway())
        assert out.offer.commission_paid is True


class TestPaymentHistory:
    async def test_lists_paid_offers_with_total(self, service, db, store) -> None:
        store.offers["off-1"] = _offer()
        store.offers["off-2"] = _offer(id="off-2", listing_id="lst-2", commission_amount=300)
        store.offers["off-3"] = _offer(id="off-3", listing_id="lst-3", status="pending")
        for offer in store.offers.values():
            offer.created_at = store.stamp()
        await service.pay_commission(db, BIDDER, _pay("off-1"), FakePaymentGateway())
        await service.pay_commission(db, BIDDER, _pay("off-2"), FakePaymentGateway())

        history = await service.payment_history(db, BIDDER)

        assert {p.id for p in history.payments} == {"off-1", "off-2"}
        assert history.total_commission_paid == 750

    async def test_empty_history(self, service, db) -> None:
        history = await service.payment_history(db, BIDDER)
        assert history.payments == []
        assert history.total_commission_paid == 0


def test_idempotency_key_is_stable() -> None:
    assert idempotency_key_for("abc") == idempotency_key_for("abc") == "commission-abc"


def test_payment_request_without_vendor_omits_vendor_metadata() -> None:
    request = build_payment_request(_offer(vendor_id=None), "pm_x")
    assert "vendorId" not in request.metadata
    assert request.description == "Commission for Charizard"
