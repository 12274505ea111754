"""OfferApplicationService — submit, browse, accept and reject offers.

Every mutation locks the listing row first (SELECT ... FOR UPDATE) and
writes it back through a version check, so concurrent bids on one listing
are serialised and the highest-bid snapshot moves under the same lock as
the offer write. Accept is one transaction: the offer, the listing and all
sibling offers change together or not at all.
"""

import logging
import uuid
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.cm_common.cents import calculate_commission
from src.cm_common.datetime_utils import utc_now
from src.cm_common.errors import (
    AuctionEndedError,
    AuctionStillOpenError,
    BidTooLowError,
    DuplicateOfferError,
    ListingNotActiveError,
    ListingNotFoundError,
    NotListingSellerError,
    NotOfferPartyError,
    OfferBelowMinimumError,
    OfferNotFoundError,
    SelfBidError,
    UserNotFoundError,
)
from src.cm_common.schemas import page_count
from src.cm_listing.domain.models import AuctionMode, Listing
from src.cm_listing.domain.repository import ListingRepositoryProtocol
from src.cm_listing.infrastructure.persistence import ListingRepository
from src.cm_offer.application.schemas import OfferOut, OfferPage, SubmitOfferRequest
from src.cm_offer.domain.models import Offer
from src.cm_offer.domain.repository import OfferRepositoryProtocol
from src.cm_offer.infrastructure.persistence import OfferRepository
from src.cm_vendor.domain.models import commission_terms_for
from src.cm_vendor.domain.repository import VendorRepositoryProtocol
from src.cm_vendor.infrastructure.persistence import VendorRepository

logger = logging.getLogger(__name__)


def check_offer_amount(listing: Listing, amount: int, now: datetime) -> None:
    """Price rule for the listing's sale mode.

    Auction: still open, and amount strictly above max(startingPrice, highest bid).
    RFQ: amount at least minPrice.
    """
    mode = listing.mode
    if isinstance(mode, AuctionMode):
        if not mode.is_open(now):
            raise AuctionEndedError()
        floor = listing.bid_floor()
        if amount <= floor:
            raise BidTooLowError(floor)
    elif amount < mode.min_price:
        raise OfferBelowMinimumError(mode.min_price)


class OfferApplicationService:
    def __init__(
        self,
        offer_repo: OfferRepositoryProtocol | None = None,
        listing_repo: ListingRepositoryProtocol | None = None,
        vendor_repo: VendorRepositoryProtocol | None = None,
    ) -> None:
        self._offers: OfferRepositoryProtocol = offer_repo or OfferRepository()
        self._listings: ListingRepositoryProtocol = listing_repo or ListingRepository()
        self._vendors: VendorRepositoryProtocol = vendor_repo or VendorRepository()

    # ------------------------------------------------------------------
    # Submit
    # ------------------------------------------------------------------

    async def submit_offer(
        self, db: AsyncSession, bidder_id: str, req: SubmitOfferRequest
    ) -> OfferOut:
        try:
            listing = await self._listings.get_by_id(db, req.card_id, for_update=True)
            if listing is None:
                raise ListingNotFoundError(req.card_id)
            if listing.seller_id == bidder_id:
                raise SelfBidError()
            if not listing.is_active:
                raise ListingNotActiveError(listing.id, listing.status)

            now = utc_now()
            check_offer_amount(listing, req.amount, now)

            if await self._offers.find_open_offer(db, listing.id, bidder_id) is not None:
                raise DuplicateOfferError()

            vendor = await self._vendors.get_by_user_id(db, bidder_id)
            terms = commission_terms_for(vendor, settings.DEFAULT_COMMISSION_RATE_BPS)
            offer = Offer(
                id=str(uuid.uuid4()),
                listing_id=listing.id,
                bidder_id=bidder_id,
                amount=req.amount,
                message=req.message,
                commission_amount=calculate_commission(req.amount, terms.rate_bps),
                commission_rate_bps=terms.rate_bps,
                vendor_id=terms.vendor_id,
                card_name=listing.card.card_name,
                card_set=listing.card.set_name,
            )
            await self._offers.insert(db, offer)

            listing.record_offer(offer.id, bidder_id, offer.amount, now)
            await self._listings.save_state(db, listing)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Offer submitted: offer=%s listing=%s bidder=%s amount=%d commission=%d",
            offer.id, listing.id, bidder_id, offer.amount, offer.commission_amount,
        )
        return OfferOut.from_domain(offer)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def list_offers(
        self,
        db: AsyncSession,
        card_id: str | None,
        bidder_id: str | None,
        page: int,
        limit: int,
        *,
        requester_id: str,
        requester_is_admin: bool = False,
    ) -> OfferPage:
        """Filter by listing and/or bidder. Only admins may name another bidder."""
        if bidder_id is not None:
            if bidder_id != requester_id and not requester_is_admin:
                raise NotOfferPartyError()
            try:
                uuid.UUID(bidder_id)
            except ValueError:
                raise UserNotFoundError(bidder_id) from None
        total = await self._offers.count_offers(db, card_id, bidder_id)
        offers = await self._offers.list_offers(db, card_id, bidder_id, (page - 1) * limit, limit)
        return OfferPage(
            offers=[OfferOut.from_domain(o) for o in offers],
            total_pages=page_count(total, limit),
            current_page=page,
            total=total,
        )

    async def get_offer(self, db: AsyncSession, offer_id: str, requester_id: str) -> OfferOut:
        """Visible to the bidder and to the seller of the listing."""
        offer = await self._offers.get_by_id(db, offer_id)
        if offer is None:
            raise OfferNotFoundError(offer_id)
        if offer.bidder_id != requester_id:
            listing = await self._listings.get_by_id(db, offer.listing_id)
            if listing is None or listing.seller_id != requester_id:
                raise NotOfferPartyError()
        return OfferOut.from_domain(offer)

    # ------------------------------------------------------------------
    # Seller decisions
    # ------------------------------------------------------------------

    async def _lock_for_decision(
        self, db: AsyncSession, offer_id: str, requester_id: str, action: str
    ) -> tuple[Offer, Listing]:
        """Lock listing then offer; check the requester owns the listing."""
        offer = await self._offers.get_by_id(db, offer_id)
        if offer is None:
            raise OfferNotFoundError(offer_id)
        listing = await self._listings.get_by_id(db, offer.listing_id, for_update=True)
        if listing is None:
            raise ListingNotFoundError(offer.listing_id)
        locked = await self._offers.get_by_id(db, offer_id, for_update=True)
        if locked is None:
            raise OfferNotFoundError(offer_id)
        if listing.seller_id != requester_id:
            raise NotListingSellerError(f"{action} offers on")
        return locked, listing

    async def accept_offer(self, db: AsyncSession, offer_id: str, requester_id: str) -> OfferOut:
        try:
            offer, listing = await self._lock_for_decision(db, offer_id, requester_id, "accept")
            now = utc_now()
            if isinstance(listing.mode, AuctionMode) and listing.mode.is_open(now):
                raise AuctionStillOpenError()
            if not listing.is_active:
                raise ListingNotActiveError(listing.id, listing.status)

            offer.accept()
            await self._offers.update_status(db, offer)

            listing.mark_sold(offer.id, offer.bidder_id, offer.amount, offer.created_at or now)
            await self._listings.save_state(db, listing)

            rejected = await self._offers.reject_pending_siblings(db, listing.id, offer.id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Offer accepted: offer=%s listing=%s bidder=%s amount=%d siblings_rejected=%d",
            offer.id, listing.id, offer.bidder_id, offer.amount, rejected,
        )
        return OfferOut.from_domain(offer)

    async def reject_offer(self, db: AsyncSession, offer_id: str, requester_id: str) -> OfferOut:
        """Reject one offer. The auction floor is left as it is."""
        try:
            offer, listing = await self._lock_for_decision(db, offer_id, requester_id, "reject")
            if not listing.is_active:
                raise ListingNotActiveError(listing.id, listing.status)
            offer.reject()
            await self._offers.update_status(db, offer)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Offer rejected: offer=%s listing=%s", offer.id, listing.id)
        return OfferOut.from_domain(offer)
