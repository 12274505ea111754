"""ListingApplicationService — create, browse, update and cancel card listings.

Write operations own their transaction: commit on success, rollback and
re-raise on any error. Reads run without an explicit transaction.
"""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.cm_common.datetime_utils import ensure_utc, utc_now
from src.cm_common.enums import ListingStatus
from src.cm_common.errors import (
    InvalidListingError,
    InvalidListingTransitionError,
    ListingNotFoundError,
    MissingFieldsError,
    NotListingSellerError,
    UserNotFoundError,
)
from src.cm_common.schemas import page_count
from src.cm_listing.application.schemas import (
    CreateListingRequest,
    ListingOut,
    ListingPage,
    UpdateListingRequest,
)
from src.cm_listing.domain import rules
from src.cm_listing.domain.models import AuctionMode, CardDetails, Listing, RfqMode
from src.cm_listing.domain.repository import ListingRepositoryProtocol
from src.cm_listing.infrastructure.persistence import ListingRepository

logger = logging.getLogger(__name__)

# Statuses a seller may set directly; `sold` is reached only by accepting an offer.
_SELLER_SETTABLE = frozenset(
    {ListingStatus.ACTIVE, ListingStatus.EXPIRED, ListingStatus.CANCELLED}
)
# Entering one of these closes the listing: its pending offers expire with it.
_CLOSING = frozenset({ListingStatus.EXPIRED, ListingStatus.CANCELLED})


def resolve_status_filter(status: str | None) -> str | None:
    """None → default `active`; `all` → no filter; otherwise a known status."""
    if status is None:
        return ListingStatus.ACTIVE.value
    if status.lower() == "all":
        return None
    try:
        return ListingStatus(status.lower()).value
    except ValueError:
        raise InvalidListingError(f"Unknown status filter: {status}") from None


class ListingApplicationService:
    def __init__(self, repo: ListingRepositoryProtocol | None = None) -> None:
        self._repo: ListingRepositoryProtocol = repo or ListingRepository()

    async def create_listing(
        self, db: AsyncSession, seller_id: str, req: CreateListingRequest
    ) -> ListingOut:
        now = utc_now()
        rules.check_required(req.wire_values(), req.is_rfq)
        if req.year is None or req.condition is None or req.rarity is None:
            absent = {"year": req.year, "condition": req.condition, "rarity": req.rarity}
            raise MissingFieldsError([name for name, value in absent.items() if value is None])
        rules.check_year(req.year, now)
        rules.check_grading(
            req.is_graded,
            req.grade,
            req.grading_company.value if req.grading_company else None,
        )
        mode = rules.build_mode(
            is_rfq=req.is_rfq,
            starting_price=req.effective_starting_price,
            min_price=req.min_price,
            auction_end_time=req.auction_end_time,
            auction_duration=req.auction_duration,
            now=now,
            min_hours=settings.MIN_AUCTION_DURATION_HOURS,
            max_hours=settings.MAX_AUCTION_DURATION_HOURS,
        )

        listing = Listing(
            id=str(uuid.uuid4()),
            seller_id=seller_id,
            card=CardDetails(
                card_name=str(req.card_name).strip(),
                set_name=str(req.set_name).strip(),
                year=req.year,
                condition=req.condition.value,
                rarity=req.rarity.value,
                front_image=str(req.front_image),
                back_image=req.back_image,
                description=req.description.strip() if req.description else None,
                is_graded=req.is_graded,
                grade=req.grade if req.is_graded else None,
                grading_company=req.grading_company.value if req.is_graded and req.grading_company else None,
            ),
            mode=mode,
            starting_price=req.effective_starting_price,
            status=ListingStatus.ACTIVE.value,
        )

        try:
            await self._repo.insert(db, listing)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Listing created: listing=%s seller=%s mode=%s",
            listing.id, seller_id, mode.sale_mode.value,
        )
        return ListingOut.from_domain(listing)

    async def list_listings(
        self, db: AsyncSession, status: str | None, page: int, limit: int
    ) -> ListingPage:
        return await self._page(db, resolve_status_filter(status), None, page, limit)

    async def list_seller_listings(
        self, db: AsyncSession, seller_id: str, page: int, limit: int
    ) -> ListingPage:
        try:
            uuid.UUID(seller_id)
        except ValueError:
            raise UserNotFoundError(seller_id) from None
        return await self._page(db, None, seller_id, page, limit)

    async def _page(
        self,
        db: AsyncSession,
        status: str | None,
        seller_id: str | None,
        page: int,
        limit: int,
    ) -> ListingPage:
        total = await self._repo.count_listings(db, status, seller_id)
        listings = await self._repo.list_listings(
            db, status, seller_id, (page - 1) * limit, limit
        )
        return ListingPage(
            cards=[ListingOut.from_domain(item) for item in listings],
            total_pages=page_count(total, limit),
            current_page=page,
            total=total,
        )

    async def get_listing(self, db: AsyncSession, listing_id: str) -> ListingOut:
        listing = await self._repo.get_by_id(db, listing_id)
        if listing is None:
            raise ListingNotFoundError(listing_id)
        return ListingOut.from_domain(listing)

    async def update_listing(
        self,
        db: AsyncSession,
        listing_id: str,
        requester_id: str,
        req: UpdateListingRequest,
    ) -> ListingOut:
        try:
            listing = await self._repo.get_by_id(db, listing_id, for_update=True)
            if listing is None:
                raise ListingNotFoundError(listing_id)
            if listing.seller_id != requester_id:
                raise NotListingSellerError("update")

            closing = False
            if req.status is not None and req.status != listing.status:
                if req.status not in _SELLER_SETTABLE or not listing.can_transition_to(req.status):
                    raise InvalidListingTransitionError(listing.status, req.status.value)
                listing.status = req.status.value
                closing = req.status in _CLOSING

            if req.price is not None:
                rules.check_price(req.price, "price")
                if isinstance(listing.mode, RfqMode):
                    listing.mode = RfqMode(min_price=req.price)
                else:
                    listing.starting_price = req.price

            if req.auction_end_time is not None:
                if not isinstance(listing.mode, AuctionMode):
                    raise InvalidListingError("RFQ listings have no auction end time")
                end_time = ensure_utc(req.auction_end_time)
                rules.check_end_time(end_time, utc_now())
                listing.mode = AuctionMode(end_time=end_time, duration_hours=None)

            await self._repo.save_state(db, listing)
            expired = await self._repo.expire_pending_offers(db, listing.id) if closing else 0
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Listing updated: listing=%s status=%s expired_offers=%d",
            listing.id, listing.status, expired,
        )
        return ListingOut.from_domain(listing)

    async def cancel_listing(
        self, db: AsyncSession, listing_id: str, requester_id: str
    ) -> ListingOut:
        """Soft delete: the row stays so offers keep a valid reference."""
        try:
            listing = await self._repo.get_by_id(db, listing_id, for_update=True)
            if listing is None:
                raise ListingNotFoundError(listing_id)
            if listing.seller_id != requester_id:
                raise NotListingSellerError("delete")
            if not listing.can_transition_to(ListingStatus.CANCELLED):
                raise InvalidListingTransitionError(listing.status, ListingStatus.CANCELLED.value)

            listing.status = ListingStatus.CANCELLED.value
            await self._repo.save_state(db, listing)
            expired = await self._repo.expire_pending_offers(db, listing.id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Listing cancelled: listing=%s expired_offers=%d", listing.id, expired)
        return ListingOut.from_domain(listing)
