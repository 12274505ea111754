"""ListingRepository — concrete implementation of ListingRepositoryProtocol.

All queries use raw text() SQL (no ORM).
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.

Mutations are optimistic: save_state() only writes when the stored version
still equals the version that was read, and bumps it. Callers that must
serialise work per listing additionally read with for_update=True.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.cm_common.errors import ListingVersionConflictError
from src.cm_listing.domain.models import (
    AuctionMode,
    CardDetails,
    HighestBid,
    Listing,
    RfqMode,
    SellerRef,
)

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_SELECT_COLUMNS = """
    l.id, l.seller_id, l.card_name, l.set_name, l.year, l.condition, l.rarity,
    l.is_graded, l.grade, l.grading_company, l.description,
    l.front_image, l.back_image,
    l.sale_mode, l.starting_price, l.min_price,
    l.auction_end_time, l.auction_duration_hours,
    l.status, l.highest_bid_amount, l.highest_bid_bidder_id,
    l.highest_bid_offer_id, l.highest_bid_at,
    l.total_offers, l.version, l.created_at, l.updated_at,
    u.first_name AS seller_first_name, u.last_name AS seller_last_name
"""

_INSERT_LISTING_SQL = text("""
    INSERT INTO listings (id, seller_id, card_name, set_name, year, condition, rarity,
        is_graded, grade, grading_company, description, front_image, back_image,
        sale_mode, starting_price, min_price, auction_end_time, auction_duration_hours,
        status, total_offers, version)
    VALUES (:id, CAST(:seller_id AS UUID), :card_name, :set_name, :year, :condition, :rarity,
        :is_graded, :grade, :grading_company, :description, :front_image, :back_image,
        :sale_mode, :starting_price, :min_price, :auction_end_time, :auction_duration_hours,
        :status, 0, 0)
    RETURNING created_at, updated_at
""")

_GET_LISTING_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM listings l
    LEFT JOIN users u ON u.id = l.seller_id
    WHERE l.id = :listing_id
""")

_GET_LISTING_FOR_UPDATE_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM listings l
    LEFT JOIN users u ON u.id = l.seller_id
    WHERE l.id = :listing_id
    FOR UPDATE OF l
""")

_LIST_LISTINGS_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM listings l
    LEFT JOIN users u ON u.id = l.seller_id
    WHERE
        (CAST(:status AS TEXT) IS NULL OR l.status = CAST(:status AS TEXT))
        AND (CAST(:seller_id AS UUID) IS NULL OR l.seller_id = CAST(:seller_id AS UUID))
    ORDER BY l.created_at DESC, l.id DESC
    LIMIT :limit OFFSET :offset
""")

_COUNT_LISTINGS_SQL = text("""
    SELECT COUNT(*)
    FROM listings l
    WHERE
        (CAST(:status AS TEXT) IS NULL OR l.status = CAST(:status AS TEXT))
        AND (CAST(:seller_id AS UUID) IS NULL OR l.seller_id = CAST(:seller_id AS UUID))
""")

_SAVE_STATE_SQL = text("""
    UPDATE listings
    SET status = :status,
        starting_price = :starting_price,
        min_price = :min_price,
        auction_end_time = :auction_end_time,
        auction_duration_hours = :auction_duration_hours,
        highest_bid_amount = :highest_bid_amount,
        highest_bid_bidder_id = CAST(:highest_bid_bidder_id AS UUID),
        highest_bid_offer_id = :highest_bid_offer_id,
        highest_bid_at = :highest_bid_at,
        total_offers = :total_offers,
        version = version + 1,
        updated_at = NOW()
    WHERE id = :id AND version = :version
    RETURNING version, updated_at
""")

_EXPIRE_PENDING_OFFERS_SQL = text("""
    UPDATE offers
    SET status = 'expired', updated_at = NOW()
    WHERE listing_id = :listing_id AND status = 'pending'
""")

# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_listing(row: Any) -> Listing:
    mode: AuctionMode | RfqMode
    if row.sale_mode == AuctionMode.sale_mode.value:
        mode = AuctionMode(
            end_time=row.auction_end_time, duration_hours=row.auction_duration_hours
        )
    else:
        mode = RfqMode(min_price=row.min_price)

    highest_bid = None
    if row.highest_bid_amount is not None:
        highest_bid = HighestBid(
            amount=row.highest_bid_amount,
            bidder_id=str(row.highest_bid_bidder_id),
            offer_id=row.highest_bid_offer_id,
            bid_at=row.highest_bid_at,
        )

    return Listing(
        id=row.id,
        seller_id=str(row.seller_id),
        card=CardDetails(
            card_name=row.card_name,
            set_name=row.set_name,
            year=row.year,
            condition=row.condition,
            rarity=row.rarity,
            front_image=row.front_image,
            back_image=row.back_image,
            description=row.description,
            is_graded=row.is_graded,
            grade=row.grade,
            grading_company=row.grading_company,
        ),
        mode=mode,
        starting_price=row.starting_price,
        status=row.status,
        highest_bid=highest_bid,
        total_offers=row.total_offers,
        version=row.version,
        seller=SellerRef(
            id=str(row.seller_id),
            first_name=row.seller_first_name,
            last_name=row.seller_last_name,
        ),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _mode_params(listing: Listing) -> dict[str, Any]:
    if isinstance(listing.mode, AuctionMode):
        return {
            "sale_mode": AuctionMode.sale_mode.value,
            "min_price": None,
            "auction_end_time": listing.mode.end_time,
            "auction_duration_hours": listing.mode.duration_hours,
        }
    return {
        "sale_mode": RfqMode.sale_mode.value,
        "min_price": listing.mode.min_price,
        "auction_end_time": None,
        "auction_duration_hours": None,
    }


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ListingRepository:
    """Concrete implementation of ListingRepositoryProtocol using raw SQL."""

    async def insert(self, db: AsyncSession, listing: Listing) -> None:
        card = listing.card
        mode = _mode_params(listing)
        result = await db.execute(
            _INSERT_LISTING_SQL,
            {
                "id": listing.id,
                "seller_id": listing.seller_id,
                "card_name": card.card_name,
                "set_name": card.set_name,
                "year": card.year,
                "condition": card.condition,
                "rarity": card.rarity,
                "is_graded": card.is_graded,
                "grade": card.grade,
                "grading_company": card.grading_company,
                "description": card.description,
                "front_image": card.front_image,
                "back_image": card.back_image,
                "sale_mode": mode["sale_mode"],
                "starting_price": listing.starting_price,
                "min_price": mode["min_price"],
                "auction_end_time": mode["auction_end_time"],
                "auction_duration_hours": mode["auction_duration_hours"],
                "status": listing.status,
            },
        )
        row = result.fetchone()
        if row is not None:
            listing.created_at = row.created_at
            listing.updated_at = row.updated_at

    async def get_by_id(
        self, db: AsyncSession, listing_id: str, for_update: bool = False
    ) -> Listing | None:
        sql = _GET_LISTING_FOR_UPDATE_SQL if for_update else _GET_LISTING_SQL
        result = await db.execute(sql, {"listing_id": listing_id})
        row = result.fetchone()
        return _row_to_listing(row) if row else None

    async def list_listings(
        self,
        db: AsyncSession,
        status: str | None,
        seller_id: str | None,
        offset: int,
        limit: int,
    ) -> list[Listing]:
        result = await db.execute(
            _LIST_LISTINGS_SQL,
            {"status": status, "seller_id": seller_id, "offset": offset, "limit": limit},
        )
        return [_row_to_listing(row) for row in result.fetchall()]

    async def count_listings(
        self, db: AsyncSession, status: str | None, seller_id: str | None
    ) -> int:
        result = await db.execute(
            _COUNT_LISTINGS_SQL, {"status": status, "seller_id": seller_id}
        )
        return int(result.scalar_one())

    async def save_state(self, db: AsyncSession, listing: Listing) -> None:
        mode = _mode_params(listing)
        bid = listing.highest_bid
        result = await db.execute(
            _SAVE_STATE_SQL,
            {
                "id": listing.id,
                "version": listing.version,
                "status": listing.status,
                "starting_price": listing.starting_price,
                "min_price": mode["min_price"],
                "auction_end_time": mode["auction_end_time"],
                "auction_duration_hours": mode["auction_duration_hours"],
                "highest_bid_amount": bid.amount if bid else None,
                "highest_bid_bidder_id": bid.bidder_id if bid else None,
                "highest_bid_offer_id": bid.offer_id if bid else None,
                "highest_bid_at": bid.bid_at if bid else None,
                "total_offers": listing.total_offers,
            },
        )
        row = result.fetchone()
        if row is None:
            raise ListingVersionConflictError(listing.id)
        listing.version = row.version
        listing.updated_at = row.updated_at

    async def expire_pending_offers(self, db: AsyncSession, listing_id: str) -> int:
        result = await db.execute(_EXPIRE_PENDING_OFFERS_SQL, {"listing_id": listing_id})
        return int(result.rowcount or 0)
