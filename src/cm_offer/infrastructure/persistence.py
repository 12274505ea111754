"""OfferRepository — concrete implementation of OfferRepositoryProtocol.

All queries use raw text() SQL (no ORM).
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.

Lock order is listing row first, then offer rows. Callers that mutate an
offer lock its listing (ListingRepository.get_by_id(for_update=True)) before
calling get_by_id(for_update=True) here.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.cm_common.errors import DuplicateOfferError
from src.cm_offer.domain.models import Offer

# Partial unique index over (listing_id, bidder_id) WHERE status IN ('pending', 'accepted')
OPEN_OFFER_INDEX = "uq_offers_open_per_bidder"

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_SELECT_COLUMNS = """
    o.id, o.listing_id, o.bidder_id, o.vendor_id, o.amount, o.message, o.status,
    o.commission_amount, o.commission_rate_bps, o.commission_paid,
    o.created_at, o.updated_at,
    l.card_name, l.set_name AS card_set,
    u.first_name AS bidder_first_name, u.last_name AS bidder_last_name
"""

_FROM = """
    FROM offers o
    LEFT JOIN listings l ON l.id = o.listing_id
    LEFT JOIN users u ON u.id = o.bidder_id
"""

_INSERT_OFFER_SQL = text("""
    INSERT INTO offers (id, listing_id, bidder_id, vendor_id, amount, message, status,
        commission_amount, commission_rate_bps, commission_paid)
    VALUES (:id, :listing_id, CAST(:bidder_id AS UUID), :vendor_id, :amount, :message, :status,
        :commission_amount, :commission_rate_bps, FALSE)
    RETURNING created_at, updated_at
""")

_GET_OFFER_SQL = text(f"SELECT {_SELECT_COLUMNS} {_FROM} WHERE o.id = :offer_id")

_GET_OFFER_FOR_UPDATE_SQL = text(
    f"SELECT {_SELECT_COLUMNS} {_FROM} WHERE o.id = :offer_id FOR UPDATE OF o"
)

_FIND_OPEN_OFFER_SQL = text(f"""
    SELECT {_SELECT_COLUMNS} {_FROM}
    WHERE o.listing_id = :listing_id
      AND o.bidder_id = CAST(:bidder_id AS UUID)
      AND o.status IN ('pending', 'accepted')
    LIMIT 1
""")

_UPDATE_STATUS_SQL = text("""
    UPDATE offers
    SET status = :status, updated_at = NOW()
    WHERE id = :id
    RETURNING updated_at
""")

_REJECT_SIBLINGS_SQL = text("""
    UPDATE offers
    SET status = 'rejected', updated_at = NOW()
    WHERE listing_id = :listing_id AND id <> :keep_offer_id AND status = 'pending'
""")

_LIST_OFFERS_SQL = text(f"""
    SELECT {_SELECT_COLUMNS} {_FROM}
    WHERE
        (CAST(:listing_id AS TEXT) IS NULL OR o.listing_id = CAST(:listing_id AS TEXT))
        AND (CAST(:bidder_id AS UUID) IS NULL OR o.bidder_id = CAST(:bidder_id AS UUID))
    ORDER BY o.created_at DESC, o.id DESC
    LIMIT :limit OFFSET :offset
""")

_COUNT_OFFERS_SQL = text("""
    SELECT COUNT(*)
    FROM offers o
    WHERE
        (CAST(:listing_id AS TEXT) IS NULL OR o.listing_id = CAST(:listing_id AS TEXT))
        AND (CAST(:bidder_id AS UUID) IS NULL OR o.bidder_id = CAST(:bidder_id AS UUID))
""")

_MARK_COMMISSION_PAID_SQL = text("""
    UPDATE offers
    SET commission_paid = TRUE, updated_at = NOW()
    WHERE id = :id AND status = 'accepted' AND commission_paid = FALSE
    RETURNING id
""")

_LIST_PAID_BY_BIDDER_SQL = text(f"""
    SELECT {_SELECT_COLUMNS} {_FROM}
    WHERE o.bidder_id = CAST(:bidder_id AS UUID)
      AND o.status = 'accepted'
      AND o.commission_paid = TRUE
    ORDER BY o.created_at DESC, o.id DESC
""")

# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_offer(row: Any) -> Offer:
    return Offer(
        id=row.id,
        listing_id=row.listing_id,
        bidder_id=str(row.bidder_id),
        vendor_id=row.vendor_id,
        amount=row.amount,
        message=row.message,
        status=row.status,
        commission_amount=row.commission_amount,
        commission_rate_bps=row.commission_rate_bps,
        commission_paid=row.commission_paid,
        created_at=row.created_at,
        updated_at=row.updated_at,
        card_name=row.card_name,
        card_set=row.card_set,
        bidder_first_name=row.bidder_first_name,
        bidder_last_name=row.bidder_last_name,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class OfferRepository:
    """Concrete implementation of OfferRepositoryProtocol using raw SQL."""

    async def insert(self, db: AsyncSession, offer: Offer) -> None:
        try:
            result = await db.execute(
                _INSERT_OFFER_SQL,
                {
                    "id": offer.id,
                    "listing_id": offer.listing_id,
                    "bidder_id": offer.bidder_id,
                    "vendor_id": offer.vendor_id,
                    "amount": offer.amount,
                    "message": offer.message,
                    "status": offer.status,
                    "commission_amount": offer.commission_amount,
                    "commission_rate_bps": offer.commission_rate_bps,
                },
            )
        except IntegrityError as exc:
            if OPEN_OFFER_INDEX in str(exc.orig):
                raise DuplicateOfferError() from exc
            raise
        row = result.fetchone()
        if row is not None:
            offer.created_at = row.created_at
            offer.updated_at = row.updated_at

    async def get_by_id(
        self, db: AsyncSession, offer_id: str, for_update: bool = False
    ) -> Offer | None:
        sql = _GET_OFFER_FOR_UPDATE_SQL if for_update else _GET_OFFER_SQL
        result = await db.execute(sql, {"offer_id": offer_id})
        row = result.fetchone()
        return _row_to_offer(row) if row else None

    async def find_open_offer(
        self, db: AsyncSession, listing_id: str, bidder_id: str
    ) -> Offer | None:
        result = await db.execute(
            _FIND_OPEN_OFFER_SQL, {"listing_id": listing_id, "bidder_id": bidder_id}
        )
        row = result.fetchone()
        return _row_to_offer(row) if row else None

    async def update_status(self, db: AsyncSession, offer: Offer) -> None:
        result = await db.execute(_UPDATE_STATUS_SQL, {"id": offer.id, "status": offer.status})
        row = result.fetchone()
        if row is not None:
            offer.updated_at = row.updated_at

    async def reject_pending_siblings(
        self, db: AsyncSession, listing_id: str, keep_offer_id: str
    ) -> int:
        result = await db.execute(
            _REJECT_SIBLINGS_SQL, {"listing_id": listing_id, "keep_offer_id": keep_offer_id}
        )
        return int(result.rowcount or 0)

    async def list_offers(
        self,
        db: AsyncSession,
        listing_id: str | None,
        bidder_id: str | None,
        offset: int,
        limit: int,
    ) -> list[Offer]:
        result = await db.execute(
            _LIST_OFFERS_SQL,
            {"listing_id": listing_id, "bidder_id": bidder_id, "offset": offset, "limit": limit},
        )
        return [_row_to_offer(row) for row in result.fetchall()]

    async def count_offers(
        self, db: AsyncSession, listing_id: str | None, bidder_id: str | None
    ) -> int:
        result = await db.execute(
            _COUNT_OFFERS_SQL, {"listing_id": listing_id, "bidder_id": bidder_id}
        )
        return int(result.scalar_one())

    async def mark_commission_paid(self, db: AsyncSession, offer_id: str) -> bool:
        result = await db.execute(_MARK_COMMISSION_PAID_SQL, {"id": offer_id})
        return result.fetchone() is not None

    async def list_paid_by_bidder(self, db: AsyncSession, bidder_id: str) -> list[Offer]:
        result = await db.execute(_LIST_PAID_BY_BIDDER_SQL, {"bidder_id": bidder_id})
        return [_row_to_offer(row) for row in result.fetchall()]
