# src/cm_offer/domain/repository.py
"""Repository Protocol for offers.

Transaction ownership stays with the application service; every method
runs inside the caller's transaction.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.cm_offer.domain.models import Offer


class OfferRepositoryProtocol(Protocol):
    async def insert(self, db: AsyncSession, offer: Offer) -> None:
        """Raises DuplicateOfferError when the bidder already holds an open offer."""
        ...

    async def get_by_id(
        self, db: AsyncSession, offer_id: str, for_update: bool = False
    ) -> Offer | None: ...

    async def find_open_offer(
        self, db: AsyncSession, listing_id: str, bidder_id: str
    ) -> Offer | None: ...

    async def update_status(self, db: AsyncSession, offer: Offer) -> None: ...

    async def reject_pending_siblings(
        self, db: AsyncSession, listing_id: str, keep_offer_id: str
    ) -> int: ...

    async def list_offers(
        self,
        db: AsyncSession,
        listing_id: str | None,
        bidder_id: str | None,
        offset: int,
        limit: int,
    ) -> list[Offer]: ...

    async def count_offers(
        self, db: AsyncSession, listing_id: str | None, bidder_id: str | None
    ) -> int: ...

    async def mark_commission_paid(self, db: AsyncSession, offer_id: str) -> bool:
        """Flip commission_paid FALSE → TRUE. Returns False if it was already set."""
        ...

    async def list_paid_by_bidder(self, db: AsyncSession, bidder_id: str) -> list[Offer]: ...
