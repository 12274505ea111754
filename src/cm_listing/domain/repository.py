# src/cm_listing/domain/repository.py
"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock or fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.cm_listing.domain.models import Listing


class ListingRepositoryProtocol(Protocol):
    async def insert(self, db: AsyncSession, listing: Listing) -> None: ...

    async def get_by_id(
        self, db: AsyncSession, listing_id: str, for_update: bool = False
    ) -> Listing | None: ...

    async def list_listings(
        self,
        db: AsyncSession,
        status: str | None,
        seller_id: str | None,
        offset: int,
        limit: int,
    ) -> list[Listing]: ...

    async def count_listings(
        self, db: AsyncSession, status: str | None, seller_id: str | None
    ) -> int: ...

    async def save_state(self, db: AsyncSession, listing: Listing) -> None:
        """Persist mutable fields; raises ListingVersionConflictError on a stale version."""
        ...

    async def expire_pending_offers(self, db: AsyncSession, listing_id: str) -> int: ...
