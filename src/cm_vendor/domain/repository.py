"""Repository Protocol for vendor profiles."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.cm_vendor.domain.models import Vendor


class VendorRepositoryProtocol(Protocol):
    async def get_by_user_id(self, db: AsyncSession, user_id: str) -> Vendor | None: ...

    async def insert(self, db: AsyncSession, vendor: Vendor) -> None: ...

    async def update_profile(self, db: AsyncSession, vendor: Vendor) -> None: ...

    async def record_commission(self, db: AsyncSession, vendor_id: str, amount: int) -> None:
        """totalLeads + 1 and totalCommissionPaid + amount, atomically."""
        ...

    async def list_vendors(self, db: AsyncSession, offset: int, limit: int) -> list[Vendor]: ...

    async def count_vendors(self, db: AsyncSession) -> int: ...
