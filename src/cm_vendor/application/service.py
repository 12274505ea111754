"""VendorService — vendor registration, profile maintenance and statistics."""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.cm_common.errors import CommissionRateOutOfRangeError, VendorExistsError, VendorNotFoundError
from src.cm_common.schemas import page_count
from src.cm_vendor.application.schemas import (
    RegisterVendorRequest,
    UpdateVendorRequest,
    VendorOut,
    VendorPage,
    VendorStatsOut,
)
from src.cm_vendor.domain.models import Vendor
from src.cm_vendor.domain.repository import VendorRepositoryProtocol
from src.cm_vendor.infrastructure.persistence import VendorRepository

logger = logging.getLogger(__name__)


def check_commission_rate(rate_bps: int) -> None:
    low, high = settings.MIN_COMMISSION_RATE_BPS, settings.MAX_COMMISSION_RATE_BPS
    if not (low <= rate_bps <= high):
        raise CommissionRateOutOfRangeError(rate_bps, low, high)


class VendorService:
    def __init__(self, repo: VendorRepositoryProtocol | None = None) -> None:
        self._repo: VendorRepositoryProtocol = repo or VendorRepository()

    async def register(
        self, db: AsyncSession, user_id: str, req: RegisterVendorRequest
    ) -> VendorOut:
        rate = (
            req.commission_rate
            if req.commission_rate is not None
            else settings.DEFAULT_COMMISSION_RATE_BPS
        )
        check_commission_rate(rate)

        try:
            if await self._repo.get_by_user_id(db, user_id) is not None:
                raise VendorExistsError()
            vendor = Vendor(
                id=str(uuid.uuid4()),
                user_id=user_id,
                business_name=req.business_name.strip(),
                business_type=req.business_type,
                address=req.address,
                phone=req.phone,
                website=req.website,
                description=req.description,
                commission_rate_bps=rate,
            )
            await self._repo.insert(db, vendor)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Vendor registered: vendor=%s user=%s rate_bps=%d", vendor.id, user_id, rate)
        return VendorOut.from_domain(vendor)

    async def _require(self, db: AsyncSession, user_id: str) -> Vendor:
        vendor = await self._repo.get_by_user_id(db, user_id)
        if vendor is None:
            raise VendorNotFoundError()
        return vendor

    async def get_profile(self, db: AsyncSession, user_id: str) -> VendorOut:
        return VendorOut.from_domain(await self._require(db, user_id))

    async def update_profile(
        self, db: AsyncSession, user_id: str, req: UpdateVendorRequest
    ) -> VendorOut:
        if req.commission_rate is not None:
            check_commission_rate(req.commission_rate)

        try:
            vendor = await self._require(db, user_id)
            for field_name, value in req.model_dump(exclude_unset=True).items():
                if value is None:
                    continue
                if field_name == "commission_rate":
                    vendor.commission_rate_bps = value
                else:
                    setattr(vendor, field_name, value)
            await self._repo.update_profile(db, vendor)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        return VendorOut.from_domain(vendor)

    async def get_stats(self, db: AsyncSession, user_id: str) -> VendorStatsOut:
        vendor = await self._require(db, user_id)
        return VendorStatsOut(
            total_leads=vendor.total_leads,
            total_commission_paid=vendor.total_commission_paid,
            commission_rate=vendor.commission_rate_bps,
        )

    async def list_vendors(self, db: AsyncSession, page: int, limit: int) -> VendorPage:
        total = await self._repo.count_vendors(db)
        vendors = await self._repo.list_vendors(db, (page - 1) * limit, limit)
        return VendorPage(
            vendors=[VendorOut.from_domain(v) for v in vendors],
            total_pages=page_count(total, limit),
            current_page=page,
            total=total,
        )
