"""VendorRepository — concrete implementation of VendorRepositoryProtocol.

Raw text() SQL. Transaction ownership stays with the calling service.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.cm_common.errors import VendorNotFoundError
from src.cm_vendor.domain.models import Vendor

_SELECT_COLUMNS = """
    v.id, v.user_id, v.business_name, v.business_type, v.address, v.phone,
    v.website, v.description, v.commission_rate_bps, v.total_leads,
    v.total_commission_paid, v.created_at, v.updated_at,
    u.first_name AS owner_first_name, u.last_name AS owner_last_name,
    u.email AS owner_email
"""

_GET_BY_USER_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM vendors v
    JOIN users u ON u.id = v.user_id
    WHERE v.user_id = CAST(:user_id AS UUID)
""")

_INSERT_VENDOR_SQL = text("""
    INSERT INTO vendors (id, user_id, business_name, business_type, address, phone,
        website, description, commission_rate_bps)
    VALUES (:id, CAST(:user_id AS UUID), :business_name, :business_type, :address, :phone,
        :website, :description, :commission_rate_bps)
    RETURNING created_at, updated_at
""")

_UPDATE_PROFILE_SQL = text("""
    UPDATE vendors
    SET business_name = :business_name,
        business_type = :business_type,
        address = :address,
        phone = :phone,
        website = :website,
        description = :description,
        commission_rate_bps = :commission_rate_bps,
        updated_at = NOW()
    WHERE id = :id
    RETURNING updated_at
""")

_RECORD_COMMISSION_SQL = text("""
    UPDATE vendors
    SET total_leads = total_leads + 1,
        total_commission_paid = total_commission_paid + :amount,
        updated_at = NOW()
    WHERE id = :id
    RETURNING id
""")

_LIST_VENDORS_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM vendors v
    JOIN users u ON u.id = v.user_id
    ORDER BY v.created_at DESC, v.id DESC
    LIMIT :limit OFFSET :offset
""")

_COUNT_VENDORS_SQL = text("SELECT COUNT(*) FROM vendors")


def _row_to_vendor(row: Any) -> Vendor:
    return Vendor(
        id=row.id,
        user_id=str(row.user_id),
        business_name=row.business_name,
        business_type=row.business_type,
        address=row.address,
        phone=row.phone,
        website=row.website,
        description=row.description,
        commission_rate_bps=row.commission_rate_bps,
        total_leads=row.total_leads,
        total_commission_paid=row.total_commission_paid,
        owner_first_name=row.owner_first_name,
        owner_last_name=row.owner_last_name,
        owner_email=row.owner_email,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _profile_params(vendor: Vendor) -> dict[str, Any]:
    return {
        "id": vendor.id,
        "business_name": vendor.business_name,
        "business_type": vendor.business_type,
        "address": vendor.address,
        "phone": vendor.phone,
        "website": vendor.website,
        "description": vendor.description,
        "commission_rate_bps": vendor.commission_rate_bps,
    }


class VendorRepository:
    async def get_by_user_id(self, db: AsyncSession, user_id: str) -> Vendor | None:
        result = await db.execute(_GET_BY_USER_SQL, {"user_id": user_id})
        row = result.fetchone()
        return _row_to_vendor(row) if row else None

    async def insert(self, db: AsyncSession, vendor: Vendor) -> None:
        params = _profile_params(vendor)
        params["user_id"] = vendor.user_id
        result = await db.execute(_INSERT_VENDOR_SQL, params)
        row = result.fetchone()
        if row is not None:
            vendor.created_at = row.created_at
            vendor.updated_at = row.updated_at

    async def update_profile(self, db: AsyncSession, vendor: Vendor) -> None:
        result = await db.execute(_UPDATE_PROFILE_SQL, _profile_params(vendor))
        row = result.fetchone()
        if row is None:
            raise VendorNotFoundError()
        vendor.updated_at = row.updated_at

    async def record_commission(self, db: AsyncSession, vendor_id: str, amount: int) -> None:
        result = await db.execute(_RECORD_COMMISSION_SQL, {"id": vendor_id, "amount": amount})
        if result.fetchone() is None:
            raise VendorNotFoundError()

    async def list_vendors(self, db: AsyncSession, offset: int, limit: int) -> list[Vendor]:
        result = await db.execute(_LIST_VENDORS_SQL, {"offset": offset, "limit": limit})
        return [_row_to_vendor(row) for row in result.fetchall()]

    async def count_vendors(self, db: AsyncSession) -> int:
        result = await db.execute(_COUNT_VENDORS_SQL)
        return int(result.scalar_one())
