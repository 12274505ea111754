"""Pydantic schemas for vendor profiles. commissionRate is in basis points."""

from pydantic import Field

from src.cm_common.datetime_utils import isoformat_or_none
from src.cm_common.schemas import CamelModel
from src.cm_vendor.domain.models import Vendor


class RegisterVendorRequest(CamelModel):
    business_name: str = Field(..., min_length=1, max_length=200)
    business_type: str | None = Field(None, max_length=50)
    address: str | None = None
    phone: str | None = Field(None, max_length=32)
    website: str | None = Field(None, max_length=500)
    description: str | None = None
    commission_rate: int | None = None


class UpdateVendorRequest(CamelModel):
    """Partial update: omitted fields keep their stored value."""

    business_name: str | None = Field(None, min_length=1, max_length=200)
    business_type: str | None = Field(None, max_length=50)
    address: str | None = None
    phone: str | None = Field(None, max_length=32)
    website: str | None = Field(None, max_length=500)
    description: str | None = None
    commission_rate: int | None = None


class VendorOwnerOut(CamelModel):
    first_name: str | None
    last_name: str | None
    email: str | None


class VendorOut(CamelModel):
    id: str
    user_id: str
    user: VendorOwnerOut
    business_name: str
    business_type: str | None
    address: str | None
    phone: str | None
    website: str | None
    description: str | None
    commission_rate: int
    total_leads: int
    total_commission_paid: int
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, vendor: Vendor) -> "VendorOut":
        return cls(
            id=vendor.id,
            user_id=vendor.user_id,
            user=VendorOwnerOut(
                first_name=vendor.owner_first_name,
                last_name=vendor.owner_last_name,
                email=vendor.owner_email,
            ),
            business_name=vendor.business_name,
            business_type=vendor.business_type,
            address=vendor.address,
            phone=vendor.phone,
            website=vendor.website,
            description=vendor.description,
            commission_rate=vendor.commission_rate_bps,
            total_leads=vendor.total_leads,
            total_commission_paid=vendor.total_commission_paid,
            created_at=isoformat_or_none(vendor.created_at),
            updated_at=isoformat_or_none(vendor.updated_at),
        )


class VendorStatsOut(CamelModel):
    total_leads: int
    total_commission_paid: int
    commission_rate: int


class VendorPage(CamelModel):
    vendors: list[VendorOut]
    total_pages: int
    current_page: int
    total: int
