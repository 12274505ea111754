"""Domain models for cm_vendor — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Vendor:
    """Business profile wrapping a user account.

    commission_rate_bps: 300 = 3%. Running totals move only when a
    commission payment succeeds.
    """

    id: str
    user_id: str
    business_name: str
    commission_rate_bps: int
    business_type: str | None = None
    address: str | None = None
    phone: str | None = None
    website: str | None = None
    description: str | None = None
    total_leads: int = 0
    total_commission_paid: int = 0  # cents
    owner_first_name: str | None = None
    owner_last_name: str | None = None
    owner_email: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class CommissionTerms:
    """Rate applied to a bidder's offer and the vendor profile it is charged to."""

    rate_bps: int
    vendor_id: str | None


def commission_terms_for(vendor: Vendor | None, default_rate_bps: int) -> CommissionTerms:
    if vendor is None:
        return CommissionTerms(rate_bps=default_rate_bps, vendor_id=None)
    return CommissionTerms(rate_bps=vendor.commission_rate_bps, vendor_id=vendor.id)
