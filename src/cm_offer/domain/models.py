"""Domain models for cm_offer — pure dataclasses, no SQLAlchemy dependency.

Offer state machine: pending → {accepted, rejected, expired}. All three
targets are terminal.
"""

from dataclasses import dataclass
from datetime import datetime

from src.cm_common.enums import OfferStatus
from src.cm_common.errors import OfferNotPendingError

OPEN_STATUSES = frozenset({OfferStatus.PENDING.value, OfferStatus.ACCEPTED.value})


@dataclass
class Offer:
    id: str
    listing_id: str
    bidder_id: str
    amount: int  # cents
    commission_amount: int  # cents, fixed at submission
    commission_rate_bps: int
    status: str = OfferStatus.PENDING.value
    message: str | None = None
    vendor_id: str | None = None
    commission_paid: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
    # Read-side projections (joined on list/get, never written)
    card_name: str | None = None
    card_set: str | None = None
    bidder_first_name: str | None = None
    bidder_last_name: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == OfferStatus.PENDING.value

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_STATUSES

    def _leave_pending(self, target: OfferStatus) -> None:
        if not self.is_pending:
            raise OfferNotPendingError(self.id, self.status)
        self.status = target.value

    def accept(self) -> None:
        self._leave_pending(OfferStatus.ACCEPTED)

    def reject(self) -> None:
        self._leave_pending(OfferStatus.REJECTED)
